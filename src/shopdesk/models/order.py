"""Order model with worker and transporter assignments."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shopdesk.models.base import ZERO, Base, TimestampMixin

if TYPE_CHECKING:
    from shopdesk.models.client import Client
    from shopdesk.models.user import User

UNKNOWN_CLIENT = "Unknown Client"


class AssignmentRole(str, Enum):
    """What an assignee does on an order."""

    WORKER = "worker"
    TRANSPORTER = "transporter"


class Order(Base, TimestampMixin):
    """Client order.

    ``client_id`` is nulled if the client is deleted; ``client_name`` keeps
    a snapshot so the order can still be labelled.
    """

    __tablename__ = "shop_order"

    order_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    shop_name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    client_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("client.client_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    client_name: Mapped[str | None] = mapped_column(String, nullable=True)
    order_name: Mapped[str] = mapped_column(String, nullable=False)
    venue_place: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    products: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    received_payment: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    remaining_payment: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)

    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    completion_date: Mapped[datetime | None] = mapped_column(nullable=True)
    created_by: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed')",
            name="shop_order_status_check",
        ),
        CheckConstraint("total_amount >= 0", name="shop_order_total_check"),
    )

    # Relationships
    client: Mapped[Client | None] = relationship(lazy="selectin")
    assignments: Mapped[list[OrderAssignment]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def workers(self) -> list[OrderAssignment]:
        return [a for a in self.assignments if a.role == AssignmentRole.WORKER.value]

    @property
    def transporters(self) -> list[OrderAssignment]:
        return [a for a in self.assignments if a.role == AssignmentRole.TRANSPORTER.value]

    @property
    def client_display_name(self) -> str:
        """Client name, falling back to the snapshot, then a placeholder."""
        if self.client is not None and self.client.name:
            return self.client.name
        return self.client_name or UNKNOWN_CLIENT

    @property
    def display_name(self) -> str:
        return self.order_name or f"Order #{str(self.order_id)[-6:]}"


class OrderAssignment(Base):
    """One assignee on an order and what they are owed for it."""

    __tablename__ = "order_assignment"

    assignment_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    order_id: Mapped[UUID] = mapped_column(
        ForeignKey("shop_order.order_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("app_user.user_id"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String, nullable=False)
    payment: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)

    __table_args__ = (
        CheckConstraint("role IN ('worker', 'transporter')", name="order_assignment_role_check"),
        CheckConstraint("payment >= 0", name="order_assignment_payment_check"),
    )

    order: Mapped[Order] = relationship(back_populates="assignments")
    user: Mapped[User] = relationship(lazy="selectin")

    @property
    def user_name(self) -> str | None:
        return self.user.full_name if self.user is not None else None
