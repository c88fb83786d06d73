"""Editing project model."""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Numeric, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shopdesk.models.base import ZERO, Base, TimestampMixin
from shopdesk.models.order import UNKNOWN_CLIENT

if TYPE_CHECKING:
    from shopdesk.models.client import Client
    from shopdesk.models.user import User


def commission_for(total: Decimal, percentage: Decimal) -> Decimal:
    """Editor commission, rounded half-up to a whole amount."""
    raw = Decimal(total) * Decimal(percentage) / Decimal(100)
    return raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


class EditingProject(Base, TimestampMixin):
    """Video editing job handled by a single editor.

    ``commission_amount`` and ``remaining_payment`` are derived columns,
    recomputed by the mapper hooks below on every insert and update.
    """

    __tablename__ = "editing_project"

    project_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    shop_name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    client_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("client.client_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    client_name: Mapped[str | None] = mapped_column(String, nullable=True)
    editor_id: Mapped[UUID] = mapped_column(
        ForeignKey("app_user.user_id"),
        nullable=False,
        index=True,
    )
    created_by: Mapped[UUID | None] = mapped_column(nullable=True)
    project_name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    total_amount: Mapped[Decimal] = mapped_column(nullable=False)
    received_payment: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    remaining_payment: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    commission_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    commission_amount: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)

    start_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    completion_date: Mapped[datetime | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed')",
            name="editing_project_status_check",
        ),
        CheckConstraint(
            "commission_percentage >= 0 AND commission_percentage <= 100",
            name="editing_project_commission_check",
        ),
    )

    # Relationships
    client: Mapped[Client | None] = relationship(lazy="selectin")
    editor: Mapped[User] = relationship(lazy="selectin")

    @property
    def client_display_name(self) -> str:
        if self.client is not None and self.client.name:
            return self.client.name
        return self.client_name or UNKNOWN_CLIENT

    @property
    def editor_name(self) -> str | None:
        return self.editor.full_name if self.editor is not None else None

    def recompute_derived(self) -> None:
        """Refresh commission and remaining payment from their inputs."""
        total = self.total_amount or ZERO
        received = self.received_payment or ZERO
        self.commission_amount = commission_for(total, self.commission_percentage or ZERO)
        self.remaining_payment = total - received


@event.listens_for(EditingProject, "before_insert")
@event.listens_for(EditingProject, "before_update")
def _recompute_before_flush(mapper: Any, connection: Any, target: EditingProject) -> None:
    target.recompute_derived()
