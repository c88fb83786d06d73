"""Client model and the rules tying its payment counters together."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shopdesk.models.base import ZERO, Base, TimestampMixin, utcnow


class PaymentStatus(str, Enum):
    """Client payment status values."""

    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


def pending_for(due: Decimal, received: Decimal) -> Decimal:
    """Outstanding amount, floored at zero."""
    return max(ZERO, due - received)


def payment_status_for(due: Decimal, received: Decimal) -> str:
    """Payment status as a pure function of the two authoritative counters."""
    if due == 0:
        return PaymentStatus.PENDING.value
    if received >= due:
        return PaymentStatus.PAID.value
    if received > 0:
        return PaymentStatus.PARTIAL.value
    return PaymentStatus.PENDING.value


class Client(Base, TimestampMixin):
    """Shop client.

    ``total_payments_due`` and ``received_payments`` are authoritative;
    ``pending_payments`` and ``payment_status`` are always rewritten from
    them in the same statement.
    """

    __tablename__ = "client"

    client_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    shop_name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, default="")
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_type: Mapped[str] = mapped_column(String, nullable=False, default="individual")
    business_category: Mapped[str] = mapped_column(String, nullable=False, default="mixed")
    priority_level: Mapped[str] = mapped_column(String, nullable=False, default="normal")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    lifetime_orders: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_payments_due: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    received_payments: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    pending_payments: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    payment_status: Mapped[str] = mapped_column(
        String, nullable=False, default=PaymentStatus.PENDING.value
    )

    __table_args__ = (
        CheckConstraint(
            "payment_status IN ('pending', 'partial', 'paid')",
            name="client_payment_status_check",
        ),
    )

    payment_history: Mapped[list[ClientPaymentRecord]] = relationship(
        back_populates="client",
        cascade="all, delete-orphan",
        order_by="ClientPaymentRecord.recorded_at",
        lazy="selectin",
    )

    def apply_totals(self, due: Decimal, received: Decimal) -> None:
        """Overwrite the counters and everything derived from them."""
        self.total_payments_due = due
        self.received_payments = received
        self.pending_payments = pending_for(due, received)
        self.payment_status = payment_status_for(due, received)


class ClientPaymentRecord(Base):
    """Append-only payment history line."""

    __tablename__ = "client_payment_record"

    record_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    client_id: Mapped[UUID] = mapped_column(
        ForeignKey("client.client_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    recorded_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    updated_by: Mapped[str] = mapped_column(String, nullable=False, default="owner")

    client: Mapped[Client] = relationship(back_populates="payment_history")
