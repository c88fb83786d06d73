"""Salary ledger entries."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shopdesk.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from shopdesk.models.user import User


class SalaryType(str, Enum):
    """Kinds of ledger entry."""

    ORDER_WORK = "order_work"
    TRANSPORT_WORK = "transport_work"
    OTHER = "other"


class Salary(Base, TimestampMixin):
    """One owed-or-paid amount to one employee for one piece of work."""

    __tablename__ = "salary"

    salary_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("app_user.user_id"),
        nullable=False,
        index=True,
    )
    shop_name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    salary_type: Mapped[str] = mapped_column(String, nullable=False)
    related_order_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("shop_order.order_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    paid_date: Mapped[datetime | None] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="salary_amount_positive"),
        CheckConstraint(
            "salary_type IN ('order_work', 'transport_work', 'other')",
            name="salary_type_check",
        ),
    )

    employee: Mapped[User] = relationship(lazy="selectin")
