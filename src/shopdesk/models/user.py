"""Shop staff accounts and their notification feed."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from shopdesk.models.base import ZERO, Base, TimestampMixin, utcnow


class UserRole(str, Enum):
    """Account roles."""

    OWNER = "owner"
    WORKER = "worker"
    TRANSPORTER = "transporter"
    EDITOR = "editor"
    WORKER_EDITOR = "worker_editor"


EDITOR_ROLES = frozenset({UserRole.EDITOR.value, UserRole.WORKER_EDITOR.value})


class User(Base, TimestampMixin):
    """Owner or assignee account.

    ``total_earnings``/``paid_salary``/``remaining_salary`` are running
    counters maintained by ``BalanceService``; the salary ledger is the
    authoritative record they can be re-derived from.
    """

    __tablename__ = "app_user"

    user_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    external_uid: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False, default="")
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    shop_name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    role: Mapped[str] = mapped_column(String, nullable=False, default=UserRole.WORKER.value)

    total_earnings: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    paid_salary: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)
    remaining_salary: Mapped[Decimal] = mapped_column(nullable=False, default=ZERO)

    __table_args__ = (
        CheckConstraint(
            "role IN ('owner', 'worker', 'transporter', 'editor', 'worker_editor')",
            name="app_user_role_check",
        ),
    )

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}".strip()


class Notification(Base):
    """Message appended to a user's feed by a cascade."""

    __tablename__ = "user_notification"

    notification_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("app_user.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    message: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False, default="general")
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
