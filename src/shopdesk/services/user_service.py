"""User accounts, notification feeds and salary views."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shopdesk.errors import NotFoundError, ValidationFailedError
from shopdesk.models import Notification, Salary, User, UserRole
from shopdesk.services.balance_service import BalanceService, SalarySnapshot
from shopdesk.services.identity import resolve_user_id
from shopdesk.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

ROLES = {r.value for r in UserRole}


@dataclass
class UserDraft:
    """Input for creating a user."""

    first_name: str
    shop_name: str
    role: str
    last_name: str = ""
    email: str | None = None
    phone: str | None = None
    external_uid: str | None = None


class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.balances = BalanceService(session)
        self.ledger = LedgerService(session)

    async def get_user(self, raw_id: str | UUID) -> User:
        """Load a user by native id or external UID.

        Raises:
            NotFoundError: If no user matches
        """
        user_id = await resolve_user_id(self.session, raw_id)
        user = None
        if user_id is not None:
            user = await self.session.get(User, user_id, populate_existing=True)
        if user is None:
            raise NotFoundError("User", raw_id)
        return user

    async def list_users(self, shop_name: str | None = None, role: str | None = None) -> list[User]:
        query = select(User)
        if shop_name:
            query = query.where(User.shop_name == shop_name)
        if role:
            query = query.where(User.role == role)
        result = await self.session.execute(
            query.order_by(User.first_name, User.last_name).execution_options(
                populate_existing=True
            )
        )
        return list(result.scalars().all())

    async def create_user(self, draft: UserDraft) -> User:
        """Create a user account with zeroed salary counters.

        Raises:
            ValidationFailedError: If a field is missing, the role is unknown
                or the external UID is already taken
        """
        if not draft.first_name or not draft.first_name.strip():
            raise ValidationFailedError("Missing required field: first_name")
        if not draft.shop_name or not draft.shop_name.strip():
            raise ValidationFailedError("Missing required field: shop_name")
        if draft.role not in ROLES:
            raise ValidationFailedError(f"Invalid role: {draft.role}")

        user = User(
            first_name=draft.first_name.strip(),
            last_name=(draft.last_name or "").strip(),
            email=draft.email,
            phone=draft.phone,
            shop_name=draft.shop_name.strip(),
            role=draft.role,
            external_uid=draft.external_uid or None,
        )
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ValidationFailedError("External UID is already registered")
        logger.info("User %s created in shop %s as %s", user.user_id, user.shop_name, user.role)
        return user

    async def notifications(self, raw_id: str | UUID, unread_only: bool = False) -> list[Notification]:
        """A user's notification feed, newest first."""
        user = await self.get_user(raw_id)
        query = select(Notification).where(Notification.user_id == user.user_id)
        if unread_only:
            query = query.where(Notification.is_read == False)  # noqa: E712
        result = await self.session.execute(query.order_by(Notification.created_at.desc()))
        return list(result.scalars().all())

    async def salary(self, raw_id: str | UUID) -> tuple[SalarySnapshot, list[Salary]]:
        """Salary counters, their ledger-derived counterparts and the ledger itself."""
        user = await self.get_user(raw_id)
        snapshot = await self.balances.salary_snapshot(user.user_id)
        entries = await self.ledger.entries_for_user(user.user_id)
        return snapshot, entries

    async def reconcile_salary(self, raw_id: str | UUID) -> tuple[SalarySnapshot, SalarySnapshot]:
        """Reset a user's counters from the ledger.

        Returns:
            The snapshots from before and after the reset
        """
        user = await self.get_user(raw_id)
        before = await self.balances.reconcile_user_salary(user.user_id)
        await self.session.commit()
        after = await self.balances.salary_snapshot(user.user_id)
        return before, after
