"""Salary ledger entries derived from order assignments."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shopdesk.models import AssignmentRole, Order, Salary, SalaryType
from shopdesk.services.balance_service import BalanceService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentShare:
    """Plain copy of one assignment, safe to use after a rollback."""

    user_id: UUID
    role: str
    payment: Decimal

    @property
    def salary_type(self) -> str:
        if self.role == AssignmentRole.TRANSPORTER.value:
            return SalaryType.TRANSPORT_WORK.value
        return SalaryType.ORDER_WORK.value

    def describe(self, order_label: str) -> str:
        if self.role == AssignmentRole.TRANSPORTER.value:
            return f"Transport work: {order_label}"
        return f"Order work: {order_label}"


def shares_for(order: Order) -> list[AssignmentShare]:
    """Copy an order's assignments into plain values."""
    return [
        AssignmentShare(user_id=a.user_id, role=a.role, payment=a.payment or Decimal("0"))
        for a in order.assignments
    ]


class LedgerService:
    """Writes and clears the Salary rows that back employee earnings.

    Every entry is committed as soon as it and its counter increment are
    written. A failure part-way through leaves the earlier entries (and
    their increments) in place.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.balances = BalanceService(session)

    async def create_entries_for_order(self, order: Order) -> list[Salary]:
        """Create one unpaid entry per assignment with a positive payment.

        Returns:
            The entries written, in assignment order
        """
        order_id = order.order_id
        shop_name = order.shop_name
        label = order.display_name
        work_date: date = order.order_date or order.created_at.date()
        shares = shares_for(order)

        created: list[Salary] = []
        for share in shares:
            if share.payment <= 0:
                continue

            entry = Salary(
                employee_id=share.user_id,
                shop_name=shop_name,
                amount=share.payment,
                salary_type=share.salary_type,
                related_order_id=order_id,
                description=share.describe(label),
                work_date=work_date,
                is_paid=False,
            )
            self.session.add(entry)
            await self.balances.adjust_user_salary(share.user_id, share.payment, Decimal("0"))
            await self.session.commit()
            created.append(entry)

        logger.info("Created %d salary entries for order %s", len(created), order_id)
        return created

    async def unpaid_entries_for_order(self, order_id: UUID) -> list[Salary]:
        result = await self.session.execute(
            select(Salary)
            .where(
                Salary.related_order_id == order_id,
                Salary.is_paid == False,  # noqa: E712
            )
            .order_by(Salary.created_at)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def entries_for_order(self, order_id: UUID) -> list[Salary]:
        result = await self.session.execute(
            select(Salary)
            .where(Salary.related_order_id == order_id)
            .order_by(Salary.created_at)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def entries_for_user(self, user_id: UUID) -> list[Salary]:
        result = await self.session.execute(
            select(Salary)
            .where(Salary.employee_id == user_id)
            .order_by(Salary.work_date.desc(), Salary.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())
