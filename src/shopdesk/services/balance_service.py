"""Running balance counters for clients and employees.

Two write paths keep the counters current:

1. Incremental: ``adjust_client_balance`` / ``adjust_user_salary`` issue a
   single UPDATE that increments the authoritative counters and rewrites
   the derived ones from the incremented values in the same statement, so
   there is no read-modify-write window.
2. Reconciliation: ``recalculate_client_totals`` and
   ``reconcile_user_salary`` re-derive the counters from source rows and
   overwrite them. These read then write, so two concurrent reconciliations
   of the same row can lose an update.

Given the same fully-delivered events both paths must agree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shopdesk.errors import NotFoundError
from shopdesk.models import (
    Client,
    EditingProject,
    Order,
    PaymentStatus,
    Salary,
    User,
    payment_status_for,
    pending_for,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _floor_zero(expr: ColumnElement[Any]) -> ColumnElement[Any]:
    return case((expr > 0, expr), else_=0)


def _status_expr(due: ColumnElement[Any], received: ColumnElement[Any]) -> ColumnElement[Any]:
    # SQL rendition of models.client.payment_status_for
    return case(
        (due == 0, PaymentStatus.PENDING.value),
        (received >= due, PaymentStatus.PAID.value),
        (received > 0, PaymentStatus.PARTIAL.value),
        else_=PaymentStatus.PENDING.value,
    )


@dataclass(frozen=True)
class ClientTotals:
    """Client counters as re-derived from its orders and projects."""

    client_id: UUID
    total_payments_due: Decimal
    total_payments_received: Decimal
    pending_payments: Decimal
    payment_status: str


@dataclass(frozen=True)
class SalarySnapshot:
    """A user's salary counters next to the same figures summed from the ledger."""

    user_id: UUID
    total_earnings: Decimal
    paid_salary: Decimal
    remaining_salary: Decimal
    ledger_total: Decimal
    ledger_paid: Decimal

    @property
    def ledger_remaining(self) -> Decimal:
        return self.ledger_total - self.ledger_paid

    @property
    def drift(self) -> Decimal:
        """Counter remaining minus ledger remaining; zero when consistent."""
        return self.remaining_salary - self.ledger_remaining

    @property
    def is_consistent(self) -> bool:
        return (
            self.total_earnings == self.ledger_total
            and self.paid_salary == self.ledger_paid
            and self.remaining_salary == self.ledger_remaining
        )


class BalanceService:
    """Incremental and reconciling updates of the balance counters."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def adjust_client_balance(
        self,
        client_id: UUID,
        delta_due: Decimal,
        delta_received: Decimal,
        *,
        delta_orders: int = 0,
    ) -> None:
        """Atomically shift a client's due/received counters.

        Raises:
            NotFoundError: If the client row does not exist
        """
        new_due = Client.total_payments_due + delta_due
        new_received = Client.received_payments + delta_received

        stmt = (
            update(Client)
            .where(Client.client_id == client_id)
            .values(
                total_payments_due=new_due,
                received_payments=new_received,
                pending_payments=_floor_zero(new_due - new_received),
                payment_status=_status_expr(new_due, new_received),
                lifetime_orders=Client.lifetime_orders + delta_orders,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError("Client", client_id)

        logger.debug(
            "Client %s balance adjusted: due %+s, received %+s, orders %+d",
            client_id,
            delta_due,
            delta_received,
            delta_orders,
        )

    async def adjust_user_salary(
        self,
        user_id: UUID,
        delta_total: Decimal,
        delta_paid: Decimal,
    ) -> None:
        """Atomically shift a user's earnings/paid counters.

        Raises:
            NotFoundError: If the user row does not exist
        """
        new_total = User.total_earnings + delta_total
        new_paid = User.paid_salary + delta_paid

        stmt = (
            update(User)
            .where(User.user_id == user_id)
            .values(
                total_earnings=new_total,
                paid_salary=new_paid,
                remaining_salary=new_total - new_paid,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError("User", user_id)

        logger.debug(
            "User %s salary adjusted: total %+s, paid %+s", user_id, delta_total, delta_paid
        )

    async def compute_client_totals(self, client_id: UUID) -> ClientTotals:
        """Sum a client's orders and projects without writing anything."""
        order_row = (
            await self.session.execute(
                select(
                    func.coalesce(func.sum(Order.total_amount), 0),
                    func.coalesce(func.sum(Order.received_payment), 0),
                ).where(Order.client_id == client_id)
            )
        ).one()
        project_row = (
            await self.session.execute(
                select(
                    func.coalesce(func.sum(EditingProject.total_amount), 0),
                    func.coalesce(func.sum(EditingProject.received_payment), 0),
                ).where(EditingProject.client_id == client_id)
            )
        ).one()

        due = _to_decimal(order_row[0]) + _to_decimal(project_row[0])
        received = _to_decimal(order_row[1]) + _to_decimal(project_row[1])

        return ClientTotals(
            client_id=client_id,
            total_payments_due=due,
            total_payments_received=received,
            pending_payments=pending_for(due, received),
            payment_status=payment_status_for(due, received),
        )

    async def recalculate_client_totals(self, client_id: UUID) -> ClientTotals:
        """Re-derive a client's counters from its work and overwrite them.

        Raises:
            NotFoundError: If the client does not exist
        """
        client = await self.session.get(Client, client_id)
        if client is None:
            raise NotFoundError("Client", client_id)

        totals = await self.compute_client_totals(client_id)
        client.apply_totals(totals.total_payments_due, totals.total_payments_received)
        await self.session.flush()

        logger.info(
            "Client %s reconciled: due=%s received=%s status=%s",
            client_id,
            totals.total_payments_due,
            totals.total_payments_received,
            totals.payment_status,
        )
        return totals

    async def salary_snapshot(self, user_id: UUID) -> SalarySnapshot:
        """Compare a user's counters against a full scan of their ledger.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self.session.get(User, user_id, populate_existing=True)
        if user is None:
            raise NotFoundError("User", user_id)

        row = (
            await self.session.execute(
                select(
                    func.coalesce(func.sum(Salary.amount), 0),
                    func.coalesce(
                        func.sum(case((Salary.is_paid.is_(True), Salary.amount), else_=0)),
                        0,
                    ),
                ).where(Salary.employee_id == user_id)
            )
        ).one()

        return SalarySnapshot(
            user_id=user_id,
            total_earnings=_to_decimal(user.total_earnings),
            paid_salary=_to_decimal(user.paid_salary),
            remaining_salary=_to_decimal(user.remaining_salary),
            ledger_total=_to_decimal(row[0]),
            ledger_paid=_to_decimal(row[1]),
        )

    async def reconcile_user_salary(self, user_id: UUID) -> SalarySnapshot:
        """Overwrite a user's counters with the ledger-derived figures.

        Returns the snapshot taken before the overwrite, so callers can see
        how far the counters had drifted.
        """
        before = await self.salary_snapshot(user_id)
        if not before.is_consistent:
            logger.warning(
                "Salary counters for user %s drifted by %s; resetting from ledger",
                user_id,
                before.drift,
            )

        await self.session.execute(
            update(User)
            .where(User.user_id == user_id)
            .values(
                total_earnings=before.ledger_total,
                paid_salary=before.ledger_paid,
                remaining_salary=before.ledger_remaining,
            )
            .execution_options(synchronize_session=False)
        )
        return before
