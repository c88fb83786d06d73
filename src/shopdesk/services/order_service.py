"""Order service - orchestrates order writes and the cascades they trigger."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from functools import partial
from typing import Any
from uuid import UUID

from sqlalchemy import delete, exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shopdesk.errors import NotFoundError, ValidationFailedError
from shopdesk.models import (
    AssignmentRole,
    Client,
    Notification,
    Order,
    OrderAssignment,
    Salary,
    User,
    UserRole,
    utcnow,
)
from shopdesk.services.balance_service import BalanceService
from shopdesk.services.cascade import CascadeResult, CascadeRunner
from shopdesk.services.identity import parse_uuid, resolve_user_id
from shopdesk.services.ledger_service import LedgerService, shares_for
from shopdesk.services.state_machine import WorkStatus, WorkStatusMachine

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass
class AssignmentDraft:
    """Requested assignee and their payment."""

    user_id: UUID
    payment: Decimal = ZERO


@dataclass
class OrderDraft:
    """Input for creating an order."""

    client_id: UUID
    order_name: str
    venue_place: str
    description: str
    total_amount: Decimal
    shop_name: str
    received_payment: Decimal = ZERO
    order_date: date | None = None
    created_by: str | None = None
    client_name: str | None = None
    products: list[dict[str, Any]] | None = None
    workers: list[AssignmentDraft] = field(default_factory=list)
    transporters: list[AssignmentDraft] = field(default_factory=list)


def _require_text(value: str | None, name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationFailedError(f"Missing required field: {name}")
    return str(value).strip()


def validate_amounts(total: Decimal, received: Decimal) -> None:
    """Check a total/received pair shared by orders and projects."""
    if total < 0:
        raise ValidationFailedError("Total amount cannot be negative")
    if received < 0:
        raise ValidationFailedError("Received payment cannot be negative")
    if received > total:
        raise ValidationFailedError("Received payment cannot exceed total amount")


class OrderService:
    """Service for the order lifecycle.

    Operations:
    - create_order: persist, then derive ledger entries and bump client balance
    - update_status: move toward completed; completion pays unpaid entries
    - delete_order: clear entries, reverse earnings and client balance, delete
    - update_payment: overwrite received payment, no cascade

    The primary write is committed before any cascade step runs. Cascade
    steps are best-effort and reported through the returned CascadeResult.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.ledger = LedgerService(session)
        self.balances = BalanceService(session)

    async def get_order(self, order_id: UUID) -> Order:
        """Load an order fresh from the store.

        Raises:
            NotFoundError: If the order does not exist
        """
        result = await self.session.execute(
            select(Order)
            .where(Order.order_id == order_id)
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    async def list_orders(
        self,
        shop_name: str | None = None,
        user_role: str | None = None,
        user_id: str | None = None,
    ) -> list[Order]:
        """Orders visible to a caller, newest first.

        Owners see every order in their shop. Anyone else sees only the
        orders they are assigned to, and nothing if their id cannot be
        resolved.
        """
        query = select(Order)
        if shop_name:
            query = query.where(Order.shop_name == shop_name)

        if user_role != UserRole.OWNER.value:
            resolved = await resolve_user_id(self.session, user_id)
            if resolved is None:
                return []
            query = query.where(
                exists().where(
                    OrderAssignment.order_id == Order.order_id,
                    OrderAssignment.user_id == resolved,
                )
            )

        result = await self.session.execute(
            query.order_by(Order.created_at.desc()).execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def create_order(self, draft: OrderDraft) -> tuple[Order, CascadeResult]:
        """Create an order and run its creation cascade.

        Raises:
            ValidationFailedError: If required fields or amounts are invalid
            NotFoundError: If the client or an assignee does not exist
        """
        order_name = _require_text(draft.order_name, "order_name")
        venue_place = _require_text(draft.venue_place, "venue_place")
        description = _require_text(draft.description, "description")
        shop_name = _require_text(draft.shop_name, "shop_name")

        total = Decimal(draft.total_amount)
        received = Decimal(draft.received_payment or ZERO)
        validate_amounts(total, received)

        client = await self.session.get(Client, draft.client_id)
        if client is None:
            raise NotFoundError("Client", draft.client_id)

        assignments: list[OrderAssignment] = []
        for role, drafts in (
            (AssignmentRole.WORKER, draft.workers),
            (AssignmentRole.TRANSPORTER, draft.transporters),
        ):
            for item in drafts:
                payment = Decimal(item.payment or ZERO)
                if payment < 0:
                    raise ValidationFailedError(f"Invalid {role.value} payment: {payment}")
                user = await self.session.get(User, item.user_id)
                if user is None:
                    raise NotFoundError(role.value.capitalize(), item.user_id)
                assignments.append(
                    OrderAssignment(user_id=user.user_id, user=user, role=role.value, payment=payment)
                )

        products = draft.products or [{"name": order_name, "quantity": 1, "price": float(total)}]

        order = Order(
            shop_name=shop_name,
            client_id=client.client_id,
            client=client,
            client_name=draft.client_name or client.name,
            order_name=order_name,
            venue_place=venue_place,
            description=description,
            products=products,
            total_amount=total,
            received_payment=received,
            remaining_payment=total - received,
            status=WorkStatus.PENDING.value,
            order_date=draft.order_date or date.today(),
            created_by=parse_uuid(draft.created_by),
            assignments=assignments,
        )
        self.session.add(order)
        await self.session.commit()
        order_id = order.order_id
        logger.info("Order %s created for client %s", order_id, client.client_id)

        client_id = client.client_id
        runner = CascadeRunner(self.session, "order.create")
        await runner.step("ledger_entries", partial(self.ledger.create_entries_for_order, order))
        await runner.step(
            "client_balance",
            partial(
                self.balances.adjust_client_balance,
                client_id,
                total,
                received,
                delta_orders=1,
            ),
        )
        return await self.get_order(order_id), runner.result

    async def update_status(self, order_id: UUID, status: str) -> tuple[Order, CascadeResult]:
        """Move an order to a new status.

        Setting the current status again changes nothing and runs no
        cascade. Completing an order pays out every unpaid ledger entry
        tied to it, one step per entry.

        Raises:
            NotFoundError: If the order does not exist
            InvalidTransitionError: If the status is unknown or moves backward
        """
        order = await self.get_order(order_id)
        from_status = order.status
        WorkStatusMachine.validate_transition(from_status, status)

        runner = CascadeRunner(self.session, f"order.status:{status}")
        if WorkStatusMachine.is_noop(from_status, status):
            return order, runner.result

        order.status = status
        if status == WorkStatus.COMPLETED:
            order.completion_date = utcnow()
        await self.session.commit()
        logger.info("Order %s moved %s -> %s", order_id, from_status, status)

        if status == WorkStatus.COMPLETED:
            paid_at = order.completion_date
            entries = [
                (entry.salary_id, entry.employee_id, entry.amount)
                for entry in await self.ledger.unpaid_entries_for_order(order_id)
            ]
            for salary_id, employee_id, amount in entries:
                await runner.step(
                    f"pay_salary:{salary_id}",
                    partial(self._pay_entry, salary_id, employee_id, amount, paid_at),
                )

        return await self.get_order(order_id), runner.result

    async def _pay_entry(
        self,
        salary_id: UUID,
        employee_id: UUID,
        amount: Decimal,
        paid_at: datetime,
    ) -> bool:
        # The is_paid guard keeps a second completion from paying twice
        result = await self.session.execute(
            update(Salary)
            .where(Salary.salary_id == salary_id, Salary.is_paid == False)  # noqa: E712
            .values(is_paid=True, paid_date=paid_at)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return False

        await self.balances.adjust_user_salary(employee_id, ZERO, amount)
        self.session.add(
            Notification(
                user_id=employee_id,
                message=f"Salary of {amount} has been paid for completed order work.",
                type="salary",
                is_read=False,
                created_at=paid_at,
            )
        )
        return True

    async def delete_order(self, order_id: UUID) -> CascadeResult:
        """Delete an order after unwinding what its creation added.

        The reversal subtracts assignment payments from earnings even when
        the order was already completed; paid salary is left as it is.

        Raises:
            NotFoundError: If the order does not exist
        """
        order = await self.get_order(order_id)
        client_id = order.client_id
        total = order.total_amount
        received = order.received_payment
        shares = shares_for(order)

        runner = CascadeRunner(self.session, "order.delete")
        await runner.step("delete_salaries", partial(self._delete_entries, order_id))
        for share in shares:
            if share.payment <= 0:
                continue
            await runner.step(
                f"reverse_earnings:{share.user_id}",
                partial(self.balances.adjust_user_salary, share.user_id, -share.payment, ZERO),
            )
        if client_id is not None:
            await runner.step(
                "client_balance",
                partial(
                    self.balances.adjust_client_balance,
                    client_id,
                    -total,
                    -received,
                    delta_orders=-1,
                ),
            )

        order = await self.get_order(order_id)
        await self.session.delete(order)
        await self.session.commit()
        logger.info("Order %s deleted", order_id)
        return runner.result

    async def _delete_entries(self, order_id: UUID) -> int:
        result = await self.session.execute(
            delete(Salary)
            .where(Salary.related_order_id == order_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def update_payment(self, order_id: UUID, received_payment: Decimal) -> Order:
        """Overwrite an order's received payment.

        Client counters are not touched; they catch up on the next
        reconciliation.

        Raises:
            NotFoundError: If the order does not exist
            ValidationFailedError: If the amount is negative or above the total
        """
        order = await self.get_order(order_id)
        received = Decimal(received_payment)
        validate_amounts(order.total_amount, received)

        order.received_payment = received
        order.remaining_payment = order.total_amount - received
        await self.session.commit()
        return order
