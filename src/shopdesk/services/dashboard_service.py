"""Dashboard read side: deadline alerts and summary statistics.

Nothing here writes. Every figure is computed from persisted rows at request
time; assignee earnings come from the salary ledger, not the user counters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import case, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shopdesk.models import (
    Client,
    EditingProject,
    Order,
    OrderAssignment,
    Salary,
    UserRole,
)
from shopdesk.services.identity import resolve_user_id
from shopdesk.services.state_machine import WorkStatus

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class Alert:
    """One dashboard alert card."""

    type: str
    title: str
    message: str
    icon: str
    count: int


ALL_GOOD = Alert(
    type="info",
    title="All Good!",
    message="No urgent deadlines today. Keep up the great work!",
    icon="fas fa-check-circle",
    count=0,
)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def _names(assignments: list[OrderAssignment], fallback: str) -> str:
    return ", ".join(a.user.full_name for a in assignments if a.user is not None) or fallback


def _order_line(order: Order) -> str:
    remaining = (order.total_amount or ZERO) - (order.received_payment or ZERO)
    return (
        f"{order.display_name} | Client: {order.client_display_name}"
        f" | Venue: {order.venue_place or 'N/A'} | Remaining: {remaining}"
        f" | Workers: {_names(order.workers, 'No workers assigned')}"
        f" | Transporters: {_names(order.transporters, 'No transporters assigned')}"
    )


def _project_line(project: EditingProject) -> str:
    editor = project.editor.full_name if project.editor is not None else "No editor assigned"
    return (
        f"{project.project_name} | Client: {project.client_display_name}"
        f" | Value: {project.total_amount} | Commission: {project.commission_amount}"
        f" | Editor: {editor}"
    )


def empty_stats(user_role: str | None) -> dict[str, Any]:
    return {
        "remaining_orders": 0,
        "done_orders": 0,
        "total_payment": ZERO,
        "received_payment": ZERO,
        "active_orders": 0,
        "completed_orders": 0,
        "active_projects": 0,
        "completed_projects": 0,
        "total_earnings": ZERO,
        "paid_salary": ZERO,
        "remaining_salary": ZERO,
        "remaining_client_payments": ZERO,
        "worker_payments": ZERO,
        "user_role": user_role or "unknown",
    }


class DashboardService:
    """Aggregates for the dashboard screens."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _orders_due(
        self,
        today: date,
        shop_name: str | None,
        user_id: UUID | None = None,
    ) -> list[Order]:
        query = select(Order).where(
            Order.order_date == today,
            Order.status != WorkStatus.COMPLETED.value,
        )
        if shop_name:
            query = query.where(Order.shop_name == shop_name)
        if user_id is not None:
            query = query.where(
                exists().where(
                    OrderAssignment.order_id == Order.order_id,
                    OrderAssignment.user_id == user_id,
                )
            )
        result = await self.session.execute(query.order_by(Order.created_at))
        return list(result.scalars().all())

    async def _projects_due(
        self,
        today: date,
        shop_name: str | None,
        editor_id: UUID | None = None,
    ) -> list[EditingProject]:
        query = select(EditingProject).where(
            EditingProject.end_date == today,
            EditingProject.status != WorkStatus.COMPLETED.value,
        )
        if shop_name:
            query = query.where(EditingProject.shop_name == shop_name)
        if editor_id is not None:
            query = query.where(EditingProject.editor_id == editor_id)
        result = await self.session.execute(query.order_by(EditingProject.created_at))
        return list(result.scalars().all())

    async def alerts(
        self,
        shop_name: str | None,
        user_role: str | None,
        user_id: str | None = None,
        today: date | None = None,
    ) -> list[Alert]:
        """Deadline alerts for today, or a single all-good card."""
        today = today or date.today()
        alerts: list[Alert] = []

        if user_role == UserRole.OWNER.value:
            orders = await self._orders_due(today, shop_name)
            projects = await self._projects_due(today, shop_name)

            if orders:
                alerts.append(
                    Alert(
                        type="urgent",
                        title=f"{_plural(len(orders), 'Order')} Due Today",
                        message="\n".join(_order_line(o) for o in orders),
                        icon="fas fa-exclamation-triangle",
                        count=len(orders),
                    )
                )
            if projects:
                alerts.append(
                    Alert(
                        type="urgent",
                        title=f"{_plural(len(projects), 'Project')} Ending Today",
                        message="\n".join(_project_line(p) for p in projects),
                        icon="fas fa-video",
                        count=len(projects),
                    )
                )

            # Distinct people, keyed by user and role
            members: dict[tuple[UUID, str], str] = {}
            for order in orders:
                for a in order.assignments:
                    if a.user is not None:
                        members[(a.user_id, a.role)] = f"{a.user.full_name} ({a.role.capitalize()})"
            for project in projects:
                if project.editor is not None:
                    members[(project.editor_id, "editor")] = f"{project.editor.full_name} (Editor)"

            if members:
                alerts.append(
                    Alert(
                        type="info",
                        title=f"Team Coordination ({len(members)} members with deadlines)",
                        message="Team members with deadlines today: "
                        + ", ".join(members.values()),
                        icon="fas fa-users",
                        count=len(members),
                    )
                )
        else:
            resolved = await resolve_user_id(self.session, user_id)
            if resolved is not None:
                orders = await self._orders_due(today, shop_name, user_id=resolved)
                projects = await self._projects_due(today, shop_name, editor_id=resolved)

                if orders:
                    alerts.append(
                        Alert(
                            type="urgent",
                            title=f"Your {_plural(len(orders), 'Order')} Ending Today",
                            message="\n".join(_order_line(o) for o in orders),
                            icon="fas fa-box",
                            count=len(orders),
                        )
                    )
                if projects:
                    alerts.append(
                        Alert(
                            type="urgent",
                            title=f"Your {_plural(len(projects), 'Project')} Ending Today",
                            message="\n".join(_project_line(p) for p in projects),
                            icon="fas fa-video",
                            count=len(projects),
                        )
                    )

        if not alerts:
            alerts.append(ALL_GOOD)
        logger.debug("%d alerts for %s in shop %s on %s", len(alerts), user_role, shop_name, today)
        return alerts

    async def stats(
        self,
        shop_name: str | None,
        user_role: str | None,
        user_id: str | None = None,
    ) -> dict[str, Any]:
        """Summary figures for an owner's shop or for one assignee."""
        stats = empty_stats(user_role)

        if user_role == UserRole.OWNER.value:
            await self._owner_stats(stats, shop_name)
        else:
            resolved = await resolve_user_id(self.session, user_id)
            if resolved is not None:
                await self._assignee_stats(stats, resolved)
        return stats

    async def _owner_stats(self, stats: dict[str, Any], shop_name: str | None) -> None:
        completed = Order.status == WorkStatus.COMPLETED.value
        order_query = select(
            func.count(Order.order_id),
            func.coalesce(func.sum(case((completed, 1), else_=0)), 0),
            func.coalesce(func.sum(Order.total_amount), 0),
            func.coalesce(func.sum(Order.received_payment), 0),
        )
        project_done = EditingProject.status == WorkStatus.COMPLETED.value
        project_query = select(
            func.count(EditingProject.project_id),
            func.coalesce(func.sum(case((project_done, 1), else_=0)), 0),
        )
        outstanding = Client.total_payments_due - Client.received_payments
        client_query = select(
            func.coalesce(func.sum(case((outstanding > 0, outstanding), else_=0)), 0)
        )
        salary_query = select(func.coalesce(func.sum(Salary.amount), 0)).where(
            Salary.is_paid == False  # noqa: E712
        )

        if shop_name:
            order_query = order_query.where(Order.shop_name == shop_name)
            project_query = project_query.where(EditingProject.shop_name == shop_name)
            client_query = client_query.where(Client.shop_name == shop_name)
            salary_query = salary_query.where(Salary.shop_name == shop_name)

        total_orders, done_orders, total_payment, received = (
            await self.session.execute(order_query)
        ).one()
        total_projects, done_projects = (await self.session.execute(project_query)).one()

        stats["remaining_orders"] = int(total_orders) - int(done_orders)
        stats["done_orders"] = int(done_orders)
        stats["total_payment"] = Decimal(str(total_payment))
        stats["received_payment"] = Decimal(str(received))
        stats["active_projects"] = int(total_projects) - int(done_projects)
        stats["completed_projects"] = int(done_projects)
        stats["remaining_client_payments"] = Decimal(
            str(await self.session.scalar(client_query))
        )
        stats["worker_payments"] = Decimal(str(await self.session.scalar(salary_query)))

    async def _assignee_stats(self, stats: dict[str, Any], user_id: UUID) -> None:
        # Figures follow the person across shops; only owner stats are shop-scoped
        completed = Order.status == WorkStatus.COMPLETED.value
        order_query = select(
            func.count(Order.order_id),
            func.coalesce(func.sum(case((completed, 1), else_=0)), 0),
        ).where(
            exists().where(
                OrderAssignment.order_id == Order.order_id,
                OrderAssignment.user_id == user_id,
            )
        )
        project_done = EditingProject.status == WorkStatus.COMPLETED.value
        project_query = select(
            func.count(EditingProject.project_id),
            func.coalesce(func.sum(case((project_done, 1), else_=0)), 0),
        ).where(EditingProject.editor_id == user_id)

        ledger_query = select(
            func.coalesce(func.sum(Salary.amount), 0),
            func.coalesce(func.sum(case((Salary.is_paid == True, Salary.amount), else_=0)), 0),  # noqa: E712
        ).where(Salary.employee_id == user_id)

        total_orders, done_orders = (await self.session.execute(order_query)).one()
        total_projects, done_projects = (await self.session.execute(project_query)).one()
        earned, paid = (await self.session.execute(ledger_query)).one()

        stats["active_orders"] = int(total_orders) - int(done_orders)
        stats["completed_orders"] = int(done_orders)
        stats["active_projects"] = int(total_projects) - int(done_projects)
        stats["completed_projects"] = int(done_projects)
        stats["total_earnings"] = Decimal(str(earned))
        stats["paid_salary"] = Decimal(str(paid))
        stats["remaining_salary"] = stats["total_earnings"] - stats["paid_salary"]
