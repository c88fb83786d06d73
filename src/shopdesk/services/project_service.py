"""Editing project service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from functools import partial
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shopdesk.errors import NotFoundError, ValidationFailedError
from shopdesk.models import EDITOR_ROLES, Client, EditingProject, User, UserRole, utcnow
from shopdesk.services.balance_service import BalanceService
from shopdesk.services.cascade import CascadeResult, CascadeRunner
from shopdesk.services.identity import parse_uuid, resolve_user_id
from shopdesk.services.order_service import validate_amounts
from shopdesk.services.state_machine import WorkStatus, WorkStatusMachine

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

EDITABLE_FIELDS = ("project_name", "description", "end_date", "start_date")


@dataclass
class ProjectDraft:
    """Input for creating an editing project."""

    client_id: UUID
    editor_id: UUID
    project_name: str
    description: str
    total_amount: Decimal
    commission_percentage: Decimal
    end_date: date
    shop_name: str
    received_payment: Decimal = ZERO
    start_date: date | None = None
    created_by: str | None = None
    client_name: str | None = None


def _validate_percentage(value: Decimal) -> Decimal:
    pct = Decimal(value)
    if pct < 0 or pct > 100:
        raise ValidationFailedError("Commission percentage must be between 0 and 100")
    return pct


class ProjectService:
    """Service for editing projects.

    Commission and remaining payment are never written here; the model's
    flush hooks derive them from total, received and percentage. Changes to
    a project's total reach the client counters through a cascade step, as
    order writes do.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.balances = BalanceService(session)

    async def get_project(self, project_id: UUID) -> EditingProject:
        """Load a project fresh from the store.

        Raises:
            NotFoundError: If the project does not exist
        """
        project = await self.session.get(EditingProject, project_id, populate_existing=True)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def list_projects(
        self,
        shop_name: str | None = None,
        user_role: str | None = None,
        user_id: str | None = None,
    ) -> list[EditingProject]:
        """Projects visible to a caller, newest first.

        Owners see the whole shop, editors see the projects they edit and
        every other role sees none.
        """
        query = select(EditingProject)
        if shop_name:
            query = query.where(EditingProject.shop_name == shop_name)

        if user_role != UserRole.OWNER.value:
            if user_role not in EDITOR_ROLES:
                return []
            resolved = await resolve_user_id(self.session, user_id)
            if resolved is None:
                return []
            query = query.where(EditingProject.editor_id == resolved)

        result = await self.session.execute(
            query.order_by(EditingProject.created_at.desc()).execution_options(
                populate_existing=True
            )
        )
        return list(result.scalars().all())

    async def create_project(self, draft: ProjectDraft) -> tuple[EditingProject, CascadeResult]:
        """Create a project and add its amounts to the client's counters.

        Raises:
            ValidationFailedError: If fields, amounts or percentage are invalid
            NotFoundError: If the client or editor does not exist
        """
        if not draft.project_name or not draft.project_name.strip():
            raise ValidationFailedError("Missing required field: project_name")
        if not draft.description or not draft.description.strip():
            raise ValidationFailedError("Missing required field: description")
        if not draft.shop_name or not draft.shop_name.strip():
            raise ValidationFailedError("Missing required field: shop_name")

        total = Decimal(draft.total_amount)
        received = Decimal(draft.received_payment or ZERO)
        validate_amounts(total, received)
        pct = _validate_percentage(draft.commission_percentage)

        start = draft.start_date or date.today()
        if draft.end_date < start:
            raise ValidationFailedError("End date cannot be before start date")

        client = await self.session.get(Client, draft.client_id)
        if client is None:
            raise NotFoundError("Client", draft.client_id)
        editor = await self.session.get(User, draft.editor_id)
        if editor is None:
            raise NotFoundError("Editor", draft.editor_id)

        project = EditingProject(
            shop_name=draft.shop_name.strip(),
            client_id=client.client_id,
            client=client,
            client_name=draft.client_name or client.name,
            editor_id=editor.user_id,
            editor=editor,
            created_by=parse_uuid(draft.created_by),
            project_name=draft.project_name.strip(),
            description=draft.description.strip(),
            total_amount=total,
            received_payment=received,
            commission_percentage=pct,
            start_date=start,
            end_date=draft.end_date,
            status=WorkStatus.PENDING.value,
        )
        self.session.add(project)
        await self.session.commit()
        project_id = project.project_id
        logger.info(
            "Project %s created for editor %s (commission %s)",
            project_id,
            editor.user_id,
            project.commission_amount,
        )

        runner = CascadeRunner(self.session, "project.create")
        await runner.step(
            "client_balance",
            partial(self.balances.adjust_client_balance, client.client_id, total, received),
        )
        return await self.get_project(project_id), runner.result

    async def update_project(
        self, project_id: UUID, changes: dict[str, Any]
    ) -> tuple[EditingProject, CascadeResult]:
        """Update descriptive fields, amounts and commission percentage.

        A changed total shifts the client's amount due by the difference.

        Raises:
            NotFoundError: If the project does not exist
            ValidationFailedError: If the resulting amounts are invalid
        """
        project = await self.get_project(project_id)
        client_id = project.client_id
        old_total = project.total_amount

        for name in EDITABLE_FIELDS:
            if changes.get(name) is not None:
                setattr(project, name, changes[name])

        if changes.get("total_amount") is not None:
            total = Decimal(changes["total_amount"])
            validate_amounts(total, project.received_payment)
            project.total_amount = total

        if changes.get("commission_percentage") is not None:
            project.commission_percentage = _validate_percentage(changes["commission_percentage"])

        if project.end_date < project.start_date:
            raise ValidationFailedError("End date cannot be before start date")

        delta_due = project.total_amount - old_total
        await self.session.commit()

        runner = CascadeRunner(self.session, "project.update")
        if client_id is not None and delta_due != 0:
            await runner.step(
                "client_balance",
                partial(self.balances.adjust_client_balance, client_id, delta_due, ZERO),
            )
        return await self.get_project(project_id), runner.result

    async def update_status(self, project_id: UUID, status: str) -> EditingProject:
        """Move a project to a new status; re-applying the current one changes nothing.

        Raises:
            NotFoundError: If the project does not exist
            InvalidTransitionError: If the status is unknown or moves backward
        """
        project = await self.get_project(project_id)
        from_status = project.status
        WorkStatusMachine.validate_transition(from_status, status)
        if WorkStatusMachine.is_noop(from_status, status):
            return project

        project.status = status
        if status == WorkStatus.COMPLETED:
            project.completion_date = utcnow()
        await self.session.commit()
        logger.info("Project %s moved %s -> %s", project_id, from_status, status)
        return project

    async def update_payment(self, project_id: UUID, received_payment: Decimal) -> EditingProject:
        """Overwrite a project's received payment.

        Raises:
            NotFoundError: If the project does not exist
            ValidationFailedError: If the amount is negative or above the total
        """
        project = await self.get_project(project_id)
        received = Decimal(received_payment)
        validate_amounts(project.total_amount, received)

        project.received_payment = received
        await self.session.commit()
        return project

    async def delete_project(self, project_id: UUID) -> CascadeResult:
        """Delete a project after taking its amounts off the client's counters.

        Raises:
            NotFoundError: If the project does not exist
        """
        project = await self.get_project(project_id)
        client_id = project.client_id
        total = project.total_amount
        received = project.received_payment

        runner = CascadeRunner(self.session, "project.delete")
        if client_id is not None:
            await runner.step(
                "client_balance",
                partial(self.balances.adjust_client_balance, client_id, -total, -received),
            )

        project = await self.get_project(project_id)
        await self.session.delete(project)
        await self.session.commit()
        logger.info("Project %s deleted", project_id)
        return runner.result
