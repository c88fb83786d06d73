"""Client service - client records, client payments and work history."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from functools import partial
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shopdesk.errors import NotFoundError, ValidationFailedError
from shopdesk.models import (
    Client,
    ClientPaymentRecord,
    EditingProject,
    Order,
    UserRole,
)
from shopdesk.services.balance_service import BalanceService
from shopdesk.services.cascade import CascadeResult, CascadeRunner
from shopdesk.services.work_items import WorkItem, WorkKind, newest_first

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "email", "phone", "address")


@dataclass
class ClientDraft:
    """Input for creating a client."""

    name: str
    shop_name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    client_type: str | None = None
    business_category: str | None = None
    priority_level: str | None = None
    notes: str | None = None


class ClientService:
    """Service for clients and the balance cascades client payments trigger."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.balances = BalanceService(session)

    async def get_client(self, client_id: UUID) -> Client:
        """Load a client fresh from the store.

        Raises:
            NotFoundError: If the client does not exist
        """
        client = await self.session.get(Client, client_id, populate_existing=True)
        if client is None:
            raise NotFoundError("Client", client_id)
        return client

    async def list_clients(
        self,
        shop_name: str | None = None,
        user_role: str | None = None,
    ) -> list[Client]:
        """Clients of a shop, newest first. Only owners may see clients."""
        query = select(Client)
        if shop_name:
            if user_role != UserRole.OWNER.value:
                return []
            query = query.where(Client.shop_name == shop_name)

        result = await self.session.execute(
            query.order_by(Client.created_at.desc()).execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def create_client(self, draft: ClientDraft) -> Client:
        if not draft.name or not draft.name.strip():
            raise ValidationFailedError("Missing required field: name")
        if not draft.shop_name or not draft.shop_name.strip():
            raise ValidationFailedError("Missing required field: shop_name")

        client = Client(
            name=draft.name.strip(),
            shop_name=draft.shop_name.strip(),
            email=draft.email or "",
            phone=draft.phone,
            address=draft.address,
            client_type=draft.client_type or "individual",
            business_category=draft.business_category or "mixed",
            priority_level=draft.priority_level or "normal",
            notes=draft.notes or "",
            payment_history=[],
        )
        self.session.add(client)
        await self.session.commit()
        logger.info("Client %s created in shop %s", client.client_id, client.shop_name)
        return client

    async def update_client(self, client_id: UUID, changes: dict[str, Any]) -> Client:
        """Update contact fields. Counters are never written here."""
        client = await self.get_client(client_id)
        for name in EDITABLE_FIELDS:
            if name in changes and changes[name] is not None:
                setattr(client, name, changes[name])
        await self.session.commit()
        return client

    async def delete_client(self, client_id: UUID) -> None:
        """Delete a client.

        Orders and projects keep their rows; their client reference is
        cleared and the stored client name is used from then on.
        """
        client = await self.get_client(client_id)
        for model in (Order, EditingProject):
            await self.session.execute(
                update(model)
                .where(model.client_id == client_id)
                .values(client_id=None)
                .execution_options(synchronize_session=False)
            )
        await self.session.delete(client)
        await self.session.commit()
        logger.info("Client %s deleted", client_id)

    async def update_payment(
        self,
        client_id: UUID,
        received_amount: Decimal,
        notes: str | None = None,
    ) -> Client:
        """Set a client's total received amount directly.

        Raises:
            NotFoundError: If the client does not exist
            ValidationFailedError: If the amount is negative or above the amount due
        """
        client = await self.get_client(client_id)
        amount = Decimal(received_amount)
        due = client.total_payments_due or Decimal("0")

        if amount < 0:
            raise ValidationFailedError("Received amount cannot be negative")
        if amount > due:
            raise ValidationFailedError("Received amount cannot exceed total due amount")

        client.apply_totals(due, amount)
        if notes:
            client.payment_history.append(
                ClientPaymentRecord(amount=amount, notes=notes, updated_by="owner")
            )
        await self.session.commit()
        logger.info("Client %s payment set to %s of %s", client_id, amount, due)
        return client

    async def work_history(self, client_id: UUID) -> tuple[Client, list[WorkItem]]:
        """Every order and project billed to a client, newest first.

        Raises:
            NotFoundError: If the client does not exist
        """
        client = await self.get_client(client_id)

        orders = await self.session.execute(
            select(Order)
            .where(Order.client_id == client_id)
            .execution_options(populate_existing=True)
        )
        projects = await self.session.execute(
            select(EditingProject)
            .where(EditingProject.client_id == client_id)
            .execution_options(populate_existing=True)
        )

        items = [WorkItem.from_order(o) for o in orders.scalars().all()]
        items.extend(WorkItem.from_project(p) for p in projects.scalars().all())
        return client, newest_first(items)

    async def update_work_payment(
        self,
        client_id: UUID,
        work_id: UUID,
        work_type: str,
        received_amount: Decimal,
    ) -> tuple[WorkItem, CascadeResult]:
        """Set the received payment of one order or project, then reconcile the client.

        Raises:
            ValidationFailedError: If the work type or amount is invalid
            NotFoundError: If the client or the work item does not exist
        """
        try:
            kind = WorkKind(work_type)
        except ValueError:
            raise ValidationFailedError('Invalid work type. Must be "order" or "project"')

        if received_amount is None:
            raise ValidationFailedError("Missing required parameters")
        amount = Decimal(received_amount)
        if amount < 0:
            raise ValidationFailedError("Invalid payment amount")

        await self.get_client(client_id)

        work: Order | EditingProject | None
        if kind is WorkKind.ORDER:
            work = await self.session.get(Order, work_id, populate_existing=True)
        else:
            work = await self.session.get(EditingProject, work_id, populate_existing=True)
        if work is None or work.client_id != client_id:
            raise NotFoundError(kind.value.capitalize(), work_id)

        if amount > work.total_amount:
            raise ValidationFailedError("Payment amount cannot exceed total amount")

        work.received_payment = amount
        work.remaining_payment = work.total_amount - amount
        await self.session.commit()
        item = WorkItem.from_order(work) if kind is WorkKind.ORDER else WorkItem.from_project(work)
        logger.info("%s %s payment set to %s", kind.value.capitalize(), work_id, amount)

        runner = CascadeRunner(self.session, f"client.work_payment:{kind.value}")
        await runner.step(
            "client_totals",
            partial(self.balances.recalculate_client_totals, client_id),
        )
        return item, runner.result
