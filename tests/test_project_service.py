"""Tests for editing projects and their derived commission."""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from shopdesk.errors import NotFoundError, ValidationFailedError
from shopdesk.models import Client, User
from shopdesk.services.balance_service import BalanceService
from shopdesk.services.client_service import ClientService
from shopdesk.services.project_service import ProjectDraft, ProjectService
from shopdesk.services.state_machine import InvalidTransitionError
from tests.conftest import SHOP, make_project, make_user


def project_draft(shop_client: Client, editor: User, **overrides) -> ProjectDraft:
    values = dict(
        client_id=shop_client.client_id,
        editor_id=editor.user_id,
        project_name="Corporate promo",
        description="Two minute promo cut",
        total_amount=Decimal("1000"),
        commission_percentage=Decimal("15"),
        start_date=date(2024, 5, 1),
        end_date=date(2024, 5, 20),
        shop_name=SHOP,
    )
    values.update(overrides)
    return ProjectDraft(**values)


class TestCreateProject:
    async def test_commission_and_remaining_derived(
        self, session: AsyncSession, shop_client: Client, editor: User
    ):
        project, result = await ProjectService(session).create_project(project_draft(shop_client, editor))

        assert result.success is True
        assert project.commission_amount == Decimal("150")
        assert project.remaining_payment == Decimal("1000")
        assert project.status == "pending"
        assert project.client_display_name == "Acme Events"
        assert project.editor_name == "Eddie Test"

    async def test_commission_rounds_half_up(
        self, session: AsyncSession, shop_client: Client, editor: User
    ):
        project, _ = await ProjectService(session).create_project(
            project_draft(
                shop_client,
                editor,
                total_amount=Decimal("1010"),
                commission_percentage=Decimal("5"),
            )
        )

        assert project.commission_amount == Decimal("51")

    @pytest.mark.parametrize("pct", ["-1", "100.5"])
    async def test_percentage_out_of_range(
        self, session: AsyncSession, shop_client: Client, editor: User, pct
    ):
        with pytest.raises(ValidationFailedError) as exc_info:
            await ProjectService(session).create_project(
                project_draft(shop_client, editor, commission_percentage=Decimal(pct))
            )

        assert exc_info.value.message == "Commission percentage must be between 0 and 100"

    async def test_end_before_start(self, session: AsyncSession, shop_client: Client, editor: User):
        with pytest.raises(ValidationFailedError) as exc_info:
            await ProjectService(session).create_project(
                project_draft(shop_client, editor, end_date=date(2024, 4, 30))
            )

        assert exc_info.value.message == "End date cannot be before start date"

    async def test_missing_description(self, session: AsyncSession, shop_client: Client, editor: User):
        with pytest.raises(ValidationFailedError):
            await ProjectService(session).create_project(
                project_draft(shop_client, editor, description=" ")
            )

    async def test_unknown_editor(self, session: AsyncSession, shop_client: Client, editor: User):
        with pytest.raises(NotFoundError) as exc_info:
            await ProjectService(session).create_project(
                project_draft(shop_client, editor, editor_id=uuid4())
            )

        assert exc_info.value.message == "Editor not found"

    async def test_unknown_client(self, session: AsyncSession, shop_client: Client, editor: User):
        with pytest.raises(NotFoundError) as exc_info:
            await ProjectService(session).create_project(
                project_draft(shop_client, editor, client_id=uuid4())
            )

        assert exc_info.value.message == "Client not found"


class TestUpdateProject:
    async def test_full_payment_clears_remaining(
        self, session: AsyncSession, shop_client: Client, editor: User
    ):
        project = await make_project(session, shop_client, editor)

        updated = await ProjectService(session).update_payment(project.project_id, Decimal("1000"))

        assert updated.received_payment == Decimal("1000")
        assert updated.remaining_payment == Decimal("0")

    async def test_overpayment_rejected(self, session: AsyncSession, shop_client: Client, editor: User):
        project = await make_project(session, shop_client, editor)

        with pytest.raises(ValidationFailedError):
            await ProjectService(session).update_payment(project.project_id, Decimal("1001"))

    async def test_total_and_percentage_change_recompute(
        self, session: AsyncSession, shop_client: Client, editor: User
    ):
        project = await make_project(session, shop_client, editor, received="200")

        updated, _ = await ProjectService(session).update_project(
            project.project_id,
            {
                "project_name": "Wedding feature",
                "total_amount": Decimal("2000"),
                "commission_percentage": Decimal("10"),
            },
        )

        assert updated.project_name == "Wedding feature"
        assert updated.commission_amount == Decimal("200")
        assert updated.remaining_payment == Decimal("1800")

    async def test_total_below_received_rejected(
        self, session: AsyncSession, shop_client: Client, editor: User
    ):
        project = await make_project(session, shop_client, editor, received="500")

        with pytest.raises(ValidationFailedError):
            await ProjectService(session).update_project(
                project.project_id, {"total_amount": Decimal("400")}
            )

    async def test_end_date_before_start_rejected(
        self, session: AsyncSession, shop_client: Client, editor: User
    ):
        project = await make_project(session, shop_client, editor)

        with pytest.raises(ValidationFailedError):
            await ProjectService(session).update_project(
                project.project_id, {"end_date": date(2023, 12, 31)}
            )


class TestProjectStatus:
    async def test_complete_sets_completion_date(
        self, session: AsyncSession, shop_client: Client, editor: User
    ):
        project = await make_project(session, shop_client, editor)
        service = ProjectService(session)

        updated = await service.update_status(project.project_id, "completed")
        assert updated.status == "completed"
        first_completion = updated.completion_date
        assert first_completion is not None

        again = await service.update_status(project.project_id, "completed")
        assert again.completion_date == first_completion
        # Reloaded timestamps come back in UTC
        assert again.completion_date.tzinfo is not None
        assert again.completion_date.utcoffset() == timedelta(0)
        assert again.created_at.tzinfo is not None

        with pytest.raises(InvalidTransitionError):
            await service.update_status(project.project_id, "in_progress")

    async def test_delete(self, session: AsyncSession, shop_client: Client, editor: User):
        project = await make_project(session, shop_client, editor)
        service = ProjectService(session)

        await service.delete_project(project.project_id)

        with pytest.raises(NotFoundError) as exc_info:
            await service.get_project(project.project_id)
        assert exc_info.value.message == "Project not found"


class TestListProjects:
    async def test_visibility_by_role(self, session: AsyncSession, shop_client: Client, editor: User):
        other_editor = await make_user(session, "Erin", role="worker_editor")
        mine = await make_project(session, shop_client, editor)
        await make_project(session, shop_client, other_editor)
        service = ProjectService(session)

        assert len(await service.list_projects(SHOP, "owner")) == 2
        editor_view = await service.list_projects(SHOP, "editor", str(editor.user_id))
        assert [p.project_id for p in editor_view] == [mine.project_id]
        assert await service.list_projects(SHOP, "worker", str(editor.user_id)) == []
        assert await service.list_projects(SHOP, "editor", "undefined") == []


class TestClientCounters:
    async def test_create_matches_reconciled_totals(
        self, session: AsyncSession, shop_client: Client, editor: User
    ):
        client_id = shop_client.client_id
        service = ProjectService(session)

        _, result = await service.create_project(
            project_draft(
                shop_client,
                editor,
                total_amount=Decimal("300"),
                received_payment=Decimal("100"),
            )
        )

        assert [s.name for s in result.steps] == ["client_balance"]
        client = await session.get(Client, client_id, populate_existing=True)
        assert client.total_payments_due == Decimal("300")
        assert client.received_payments == Decimal("100")
        assert client.pending_payments == Decimal("200")
        assert client.payment_status == "partial"
        # Projects are not orders
        assert client.lifetime_orders == 0

        totals = await BalanceService(session).compute_client_totals(client_id)
        assert totals.total_payments_due == client.total_payments_due
        assert totals.total_payments_received == client.received_payments
        assert totals.pending_payments == client.pending_payments
        assert totals.payment_status == client.payment_status

    async def test_total_change_shifts_amount_due(
        self, session: AsyncSession, shop_client: Client, editor: User
    ):
        client_id = shop_client.client_id
        service = ProjectService(session)
        project, _ = await service.create_project(project_draft(shop_client, editor))

        _, result = await service.update_project(project.project_id, {"total_amount": Decimal("1400")})
        assert [s.name for s in result.steps] == ["client_balance"]

        client = await session.get(Client, client_id, populate_existing=True)
        assert client.total_payments_due == Decimal("1400")
        assert client.received_payments == Decimal("0")

        # Renaming alone leaves the counters alone
        _, renamed = await service.update_project(project.project_id, {"project_name": "Recut"})
        assert renamed.is_noop is True

    async def test_delete_takes_amounts_off(
        self, session: AsyncSession, shop_client: Client, editor: User
    ):
        client_id = shop_client.client_id
        service = ProjectService(session)
        project, _ = await service.create_project(
            project_draft(shop_client, editor, received_payment=Decimal("250"))
        )

        result = await service.delete_project(project.project_id)

        assert result.success is True
        client = await session.get(Client, client_id, populate_existing=True)
        assert client.total_payments_due == Decimal("0")
        assert client.received_payments == Decimal("0")
        assert client.payment_status == "pending"

    async def test_delete_without_client_runs_no_cascade(
        self, session: AsyncSession, shop_client: Client, editor: User
    ):
        project = await make_project(session, shop_client, editor)
        await ClientService(session).delete_client(shop_client.client_id)

        result = await ProjectService(session).delete_project(project.project_id)

        assert result.is_noop is True
