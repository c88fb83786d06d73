"""Property-based tests for balance and status invariants.

These use hypothesis to generate amounts, status sequences and whole
sequences of order and project writes. The pure rules behind the counters
must always hold, and the incrementally maintained counters must always
match a full recount.
"""

from __future__ import annotations

import asyncio
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from hypothesis import HealthCheck, given, settings, strategies as st
from sqlalchemy.pool import StaticPool

from shopdesk.database import Database
from shopdesk.models import Client, UserRole, commission_for, payment_status_for, pending_for
from shopdesk.services.order_service import OrderService
from shopdesk.services.project_service import ProjectDraft, ProjectService
from shopdesk.services.state_machine import WorkStatus, WorkStatusMachine
from tests.conftest import TEST_DATABASE_URL, make_client, make_user, order_draft

amounts = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("1000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
statuses = st.sampled_from([s.value for s in WorkStatus])
ORDER = {WorkStatus.PENDING.value: 0, WorkStatus.IN_PROGRESS.value: 1, WorkStatus.COMPLETED.value: 2}


class TestClientCounterRules:
    """Derived client counters are functions of due and received."""

    @given(due=amounts, received=amounts)
    @settings(max_examples=200)
    def test_pending_never_negative(self, due: Decimal, received: Decimal):
        pending = pending_for(due, received)

        assert pending >= 0
        assert pending == max(Decimal("0"), due - received)

    @given(due=amounts, received=amounts)
    @settings(max_examples=200)
    def test_status_matches_amounts(self, due: Decimal, received: Decimal):
        status = payment_status_for(due, received)

        if due == 0:
            assert status == "pending"
        elif received >= due:
            assert status == "paid"
            assert pending_for(due, received) == 0
        elif received > 0:
            assert status == "partial"
        else:
            assert status == "pending"


class TestCommissionRules:
    @given(total=amounts, pct=st.decimals(min_value=0, max_value=100, places=2))
    @settings(max_examples=200)
    def test_commission_is_whole_and_bounded(self, total: Decimal, pct: Decimal):
        commission = commission_for(total, pct)

        assert commission == commission.to_integral_value()
        assert 0 <= commission
        # Rounding moves the value by at most half a unit
        assert abs(commission - total * pct / 100) <= Decimal("0.5")

    @given(total=amounts)
    def test_zero_and_full_percentage(self, total: Decimal):
        assert commission_for(total, Decimal("0")) == 0
        assert commission_for(total, Decimal("100")) == total.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


class TestStatusRules:
    @given(transitions=st.lists(statuses, min_size=1, max_size=20))
    @settings(max_examples=100)
    def test_status_only_moves_forward(self, transitions: list[str]):
        """Applying any sequence of accepted transitions never moves backward."""
        current = WorkStatus.PENDING.value
        for target in transitions:
            if WorkStatusMachine.can_transition(current, target) or WorkStatusMachine.is_noop(
                current, target
            ):
                assert ORDER[target] >= ORDER[current]
                current = target
            else:
                assert ORDER[target] < ORDER[current]

    @given(target=statuses)
    def test_completed_is_terminal(self, target: str):
        assert WorkStatusMachine.can_transition(WorkStatus.COMPLETED.value, target) is False


@st.composite
def total_and_received(draw) -> tuple[Decimal, Decimal]:
    total = draw(st.integers(min_value=0, max_value=5000))
    received = draw(st.integers(min_value=0, max_value=total))
    return Decimal(total), Decimal(received)


write_events = st.lists(
    st.tuples(
        st.sampled_from(
            ["order", "project", "retotal_project", "complete_order", "delete_order", "delete_project"]
        ),
        total_and_received(),
        st.integers(min_value=0, max_value=500),
        st.integers(min_value=0, max_value=50),
    ),
    min_size=1,
    max_size=12,
)


async def replay_writes(events) -> tuple[tuple, tuple, bool]:
    """Apply a sequence of writes to a fresh store.

    Returns the stored client counters, the same counters recounted from
    orders and projects, and whether the worker's salary counters match
    the ledger. Completed orders are never deleted, since deleting one
    leaves paid salary on the counter by design.
    """
    database = Database(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await database.create_all()
    try:
        async with database.session() as session:
            shop_client = await make_client(session)
            worker = await make_user(session, "Wendy")
            editor = await make_user(session, "Eddie", role=UserRole.EDITOR.value)
            client_id = shop_client.client_id
            worker_id = worker.user_id

            orders = OrderService(session)
            projects = ProjectService(session)
            open_orders: list[UUID] = []
            project_received: dict[UUID, Decimal] = {}

            for kind, (total, received), payment, pick in events:
                if kind == "order":
                    order, _ = await orders.create_order(
                        order_draft(
                            shop_client,
                            total=str(total),
                            received=str(received),
                            workers=[(worker, str(payment))],
                        )
                    )
                    open_orders.append(order.order_id)
                elif kind == "project":
                    project, _ = await projects.create_project(
                        ProjectDraft(
                            client_id=client_id,
                            editor_id=editor.user_id,
                            project_name="Highlights",
                            description="Highlight reel",
                            total_amount=total,
                            received_payment=received,
                            commission_percentage=Decimal("10"),
                            start_date=date(2024, 1, 1),
                            end_date=date(2024, 2, 1),
                            shop_name=shop_client.shop_name,
                        )
                    )
                    project_received[project.project_id] = received
                elif kind == "retotal_project" and project_received:
                    project_id = list(project_received)[pick % len(project_received)]
                    await projects.update_project(
                        project_id, {"total_amount": project_received[project_id] + total}
                    )
                elif kind == "complete_order" and open_orders:
                    await orders.update_status(open_orders.pop(pick % len(open_orders)), "completed")
                elif kind == "delete_order" and open_orders:
                    await orders.delete_order(open_orders.pop(pick % len(open_orders)))
                elif kind == "delete_project" and project_received:
                    project_id = list(project_received)[pick % len(project_received)]
                    del project_received[project_id]
                    await projects.delete_project(project_id)

            client = await session.get(Client, client_id, populate_existing=True)
            stored = (
                client.total_payments_due,
                client.received_payments,
                client.pending_payments,
                client.payment_status,
            )
            totals = await orders.balances.compute_client_totals(client_id)
            recounted = (
                totals.total_payments_due,
                totals.total_payments_received,
                totals.pending_payments,
                totals.payment_status,
            )
            snapshot = await orders.balances.salary_snapshot(worker_id)
            return stored, recounted, snapshot.is_consistent
    finally:
        await database.dispose()


class TestCounterPathsAgree:
    """Incremental counter updates agree with a full recount."""

    @given(events=write_events)
    @settings(max_examples=30, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_counters_match_recount(self, events):
        stored, recounted, salary_consistent = asyncio.run(replay_writes(events))

        assert stored == recounted
        assert salary_consistent is True
