"""Tests for best-effort cascade bookkeeping."""

import logging
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shopdesk.models import Notification, User
from shopdesk.services.cascade import CascadeResult, CascadeRunner, StepOutcome


class TestCascadeResult:
    def test_empty_result_is_successful_noop(self):
        result = CascadeResult(trigger="order.status:completed")

        assert result.success is True
        assert result.is_noop is True
        assert result.failed_steps == []

    def test_failed_steps_reported(self):
        result = CascadeResult(
            trigger="order.create",
            steps=[
                StepOutcome(name="ledger_entries", ok=True),
                StepOutcome(name="client_balance", ok=False, error="boom"),
            ],
        )

        assert result.success is False
        assert [s.name for s in result.failed_steps] == ["client_balance"]
        assert result.to_dict() == {
            "trigger": "order.create",
            "success": False,
            "steps": [
                {"name": "ledger_entries", "ok": True, "error": None},
                {"name": "client_balance", "ok": False, "error": "boom"},
            ],
        }


class TestCascadeRunner:
    async def test_steps_commit_independently(
        self, session: AsyncSession, worker: User, caplog: pytest.LogCaptureFixture
    ):
        """A failing step is rolled back alone and the next step still runs."""
        worker_id = worker.user_id
        runner = CascadeRunner(session, "test")

        async def first():
            session.add(Notification(user_id=worker_id, message="first", type="general"))

        async def second():
            session.add(Notification(user_id=worker_id, message="second", type="general"))
            raise RuntimeError("second step broke")

        async def third():
            session.add(Notification(user_id=worker_id, message="third", type="general"))
            return "done"

        with caplog.at_level(logging.ERROR, logger="shopdesk.services.cascade"):
            await runner.step("first", first)
            failed = await runner.step("second", second)
            last = await runner.step("third", third)

        assert failed.ok is False
        assert failed.error == "second step broke"
        assert last.ok is True
        assert last.detail == "done"
        assert runner.result.success is False
        assert "Cascade step second failed during test" in caplog.text

        messages = (
            await session.execute(
                select(Notification.message)
                .where(Notification.user_id == worker_id)
            )
        ).scalars().all()
        assert sorted(messages) == ["first", "third"]

    async def test_error_without_message_uses_type_name(self, session: AsyncSession):
        runner = CascadeRunner(session, "test")

        async def broken():
            raise ValueError()

        outcome = await runner.step("broken", broken)

        assert outcome.error == "ValueError"

    async def test_successful_step_persists(self, session: AsyncSession, worker: User):
        worker_id = worker.user_id
        runner = CascadeRunner(session, "test")

        async def bump():
            user = await session.get(User, worker_id)
            user.total_earnings = Decimal("10")

        await runner.step("bump", bump)

        reloaded = await session.get(User, worker_id, populate_existing=True)
        assert reloaded.total_earnings == Decimal("10")
        assert runner.result.success is True
