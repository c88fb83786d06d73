"""Best-effort cascade bookkeeping.

A cascade is the chain of derived writes that follows a primary write
(ledger entries, balance counters, notifications). Each step commits on
its own; a failing step is rolled back alone, logged, and recorded, and the
remaining steps still run. Nothing already committed is undone.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepOutcome:
    """Outcome of one cascade step."""

    name: str
    ok: bool
    error: str | None = None
    detail: Any = None


@dataclass
class CascadeResult:
    """Result of a primary write and the cascade it triggered.

    The primary write has always succeeded when one of these exists;
    ``success`` only reports whether every derived step did too.
    """

    trigger: str
    steps: list[StepOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Whether every cascade step completed."""
        return all(step.ok for step in self.steps)

    @property
    def failed_steps(self) -> list[StepOutcome]:
        return [step for step in self.steps if not step.ok]

    @property
    def is_noop(self) -> bool:
        return not self.steps

    def to_dict(self) -> dict[str, Any]:
        return {
            "trigger": self.trigger,
            "success": self.success,
            "steps": [
                {"name": s.name, "ok": s.ok, "error": s.error} for s in self.steps
            ],
        }


class CascadeRunner:
    """Runs cascade steps against one session and collects their outcomes."""

    def __init__(self, session: AsyncSession, trigger: str):
        self.session = session
        self.result = CascadeResult(trigger=trigger)

    async def step(self, name: str, action: Callable[[], Awaitable[Any]]) -> StepOutcome:
        """Run and commit one step; on failure roll it back and carry on."""
        try:
            detail = await action()
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.exception("Cascade step %s failed during %s", name, self.result.trigger)
            outcome = StepOutcome(name=name, ok=False, error=str(e) or type(e).__name__)
        else:
            outcome = StepOutcome(name=name, ok=True, detail=detail)
        self.result.steps.append(outcome)
        return outcome
