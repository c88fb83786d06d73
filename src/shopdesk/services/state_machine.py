"""Work status state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from shopdesk.errors import ShopdeskError


class WorkStatus(str, Enum):
    """Status values shared by orders and editing projects."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class InvalidTransitionError(ShopdeskError):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class WorkStatusMachine:
    """State machine for order and project status.

    Allowed transitions (one-way toward completed):
    - pending → in_progress
    - pending → completed
    - in_progress → completed

    Re-applying the current status is accepted and reported as a no-op so
    that callers can skip their side effects.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        WorkStatus.PENDING: [WorkStatus.IN_PROGRESS, WorkStatus.COMPLETED],
        WorkStatus.IN_PROGRESS: [WorkStatus.COMPLETED],
        WorkStatus.COMPLETED: [],  # Terminal state
    }

    @classmethod
    def is_known(cls, status: str) -> bool:
        return status in {s.value for s in WorkStatus}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def is_noop(cls, from_status: str, to_status: str) -> bool:
        return from_status == to_status and cls.is_known(to_status)

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.is_known(to_status):
            raise InvalidTransitionError(from_status, to_status, "unknown status")
        if cls.is_noop(from_status, to_status):
            return
        if not cls.can_transition(from_status, to_status):
            reason = "status is terminal" if cls.is_terminal(from_status) else None
            raise InvalidTransitionError(from_status, to_status, reason)

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return status == WorkStatus.COMPLETED

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])
