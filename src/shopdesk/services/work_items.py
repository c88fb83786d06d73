"""Orders and editing projects projected onto one shape for client history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from shopdesk.models import EditingProject, Order


class WorkKind(str, Enum):
    ORDER = "order"
    PROJECT = "project"


@dataclass(frozen=True)
class WorkItem:
    """A billable piece of work for a client, whatever produced it."""

    kind: WorkKind
    id: UUID
    name: str
    total_amount: Decimal
    received_payment: Decimal
    remaining_payment: Decimal
    status: str
    date: date

    @property
    def is_paid(self) -> bool:
        return self.remaining_payment <= 0

    @classmethod
    def from_order(cls, order: Order) -> WorkItem:
        return cls(
            kind=WorkKind.ORDER,
            id=order.order_id,
            name=order.display_name,
            total_amount=order.total_amount,
            received_payment=order.received_payment,
            remaining_payment=order.remaining_payment,
            status=order.status,
            date=order.order_date,
        )

    @classmethod
    def from_project(cls, project: EditingProject) -> WorkItem:
        return cls(
            kind=WorkKind.PROJECT,
            id=project.project_id,
            name=project.project_name,
            total_amount=project.total_amount,
            received_payment=project.received_payment,
            remaining_payment=project.remaining_payment,
            status=project.status,
            date=project.start_date,
        )


def newest_first(items: list[WorkItem]) -> list[WorkItem]:
    return sorted(items, key=lambda item: item.date, reverse=True)
