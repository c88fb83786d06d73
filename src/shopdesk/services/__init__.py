"""Shopdesk services."""

from shopdesk.services.balance_service import BalanceService, ClientTotals, SalarySnapshot
from shopdesk.services.cascade import CascadeResult, CascadeRunner, StepOutcome
from shopdesk.services.client_service import ClientDraft, ClientService
from shopdesk.services.dashboard_service import Alert, DashboardService
from shopdesk.services.identity import resolve_user_id
from shopdesk.services.ledger_service import LedgerService
from shopdesk.services.order_service import AssignmentDraft, OrderDraft, OrderService
from shopdesk.services.project_service import ProjectDraft, ProjectService
from shopdesk.services.state_machine import InvalidTransitionError, WorkStatus, WorkStatusMachine
from shopdesk.services.user_service import UserDraft, UserService
from shopdesk.services.work_items import WorkItem, WorkKind

__all__ = [
    "BalanceService",
    "ClientTotals",
    "SalarySnapshot",
    "CascadeResult",
    "CascadeRunner",
    "StepOutcome",
    "ClientDraft",
    "ClientService",
    "Alert",
    "DashboardService",
    "resolve_user_id",
    "LedgerService",
    "AssignmentDraft",
    "OrderDraft",
    "OrderService",
    "ProjectDraft",
    "ProjectService",
    "InvalidTransitionError",
    "WorkStatus",
    "WorkStatusMachine",
    "UserDraft",
    "UserService",
    "WorkItem",
    "WorkKind",
]
