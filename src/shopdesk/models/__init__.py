"""ORM models."""

from shopdesk.models.base import Base, TimestampMixin, utcnow
from shopdesk.models.client import (
    Client,
    ClientPaymentRecord,
    PaymentStatus,
    payment_status_for,
    pending_for,
)
from shopdesk.models.order import UNKNOWN_CLIENT, AssignmentRole, Order, OrderAssignment
from shopdesk.models.project import EditingProject, commission_for
from shopdesk.models.salary import Salary, SalaryType
from shopdesk.models.user import EDITOR_ROLES, Notification, User, UserRole

__all__ = [
    "Base",
    "TimestampMixin",
    "utcnow",
    "Client",
    "ClientPaymentRecord",
    "PaymentStatus",
    "payment_status_for",
    "pending_for",
    "UNKNOWN_CLIENT",
    "AssignmentRole",
    "Order",
    "OrderAssignment",
    "EditingProject",
    "commission_for",
    "Salary",
    "SalaryType",
    "EDITOR_ROLES",
    "Notification",
    "User",
    "UserRole",
]
