"""API routes."""

from shopdesk.api.routes.clients import router as clients_router
from shopdesk.api.routes.dashboard import router as dashboard_router
from shopdesk.api.routes.health import router as health_router
from shopdesk.api.routes.orders import router as orders_router
from shopdesk.api.routes.projects import router as projects_router
from shopdesk.api.routes.users import router as users_router

__all__ = [
    "clients_router",
    "dashboard_router",
    "health_router",
    "orders_router",
    "projects_router",
    "users_router",
]
