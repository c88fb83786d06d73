"""Dashboard API endpoints."""

from fastapi import APIRouter

from shopdesk.api.dependencies import CallerInfo, DbSession
from shopdesk.api.schemas import AlertResponse, DataEnvelope, StatsResponse
from shopdesk.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/alerts", response_model=DataEnvelope[list[AlertResponse]])
async def dashboard_alerts(db: DbSession, caller: CallerInfo) -> DataEnvelope[list[AlertResponse]]:
    """Today's deadline alerts for the caller."""
    alerts = await DashboardService(db).alerts(
        shop_name=caller.shop_name,
        user_role=caller.user_role,
        user_id=caller.user_id,
    )
    return DataEnvelope[list[AlertResponse]](
        data=[AlertResponse.model_validate(a) for a in alerts]
    )


@router.get("/stats", response_model=DataEnvelope[StatsResponse])
async def dashboard_stats(db: DbSession, caller: CallerInfo) -> DataEnvelope[StatsResponse]:
    """Summary figures for the caller's shop or for the caller alone."""
    stats = await DashboardService(db).stats(
        shop_name=caller.shop_name,
        user_role=caller.user_role,
        user_id=caller.user_id,
    )
    return DataEnvelope[StatsResponse](data=StatsResponse(**stats))
