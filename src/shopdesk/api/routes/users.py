"""User, notification and salary API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from shopdesk.api.dependencies import CallerInfo, DbSession
from shopdesk.api.schemas import (
    DataEnvelope,
    MessageResponse,
    NotificationResponse,
    ReconcileResponse,
    SalaryResponse,
    SalaryResponseEnvelope,
    SalarySnapshotResponse,
    UserCreate,
    UserResponse,
    UserWriteResponse,
)
from shopdesk.services.user_service import UserDraft, UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=DataEnvelope[list[UserResponse]])
async def list_users(
    db: DbSession,
    caller: CallerInfo,
    role: Annotated[str | None, Query()] = None,
) -> DataEnvelope[list[UserResponse]]:
    """List the users of a shop, optionally restricted to one role."""
    users = await UserService(db).list_users(shop_name=caller.shop_name, role=role)
    return DataEnvelope[list[UserResponse]](data=[UserResponse.model_validate(u) for u in users])


@router.post(
    "",
    response_model=UserWriteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": MessageResponse}},
)
async def create_user(db: DbSession, payload: UserCreate) -> UserWriteResponse:
    """Register a shop user."""
    user = await UserService(db).create_user(UserDraft(**payload.model_dump()))
    return UserWriteResponse(
        message="User created successfully",
        user=UserResponse.model_validate(user),
    )


@router.get(
    "/{user_id}/notifications",
    response_model=DataEnvelope[list[NotificationResponse]],
    responses={404: {"model": MessageResponse}},
)
async def list_notifications(
    db: DbSession,
    user_id: Annotated[str, Path()],
    unread_only: Annotated[bool, Query(alias="unreadOnly")] = False,
) -> DataEnvelope[list[NotificationResponse]]:
    """A user's notifications, newest first. Accepts a native id or external UID."""
    notifications = await UserService(db).notifications(user_id, unread_only=unread_only)
    return DataEnvelope[list[NotificationResponse]](
        data=[NotificationResponse.model_validate(n) for n in notifications]
    )


@router.get(
    "/{user_id}/salary",
    response_model=SalaryResponseEnvelope,
    responses={404: {"model": MessageResponse}},
)
async def get_salary(db: DbSession, user_id: Annotated[str, Path()]) -> SalaryResponseEnvelope:
    """Salary counters, their ledger-derived values and the ledger entries."""
    snapshot, entries = await UserService(db).salary(user_id)
    return SalaryResponseEnvelope(
        summary=SalarySnapshotResponse.model_validate(snapshot),
        entries=[SalaryResponse.model_validate(e) for e in entries],
    )


@router.post(
    "/{user_id}/salary/reconcile",
    response_model=ReconcileResponse,
    responses={404: {"model": MessageResponse}},
)
async def reconcile_salary(
    db: DbSession,
    user_id: Annotated[str, Path()],
) -> ReconcileResponse:
    """Reset a user's salary counters from the ledger."""
    before, after = await UserService(db).reconcile_salary(user_id)
    return ReconcileResponse(
        message="Salary reconciled" if not before.is_consistent else "Salary already consistent",
        before=SalarySnapshotResponse.model_validate(before),
        after=SalarySnapshotResponse.model_validate(after),
    )
