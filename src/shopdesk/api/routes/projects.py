"""Editing project API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, status

from shopdesk.api.dependencies import CallerInfo, DbSession
from shopdesk.api.schemas import (
    CascadeResponse,
    DataEnvelope,
    DeleteResponse,
    MessageResponse,
    PaymentUpdate,
    ProjectCascadeResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    ProjectWriteResponse,
    StatusUpdate,
)
from shopdesk.services.project_service import ProjectDraft, ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=DataEnvelope[list[ProjectResponse]])
async def list_projects(
    db: DbSession, caller: CallerInfo
) -> DataEnvelope[list[ProjectResponse]]:
    """List projects visible to the caller, newest first."""
    projects = await ProjectService(db).list_projects(
        shop_name=caller.shop_name,
        user_role=caller.user_role,
        user_id=caller.user_id,
    )
    return DataEnvelope[list[ProjectResponse]](
        data=[ProjectResponse.model_validate(p) for p in projects]
    )


@router.post(
    "",
    response_model=ProjectCascadeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": MessageResponse}, 404: {"model": MessageResponse}},
)
async def create_project(db: DbSession, payload: ProjectCreate) -> ProjectCascadeResponse:
    """Create an editing project; commission is derived on save."""
    project, cascade = await ProjectService(db).create_project(ProjectDraft(**payload.model_dump()))
    return ProjectCascadeResponse(
        message="Editing project created successfully",
        project=ProjectResponse.model_validate(project),
        cascade=CascadeResponse.model_validate(cascade),
    )


@router.put(
    "/{project_id}",
    response_model=ProjectCascadeResponse,
    responses={400: {"model": MessageResponse}, 404: {"model": MessageResponse}},
)
async def update_project(
    db: DbSession,
    project_id: Annotated[UUID, Path()],
    payload: ProjectUpdate,
) -> ProjectCascadeResponse:
    """Edit a project's details, total or commission percentage."""
    project, cascade = await ProjectService(db).update_project(
        project_id, payload.model_dump(exclude_unset=True)
    )
    return ProjectCascadeResponse(
        message="Editing project updated successfully",
        project=ProjectResponse.model_validate(project),
        cascade=CascadeResponse.model_validate(cascade),
    )


@router.put(
    "/{project_id}/status",
    response_model=ProjectWriteResponse,
    responses={400: {"model": MessageResponse}, 404: {"model": MessageResponse}},
)
async def update_project_status(
    db: DbSession,
    project_id: Annotated[UUID, Path()],
    payload: StatusUpdate,
) -> ProjectWriteResponse:
    """Move a project toward completed."""
    project = await ProjectService(db).update_status(project_id, payload.status)
    return ProjectWriteResponse(
        message="Project status updated",
        project=ProjectResponse.model_validate(project),
    )


@router.put(
    "/{project_id}/payment",
    response_model=ProjectWriteResponse,
    responses={400: {"model": MessageResponse}, 404: {"model": MessageResponse}},
)
async def update_project_payment(
    db: DbSession,
    project_id: Annotated[UUID, Path()],
    payload: PaymentUpdate,
) -> ProjectWriteResponse:
    """Overwrite the amount received for a project."""
    project = await ProjectService(db).update_payment(project_id, payload.received_payment)
    return ProjectWriteResponse(
        message="Payment updated",
        project=ProjectResponse.model_validate(project),
    )


@router.delete(
    "/{project_id}",
    response_model=DeleteResponse,
    responses={404: {"model": MessageResponse}},
)
async def delete_project(db: DbSession, project_id: Annotated[UUID, Path()]) -> DeleteResponse:
    """Delete an editing project and take its amounts off the client's counters."""
    cascade = await ProjectService(db).delete_project(project_id)
    return DeleteResponse(
        message="Editing project deleted successfully",
        cascade=CascadeResponse.model_validate(cascade),
    )
