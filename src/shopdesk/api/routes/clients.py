"""Client API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, status

from shopdesk.api.dependencies import CallerInfo, DbSession
from shopdesk.api.schemas import (
    CascadeResponse,
    ClientCreate,
    ClientPaymentUpdate,
    ClientResponse,
    ClientUpdate,
    ClientWriteResponse,
    DataEnvelope,
    MessageResponse,
    WorkHistoryResponse,
    WorkItemResponse,
    WorkPaymentResponse,
    WorkPaymentUpdate,
)
from shopdesk.services.client_service import ClientDraft, ClientService

router = APIRouter(prefix="/clients", tags=["clients"])


# ============================================================================
# Client CRUD
# ============================================================================


@router.get("", response_model=DataEnvelope[list[ClientResponse]])
async def list_clients(db: DbSession, caller: CallerInfo) -> DataEnvelope[list[ClientResponse]]:
    """List a shop's clients. Only owners get any."""
    clients = await ClientService(db).list_clients(
        shop_name=caller.shop_name,
        user_role=caller.user_role,
    )
    return DataEnvelope[list[ClientResponse]](
        data=[ClientResponse.model_validate(c) for c in clients]
    )


@router.post(
    "",
    response_model=ClientWriteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": MessageResponse}},
)
async def create_client(db: DbSession, payload: ClientCreate) -> ClientWriteResponse:
    """Create a client with zeroed balance counters."""
    client = await ClientService(db).create_client(ClientDraft(**payload.model_dump()))
    return ClientWriteResponse(
        message="Client created successfully",
        client=ClientResponse.model_validate(client),
    )


@router.put(
    "/{client_id}",
    response_model=ClientWriteResponse,
    responses={404: {"model": MessageResponse}},
)
async def update_client(
    db: DbSession,
    client_id: Annotated[UUID, Path()],
    payload: ClientUpdate,
) -> ClientWriteResponse:
    """Update a client's contact details."""
    client = await ClientService(db).update_client(
        client_id, payload.model_dump(exclude_unset=True)
    )
    return ClientWriteResponse(
        message="Client updated successfully",
        client=ClientResponse.model_validate(client),
    )


@router.delete(
    "/{client_id}",
    response_model=MessageResponse,
    responses={404: {"model": MessageResponse}},
)
async def delete_client(db: DbSession, client_id: Annotated[UUID, Path()]) -> MessageResponse:
    """Delete a client; its orders and projects are kept."""
    await ClientService(db).delete_client(client_id)
    return MessageResponse(message="Client deleted successfully")


# ============================================================================
# Client payments
# ============================================================================


@router.put(
    "/{client_id}/payment",
    response_model=ClientWriteResponse,
    responses={400: {"model": MessageResponse}, 404: {"model": MessageResponse}},
)
async def update_client_payment(
    db: DbSession,
    client_id: Annotated[UUID, Path()],
    payload: ClientPaymentUpdate,
) -> ClientWriteResponse:
    """Set the total a client has paid, optionally recording a history line."""
    client = await ClientService(db).update_payment(
        client_id, payload.received_amount, payload.notes
    )
    return ClientWriteResponse(
        message="Client payment updated successfully",
        client=ClientResponse.model_validate(client),
    )


@router.get(
    "/{client_id}/work-history",
    response_model=WorkHistoryResponse,
    responses={404: {"model": MessageResponse}},
)
async def client_work_history(
    db: DbSession,
    client_id: Annotated[UUID, Path()],
) -> WorkHistoryResponse:
    """Orders and projects billed to a client, newest first."""
    client, items = await ClientService(db).work_history(client_id)
    return WorkHistoryResponse(
        client=ClientResponse.model_validate(client),
        work_history=[WorkItemResponse.model_validate(item) for item in items],
    )


@router.put(
    "/{client_id}/work/{work_id}/payment",
    response_model=WorkPaymentResponse,
    responses={400: {"model": MessageResponse}, 404: {"model": MessageResponse}},
)
async def update_work_payment(
    db: DbSession,
    client_id: Annotated[UUID, Path()],
    work_id: Annotated[UUID, Path()],
    payload: WorkPaymentUpdate,
) -> WorkPaymentResponse:
    """Set one work item's received payment and reconcile the client's totals."""
    item, cascade = await ClientService(db).update_work_payment(
        client_id, work_id, payload.work_type, payload.received_amount
    )
    return WorkPaymentResponse(
        message=f"{item.kind.value.capitalize()} payment updated successfully",
        work=WorkItemResponse.model_validate(item),
        cascade=CascadeResponse.model_validate(cascade),
    )
