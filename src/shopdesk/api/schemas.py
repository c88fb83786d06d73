"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shopdesk.services.work_items import WorkKind

T = TypeVar("T")


# ============================================================================
# Base schemas
# ============================================================================


class RequestBase(BaseModel):
    """Request bodies accept camelCase keys as well as snake_case ones."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResponseBase(BaseModel):
    """Base response schema, read straight off ORM objects."""

    model_config = ConfigDict(from_attributes=True)


class DataEnvelope(BaseModel, Generic[T]):
    """Schema for ``{"data": ...}`` responses."""

    data: T


class MessageResponse(BaseModel):
    """Schema for plain acknowledgements and errors."""

    message: str


# ============================================================================
# Cascade schemas
# ============================================================================


class CascadeStepResponse(ResponseBase):
    """Schema for one cascade step outcome."""

    name: str
    ok: bool
    error: str | None = None


class CascadeResponse(ResponseBase):
    """Schema for the cascade a write triggered."""

    trigger: str
    success: bool
    steps: list[CascadeStepResponse]


# ============================================================================
# Order schemas
# ============================================================================


class ProductIn(RequestBase):
    """Schema for an order product line."""

    name: str
    quantity: int = Field(default=1, ge=0)
    price: Decimal = Field(default=Decimal("0"), ge=0)


class AssignmentIn(RequestBase):
    """Schema for an assignee on an order."""

    user_id: UUID = Field(
        validation_alias=AliasChoices("user_id", "userId", "worker", "transporter")
    )
    payment: Decimal = Field(default=Decimal("0"), ge=0)


class OrderCreate(RequestBase):
    """Schema for creating an order."""

    client_id: UUID
    order_name: str
    venue_place: str
    description: str
    total_amount: Decimal = Field(ge=0)
    received_payment: Decimal = Field(default=Decimal("0"), ge=0)
    shop_name: str
    order_date: date | None = None
    created_by: str | None = None
    client_name: str | None = None
    products: list[ProductIn] | None = None
    workers: list[AssignmentIn] = Field(default_factory=list)
    transporters: list[AssignmentIn] = Field(default_factory=list)


class StatusUpdate(RequestBase):
    """Schema for a status change."""

    status: str


class PaymentUpdate(RequestBase):
    """Schema for overwriting received payment on an order or project."""

    received_payment: Decimal


class AssignmentResponse(ResponseBase):
    """Schema for an order assignee."""

    user_id: UUID
    user_name: str | None = None
    role: str
    payment: Decimal


class OrderResponse(ResponseBase):
    """Schema for order response."""

    order_id: UUID
    shop_name: str
    client_id: UUID | None = None
    client_name: str = Field(
        validation_alias=AliasChoices("client_display_name", "client_name")
    )
    order_name: str
    venue_place: str
    description: str
    products: list[dict[str, Any]]
    total_amount: Decimal
    received_payment: Decimal
    remaining_payment: Decimal
    status: str
    order_date: date
    completion_date: datetime | None = None
    created_by: UUID | None = None
    workers: list[AssignmentResponse]
    transporters: list[AssignmentResponse]
    created_at: datetime
    updated_at: datetime


class OrderWriteResponse(BaseModel):
    """Schema for order writes that trigger a cascade."""

    message: str
    order: OrderResponse
    cascade: CascadeResponse


class OrderPaymentResponse(BaseModel):
    """Schema for order payment updates."""

    message: str
    order: OrderResponse


class DeleteResponse(BaseModel):
    """Schema for deletes that trigger a cascade."""

    message: str
    cascade: CascadeResponse


# ============================================================================
# Client schemas
# ============================================================================


class ClientCreate(RequestBase):
    """Schema for creating a client."""

    name: str
    shop_name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    client_type: str | None = None
    business_category: str | None = None
    priority_level: str | None = None
    notes: str | None = None


class ClientUpdate(RequestBase):
    """Schema for editing client contact details."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None


class ClientPaymentUpdate(RequestBase):
    """Schema for setting a client's received total."""

    received_amount: Decimal
    notes: str | None = None


class WorkPaymentUpdate(RequestBase):
    """Schema for setting the received payment of one work item."""

    work_type: str
    received_amount: Decimal


class PaymentRecordResponse(ResponseBase):
    """Schema for a client payment history line."""

    recorded_at: datetime
    amount: Decimal
    notes: str
    updated_by: str


class ClientResponse(ResponseBase):
    """Schema for client response."""

    client_id: UUID
    shop_name: str
    name: str
    email: str
    phone: str | None = None
    address: str | None = None
    client_type: str
    business_category: str
    priority_level: str
    notes: str
    lifetime_orders: int
    total_payments_due: Decimal
    received_payments: Decimal
    pending_payments: Decimal
    payment_status: str
    payment_history: list[PaymentRecordResponse]
    created_at: datetime
    updated_at: datetime


class ClientWriteResponse(BaseModel):
    """Schema for client writes."""

    message: str
    client: ClientResponse


class WorkItemResponse(ResponseBase):
    """Schema for one entry of a client's work history."""

    type: WorkKind = Field(validation_alias=AliasChoices("kind", "type"))
    id: UUID
    name: str
    total_amount: Decimal
    received_payment: Decimal
    remaining_payment: Decimal
    status: str
    work_date: date = Field(
        validation_alias=AliasChoices("date", "work_date"),
        serialization_alias="date",
    )
    is_paid: bool


class WorkHistoryResponse(BaseModel):
    """Schema for a client's work history."""

    client: ClientResponse
    work_history: list[WorkItemResponse]


class WorkPaymentResponse(BaseModel):
    """Schema for a work item payment update."""

    message: str
    work: WorkItemResponse
    cascade: CascadeResponse


# ============================================================================
# Editing project schemas
# ============================================================================


class ProjectCreate(RequestBase):
    """Schema for creating an editing project."""

    client_id: UUID
    editor_id: UUID = Field(validation_alias=AliasChoices("editor_id", "editorId", "editor"))
    project_name: str
    description: str
    total_amount: Decimal = Field(ge=0)
    received_payment: Decimal = Field(default=Decimal("0"), ge=0)
    commission_percentage: Decimal = Field(ge=0, le=100)
    start_date: date | None = None
    end_date: date
    shop_name: str
    created_by: str | None = None
    client_name: str | None = None


class ProjectUpdate(RequestBase):
    """Schema for editing a project."""

    project_name: str | None = None
    description: str | None = None
    total_amount: Decimal | None = Field(default=None, ge=0)
    commission_percentage: Decimal | None = Field(default=None, ge=0, le=100)
    start_date: date | None = None
    end_date: date | None = None


class ProjectResponse(ResponseBase):
    """Schema for editing project response."""

    project_id: UUID
    shop_name: str
    client_id: UUID | None = None
    client_name: str = Field(
        validation_alias=AliasChoices("client_display_name", "client_name")
    )
    editor_id: UUID
    editor_name: str | None = None
    created_by: UUID | None = None
    project_name: str
    description: str
    total_amount: Decimal
    received_payment: Decimal
    remaining_payment: Decimal
    commission_percentage: Decimal
    commission_amount: Decimal
    start_date: date
    end_date: date
    completion_date: datetime | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class ProjectWriteResponse(BaseModel):
    """Schema for project writes."""

    message: str
    project: ProjectResponse


class ProjectCascadeResponse(ProjectWriteResponse):
    """Schema for project writes that shift the client's counters."""

    cascade: CascadeResponse


# ============================================================================
# User and salary schemas
# ============================================================================


class UserCreate(RequestBase):
    """Schema for creating a user."""

    first_name: str
    last_name: str = ""
    email: str | None = None
    phone: str | None = None
    shop_name: str
    role: str
    external_uid: str | None = Field(
        default=None,
        validation_alias=AliasChoices("external_uid", "externalUid", "firebaseUID"),
    )


class UserResponse(ResponseBase):
    """Schema for user response."""

    user_id: UUID
    external_uid: str | None = None
    first_name: str
    last_name: str
    full_name: str
    email: str | None = None
    phone: str | None = None
    shop_name: str
    role: str
    total_earnings: Decimal
    paid_salary: Decimal
    remaining_salary: Decimal
    created_at: datetime


class UserWriteResponse(BaseModel):
    """Schema for user writes."""

    message: str
    user: UserResponse


class NotificationResponse(ResponseBase):
    """Schema for a notification."""

    notification_id: UUID
    message: str
    type: str
    is_read: bool
    created_at: datetime


class SalaryResponse(ResponseBase):
    """Schema for a salary ledger entry."""

    salary_id: UUID
    employee_id: UUID
    shop_name: str
    amount: Decimal
    salary_type: str
    related_order_id: UUID | None = None
    description: str
    work_date: date
    is_paid: bool
    paid_date: datetime | None = None


class SalarySnapshotResponse(ResponseBase):
    """Schema for salary counters next to their ledger-derived values."""

    user_id: UUID
    total_earnings: Decimal
    paid_salary: Decimal
    remaining_salary: Decimal
    ledger_total: Decimal
    ledger_paid: Decimal
    ledger_remaining: Decimal
    drift: Decimal
    is_consistent: bool


class SalaryResponseEnvelope(BaseModel):
    """Schema for a user's salary view."""

    summary: SalarySnapshotResponse
    entries: list[SalaryResponse]


class ReconcileResponse(BaseModel):
    """Schema for a salary reconciliation."""

    message: str
    before: SalarySnapshotResponse
    after: SalarySnapshotResponse


# ============================================================================
# Dashboard schemas
# ============================================================================


class AlertResponse(ResponseBase):
    """Schema for a dashboard alert."""

    type: str
    title: str
    message: str
    icon: str
    count: int


class StatsResponse(BaseModel):
    """Schema for dashboard statistics."""

    remaining_orders: int
    done_orders: int
    total_payment: Decimal
    received_payment: Decimal
    active_orders: int
    completed_orders: int
    active_projects: int
    completed_projects: int
    total_earnings: Decimal
    paid_salary: Decimal
    remaining_salary: Decimal
    remaining_client_payments: Decimal
    worker_payments: Decimal
    user_role: str
