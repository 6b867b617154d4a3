"""Pydantic schemas for invoice endpoints.

Numeric inputs are accepted as Decimal without range constraints; the
services validate them so that a negative value yields the domain
``InvalidInput`` error rather than a schema error.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from rentledger.models.invoice import InvoiceStatus


class InvoiceCreatePayload(BaseModel):
    """Request payload for POST /invoice/create."""

    contract_id: int = Field(..., description="Contract to bill")
    create_date: date = Field(..., description="Period anchor date")
    water_unit: Decimal = Field(..., description="Metered water units")
    electricity_unit: Decimal = Field(..., description="Metered electricity units")
    water_rate: Decimal | None = Field(None, description="Water rate (default: standard rate)")
    electricity_rate: Decimal | None = Field(
        None, description="Electricity rate (default: standard rate)"
    )
    addon_amount: Decimal = Field(Decimal("0"), description="Flat extra fee")
    due_date: date | None = Field(None, description="Due date (default: create_date + due days)")
    actor: str | None = Field(None, description="Who is creating the invoice")


class InvoiceUpdatePayload(BaseModel):
    """Request payload for PUT /invoice/update/{id}. Omitted fields are unchanged."""

    water_unit: Decimal | None = None
    electricity_unit: Decimal | None = None
    addon_amount: Decimal | None = None
    rent: Decimal | None = None
    due_date: date | None = None
    water_rate: Decimal | None = Field(None, description="Must equal the frozen rate")
    electricity_rate: Decimal | None = Field(None, description="Must equal the frozen rate")
    actor: str | None = None


class InvoiceStatusPayload(BaseModel):
    """Request payload for POST /invoice/{id}/status."""

    status: str | None = Field(
        None, description="INCOMPLETE or COMPLETE; omit to re-derive from the ledger"
    )
    actor: str | None = None


class ActorPayload(BaseModel):
    """Optional request body naming who performs an action."""

    actor: str | None = None


class PenaltyPayload(ActorPayload):
    """Request payload for penalty actions."""

    as_of: date | None = Field(None, description="Date the overdue check is evaluated at")


class InvoiceResponse(BaseModel):
    """Response schema for an invoice."""

    id: int
    contract_id: int
    create_date: date
    billing_month: str
    due_date: date
    rent: Decimal
    water_unit: Decimal
    water_rate: Decimal
    electricity_unit: Decimal
    electricity_rate: Decimal
    addon_amount: Decimal
    water_bill: Decimal
    electricity_bill: Decimal
    sub_total: Decimal
    previous_balance: Decimal
    penalty_total: Decimal
    net_amount: Decimal
    status: InvoiceStatus
    pay_date: datetime | None = None
    penalty_applied_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PenaltyOutcomeResponse(BaseModel):
    """Response schema for a penalty attempt."""

    invoice_id: int
    applied: bool
    penalty: Decimal
    net_amount: Decimal
    reason: str


class OutstandingInvoiceResponse(BaseModel):
    """One invoice with an unpaid remainder."""

    invoice_id: int
    billing_month: str
    due_date: date
    net_amount: Decimal
    remaining: Decimal
    overdue: bool


class OutstandingResponse(BaseModel):
    """Response schema for GET /invoice/outstanding/{contract_id}."""

    contract_id: int
    total_outstanding: Decimal = Field(..., description="Latest invoice's unpaid remainder")
    total_penalty: Decimal
    overdue_count: int
    total_invoices: int
    invoices: list[OutstandingInvoiceResponse]


class UsageRowPayload(BaseModel):
    """One usage row for POST /invoice/import."""

    room_number: str | None = None
    water_usage: str | None = None
    electricity_usage: str | None = None
    billing_month: str | None = None
    water_rate: str | None = None
    electricity_rate: str | None = None


class RowRejectionResponse(BaseModel):
    row_index: int
    reason: str
    detail: str


class ImportResultResponse(BaseModel):
    """Response schema for batch imports."""

    accepted: int
    rejected: list[RowRejectionResponse]
