"""Pydantic schemas for payment record endpoints."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from rentledger.models.payment_proof import ProofType
from rentledger.models.payment_record import PaymentMethod, PaymentStatus


class PaymentCreatePayload(BaseModel):
    """Request payload for POST /api/payments/records."""

    invoice_id: int = Field(..., description="Invoice the payment applies to")
    payment_amount: Decimal = Field(..., description="Amount paid (> 0)")
    payment_method: str = Field("CASH", description="Payment method")
    payment_date: date | None = Field(None, description="Date received (default today)")
    transaction_reference: str | None = None
    notes: str | None = None
    recorded_by: str | None = None
    confirmed: bool | None = Field(
        None, description="Record as CONFIRMED; default from AUTO_CONFIRM_PAYMENTS"
    )


class PaymentUpdatePayload(BaseModel):
    """Request payload for PUT /api/payments/records/{id}. Omitted fields are unchanged."""

    payment_amount: Decimal | None = None
    payment_method: str | None = None
    payment_date: date | None = None
    transaction_reference: str | None = None
    notes: str | None = None
    actor: str | None = None


class PaymentStatusPayload(BaseModel):
    """Request payload for PUT /api/payments/records/{id}/status."""

    payment_status: str = Field(..., description="PENDING, CONFIRMED, REJECTED or CANCELLED")
    actor: str | None = None


class PaymentResponse(BaseModel):
    """Response schema for a payment record."""

    id: int
    invoice_id: int
    payment_amount: Decimal
    payment_method: PaymentMethod
    payment_date: date
    payment_status: PaymentStatus
    transaction_reference: str | None = None
    notes: str | None = None
    recorded_by: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentDeleteResponse(BaseModel):
    """Response schema for DELETE /api/payments/records/{id}."""

    deleted: int
    remaining: Decimal


class InvoiceBalanceResponse(BaseModel):
    """Ledger totals for one invoice."""

    invoice_id: int
    remaining: Decimal
    total_confirmed: Decimal
    total_pending: Decimal


class ProofCreatePayload(BaseModel):
    """Request payload for POST /api/payments/records/{id}/proofs."""

    file_ref: str = Field(..., description="Opaque reference to the stored file")
    proof_type: str = Field("OTHER", description="RECEIPT, BANK_SLIP, BANK_STATEMENT, ...")
    uploaded_by: str | None = None
    description: str | None = None


class ProofResponse(BaseModel):
    """Response schema for a payment proof."""

    id: int
    payment_record_id: int
    proof_type: ProofType
    file_ref: str
    uploaded_by: str | None = None
    description: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
