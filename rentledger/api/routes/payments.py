"""Payment record API routes: ledger entries, reconciliation status and proofs."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from rentledger.schemas.payments import (
    InvoiceBalanceResponse,
    PaymentCreatePayload,
    PaymentDeleteResponse,
    PaymentResponse,
    PaymentStatusPayload,
    PaymentUpdatePayload,
    ProofCreatePayload,
    ProofResponse,
)
from rentledger.services import get_db
from rentledger.services.payment_service import PaymentLedger

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("/records", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def create_payment(payload: PaymentCreatePayload, db: Session = Depends(get_db)):
    """
    Record a payment against an invoice.

    Returns:
        201: Created payment record
        400: InvalidAmountError / InvalidInput
        404: Invoice not found
        409: OverpaymentError (body carries ``remaining``) or InvoiceLocked
    """
    record = PaymentLedger(db).add_payment(
        payload.invoice_id,
        payload.payment_amount,
        method=payload.payment_method,
        payment_date=payload.payment_date,
        reference=payload.transaction_reference,
        notes=payload.notes,
        recorded_by=payload.recorded_by,
        confirmed=payload.confirmed,
    )
    return PaymentResponse.model_validate(record)


@router.get("/records", response_model=list[PaymentResponse])
def list_payments(
    invoice_id: int | None = Query(None),
    payment_status: str | None = Query(None),
    db: Session = Depends(get_db),
):
    records = PaymentLedger(db).list_payments(invoice_id, payment_status)
    return [PaymentResponse.model_validate(record) for record in records]


@router.get("/records/{payment_id}", response_model=PaymentResponse)
def get_payment(payment_id: int, db: Session = Depends(get_db)):
    return PaymentResponse.model_validate(PaymentLedger(db).get_payment(payment_id))


@router.put("/records/{payment_id}", response_model=PaymentResponse)
def update_payment(payment_id: int, payload: PaymentUpdatePayload, db: Session = Depends(get_db)):
    """
    Edit a payment record. An amount change re-validates the no-overpayment rule.
    """
    record = PaymentLedger(db).update_payment(
        payment_id,
        amount=payload.payment_amount,
        method=payload.payment_method,
        payment_date=payload.payment_date,
        reference=payload.transaction_reference,
        notes=payload.notes,
        actor=payload.actor,
    )
    return PaymentResponse.model_validate(record)


@router.put("/records/{payment_id}/status", response_model=PaymentResponse)
def update_payment_status(
    payment_id: int, payload: PaymentStatusPayload, db: Session = Depends(get_db)
):
    """
    Confirm, reject or cancel a payment record. The invoice status is recomputed.
    """
    record = PaymentLedger(db).update_status(
        payment_id, payload.payment_status, actor=payload.actor
    )
    return PaymentResponse.model_validate(record)


@router.delete("/records/{payment_id}", response_model=PaymentDeleteResponse)
def delete_payment(
    payment_id: int, actor: str | None = Query(None), db: Session = Depends(get_db)
):
    remaining = PaymentLedger(db).delete_payment(payment_id, actor=actor)
    return PaymentDeleteResponse(deleted=payment_id, remaining=remaining)


@router.get("/invoices/{invoice_id}/balance", response_model=InvoiceBalanceResponse)
def get_invoice_balance(invoice_id: int, db: Session = Depends(get_db)):
    ledger = PaymentLedger(db)
    return InvoiceBalanceResponse(
        invoice_id=invoice_id,
        remaining=ledger.remaining(invoice_id),
        total_confirmed=ledger.total_confirmed(invoice_id),
        total_pending=ledger.total_pending(invoice_id),
    )


@router.post(
    "/records/{payment_id}/proofs",
    response_model=ProofResponse,
    status_code=status.HTTP_201_CREATED,
)
def attach_proof(payment_id: int, payload: ProofCreatePayload, db: Session = Depends(get_db)):
    proof = PaymentLedger(db).attach_proof(
        payment_id,
        payload.file_ref,
        proof_type=payload.proof_type,
        uploaded_by=payload.uploaded_by,
        description=payload.description,
    )
    return ProofResponse.model_validate(proof)


@router.get("/records/{payment_id}/proofs", response_model=list[ProofResponse])
def list_proofs(payment_id: int, db: Session = Depends(get_db)):
    return [ProofResponse.model_validate(proof) for proof in PaymentLedger(db).list_proofs(payment_id)]


@router.delete("/records/{payment_id}/proofs/{proof_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_proof(
    payment_id: int,
    proof_id: int,
    actor: str | None = Query(None),
    db: Session = Depends(get_db),
):
    PaymentLedger(db).delete_proof(proof_id, actor=actor, payment_id=payment_id)
