"""Invoice API routes: lifecycle, status, penalties, balances and usage import."""

import logging

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from rentledger.schemas.invoices import (
    ActorPayload,
    ImportResultResponse,
    InvoiceCreatePayload,
    InvoiceResponse,
    InvoiceStatusPayload,
    InvoiceUpdatePayload,
    OutstandingInvoiceResponse,
    OutstandingResponse,
    PenaltyOutcomeResponse,
    PenaltyPayload,
    RowRejectionResponse,
    UsageRowPayload,
)
from rentledger.services import get_db
from rentledger.services.balance_service import OutstandingBalanceResolver
from rentledger.services.errors import InvalidInput
from rentledger.services.invoice_service import InvoiceService
from rentledger.services.invoice_status import InvoiceStatusMachine
from rentledger.services.parsers import read_usage_csv
from rentledger.services.penalty_service import PenaltyService
from rentledger.services.usage_importer import BatchResult, UtilityUsageImporter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoice", tags=["invoices"])


def _import_response(result: BatchResult) -> ImportResultResponse:
    return ImportResultResponse(
        accepted=result.accepted,
        rejected=[RowRejectionResponse(**rejection._asdict()) for rejection in result.rejected],
    )


@router.post("/create", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(payload: InvoiceCreatePayload, db: Session = Depends(get_db)):
    """
    Create the next invoice of a contract.

    Returns:
        201: Created invoice with previous_balance frozen
        400: InvalidInput / InvalidPeriod
        404: Contract not found
    """
    invoice = InvoiceService(db).create_invoice(
        payload.contract_id,
        payload.create_date,
        payload.water_unit,
        payload.electricity_unit,
        water_rate=payload.water_rate,
        electricity_rate=payload.electricity_rate,
        addon_amount=payload.addon_amount,
        due_date=payload.due_date,
        actor=payload.actor,
    )
    return InvoiceResponse.model_validate(invoice)


@router.put("/update/{invoice_id}", response_model=InvoiceResponse)
def update_invoice(invoice_id: int, payload: InvoiceUpdatePayload, db: Session = Depends(get_db)):
    """
    Edit an invoice's units, addon, rent or due date.

    Returns:
        200: Updated invoice
        409: InvoiceLocked when payments exist
    """
    invoice = InvoiceService(db).update_invoice(
        invoice_id,
        water_unit=payload.water_unit,
        electricity_unit=payload.electricity_unit,
        addon_amount=payload.addon_amount,
        rent=payload.rent,
        due_date=payload.due_date,
        water_rate=payload.water_rate,
        electricity_rate=payload.electricity_rate,
        actor=payload.actor,
    )
    return InvoiceResponse.model_validate(invoice)


@router.get("/list", response_model=list[InvoiceResponse])
def list_invoices(
    contract_id: int | None = Query(None),
    include_cancelled: bool = Query(False),
    db: Session = Depends(get_db),
):
    invoices = InvoiceService(db).list_invoices(contract_id, include_cancelled)
    return [InvoiceResponse.model_validate(invoice) for invoice in invoices]


@router.get("/outstanding/{contract_id}", response_model=OutstandingResponse)
def get_outstanding(contract_id: int, db: Session = Depends(get_db)):
    """
    Outstanding position of a contract.

    Returns:
        200: Summary plus the invoices that still have an unpaid remainder
        404: Contract not found
        500: DataIntegrityFault when an invoice is overpaid
    """
    resolver = OutstandingBalanceResolver(db)
    status_machine = InvoiceStatusMachine(db)
    summary = resolver.get_outstanding_summary(contract_id)
    invoices = [
        OutstandingInvoiceResponse(
            invoice_id=item.invoice.id,
            billing_month=item.invoice.billing_month,
            due_date=item.invoice.due_date,
            net_amount=item.invoice.net_amount,
            remaining=item.remaining,
            overdue=status_machine.is_overdue(item.invoice),
        )
        for item in resolver.get_outstanding_invoices(contract_id)
    ]
    return OutstandingResponse(contract_id=contract_id, invoices=invoices, **summary._asdict())


@router.post("/import", response_model=ImportResultResponse)
def import_usage(rows: list[UsageRowPayload], db: Session = Depends(get_db)):
    """
    Import usage rows given as JSON.

    Returns:
        200: Accepted count and per-row rejections (never fails as a whole)
    """
    result = UtilityUsageImporter(db).import_batch(row.model_dump() for row in rows)
    return _import_response(result)


@router.post("/import-csv", response_model=ImportResultResponse)
async def import_usage_csv(request: Request, db: Session = Depends(get_db)):
    """
    Import usage rows from a CSV request body.

    Header: RoomNumber,WaterUsage,ElectricityUsage,BillingMonth[,WaterRate,ElectricityRate]

    Returns:
        200: Accepted count and per-row rejections
        400: InvalidInput when the header is missing required columns
    """
    try:
        text = (await request.body()).decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InvalidInput("CSV body must be UTF-8 text") from e
    rows = read_usage_csv(text)
    logger.info(f"CSV import received {len(rows)} rows")
    result = await run_in_threadpool(UtilityUsageImporter(db).import_batch, rows)
    return _import_response(result)


@router.post("/penalties/apply", response_model=list[PenaltyOutcomeResponse])
def apply_penalties(payload: PenaltyPayload | None = None, db: Session = Depends(get_db)):
    """
    Penalize every open invoice past its due date (each at most once).

    Returns:
        200: Outcomes for the invoices that received a penalty
    """
    payload = payload or PenaltyPayload()
    outcomes = PenaltyService(db).apply_overdue_penalties(as_of=payload.as_of, actor=payload.actor)
    return [PenaltyOutcomeResponse(**outcome._asdict()) for outcome in outcomes]


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return InvoiceResponse.model_validate(InvoiceService(db).get_invoice(invoice_id))


@router.post("/{invoice_id}/status", response_model=InvoiceResponse)
def set_invoice_status(
    invoice_id: int, payload: InvoiceStatusPayload, db: Session = Depends(get_db)
):
    """
    Override an invoice's status, or re-derive it from the ledger when no status is given.
    """
    machine = InvoiceStatusMachine(db)
    if payload.status is None:
        invoice = machine.recompute(invoice_id)
    else:
        invoice = machine.set_status(invoice_id, payload.status, actor=payload.actor)
    return InvoiceResponse.model_validate(invoice)


@router.post("/{invoice_id}/penalty", response_model=PenaltyOutcomeResponse)
def apply_penalty(
    invoice_id: int, payload: PenaltyPayload | None = None, db: Session = Depends(get_db)
):
    """
    Apply the one-time overdue penalty if the invoice qualifies.

    Returns:
        200: Outcome; ``applied`` is false when already applied or not overdue
    """
    payload = payload or PenaltyPayload()
    outcome = PenaltyService(db).apply_overdue_penalty(
        invoice_id, as_of=payload.as_of, actor=payload.actor
    )
    return PenaltyOutcomeResponse(**outcome._asdict())


@router.post("/{invoice_id}/waive-penalty", response_model=InvoiceResponse)
def waive_penalty(
    invoice_id: int, payload: ActorPayload | None = None, db: Session = Depends(get_db)
):
    actor = payload.actor if payload else None
    invoice = PenaltyService(db).waive_penalty(invoice_id, actor=actor)
    return InvoiceResponse.model_validate(invoice)


@router.post("/{invoice_id}/cancel", response_model=InvoiceResponse)
def cancel_invoice(
    invoice_id: int, payload: ActorPayload | None = None, db: Session = Depends(get_db)
):
    actor = payload.actor if payload else None
    invoice = InvoiceService(db).cancel_invoice(invoice_id, actor=actor)
    return InvoiceResponse.model_validate(invoice)
