"""Ledger queries shared by the balance, payment and status services.

Totals are summed as Decimal in Python over the invoice's records (served by
the ``payment_records.invoice_id`` index) so that SQLite's float SUM never
touches money.
"""

from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator

from sqlalchemy import select
from sqlalchemy.orm import Session

from rentledger.models.invoice import Invoice
from rentledger.models.payment_record import COMMITTED_STATUSES, PaymentRecord, PaymentStatus
from rentledger.services.errors import NotFoundError
from rentledger.services.locks import invoice_lock
from rentledger.services.money import ZERO


def load_invoice(db: Session, invoice_id: int, for_update: bool = False) -> Invoice:
    """Fetch an invoice, refreshing any stale copy held by the session.

    Args:
        db: Database session
        invoice_id: Invoice ID
        for_update: Take a row lock (SELECT ... FOR UPDATE) where supported

    Raises:
        NotFoundError: If invoice does not exist
    """
    stmt = (
        select(Invoice)
        .where(Invoice.id == invoice_id)
        .execution_options(populate_existing=True)
    )
    if for_update:
        stmt = stmt.with_for_update()
    invoice = db.execute(stmt).scalar_one_or_none()
    if invoice is None:
        raise NotFoundError(f"Invoice {invoice_id} not found")
    return invoice


@contextmanager
def locked_invoice(db: Session, invoice_id: int) -> Iterator[Invoice]:
    """Unit of work over one invoice: its lock, its row, one transaction.

    Commits when the block completes and rolls back if it raises, in both
    cases before the lock is released.

    Example:
        with locked_invoice(db, invoice_id) as invoice:
            invoice.due_date = new_due_date
    """
    with invoice_lock(invoice_id):
        try:
            yield load_invoice(db, invoice_id, for_update=True)
            db.commit()
        except Exception:
            db.rollback()
            raise


def _amounts(
    db: Session,
    invoice_id: int,
    statuses,
    exclude_payment_id: int | None = None,
) -> Decimal:
    stmt = select(PaymentRecord.payment_amount).where(
        PaymentRecord.invoice_id == invoice_id,
        PaymentRecord.payment_status.in_(list(statuses)),
    )
    if exclude_payment_id is not None:
        stmt = stmt.where(PaymentRecord.id != exclude_payment_id)
    return sum((Decimal(amount) for amount in db.execute(stmt).scalars()), ZERO)


def confirmed_total(db: Session, invoice_id: int) -> Decimal:
    """Sum of CONFIRMED payment amounts for an invoice."""
    return _amounts(db, invoice_id, [PaymentStatus.CONFIRMED])


def pending_total(db: Session, invoice_id: int) -> Decimal:
    """Sum of PENDING payment amounts for an invoice."""
    return _amounts(db, invoice_id, [PaymentStatus.PENDING])


def committed_total(
    db: Session, invoice_id: int, exclude_payment_id: int | None = None
) -> Decimal:
    """Sum of PENDING + CONFIRMED amounts, i.e. funds held against the invoice.

    Args:
        db: Database session
        invoice_id: Invoice ID
        exclude_payment_id: Leave one record out (used when re-validating an edit)
    """
    return _amounts(db, invoice_id, COMMITTED_STATUSES, exclude_payment_id)


def has_committed_payments(db: Session, invoice_id: int) -> bool:
    """Whether any PENDING or CONFIRMED record exists (the invoice lock condition)."""
    stmt = (
        select(PaymentRecord.id)
        .where(
            PaymentRecord.invoice_id == invoice_id,
            PaymentRecord.payment_status.in_(list(COMMITTED_STATUSES)),
        )
        .limit(1)
    )
    return db.execute(stmt).first() is not None


__all__ = [
    "load_invoice",
    "locked_invoice",
    "confirmed_total",
    "pending_total",
    "committed_total",
    "has_committed_payments",
]
