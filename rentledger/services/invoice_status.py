"""Invoice status machine: INCOMPLETE <-> COMPLETE derived from the ledger.

Policy:
- ``apply_ledger`` derives the status from CONFIRMED payments in both
  directions. Every ledger mutation (payment add/update/delete/status change)
  calls it, so rejecting a confirmed payment re-opens a COMPLETE invoice.
- ``set_status`` is a manual override for corrections. It holds until the next
  ledger mutation or an explicit ``recompute``.
- "Overdue" is never stored; ``is_overdue`` projects it at read time.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from rentledger.models import utcnow
from rentledger.models.invoice import Invoice, InvoiceStatus
from rentledger.services.audit_service import AuditService
from rentledger.services.errors import InvalidInput
from rentledger.services.ledger import confirmed_total, locked_invoice

logger = logging.getLogger(__name__)


def _set(invoice: Invoice, status: InvoiceStatus) -> None:
    invoice.status = status
    if status == InvoiceStatus.COMPLETE:
        if invoice.pay_date is None:
            invoice.pay_date = utcnow()
    else:
        invoice.pay_date = None


class InvoiceStatusMachine:
    """Derives and overrides invoice lifecycle state."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def apply_ledger(self, invoice: Invoice) -> bool:
        """Derive status from the ledger. Caller holds the invoice lock.

        Pending changes must be flushed first so the ledger query sees them.

        Args:
            invoice: Invoice to update in place

        Returns:
            True if the status changed
        """
        paid = confirmed_total(self.db, invoice.id)
        target = (
            InvoiceStatus.COMPLETE if paid >= invoice.net_amount else InvoiceStatus.INCOMPLETE
        )
        if invoice.status == target:
            return False

        old = invoice.status
        _set(invoice, target)
        AuditService.log(
            self.db,
            "invoice",
            invoice.id,
            "status",
            changes={"status": {"old": old, "new": target}, "confirmed_total": paid},
        )
        logger.info(
            f"Invoice {invoice.id} status {old.value} -> {target.value} "
            f"(confirmed={paid}, net={invoice.net_amount})"
        )
        return True

    def recompute(self, invoice_id: int) -> Invoice:
        """Explicitly re-derive an invoice's status from its ledger.

        Discards a manual override that the ledger no longer supports.
        """
        with locked_invoice(self.db, invoice_id) as invoice:
            self.apply_ledger(invoice)
        self.db.refresh(invoice)
        return invoice

    def set_status(
        self, invoice_id: int, status: InvoiceStatus, actor: str | None = None
    ) -> Invoice:
        """Manually override an invoice's status.

        COMPLETE sets pay_date to now if unset; INCOMPLETE clears pay_date.
        An applied penalty is never removed by a status change.

        Raises:
            InvalidInput: If status is not an InvoiceStatus value
            NotFoundError: If invoice does not exist
        """
        try:
            status = InvoiceStatus(status)
        except ValueError as e:
            raise InvalidInput(f"Unknown invoice status: {status!r}") from e

        with locked_invoice(self.db, invoice_id) as invoice:
            old = invoice.status
            _set(invoice, status)
            AuditService.log(
                self.db,
                "invoice",
                invoice.id,
                "status_override",
                actor=actor,
                changes={"status": {"old": old, "new": status}},
            )
        self.db.refresh(invoice)
        logger.info(f"Invoice {invoice_id} status manually set to {status.value}")
        return invoice

    def is_overdue(self, invoice: Invoice, as_of: date | None = None) -> bool:
        """Read-time overdue projection.

        Overdue means: not cancelled, due date passed, and confirmed payments
        below the net amount. The stored status is ignored, so a manual
        COMPLETE override does not hide an unpaid invoice.
        """
        as_of = as_of or date.today()
        if invoice.is_cancelled:
            return False
        if invoice.due_date >= as_of:
            return False
        return confirmed_total(self.db, invoice.id) < invoice.net_amount


__all__ = ["InvoiceStatusMachine"]
