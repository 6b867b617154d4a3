"""Outstanding balance resolution across a contract's invoice chain.

Each invoice freezes the unpaid remainder of the invoice immediately before
it as ``previous_balance``. Because that remainder already contains the
earlier carry-forward, only the most recent prior invoice is read; summing
over history would double count.

Example:
    Invoice A: net_amount 5000, confirmed payments 3000
    Invoice B (next period): previous_balance = 5000 - 3000 = 2000
"""

import logging
from datetime import date
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy.orm import Session

from rentledger.models.contract import Contract
from rentledger.models.invoice import Invoice
from rentledger.services.errors import DataIntegrityFault, NotFoundError
from rentledger.services.invoice_status import InvoiceStatusMachine
from rentledger.services.ledger import confirmed_total, load_invoice
from rentledger.services.locks import invoice_lock
from rentledger.services.money import ZERO

logger = logging.getLogger(__name__)


class OutstandingInvoice(NamedTuple):
    """Invoice with its unpaid remainder."""

    invoice: Invoice
    remaining: Decimal


class OutstandingSummary(NamedTuple):
    """Contract-level outstanding figures."""

    total_outstanding: Decimal  # remainder of the latest invoice (chain result)
    total_penalty: Decimal
    overdue_count: int
    total_invoices: int


class OutstandingBalanceResolver:
    """Computes carry-forward balances from the invoice chain."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def _chain(self, contract_id: int) -> list[Invoice]:
        """Live invoices of a contract ordered by (create_date, id)."""
        if self.db.get(Contract, contract_id) is None:
            raise NotFoundError(f"Contract {contract_id} not found")
        return (
            self.db.query(Invoice)
            .filter(Invoice.contract_id == contract_id, Invoice.cancelled_at.is_(None))
            .order_by(Invoice.create_date, Invoice.id)
            .all()
        )

    def _remainder(self, invoice: Invoice) -> Decimal:
        remainder = invoice.net_amount - confirmed_total(self.db, invoice.id)
        if remainder < ZERO:
            logger.error(
                f"Ledger invariant violated: invoice {invoice.id} has confirmed payments "
                f"above its net amount {invoice.net_amount} (remainder {remainder})"
            )
            raise DataIntegrityFault(
                f"Invoice {invoice.id} is overpaid by {-remainder}; ledger needs manual review"
            )
        return remainder

    def resolve(self, contract_id: int, as_of_invoice_id: int | None = None) -> Decimal:
        """Unpaid remainder of the most recent prior invoice of a contract.

        Args:
            contract_id: Contract ID
            as_of_invoice_id: Only consider invoices ordered before this one.
                When omitted, every live invoice counts as prior (the caller is
                about to create the next one).

        Returns:
            net_amount - sum(CONFIRMED) of the prior invoice, or 0 if none

        Raises:
            NotFoundError: If the contract or as_of invoice does not exist
            DataIntegrityFault: If the prior invoice is overpaid
        """
        chain = self._chain(contract_id)

        if as_of_invoice_id is not None:
            anchor = self.db.get(Invoice, as_of_invoice_id)
            if anchor is None or anchor.contract_id != contract_id:
                raise NotFoundError(
                    f"Invoice {as_of_invoice_id} not found for contract {contract_id}"
                )
            key = (anchor.create_date, anchor.id)
            chain = [inv for inv in chain if (inv.create_date, inv.id) < key]

        if not chain:
            return ZERO

        prior_id = chain[-1].id
        # Read the prior invoice and its ledger as one consistent snapshot
        with invoice_lock(prior_id):
            prior = load_invoice(self.db, prior_id)
            remainder = self._remainder(prior)

        logger.debug(f"Contract {contract_id}: carry-forward {remainder} from invoice {prior_id}")
        return remainder

    def get_outstanding_invoices(self, contract_id: int) -> list[OutstandingInvoice]:
        """Live invoices of a contract that still have an unpaid remainder, oldest first.

        Remainders of older invoices are already carried into later ones, so
        these figures are not additive.
        """
        result = []
        for invoice in self._chain(contract_id):
            remaining = self._remainder(invoice)
            if remaining > ZERO:
                result.append(OutstandingInvoice(invoice=invoice, remaining=remaining))
        return result

    def get_outstanding_summary(
        self, contract_id: int, as_of: date | None = None
    ) -> OutstandingSummary:
        """Summarize a contract's outstanding position.

        Args:
            contract_id: Contract ID
            as_of: Date used for the overdue projection (default today)

        Returns:
            OutstandingSummary; total_outstanding is the latest invoice's remainder
        """
        outstanding = self.get_outstanding_invoices(contract_id)
        status = InvoiceStatusMachine(self.db)

        total_penalty = sum((item.invoice.penalty_total for item in outstanding), ZERO)
        overdue_count = sum(1 for item in outstanding if status.is_overdue(item.invoice, as_of))

        return OutstandingSummary(
            total_outstanding=self.resolve(contract_id),
            total_penalty=total_penalty,
            overdue_count=overdue_count,
            total_invoices=len(outstanding),
        )


__all__ = ["OutstandingBalanceResolver", "OutstandingInvoice", "OutstandingSummary"]
