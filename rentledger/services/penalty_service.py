"""Overdue penalty policy.

An invoice is penalized once, after its due date, if confirmed payments are
still below its net amount, whatever its stored status:

    penalty = round_int(penalty_rate × (sub_total + previous_balance))

``penalty_applied_at`` guards the transition, so repeated calls (or sweeps)
never stack penalties. Manual status changes leave an applied penalty alone;
only ``waive_penalty`` removes it.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy.orm import Session

from rentledger.config import settings
from rentledger.models import utcnow
from rentledger.models.invoice import Invoice
from rentledger.services.audit_service import AuditService
from rentledger.services.bill_calculator import compute_net_amount
from rentledger.services.errors import BillingError, OverpaymentError
from rentledger.services.invoice_status import InvoiceStatusMachine
from rentledger.services.ledger import committed_total, locked_invoice
from rentledger.services.money import ZERO, clamp_zero, non_negative, round_int

logger = logging.getLogger(__name__)


class PenaltyOutcome(NamedTuple):
    """Result of one penalty attempt."""

    invoice_id: int
    applied: bool
    penalty: Decimal  # amount added by this call (0 when not applied)
    net_amount: Decimal
    reason: str  # applied | already_applied | not_overdue | cancelled


def compute_penalty(sub_total, previous_balance, rate) -> Decimal:
    """Penalty amount for an invoice, rounded to whole units."""
    base = non_negative(sub_total, "sub_total") + non_negative(
        previous_balance, "previous_balance"
    )
    return round_int(non_negative(rate, "penalty_rate") * base)


class PenaltyService:
    """Applies and waives overdue penalties."""

    def __init__(self, db_session: Session, penalty_rate: Decimal | None = None):
        self.db = db_session
        self.penalty_rate = settings.penalty_rate if penalty_rate is None else penalty_rate
        self.status = InvoiceStatusMachine(db_session)

    def apply_overdue_penalty(
        self, invoice_id: int, as_of: date | None = None, actor: str | None = None
    ) -> PenaltyOutcome:
        """Apply the one-time overdue penalty if the invoice qualifies.

        Args:
            invoice_id: Invoice ID
            as_of: Date the overdue check is evaluated at (default today)
            actor: Who triggered the penalty (optional)

        Returns:
            PenaltyOutcome describing whether a penalty was added

        Raises:
            NotFoundError: If invoice does not exist
        """
        with locked_invoice(self.db, invoice_id) as invoice:
            if invoice.is_cancelled:
                return self._skip(invoice, "cancelled")
            if invoice.penalty_applied_at is not None:
                return self._skip(invoice, "already_applied")
            if not self.status.is_overdue(invoice, as_of):
                return self._skip(invoice, "not_overdue")

            penalty = compute_penalty(invoice.sub_total, invoice.previous_balance, self.penalty_rate)
            old_net = invoice.net_amount
            invoice.penalty_total = invoice.penalty_total + penalty
            invoice.net_amount = compute_net_amount(
                invoice.sub_total, invoice.penalty_total, invoice.previous_balance
            )
            invoice.penalty_applied_at = utcnow()

            AuditService.log(
                self.db,
                "invoice",
                invoice.id,
                "apply_penalty",
                actor=actor,
                changes={
                    "penalty": penalty,
                    "rate": self.penalty_rate,
                    "net_amount": {"old": old_net, "new": invoice.net_amount},
                },
            )
            new_net = invoice.net_amount

        logger.info(
            f"Applied penalty {penalty} to invoice {invoice_id} (net {old_net} -> {new_net})"
        )
        return PenaltyOutcome(invoice_id, True, penalty, new_net, "applied")

    def apply_overdue_penalties(
        self, as_of: date | None = None, actor: str | None = None
    ) -> list[PenaltyOutcome]:
        """Sweep all live invoices past their due date and penalize each once.

        Invoices that fail are logged and skipped; the sweep continues.

        Returns:
            Outcomes for the invoices that received a penalty
        """
        as_of = as_of or date.today()
        candidate_ids = [
            row.id
            for row in self.db.query(Invoice.id)
            .filter(
                Invoice.cancelled_at.is_(None),
                Invoice.penalty_applied_at.is_(None),
                Invoice.due_date < as_of,
            )
            .order_by(Invoice.id)
            .all()
        ]

        applied = []
        for invoice_id in candidate_ids:
            try:
                outcome = self.apply_overdue_penalty(invoice_id, as_of=as_of, actor=actor)
            except BillingError as e:
                logger.error(f"Penalty sweep failed for invoice {invoice_id}: {e.code}: {e}")
                continue
            if outcome.applied:
                applied.append(outcome)

        logger.info(
            f"Penalty sweep as of {as_of}: {len(applied)} of {len(candidate_ids)} invoices penalized"
        )
        return applied

    def waive_penalty(self, invoice_id: int, actor: str | None = None) -> Invoice:
        """Remove an applied penalty.

        ``penalty_applied_at`` is kept so the penalty is never re-applied.

        Raises:
            NotFoundError: If invoice does not exist
            OverpaymentError: If committed payments exceed the reduced net amount
        """
        with locked_invoice(self.db, invoice_id) as invoice:
            if invoice.penalty_total == ZERO:
                return invoice

            new_net = compute_net_amount(invoice.sub_total, ZERO, invoice.previous_balance)
            committed = committed_total(self.db, invoice.id)
            if committed > new_net:
                raise OverpaymentError(
                    f"Cannot waive penalty on invoice {invoice.id}: committed payments "
                    f"{committed} exceed net amount {new_net} without the penalty",
                    remaining=clamp_zero(new_net - committed),
                )

            waived = invoice.penalty_total
            old_net = invoice.net_amount
            invoice.penalty_total = ZERO
            invoice.net_amount = new_net
            self.status.apply_ledger(invoice)

            AuditService.log(
                self.db,
                "invoice",
                invoice.id,
                "waive_penalty",
                actor=actor,
                changes={"penalty": waived, "net_amount": {"old": old_net, "new": new_net}},
            )
        self.db.refresh(invoice)
        logger.info(f"Waived penalty {waived} on invoice {invoice_id}")
        return invoice

    def _skip(self, invoice: Invoice, reason: str) -> PenaltyOutcome:
        logger.debug(f"Penalty not applied to invoice {invoice.id}: {reason}")
        return PenaltyOutcome(invoice.id, False, ZERO, invoice.net_amount, reason)


__all__ = ["PenaltyService", "PenaltyOutcome", "compute_penalty"]
