"""Payment ledger: records payments against invoices without overpayment.

Provides methods for:
- Recording payments (PENDING, or CONFIRMED when auto-confirmed)
- Confirming, rejecting and cancelling payment records
- Editing and deleting payment records
- Remaining balance and ledger totals per invoice
- Payment proof bookkeeping

Funds held against an invoice are PENDING + CONFIRMED. A payment (or an edit
that moves a record back into one of those statuses) is refused when it
would push that total past the invoice's net amount. The check and the write
run in one ``locked_invoice`` unit of work, so concurrent payments against the
same invoice cannot both pass the check.
"""

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from rentledger.config import settings
from rentledger.models.invoice import Invoice
from rentledger.models.payment_proof import PaymentProof, ProofType
from rentledger.models.payment_record import (
    COMMITTED_STATUSES,
    PaymentMethod,
    PaymentRecord,
    PaymentStatus,
)
from rentledger.services.audit_service import AuditService
from rentledger.services.errors import (
    InvalidAmountError,
    InvalidInput,
    InvoiceLocked,
    NotFoundError,
    OverpaymentError,
)
from rentledger.services.invoice_status import InvoiceStatusMachine
from rentledger.services.ledger import (
    committed_total,
    confirmed_total,
    load_invoice,
    locked_invoice,
    pending_total,
)
from rentledger.services.money import ZERO, clamp_zero, round2, to_decimal

logger = logging.getLogger(__name__)


def _payment_amount(value) -> Decimal:
    amount = to_decimal(value, "payment_amount")
    if amount <= ZERO:
        raise InvalidAmountError(f"Payment amount must be positive, got {amount}")
    if round2(amount) != amount:
        raise InvalidAmountError(f"Payment amount has more than two decimal places: {amount}")
    return amount


def _enum(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInput(f"Unknown {field} {value!r} (allowed: {allowed})") from e


class PaymentLedger:
    """Payment records and their effect on invoice balances."""

    def __init__(self, db_session: Session, auto_confirm: bool | None = None):
        """Initialize payment ledger.

        Args:
            db_session: SQLAlchemy database session
            auto_confirm: Record new payments as CONFIRMED (default from settings)
        """
        self.db = db_session
        self.auto_confirm = settings.auto_confirm_payments if auto_confirm is None else auto_confirm
        self.status = InvoiceStatusMachine(db_session)

    def _check_room(
        self,
        invoice: Invoice,
        amount: Decimal,
        exclude_payment_id: int | None = None,
    ) -> None:
        """Raise OverpaymentError if ``amount`` does not fit under net_amount."""
        already_paid = committed_total(self.db, invoice.id, exclude_payment_id)
        if already_paid + amount > invoice.net_amount:
            remaining = clamp_zero(invoice.net_amount - already_paid)
            logger.warning(
                f"Overpayment refused on invoice {invoice.id}: "
                f"amount {amount}, remaining {remaining}"
            )
            raise OverpaymentError(
                f"Payment of {amount} exceeds remaining balance {remaining} "
                f"of invoice {invoice.id}",
                remaining=remaining,
            )

    def _get_record(self, payment_id: int) -> PaymentRecord:
        record = (
            self.db.query(PaymentRecord)
            .populate_existing()
            .filter(PaymentRecord.id == payment_id)
            .first()
        )
        if record is None:
            raise NotFoundError(f"Payment record {payment_id} not found")
        return record

    def add_payment(
        self,
        invoice_id: int,
        amount,
        method: PaymentMethod | str = PaymentMethod.CASH,
        payment_date: date | None = None,
        reference: str | None = None,
        notes: str | None = None,
        recorded_by: str | None = None,
        confirmed: bool | None = None,
    ) -> PaymentRecord:
        """Record a payment against an invoice.

        Args:
            invoice_id: Invoice the payment applies to
            amount: Payment amount (> 0, at most two decimal places)
            method: Payment method
            payment_date: Date received (default today)
            reference: Transaction reference (optional)
            notes: Free-form notes (optional)
            recorded_by: Who entered the payment (optional)
            confirmed: Force CONFIRMED (True) or PENDING (False); default from settings

        Returns:
            Created PaymentRecord

        Raises:
            InvalidAmountError: If amount is not positive
            InvalidInput: If method is unknown
            NotFoundError: If invoice does not exist
            InvoiceLocked: If the invoice is cancelled
            OverpaymentError: If committed payments would exceed net_amount
        """
        amount = _payment_amount(amount)
        method = _enum(PaymentMethod, method, "payment method")
        is_confirmed = self.auto_confirm if confirmed is None else confirmed
        status = PaymentStatus.CONFIRMED if is_confirmed else PaymentStatus.PENDING

        with locked_invoice(self.db, invoice_id) as invoice:
            if invoice.is_cancelled:
                raise InvoiceLocked(f"Invoice {invoice_id} is cancelled and accepts no payments")
            self._check_room(invoice, amount)

            record = PaymentRecord(
                invoice_id=invoice.id,
                payment_amount=amount,
                payment_method=method,
                payment_date=payment_date or date.today(),
                payment_status=status,
                transaction_reference=reference,
                notes=notes,
                recorded_by=recorded_by,
            )
            self.db.add(record)
            self.db.flush()
            self.status.apply_ledger(invoice)

            AuditService.log(
                self.db,
                "payment_record",
                record.id,
                "create",
                actor=recorded_by,
                changes={
                    "invoice_id": invoice.id,
                    "amount": amount,
                    "method": method,
                    "status": status,
                },
            )

        self.db.refresh(record)
        logger.info(
            f"Recorded {status.value} payment {record.id}: {amount} on invoice {invoice_id}"
        )
        return record

    def update_status(
        self, payment_id: int, new_status: PaymentStatus | str, actor: str | None = None
    ) -> PaymentRecord:
        """Move a payment record to a new reconciliation status.

        Moving a REJECTED or CANCELLED record back to PENDING or CONFIRMED
        re-runs the overpayment check. The invoice status is recomputed on
        every change.

        Raises:
            InvalidInput: If status is unknown
            NotFoundError: If record does not exist
            InvoiceLocked: If the record would be committed on a cancelled invoice
            OverpaymentError: If reinstating the record would overpay the invoice
        """
        new_status = _enum(PaymentStatus, new_status, "payment status")
        invoice_id = self._get_record(payment_id).invoice_id

        with locked_invoice(self.db, invoice_id) as invoice:
            record = self._get_record(payment_id)
            old_status = record.payment_status
            if old_status == new_status:
                return record

            if new_status in COMMITTED_STATUSES and invoice.is_cancelled:
                raise InvoiceLocked(
                    f"Invoice {invoice_id} is cancelled; payment {payment_id} cannot be "
                    f"moved to {new_status.value}"
                )
            if new_status in COMMITTED_STATUSES and old_status not in COMMITTED_STATUSES:
                self._check_room(invoice, record.payment_amount, exclude_payment_id=record.id)

            record.payment_status = new_status
            self.db.flush()
            self.status.apply_ledger(invoice)

            AuditService.log(
                self.db,
                "payment_record",
                record.id,
                "status",
                actor=actor,
                changes={"status": {"old": old_status, "new": new_status}},
            )

        self.db.refresh(record)
        logger.info(
            f"Payment {payment_id} status {old_status.value} -> {new_status.value} "
            f"(invoice {invoice_id})"
        )
        return record

    def update_payment(
        self,
        payment_id: int,
        amount=None,
        method: PaymentMethod | str | None = None,
        payment_date: date | None = None,
        reference: str | None = None,
        notes: str | None = None,
        actor: str | None = None,
    ) -> PaymentRecord:
        """Edit a payment record. Only supplied fields change.

        An amount change on a PENDING or CONFIRMED record re-validates the
        no-overpayment rule against the other committed records.

        Raises:
            InvalidAmountError: If amount is not positive
            InvalidInput: If method is unknown
            NotFoundError: If record does not exist
            InvoiceLocked: If a committed amount changes on a cancelled invoice
            OverpaymentError: If the new amount would overpay the invoice
        """
        new_amount = _payment_amount(amount) if amount is not None else None
        new_method = _enum(PaymentMethod, method, "payment method") if method is not None else None
        invoice_id = self._get_record(payment_id).invoice_id

        with locked_invoice(self.db, invoice_id) as invoice:
            record = self._get_record(payment_id)
            changes = {}

            if new_amount is not None and new_amount != record.payment_amount:
                if record.is_committed:
                    if invoice.is_cancelled:
                        raise InvoiceLocked(f"Invoice {invoice_id} is cancelled")
                    self._check_room(invoice, new_amount, exclude_payment_id=record.id)
                changes["amount"] = {"old": record.payment_amount, "new": new_amount}
                record.payment_amount = new_amount
            if new_method is not None and new_method != record.payment_method:
                changes["method"] = {"old": record.payment_method, "new": new_method}
                record.payment_method = new_method
            if payment_date is not None and payment_date != record.payment_date:
                changes["payment_date"] = {"old": record.payment_date, "new": payment_date}
                record.payment_date = payment_date
            if reference is not None:
                record.transaction_reference = reference
                changes["reference"] = reference
            if notes is not None:
                record.notes = notes
                changes["notes"] = notes

            if not changes:
                return record

            self.db.flush()
            self.status.apply_ledger(invoice)
            AuditService.log(
                self.db, "payment_record", record.id, "update", actor=actor, changes=changes
            )

        self.db.refresh(record)
        logger.info(f"Updated payment {payment_id}: {', '.join(changes)}")
        return record

    def delete_payment(self, payment_id: int, actor: str | None = None) -> Decimal:
        """Delete a payment record and its proofs.

        Returns:
            The invoice's remaining balance after the deletion

        Raises:
            NotFoundError: If record does not exist
        """
        invoice_id = self._get_record(payment_id).invoice_id

        with locked_invoice(self.db, invoice_id) as invoice:
            record = self._get_record(payment_id)
            AuditService.log(
                self.db,
                "payment_record",
                record.id,
                "delete",
                actor=actor,
                changes={"amount": record.payment_amount, "status": record.payment_status},
            )
            self.db.delete(record)
            self.db.flush()
            self.status.apply_ledger(invoice)
            remaining = clamp_zero(invoice.net_amount - confirmed_total(self.db, invoice.id))

        logger.info(f"Deleted payment {payment_id} from invoice {invoice_id}")
        return remaining

    def remaining(self, invoice_id: int) -> Decimal:
        """Unpaid balance: max(0, net_amount - sum(CONFIRMED))."""
        invoice = load_invoice(self.db, invoice_id)
        return clamp_zero(invoice.net_amount - confirmed_total(self.db, invoice_id))

    def total_confirmed(self, invoice_id: int) -> Decimal:
        load_invoice(self.db, invoice_id)
        return confirmed_total(self.db, invoice_id)

    def total_pending(self, invoice_id: int) -> Decimal:
        load_invoice(self.db, invoice_id)
        return pending_total(self.db, invoice_id)

    def get_payment(self, payment_id: int) -> PaymentRecord:
        return self._get_record(payment_id)

    def list_payments(
        self,
        invoice_id: int | None = None,
        status: PaymentStatus | str | None = None,
    ) -> list[PaymentRecord]:
        """List payment records, oldest first.

        Args:
            invoice_id: Restrict to one invoice (optional)
            status: Restrict to one status (optional)
        """
        query = self.db.query(PaymentRecord)
        if invoice_id is not None:
            query = query.filter(PaymentRecord.invoice_id == invoice_id)
        if status is not None:
            query = query.filter(
                PaymentRecord.payment_status == _enum(PaymentStatus, status, "payment status")
            )
        return query.order_by(PaymentRecord.payment_date, PaymentRecord.id).all()

    def attach_proof(
        self,
        payment_id: int,
        file_ref: str,
        proof_type: ProofType | str = ProofType.OTHER,
        uploaded_by: str | None = None,
        description: str | None = None,
    ) -> PaymentProof:
        """Attach evidence to a payment record. ``file_ref`` is opaque storage reference.

        Raises:
            InvalidInput: If file_ref is empty or proof_type unknown
            NotFoundError: If record does not exist
        """
        if not file_ref or not file_ref.strip():
            raise InvalidInput("file_ref is required")
        proof_type = _enum(ProofType, proof_type, "proof type")
        record = self._get_record(payment_id)

        proof = PaymentProof(
            payment_record_id=record.id,
            proof_type=proof_type,
            file_ref=file_ref.strip(),
            uploaded_by=uploaded_by,
            description=description,
        )
        self.db.add(proof)
        self.db.flush()
        AuditService.log(
            self.db,
            "payment_proof",
            proof.id,
            "create",
            actor=uploaded_by,
            changes={"payment_record_id": record.id, "proof_type": proof_type},
        )
        self.db.commit()
        self.db.refresh(proof)
        logger.info(f"Attached {proof_type.value} proof {proof.id} to payment {payment_id}")
        return proof

    def list_proofs(self, payment_id: int) -> list[PaymentProof]:
        self._get_record(payment_id)
        return (
            self.db.query(PaymentProof)
            .filter(PaymentProof.payment_record_id == payment_id)
            .order_by(PaymentProof.id)
            .all()
        )

    def delete_proof(
        self, proof_id: int, actor: str | None = None, payment_id: int | None = None
    ) -> None:
        """Delete a payment proof.

        Args:
            proof_id: Proof ID
            actor: Who deleted the proof (optional)
            payment_id: When given, the proof must belong to this payment record

        Raises:
            NotFoundError: If proof does not exist (or belongs to another record)
        """
        proof = self.db.get(PaymentProof, proof_id)
        if proof is None or (payment_id is not None and proof.payment_record_id != payment_id):
            raise NotFoundError(f"Payment proof {proof_id} not found")
        AuditService.log(self.db, "payment_proof", proof.id, "delete", actor=actor)
        self.db.delete(proof)
        self.db.commit()
        logger.info(f"Deleted payment proof {proof_id}")


__all__ = ["PaymentLedger"]
