"""Invoice lifecycle: creation, edits before payment, soft cancellation.

Creation freezes three things on the invoice: the contract's rent, the unit
rates, and ``previous_balance`` (the unpaid remainder of the prior invoice).
Once any PENDING or CONFIRMED payment exists the inputs of ``net_amount``
are locked as well.
"""

import logging
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from rentledger.config import settings
from rentledger.models import utcnow
from rentledger.models.contract import Contract
from rentledger.models.invoice import Invoice, InvoiceStatus
from rentledger.services.audit_service import AuditService
from rentledger.services.balance_service import OutstandingBalanceResolver
from rentledger.services.bill_calculator import compute_bill, compute_net_amount
from rentledger.services.errors import (
    InvalidInput,
    InvalidPeriod,
    InvoiceLocked,
    NotFoundError,
)
from rentledger.services.invoice_status import InvoiceStatusMachine
from rentledger.services.ledger import has_committed_payments, load_invoice, locked_invoice
from rentledger.services.locks import contract_lock
from rentledger.services.money import ZERO, non_negative

logger = logging.getLogger(__name__)


def billing_month_of(day: date) -> str:
    """Billing month key (YYYY-MM) for a date."""
    return day.strftime("%Y-%m")


def _as_date(value, field: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as e:
            raise InvalidInput(f"{field} is not an ISO date: {value!r}") from e
    raise InvalidInput(f"{field} must be a date, got {value!r}")


class InvoiceService:
    """Creates, edits and cancels invoices."""

    def __init__(self, db_session: Session):
        self.db = db_session
        self.resolver = OutstandingBalanceResolver(db_session)
        self.status = InvoiceStatusMachine(db_session)

    def create_invoice(
        self,
        contract_id: int,
        create_date: date,
        water_unit,
        electricity_unit,
        water_rate=None,
        electricity_rate=None,
        addon_amount=ZERO,
        due_date: date | None = None,
        actor: str | None = None,
    ) -> Invoice:
        """Create the invoice for a contract's next billing period.

        Args:
            contract_id: Contract ID
            create_date: Period anchor date; its month is the billing month
            water_unit: Metered water units
            electricity_unit: Metered electricity units
            water_rate: Price per water unit (default: configured standard rate)
            electricity_rate: Price per electricity unit (default: configured standard rate)
            addon_amount: Flat extra fee (default 0)
            due_date: Payment due date (default: create_date + configured due days)
            actor: Who created the invoice (optional)

        Returns:
            Created Invoice with previous_balance frozen

        Raises:
            InvalidInput: If any numeric input is negative or malformed
            InvalidPeriod: If the month already has a live invoice, the date is not
                after the contract's latest invoice, or due_date precedes create_date
            NotFoundError: If contract does not exist
            DataIntegrityFault: If the prior invoice is overpaid
        """
        create_date = _as_date(create_date, "create_date")
        due_date = (
            create_date + timedelta(days=settings.due_days)
            if due_date is None
            else _as_date(due_date, "due_date")
        )
        if due_date < create_date:
            raise InvalidPeriod(f"due_date {due_date} is before create_date {create_date}")

        water_unit = non_negative(water_unit, "water_unit")
        electricity_unit = non_negative(electricity_unit, "electricity_unit")
        water_rate = non_negative(
            settings.default_water_rate if water_rate is None else water_rate, "water_rate"
        )
        electricity_rate = non_negative(
            settings.default_electricity_rate if electricity_rate is None else electricity_rate,
            "electricity_rate",
        )
        addon_amount = non_negative(ZERO if addon_amount is None else addon_amount, "addon_amount")
        billing_month = billing_month_of(create_date)

        with contract_lock(contract_id):
            try:
                contract = self.db.get(Contract, contract_id)
                if contract is None:
                    raise NotFoundError(f"Contract {contract_id} not found")

                live = (
                    self.db.query(Invoice)
                    .filter(Invoice.contract_id == contract_id, Invoice.cancelled_at.is_(None))
                    .order_by(Invoice.create_date, Invoice.id)
                    .all()
                )
                if any(inv.billing_month == billing_month for inv in live):
                    raise InvalidPeriod(
                        f"Contract {contract_id} already has an invoice for {billing_month}"
                    )
                if live and create_date <= live[-1].create_date:
                    raise InvalidPeriod(
                        f"create_date {create_date} must be after the latest invoice "
                        f"date {live[-1].create_date}"
                    )

                previous_balance = self.resolver.resolve(contract_id)
                bill = compute_bill(
                    contract.rent_amount_snapshot,
                    water_unit,
                    water_rate,
                    electricity_unit,
                    electricity_rate,
                    addon_amount,
                )

                invoice = Invoice(
                    contract_id=contract_id,
                    create_date=create_date,
                    billing_month=billing_month,
                    due_date=due_date,
                    rent=contract.rent_amount_snapshot,
                    water_unit=water_unit,
                    water_rate=water_rate,
                    electricity_unit=electricity_unit,
                    electricity_rate=electricity_rate,
                    addon_amount=addon_amount,
                    water_bill=bill.water_bill,
                    electricity_bill=bill.electricity_bill,
                    sub_total=bill.sub_total,
                    previous_balance=previous_balance,
                    penalty_total=ZERO,
                    net_amount=compute_net_amount(bill.sub_total, ZERO, previous_balance),
                    status=InvoiceStatus.INCOMPLETE,
                )
                self.db.add(invoice)
                self.db.flush()
                # A zero net amount is settled from the start
                self.status.apply_ledger(invoice)

                AuditService.log(
                    self.db,
                    "invoice",
                    invoice.id,
                    "create",
                    actor=actor,
                    changes={
                        "billing_month": billing_month,
                        "sub_total": bill.sub_total,
                        "previous_balance": previous_balance,
                        "net_amount": invoice.net_amount,
                    },
                )
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(invoice)
        logger.info(
            f"Created invoice {invoice.id} for contract {contract_id} ({billing_month}): "
            f"sub_total={invoice.sub_total}, previous_balance={invoice.previous_balance}, "
            f"net={invoice.net_amount}"
        )
        return invoice

    def update_invoice(
        self,
        invoice_id: int,
        water_unit=None,
        electricity_unit=None,
        addon_amount=None,
        rent=None,
        due_date: date | None = None,
        water_rate=None,
        electricity_rate=None,
        actor: str | None = None,
    ) -> Invoice:
        """Edit an invoice's charge inputs or due date. Only supplied fields change.

        Rates are fixed at creation: a supplied rate must equal the stored one.
        Changes to rent, units or addon are refused once the invoice has a
        PENDING or CONFIRMED payment; a due date change is always allowed.

        Raises:
            InvalidInput: If a value is negative/malformed or a rate differs
            InvalidPeriod: If due_date precedes create_date
            InvoiceLocked: If the invoice is cancelled, or net-amount inputs change
                while payments exist
            NotFoundError: If invoice does not exist
        """
        requested = {}
        for field, value in (
            ("water_unit", water_unit),
            ("electricity_unit", electricity_unit),
            ("addon_amount", addon_amount),
            ("rent", rent),
        ):
            if value is not None:
                requested[field] = non_negative(value, field)
        rates = {
            field: non_negative(value, field)
            for field, value in (("water_rate", water_rate), ("electricity_rate", electricity_rate))
            if value is not None
        }
        new_due = _as_date(due_date, "due_date") if due_date is not None else None

        with locked_invoice(self.db, invoice_id) as invoice:
            if invoice.is_cancelled:
                raise InvoiceLocked(f"Invoice {invoice_id} is cancelled")

            for field, value in rates.items():
                if value != getattr(invoice, field):
                    raise InvalidInput(
                        f"{field} is fixed at creation ({getattr(invoice, field)}); got {value}"
                    )

            changes = {
                field: {"old": getattr(invoice, field), "new": value}
                for field, value in requested.items()
                if value != getattr(invoice, field)
            }
            if changes and has_committed_payments(self.db, invoice.id):
                raise InvoiceLocked(
                    f"Invoice {invoice_id} has payments; cannot change {', '.join(changes)}"
                )

            if new_due is not None and new_due != invoice.due_date:
                if new_due < invoice.create_date:
                    raise InvalidPeriod(
                        f"due_date {new_due} is before create_date {invoice.create_date}"
                    )
                changes["due_date"] = {"old": invoice.due_date, "new": new_due}
                invoice.due_date = new_due

            if not changes:
                return invoice

            for field, value in requested.items():
                setattr(invoice, field, value)
            bill = compute_bill(
                invoice.rent,
                invoice.water_unit,
                invoice.water_rate,
                invoice.electricity_unit,
                invoice.electricity_rate,
                invoice.addon_amount,
            )
            invoice.water_bill = bill.water_bill
            invoice.electricity_bill = bill.electricity_bill
            invoice.sub_total = bill.sub_total
            invoice.net_amount = compute_net_amount(
                bill.sub_total, invoice.penalty_total, invoice.previous_balance
            )
            self.db.flush()
            self.status.apply_ledger(invoice)

            AuditService.log(self.db, "invoice", invoice.id, "update", actor=actor, changes=changes)

        self.db.refresh(invoice)
        logger.info(f"Updated invoice {invoice_id}: {', '.join(changes)} (net={invoice.net_amount})")
        return invoice

    def get_invoice(self, invoice_id: int) -> Invoice:
        return load_invoice(self.db, invoice_id)

    def list_invoices(
        self, contract_id: int | None = None, include_cancelled: bool = False
    ) -> list[Invoice]:
        """List invoices ordered by contract and period.

        Args:
            contract_id: Restrict to one contract (optional)
            include_cancelled: Include soft-cancelled invoices
        """
        query = self.db.query(Invoice)
        if contract_id is not None:
            query = query.filter(Invoice.contract_id == contract_id)
        if not include_cancelled:
            query = query.filter(Invoice.cancelled_at.is_(None))
        return query.order_by(Invoice.contract_id, Invoice.create_date, Invoice.id).all()

    def find_invoice(self, contract_id: int, billing_month: str) -> Invoice | None:
        """The live invoice of a contract for a billing month, if any."""
        return (
            self.db.query(Invoice)
            .filter(
                Invoice.contract_id == contract_id,
                Invoice.billing_month == billing_month,
                Invoice.cancelled_at.is_(None),
            )
            .first()
        )

    def cancel_invoice(self, invoice_id: int, actor: str | None = None) -> Invoice:
        """Soft-cancel an invoice. It leaves the carry-forward chain.

        Raises:
            InvoiceLocked: If the invoice has PENDING or CONFIRMED payments
            NotFoundError: If invoice does not exist
        """
        with locked_invoice(self.db, invoice_id) as invoice:
            if invoice.is_cancelled:
                return invoice
            if has_committed_payments(self.db, invoice.id):
                raise InvoiceLocked(
                    f"Invoice {invoice_id} has payments; reject or cancel them first"
                )
            invoice.cancelled_at = utcnow()
            AuditService.log(self.db, "invoice", invoice.id, "cancel", actor=actor)

        self.db.refresh(invoice)
        logger.info(f"Cancelled invoice {invoice_id}")
        return invoice


__all__ = ["InvoiceService", "billing_month_of"]
