"""Batch import of metered utility usage.

Each row names a room, a billing month and the water/electricity units for
that month. The row is applied to the room's active contract:

- an invoice already exists for the month: its units are updated through
  ``InvoiceService.update_invoice``, the same path as a manual edit, so the
  payment lock and the frozen rates apply; a month whose invoice already
  has payments is rejected outright;
- otherwise a new invoice is created dated the first of the month and due on
  the configured import due day.

Rows are independent. A failing row is rolled back and reported; it never
aborts the batch.

Example:
    >>> result = UtilityUsageImporter(db).import_batch([
    ...     {"room_number": "A101", "water_usage": "4", "electricity_usage": "206",
    ...      "billing_month": "2024-03"},
    ... ])
    >>> result.accepted, result.rejected
    (1, [])
"""

import logging
from collections.abc import Iterable, Mapping
from typing import NamedTuple

from sqlalchemy.orm import Session

from rentledger.config import settings
from rentledger.models.contract import Contract
from rentledger.models.invoice import Invoice
from rentledger.models.room import Room
from rentledger.services.errors import BillingError, InvalidInput, InvoiceLocked, UnknownRoom
from rentledger.services.invoice_service import InvoiceService, billing_month_of
from rentledger.services.ledger import has_committed_payments
from rentledger.services.money import non_negative
from rentledger.services.parsers import parse_billing_month, parse_decimal

logger = logging.getLogger(__name__)


class RowRejection(NamedTuple):
    """One rejected import row."""

    row_index: int  # 0-based position in the batch
    reason: str  # error code, e.g. "UnknownRoom"
    detail: str


class BatchResult(NamedTuple):
    """Outcome of one import batch."""

    accepted: int
    rejected: list[RowRejection]


class UtilityUsageImporter:
    """Applies usage rows to invoices, one row at a time."""

    def __init__(self, db_session: Session, invoice_service: InvoiceService | None = None):
        self.db = db_session
        self.invoices = invoice_service or InvoiceService(db_session)

    def import_batch(self, rows: Iterable[Mapping], actor: str | None = None) -> BatchResult:
        """Import a batch of usage rows.

        Args:
            rows: Row mappings with room_number, water_usage, electricity_usage,
                billing_month and optional water_rate, electricity_rate
            actor: Who ran the import (optional)

        Returns:
            BatchResult with the accepted count and one RowRejection per failed row
        """
        accepted = 0
        rejected: list[RowRejection] = []

        for index, row in enumerate(rows):
            try:
                self.import_row(row, actor=actor)
            except BillingError as e:
                self.db.rollback()
                rejected.append(RowRejection(index, e.code, e.message))
                logger.warning(f"Import row {index} rejected: {e.code}: {e.message}")
                continue
            accepted += 1

        logger.info(f"Usage import finished: {accepted} accepted, {len(rejected)} rejected")
        return BatchResult(accepted=accepted, rejected=rejected)

    def import_row(self, row: Mapping, actor: str | None = None) -> Invoice:
        """Validate and apply one row.

        Validation order: numbers (InvalidInput), month (InvalidPeriod),
        room and active contract (UnknownRoom).

        Returns:
            The created or updated Invoice

        Raises:
            InvalidInput: If a usage or rate value is missing, negative or malformed
            InvalidPeriod: If the billing month is missing or malformed, or the
                month precedes the contract's latest invoice
            UnknownRoom: If the room does not exist or has no active contract
            InvoiceLocked: If the month's invoice has PENDING or CONFIRMED payments,
                even when the row repeats the stored values
        """
        water_unit = non_negative(
            parse_decimal(row.get("water_usage"), "water_usage"), "water_usage"
        )
        electricity_unit = non_negative(
            parse_decimal(row.get("electricity_usage"), "electricity_usage"), "electricity_usage"
        )
        water_rate = parse_decimal(row.get("water_rate"), "water_rate")
        electricity_rate = parse_decimal(row.get("electricity_rate"), "electricity_rate")
        for field, rate in (("water_rate", water_rate), ("electricity_rate", electricity_rate)):
            if rate is not None:
                non_negative(rate, field)

        period_start = parse_billing_month(row.get("billing_month"))
        contract = self._active_contract(row.get("room_number"))

        existing = self.invoices.find_invoice(contract.id, billing_month_of(period_start))
        if existing is not None:
            if has_committed_payments(self.db, existing.id):
                raise InvoiceLocked(
                    f"Invoice {existing.id} for {existing.billing_month} has payments; "
                    f"usage cannot be re-imported"
                )
            return self.invoices.update_invoice(
                existing.id,
                water_unit=water_unit,
                electricity_unit=electricity_unit,
                water_rate=water_rate,
                electricity_rate=electricity_rate,
                actor=actor,
            )

        return self.invoices.create_invoice(
            contract.id,
            period_start,
            water_unit,
            electricity_unit,
            water_rate=water_rate,
            electricity_rate=electricity_rate,
            due_date=period_start.replace(day=settings.import_due_day),
            actor=actor,
        )

    def _active_contract(self, room_number) -> Contract:
        if room_number is None or not str(room_number).strip():
            raise InvalidInput("room_number is required")
        room_number = str(room_number).strip()

        room = self.db.query(Room).filter(Room.room_number == room_number).first()
        if room is None:
            raise UnknownRoom(f"Room {room_number} not found")

        contract = (
            self.db.query(Contract)
            .filter(Contract.room_id == room.id, Contract.is_active.is_(True))
            .order_by(Contract.start_date.desc(), Contract.id.desc())
            .first()
        )
        if contract is None:
            raise UnknownRoom(f"Room {room_number} has no active contract")
        return contract


__all__ = ["UtilityUsageImporter", "BatchResult", "RowRejection"]
