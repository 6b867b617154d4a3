"""Parsing utilities for utility-usage import data.

Handles the loose formats found in exported spreadsheets:
- Numbers with thousand separators: "1,339.50", "1 339.50"
- Empty cells for optional columns
- Billing months in YYYY-MM format

Example:
    >>> parse_decimal("1 339.50")
    Decimal('1339.50')

    >>> parse_billing_month("2024-03")
    datetime.date(2024, 3, 1)

    >>> read_usage_csv("RoomNumber,WaterUsage,ElectricityUsage,BillingMonth\\nA101,4,206,2024-03\\n")
    [{'room_number': 'A101', 'water_usage': '4', 'electricity_usage': '206', 'billing_month': '2024-03'}]
"""

import csv
import io
import re
from datetime import date
from decimal import Decimal, InvalidOperation

from rentledger.services.errors import InvalidInput, InvalidPeriod

# CSV header -> row key
USAGE_COLUMNS = {
    "RoomNumber": "room_number",
    "WaterUsage": "water_usage",
    "ElectricityUsage": "electricity_usage",
    "BillingMonth": "billing_month",
    "WaterRate": "water_rate",
    "ElectricityRate": "electricity_rate",
}
REQUIRED_COLUMNS = ("RoomNumber", "WaterUsage", "ElectricityUsage", "BillingMonth")

BILLING_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_decimal(value, field: str = "value") -> Decimal | None:
    """
    Parse a number cell to Decimal.

    Args:
        value: Cell content (str, int, float, Decimal) or None/empty
        field: Field name used in error messages

    Returns:
        Decimal object or None if input is empty/None

    Raises:
        InvalidInput: If value cannot be parsed as a number

    Examples:
        >>> parse_decimal("4")
        Decimal('4')
        >>> parse_decimal("6.5")
        Decimal('6.5')
        >>> parse_decimal("")
        None
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidInput(f"{field} is not a number: {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        value = str(value)

    value = str(value).strip()
    if not value:
        return None

    # Remove thousand separators (comma, regular and non-breaking spaces)
    normalized = value.replace(",", "").replace(" ", "").replace("\xa0", "")
    try:
        result = Decimal(normalized)
    except (ValueError, InvalidOperation) as e:
        raise InvalidInput(f"{field} is not a number: {value!r}") from e
    if not result.is_finite():
        raise InvalidInput(f"{field} is not a finite number: {value!r}")
    return result


def parse_billing_month(value) -> date:
    """
    Parse a YYYY-MM billing month to the first day of that month.

    Raises:
        InvalidPeriod: If value is missing or not a valid YYYY-MM month
    """
    if value is None or not str(value).strip():
        raise InvalidPeriod("billing_month is required")

    text = str(value).strip()
    match = BILLING_MONTH_RE.match(text)
    if not match:
        raise InvalidPeriod(f"billing_month must be YYYY-MM, got {text!r}")

    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise InvalidPeriod(f"billing_month is not a valid month: {text!r}")
    return date(year, month, 1)


def read_usage_csv(text: str) -> list[dict]:
    """
    Map usage CSV text into import rows.

    Expected header (rate columns optional):
        RoomNumber,WaterUsage,ElectricityUsage,BillingMonth,WaterRate,ElectricityRate

    Unknown columns are ignored. Blank lines are skipped, but a row of empty
    cells is kept so the importer rejects it and later row indices still
    match the CSV data rows.

    Returns:
        List of row dicts keyed by snake_case names (room_number, water_usage, ...)

    Raises:
        InvalidInput: If the header lacks a required column
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    header = [name.strip() for name in (reader.fieldnames or [])]
    missing = [column for column in REQUIRED_COLUMNS if column not in header]
    if missing:
        raise InvalidInput(f"CSV header is missing columns: {', '.join(missing)}")

    rows = []
    for raw in reader:
        row = {}
        for name, cell in raw.items():
            if name is None:
                continue
            key = USAGE_COLUMNS.get(name.strip())
            if key is not None:
                row[key] = cell.strip() if isinstance(cell, str) else cell
        rows.append(row)
    return rows


__all__ = ["parse_decimal", "parse_billing_month", "read_usage_csv", "USAGE_COLUMNS"]
