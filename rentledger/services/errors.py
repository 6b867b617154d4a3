"""Billing domain exceptions.

Every exception carries a stable ``code`` (used as the batch-import rejection
reason and in API error bodies) and the HTTP status the API layer maps it to.
"""

from decimal import Decimal


class BillingError(Exception):
    """Base exception for billing errors."""

    code = "BillingError"
    http_status = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInput(BillingError):
    """Negative or malformed numeric/date input. Raised before any mutation."""

    code = "InvalidInput"


class InvalidAmountError(InvalidInput):
    """Payment amount is zero or negative."""

    code = "InvalidAmountError"


class InvalidPeriod(BillingError):
    """Billing month missing, malformed, or conflicting with existing invoices."""

    code = "InvalidPeriod"


class UnknownRoom(BillingError):
    """Room number does not resolve to a room with an active contract."""

    code = "UnknownRoom"
    http_status = 404


class NotFoundError(BillingError):
    """Invoice, contract, payment record or proof does not exist."""

    code = "NotFound"
    http_status = 404


class InvoiceLocked(BillingError):
    """Edit to fields that became immutable once payments exist."""

    code = "InvoiceLocked"
    http_status = 409


class OverpaymentError(BillingError):
    """Payment would push committed payments past the invoice's net amount."""

    code = "OverpaymentError"
    http_status = 409

    def __init__(self, message: str, remaining: Decimal):
        self.remaining = remaining
        super().__init__(message)


class DataIntegrityFault(BillingError):
    """Stored state violates a ledger invariant. Never corrected silently."""

    code = "DataIntegrityFault"
    http_status = 500
