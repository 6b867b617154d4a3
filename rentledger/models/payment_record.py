"""Payment record ORM model - one payment event against one invoice."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Numeric, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentledger.models import Base, BaseModel


class PaymentMethod(str, Enum):
    """How the tenant paid."""

    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    MOBILE_BANKING = "MOBILE_BANKING"
    CHEQUE = "CHEQUE"
    CREDIT_CARD = "CREDIT_CARD"
    QR_CODE = "QR_CODE"
    OTHER = "OTHER"


class PaymentStatus(str, Enum):
    """Reconciliation state of a payment record."""

    PENDING = "PENDING"  # Received, awaiting confirmation
    CONFIRMED = "CONFIRMED"  # Counts towards the invoice's paid total
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


# Statuses whose amounts are held against the invoice's net amount
COMMITTED_STATUSES = frozenset({PaymentStatus.PENDING, PaymentStatus.CONFIRMED})


class PaymentRecord(Base, BaseModel):
    """Ledger entry for a payment against an invoice.

    Attributes:
        invoice_id: Invoice the payment is applied to
        payment_amount: Amount paid (always positive)
        payment_method: Channel used for the payment
        payment_date: Date the money was received
        payment_status: PENDING, CONFIRMED, REJECTED or CANCELLED
        transaction_reference: Bank or gateway reference (optional)
        notes: Free-form notes (optional)
        recorded_by: Who entered the record (optional)
    """

    __tablename__ = "payment_records"

    invoice_id: Mapped[int] = mapped_column(
        ForeignKey("invoices.id"), nullable=False, index=True
    )
    payment_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2), nullable=False
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod), nullable=False, default=PaymentMethod.CASH
    )
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING
    )
    transaction_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text(), nullable=True)
    recorded_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Relationships
    invoice: Mapped["Invoice"] = relationship(  # noqa: F821
        "Invoice", back_populates="payment_records"
    )
    proofs: Mapped[list["PaymentProof"]] = relationship(  # noqa: F821
        "PaymentProof",
        back_populates="payment_record",
        cascade="all, delete-orphan",
    )

    @property
    def is_committed(self) -> bool:
        return self.payment_status in COMMITTED_STATUSES

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<PaymentRecord(id={self.id}, invoice_id={self.invoice_id}, "
            f"amount={self.payment_amount}, status={self.payment_status.value})>"
        )


__all__ = ["PaymentRecord", "PaymentMethod", "PaymentStatus", "COMMITTED_STATUSES"]
