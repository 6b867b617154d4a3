"""Invoice ORM model: one billing period of one contract."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentledger.models import Base, BaseModel


class InvoiceStatus(str, Enum):
    """Stored invoice lifecycle state.

    "Overdue" is deliberately absent: it is projected at read time from the
    due date and the ledger.
    """

    INCOMPLETE = "INCOMPLETE"
    COMPLETE = "COMPLETE"


class Invoice(Base, BaseModel):
    """Invoice for one contract and one billing month.

    Money columns are Numeric(12, 2); unit rates keep four decimal places.
    ``previous_balance`` is a frozen snapshot of the prior invoice's unpaid
    remainder taken at creation time; it is not a live reference.
    """

    __tablename__ = "invoices"

    contract_id: Mapped[int] = mapped_column(
        ForeignKey("contracts.id"),
        nullable=False,
        comment="Contract this invoice bills",
    )
    create_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Period anchor date",
    )
    billing_month: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        comment="Billing month in YYYY-MM format",
    )
    due_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Payment due date; penalty applies after it",
    )

    # Charge inputs
    rent: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    water_unit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    water_rate: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    electricity_unit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    electricity_rate: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    addon_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)

    # Computed amounts
    water_bill: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    electricity_bill: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    sub_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    previous_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=0,
        comment="Unpaid remainder of the prior invoice, frozen at creation",
    )
    penalty_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    net_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)

    # Lifecycle
    status: Mapped[InvoiceStatus] = mapped_column(
        SQLEnum(InvoiceStatus),
        nullable=False,
        default=InvoiceStatus.INCOMPLETE,
    )
    pay_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    penalty_applied_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Soft-cancel timestamp; cancelled invoices leave the carry-forward chain",
    )

    # Relationships
    contract: Mapped["Contract"] = relationship(  # noqa: F821
        "Contract",
        back_populates="invoices",
    )
    payment_records: Mapped[list["PaymentRecord"]] = relationship(  # noqa: F821
        "PaymentRecord",
        back_populates="invoice",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_invoice_contract_create_date", "contract_id", "create_date"),
        Index("idx_invoice_contract_month", "contract_id", "billing_month"),
    )

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled_at is not None

    def __repr__(self) -> str:
        return (
            f"<Invoice(id={self.id}, contract_id={self.contract_id}, "
            f"billing_month={self.billing_month}, net_amount={self.net_amount}, "
            f"status={self.status})>"
        )


__all__ = ["Invoice", "InvoiceStatus"]
