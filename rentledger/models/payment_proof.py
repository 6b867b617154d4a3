"""Payment proof model - evidence attached to a payment record."""

from enum import Enum

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentledger.models import Base, BaseModel


class ProofType(str, Enum):
    """Kind of evidence."""

    RECEIPT = "RECEIPT"
    BANK_SLIP = "BANK_SLIP"
    BANK_STATEMENT = "BANK_STATEMENT"
    CHEQUE_COPY = "CHEQUE_COPY"
    OTHER = "OTHER"


class PaymentProof(Base, BaseModel):
    """Evidence file reference for a payment. Carries no computation."""

    __tablename__ = "payment_proofs"

    payment_record_id: Mapped[int] = mapped_column(
        ForeignKey("payment_records.id"), nullable=False, index=True
    )
    proof_type: Mapped[ProofType] = mapped_column(
        SQLEnum(ProofType), nullable=False, default=ProofType.OTHER
    )
    file_ref: Mapped[str] = mapped_column(String(500), nullable=False)
    uploaded_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)

    # Relationships
    payment_record: Mapped["PaymentRecord"] = relationship(  # noqa: F821
        "PaymentRecord", back_populates="proofs"
    )

    def __repr__(self) -> str:
        return f"<PaymentProof(id={self.id}, type={self.proof_type.value}, file={self.file_ref})>"


__all__ = ["PaymentProof", "ProofType"]
