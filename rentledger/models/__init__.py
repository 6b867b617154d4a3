"""Declarative base, shared columns and the model registry."""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

Base = declarative_base()


def utcnow() -> datetime:
    """Timezone-aware current time used for every stored timestamp."""
    return datetime.now(timezone.utc)


class BaseModel:
    """Surrogate key plus creation and modification times (UTC)."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


# Model modules import Base from this package, so they are registered last
from rentledger.models.audit_log import AuditLog  # noqa: E402
from rentledger.models.contract import Contract  # noqa: E402
from rentledger.models.invoice import Invoice, InvoiceStatus  # noqa: E402
from rentledger.models.payment_proof import PaymentProof, ProofType  # noqa: E402
from rentledger.models.payment_record import (  # noqa: E402
    COMMITTED_STATUSES,
    PaymentMethod,
    PaymentRecord,
    PaymentStatus,
)
from rentledger.models.room import Room  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "utcnow",
    "AuditLog",
    "Room",
    "Contract",
    "Invoice",
    "InvoiceStatus",
    "PaymentRecord",
    "PaymentMethod",
    "PaymentStatus",
    "COMMITTED_STATUSES",
    "PaymentProof",
    "ProofType",
]
