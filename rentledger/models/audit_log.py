"""Audit log model for tracking billing mutations."""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from rentledger.models import Base, BaseModel


class AuditLog(Base, BaseModel):
    """Audit log entry for invoice and payment changes.

    Records who (actor) did what (action) to which entity (entity_type,
    entity_id) and an optional snapshot of changed fields (changes).
    """

    __tablename__ = "audit_logs"

    entity_type: Mapped[str] = mapped_column(String(50), index=True)
    """Entity type being audited: "invoice", "payment_record", "payment_proof"."""

    entity_id: Mapped[int] = mapped_column(index=True)
    """Primary key of the entity being audited."""

    action: Mapped[str] = mapped_column(String(50))
    """Action performed: "create", "update", "apply_penalty", "status", etc."""

    actor: Mapped[str | None] = mapped_column(String(100), nullable=True)
    """Who performed the action. None for system actions."""

    changes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    """Optional JSON snapshot of changed fields: {"net_amount": {"old": "5000", "new": "5500"}}."""

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, entity_type={self.entity_type}, entity_id={self.entity_id}, "
            f"action={self.action}, actor={self.actor}, created_at={self.created_at})>"
        )


__all__ = ["AuditLog"]
