"""Audit trail for billing mutations.

Entries are added to the caller's session and committed together with the
change they describe, so a rolled-back mutation leaves no audit row.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from rentledger.models.audit_log import AuditLog


def _jsonable(value: Any) -> Any:
    """Decimal -> str, date/datetime -> ISO string, enum -> value, recursively."""
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Decimal):
        return str(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    return value


class AuditService:
    """Writes audit entries for invoices, payment records and proofs."""

    @staticmethod
    def log(
        db: Session,
        entity_type: str,
        entity_id: int,
        action: str,
        actor: str | None = None,
        changes: dict | None = None,
    ) -> AuditLog:
        """Add an audit entry to the session.

        Args:
            db: Database session holding the mutation
            entity_type: "invoice", "payment_record" or "payment_proof"
            entity_id: Primary key of the entity
            action: What happened ("create", "status", "apply_penalty", ...)
            actor: Free-form name of whoever triggered it (optional)
            changes: Changed fields, e.g. {"status": {"old": ..., "new": ...}}

        Returns:
            The pending AuditLog row
        """
        entry = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor=actor,
            changes=None if changes is None else _jsonable(changes),
        )
        db.add(entry)
        return entry


__all__ = ["AuditService"]
