"""Unit tests for the audit trail."""

from datetime import date
from decimal import Decimal

from rentledger.models import AuditLog, PaymentStatus
from rentledger.services.audit_service import AuditService


class TestAuditService:
    """Test audit entry creation."""

    def test_values_are_stored_as_json(self, db_session):
        AuditService.log(
            db_session,
            "payment_record",
            7,
            "update",
            actor="clerk",
            changes={
                "amount": {"old": Decimal("10.50"), "new": Decimal("12")},
                "payment_date": date(2024, 3, 9),
                "status": PaymentStatus.CONFIRMED,
                "tags": ("late", "partial"),
            },
        )
        db_session.commit()

        entry = db_session.query(AuditLog).one()
        assert entry.actor == "clerk"
        assert entry.changes == {
            "amount": {"old": "10.50", "new": "12"},
            "payment_date": "2024-03-09",
            "status": "CONFIRMED",
            "tags": ["late", "partial"],
        }

    def test_rolled_back_entry_is_discarded(self, db_session):
        AuditService.log(db_session, "invoice", 1, "cancel")
        db_session.rollback()

        assert db_session.query(AuditLog).count() == 0

    def test_changes_are_optional(self, db_session):
        entry = AuditService.log(db_session, "payment_proof", 3, "delete")
        db_session.commit()

        assert entry.changes is None
