"""Initial schema: rooms, contracts, invoices, payment records, proofs, audit log.

Mirrors the models in rentledger/models/.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
    ]


def upgrade() -> None:
    # Create rooms table
    op.create_table(
        "rooms",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("room_number", sa.String(length=20), nullable=False),
        sa.Column("floor", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rooms_room_number", "rooms", ["room_number"], unique=True)

    # Create contracts table
    op.create_table(
        "contracts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("room_id", sa.Integer(), nullable=False),
        sa.Column("rent_amount_snapshot", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["room_id"], ["rooms.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_contracts_room_id", "room_id"),
        sa.Index("idx_contract_room_active", "room_id", "is_active"),
    )

    # Create invoices table
    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("create_date", sa.Date(), nullable=False),
        sa.Column("billing_month", sa.String(length=7), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("rent", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("water_unit", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("water_rate", sa.Numeric(precision=12, scale=4), nullable=False),
        sa.Column("electricity_unit", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("electricity_rate", sa.Numeric(precision=12, scale=4), nullable=False),
        sa.Column("addon_amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("water_bill", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("electricity_bill", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("sub_total", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column(
            "previous_balance",
            sa.Numeric(precision=12, scale=2),
            nullable=False,
            comment="Unpaid remainder of the prior invoice, frozen at creation",
        ),
        sa.Column("penalty_total", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("net_amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column(
            "status",
            sa.Enum("INCOMPLETE", "COMPLETE", name="invoicestatus"),
            nullable=False,
        ),
        sa.Column("pay_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("penalty_applied_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("idx_invoice_contract_create_date", "contract_id", "create_date"),
        sa.Index("idx_invoice_contract_month", "contract_id", "billing_month"),
    )

    # Create payment_records table
    op.create_table(
        "payment_records",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("invoice_id", sa.Integer(), nullable=False),
        sa.Column("payment_amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column(
            "payment_method",
            sa.Enum(
                "CASH",
                "BANK_TRANSFER",
                "MOBILE_BANKING",
                "CHEQUE",
                "CREDIT_CARD",
                "QR_CODE",
                "OTHER",
                name="paymentmethod",
            ),
            nullable=False,
        ),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column(
            "payment_status",
            sa.Enum("PENDING", "CONFIRMED", "REJECTED", "CANCELLED", name="paymentstatus"),
            nullable=False,
        ),
        sa.Column("transaction_reference", sa.String(length=100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("recorded_by", sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["invoice_id"], ["invoices.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_payment_records_invoice_id", "invoice_id"),
    )

    # Create payment_proofs table
    op.create_table(
        "payment_proofs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("payment_record_id", sa.Integer(), nullable=False),
        sa.Column(
            "proof_type",
            sa.Enum(
                "RECEIPT",
                "BANK_SLIP",
                "BANK_STATEMENT",
                "CHEQUE_COPY",
                "OTHER",
                name="prooftype",
            ),
            nullable=False,
        ),
        sa.Column("file_ref", sa.String(length=500), nullable=False),
        sa.Column("uploaded_by", sa.String(length=100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["payment_record_id"], ["payment_records.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_payment_proofs_payment_record_id", "payment_record_id"),
    )

    # Create audit_logs table
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("actor", sa.String(length=100), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_audit_logs_entity_type", "entity_type"),
        sa.Index("ix_audit_logs_entity_id", "entity_id"),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("payment_proofs")
    op.drop_table("payment_records")
    op.drop_table("invoices")
    op.drop_table("contracts")
    op.drop_table("rooms")
    sa.Enum(name="prooftype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="paymentstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="paymentmethod").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="invoicestatus").drop(op.get_bind(), checkfirst=True)
