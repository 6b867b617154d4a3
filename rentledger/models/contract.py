"""Contract ORM model for tenancy agreements."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentledger.models import Base, BaseModel


class Contract(Base, BaseModel):
    """Tenancy agreement for one room.

    Owns a chronological sequence of invoices. The rent amount is a snapshot
    taken when the contract was signed and is copied into each invoice.
    """

    __tablename__ = "contracts"

    room_id: Mapped[int] = mapped_column(
        ForeignKey("rooms.id"),
        nullable=False,
        index=True,
        comment="Room this contract rents out",
    )
    rent_amount_snapshot: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Monthly rent at signing time",
    )
    start_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="Contract start date",
    )
    end_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
        comment="Contract end date (open-ended when null)",
    )
    is_active: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
        comment="Whether this is the room's current contract",
    )

    # Relationships
    room: Mapped["Room"] = relationship(  # noqa: F821
        "Room",
        back_populates="contracts",
    )
    invoices: Mapped[list["Invoice"]] = relationship(  # noqa: F821
        "Invoice",
        back_populates="contract",
        order_by="Invoice.create_date",
    )

    __table_args__ = (Index("idx_contract_room_active", "room_id", "is_active"),)

    def __repr__(self) -> str:
        return (
            f"<Contract(id={self.id}, room_id={self.room_id}, "
            f"rent={self.rent_amount_snapshot}, active={self.is_active})>"
        )


__all__ = ["Contract"]
