"""Room ORM model, the rentable unit a contract is signed for."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentledger.models import Base, BaseModel


class Room(Base, BaseModel):
    """Rentable room identified by its room number."""

    __tablename__ = "rooms"

    room_number: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        index=True,
        comment="Room number as printed on the door (e.g., '101')",
    )
    floor: Mapped[int | None] = mapped_column(
        nullable=True,
        comment="Floor the room is on",
    )

    # Relationships
    contracts: Mapped[list["Contract"]] = relationship(  # noqa: F821
        "Contract",
        back_populates="room",
    )

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, room_number={self.room_number})>"


__all__ = ["Room"]
