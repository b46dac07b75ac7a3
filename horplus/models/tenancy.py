import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from horplus.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RoomStatus:
    AVAILABLE = "available"
    OCCUPIED = "occupied"


class TenantRole:
    USER = "user"
    ADMIN = "admin"


class Room(Base):
    """A rentable unit. ``status`` mirrors whether a tenant holds the room."""
    __tablename__ = "rooms"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    room_number: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    rent: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    description: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(
        String(20), default=RoomStatus.AVAILABLE
    )  # available | occupied
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )


class Tenant(Base):
    """A registered occupant (or administrator), optionally bound to one room."""
    __tablename__ = "tenants"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    full_name: Mapped[str | None] = mapped_column(String(255))
    phone_number: Mapped[str | None] = mapped_column(String(50))
    line_id: Mapped[str | None] = mapped_column(String(100))
    role: Mapped[str] = mapped_column(String(20), default=TenantRole.USER)  # user | admin
    # Unique: the storage-level guarantee of one tenant per room
    room_number: Mapped[str | None] = mapped_column(
        String(20),
        ForeignKey("rooms.room_number", onupdate="CASCADE"),
        unique=True,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
