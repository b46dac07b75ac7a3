import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from horplus.core.database import Base
from horplus.models.tenancy import _utcnow


class PaymentState:
    UNPAID = "unpaid"
    PAID = "paid"


class Bill(Base):
    """One billing period for a room: rent snapshot plus metered water and electricity."""
    __tablename__ = "bills"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("tenants.id", ondelete="SET NULL"), index=True, nullable=True
    )
    room_number: Mapped[str] = mapped_column(String(20), index=True)
    water_units: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    electricity_units: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    water_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    electricity_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    rent_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    due_date: Mapped[date] = mapped_column(Date)
    meter: Mapped[str | None] = mapped_column(String(100))
    slip_path: Mapped[str | None] = mapped_column(String(500))
    payment_state: Mapped[str] = mapped_column(
        String(10), default=PaymentState.UNPAID, index=True
    )  # unpaid | paid
    paid_date: Mapped[date | None] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )


class PaymentRecord(Base):
    """Append-only audit row written when a bill turns paid."""
    __tablename__ = "payment_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Unique: a bill is paid at most once
    bill_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bills.id", ondelete="CASCADE"), unique=True, index=True
    )
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    payment_date: Mapped[date] = mapped_column(Date)
    slip_path: Mapped[str | None] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )
