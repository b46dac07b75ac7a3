import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict


# ─── Bill ──────────────────────────────────────────────────────────────────

class BillCreate(BaseModel):
    tenant_id: uuid.UUID
    room_number: str
    water_units: Decimal
    electricity_units: Decimal
    due_date: date
    meter: str | None = None


class BillUpdate(BaseModel):
    """Partial update; fields left out keep their stored value."""
    slip_path: str | None = None
    meter: str | None = None
    payment_state: Literal["unpaid", "paid"] | None = None
    paid_date: date | None = None
    water_units: Decimal | None = None
    electricity_units: Decimal | None = None
    due_date: date | None = None


class BillResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    tenant_id: uuid.UUID | None
    room_number: str
    water_units: Decimal
    electricity_units: Decimal
    water_rate: Decimal
    electricity_rate: Decimal
    rent_amount: Decimal
    total_amount: Decimal
    due_date: date
    meter: str | None
    slip_path: str | None
    payment_state: str
    paid_date: date | None
    created_at: datetime


class RoomBillResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    bill: BillResponse
    username: str | None
    full_name: str | None


# ─── Payment history ───────────────────────────────────────────────────────

class PaymentHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_id: uuid.UUID
    bill_id: uuid.UUID
    amount_paid: Decimal
    payment_date: date
    slip_path: str | None
    created_at: datetime
    total_amount: Decimal
    due_date: date
    room_number: str
