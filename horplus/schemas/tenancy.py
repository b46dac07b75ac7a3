import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# ─── Room ──────────────────────────────────────────────────────────────────

class RoomCreate(BaseModel):
    room_number: str = Field(min_length=1, max_length=20)
    rent: Decimal
    description: str | None = None


class RoomUpdate(BaseModel):
    room_number: str | None = Field(default=None, min_length=1, max_length=20)
    rent: Decimal | None = None
    description: str | None = None


class RoomResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    room_number: str
    rent: Decimal
    description: str
    status: str
    created_at: datetime


# ─── Tenant ────────────────────────────────────────────────────────────────

class TenantCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str
    full_name: str | None = None
    phone_number: str | None = None
    line_id: str | None = None
    role: Literal["user", "admin"] = "user"
    room_number: str | None = None


class TenantUpdate(BaseModel):
    username: str | None = Field(default=None, min_length=1, max_length=100)
    password: str | None = None
    full_name: str | None = None
    phone_number: str | None = None
    line_id: str | None = None
    role: Literal["user", "admin"] | None = None
    room_number: str | None = None  # explicit null moves the tenant out


class TenantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    full_name: str | None
    phone_number: str | None
    line_id: str | None
    role: str
    room_number: str | None
    created_at: datetime


class TenantSummaryResponse(TenantResponse):
    total_unpaid_amount: Decimal = Decimal(0)


class LoginRequest(BaseModel):
    username: str
    password: str
