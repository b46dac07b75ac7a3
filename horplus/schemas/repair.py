import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from horplus.services.labels import translate_repair_status


class RepairCreate(BaseModel):
    tenant_id: uuid.UUID
    room_number: str
    description: str = Field(min_length=1)
    status: str | None = None  # code or Thai label
    repair_date: date | None = None


class RepairStatusUpdate(BaseModel):
    status: str = Field(min_length=1)


class RepairResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    tenant_id: uuid.UUID
    room_number: str
    description: str
    status: str
    repair_date: date
    created_at: datetime

    @field_validator("status")
    @classmethod
    def display_label(cls, v: str) -> str:
        return translate_repair_status(v)
