import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AnnouncementWrite(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    detail: str = Field(min_length=1)


class AnnouncementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    detail: str
    created_at: datetime
