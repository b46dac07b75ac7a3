import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from horplus.core.database import get_db
from horplus.models.announcement import Announcement
from horplus.schemas.announcement import AnnouncementResponse, AnnouncementWrite

router = APIRouter(prefix="/announcements", tags=["announcements"])


async def _get_announcement(announcement_id: uuid.UUID, db: AsyncSession) -> Announcement:
    announcement = await db.get(Announcement, announcement_id)
    if not announcement:
        raise HTTPException(status_code=404, detail="Announcement not found")
    return announcement


@router.get("", response_model=list[AnnouncementResponse])
async def list_announcements(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Announcement).order_by(Announcement.created_at.desc()))
    return result.scalars().all()


@router.post("", response_model=AnnouncementResponse, status_code=201)
async def create_announcement(payload: AnnouncementWrite, db: AsyncSession = Depends(get_db)):
    announcement = Announcement(**payload.model_dump())
    db.add(announcement)
    await db.flush()
    await db.refresh(announcement)
    return announcement


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    announcement_id: uuid.UUID,
    payload: AnnouncementWrite,
    db: AsyncSession = Depends(get_db),
):
    announcement = await _get_announcement(announcement_id, db)
    for field, value in payload.model_dump().items():
        setattr(announcement, field, value)
    await db.flush()
    await db.refresh(announcement)
    return announcement


@router.delete("/{announcement_id}", status_code=204)
async def delete_announcement(announcement_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    announcement = await _get_announcement(announcement_id, db)
    await db.delete(announcement)
