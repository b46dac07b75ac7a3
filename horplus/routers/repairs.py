import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from horplus.core.database import get_db
from horplus.models.repair import Repair
from horplus.models.tenancy import Room, Tenant
from horplus.schemas.repair import RepairCreate, RepairResponse, RepairStatusUpdate
from horplus.services.labels import parse_repair_status

router = APIRouter(prefix="/repairs", tags=["repairs"])


async def _get_repair(repair_id: uuid.UUID, db: AsyncSession) -> Repair:
    repair = await db.get(Repair, repair_id)
    if not repair:
        raise HTTPException(status_code=404, detail="Repair request not found")
    return repair


@router.get("", response_model=list[RepairResponse])
async def list_repairs(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Repair).order_by(Repair.created_at.desc()))
    return result.scalars().all()


@router.get("/user/{tenant_id}", response_model=list[RepairResponse])
async def list_tenant_repairs(tenant_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Repair)
        .where(Repair.tenant_id == tenant_id)
        .order_by(Repair.created_at.desc())
    )
    return result.scalars().all()


@router.post("", response_model=RepairResponse, status_code=201)
async def create_repair(payload: RepairCreate, db: AsyncSession = Depends(get_db)):
    status = parse_repair_status(payload.status)

    if await db.get(Tenant, payload.tenant_id) is None:
        raise HTTPException(status_code=404, detail="Tenant not found")
    room = await db.execute(select(Room.id).where(Room.room_number == payload.room_number))
    if room.first() is None:
        raise HTTPException(status_code=404, detail="Room not found")

    repair = Repair(
        tenant_id=payload.tenant_id,
        room_number=payload.room_number,
        description=payload.description,
        status=status,
        repair_date=payload.repair_date or date.today(),
    )
    db.add(repair)
    await db.flush()
    await db.refresh(repair)
    return repair


@router.put("/{repair_id}", response_model=RepairResponse)
async def update_repair_status(
    repair_id: uuid.UUID,
    payload: RepairStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    repair = await _get_repair(repair_id, db)
    repair.status = parse_repair_status(payload.status)
    await db.flush()
    await db.refresh(repair)
    return repair


@router.delete("/{repair_id}", status_code=204)
async def delete_repair(repair_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    repair = await _get_repair(repair_id, db)
    await db.delete(repair)
