import uuid

from fastapi import APIRouter, Depends

from horplus.core.deps import get_coordinator
from horplus.schemas.tenancy import RoomCreate, RoomResponse, RoomUpdate
from horplus.services.coordinator import ConsistencyCoordinator

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("", response_model=list[RoomResponse])
async def list_rooms(
    status: str | None = None,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    return await coordinator.list_rooms(status)


@router.get("/{room_id}", response_model=RoomResponse)
async def get_room(
    room_id: uuid.UUID,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    return await coordinator.get_room(room_id)


@router.post("", response_model=RoomResponse, status_code=201)
async def create_room(
    payload: RoomCreate,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    return await coordinator.create_room(payload.room_number, payload.rent, payload.description)


@router.put("/{room_id}", response_model=RoomResponse)
@router.patch("/{room_id}", response_model=RoomResponse)
async def update_room(
    room_id: uuid.UUID,
    payload: RoomUpdate,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    return await coordinator.update_room(room_id, payload.model_dump(exclude_unset=True))


@router.delete("/{room_id}", status_code=204)
async def delete_room(
    room_id: uuid.UUID,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    await coordinator.delete_room(room_id)
