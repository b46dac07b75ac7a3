import uuid

from fastapi import APIRouter, Depends

from horplus.core.deps import get_coordinator
from horplus.schemas.billing import (
    BillCreate,
    BillResponse,
    BillUpdate,
    PaymentHistoryResponse,
    RoomBillResponse,
)
from horplus.services.coordinator import ConsistencyCoordinator

router = APIRouter(tags=["bills"])


# ─── Bills ───────────────────────────────────────────────────────────────────

@router.get("/bills", response_model=list[BillResponse])
async def list_bills(
    tenant_id: uuid.UUID | None = None,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    """All bills, or only the bills of ``tenant_id`` when given."""
    return await coordinator.list_bills(tenant_id)


@router.post("/bills", response_model=BillResponse, status_code=201)
async def create_bill(
    payload: BillCreate,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    return await coordinator.create_bill(
        payload.tenant_id,
        payload.room_number,
        payload.water_units,
        payload.electricity_units,
        payload.due_date,
        payload.meter,
    )


@router.get("/bills/room/{room_number}", response_model=list[RoomBillResponse])
async def list_unsettled_room_bills(
    room_number: str,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    rows = await coordinator.list_bills_for_room(room_number, include_settled=False)
    return [RoomBillResponse.model_validate(row) for row in rows]


@router.get("/bills/room-admin/{room_number}", response_model=list[RoomBillResponse])
async def list_all_room_bills(
    room_number: str,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    rows = await coordinator.list_bills_for_room(room_number, include_settled=True)
    return [RoomBillResponse.model_validate(row) for row in rows]


@router.get("/bills/{bill_id}", response_model=BillResponse)
async def get_bill(
    bill_id: uuid.UUID,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    return await coordinator.get_bill(bill_id)


@router.put("/bills/{bill_id}", response_model=BillResponse)
@router.patch("/bills/{bill_id}", response_model=BillResponse)
async def update_bill(
    bill_id: uuid.UUID,
    payload: BillUpdate,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    return await coordinator.update_bill(bill_id, payload.model_dump(exclude_unset=True))


@router.delete("/bills/{bill_id}", status_code=204)
async def delete_bill(
    bill_id: uuid.UUID,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    await coordinator.delete_bill(bill_id)


# ─── Payment history ─────────────────────────────────────────────────────────

@router.get("/payment-history/{tenant_id}", response_model=list[PaymentHistoryResponse])
async def payment_history(
    tenant_id: uuid.UUID,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    rows = await coordinator.payment_history(tenant_id)
    return [PaymentHistoryResponse.model_validate(row) for row in rows]
