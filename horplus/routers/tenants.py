import uuid

from fastapi import APIRouter, Depends

from horplus.core.deps import get_coordinator
from horplus.schemas.tenancy import (
    TenantCreate,
    TenantResponse,
    TenantSummaryResponse,
    TenantUpdate,
)
from horplus.services.coordinator import ConsistencyCoordinator

router = APIRouter(prefix="/users", tags=["tenants"])


@router.get("", response_model=list[TenantSummaryResponse])
async def list_tenants(coordinator: ConsistencyCoordinator = Depends(get_coordinator)):
    """Every tenant with the total of their unpaid bills."""
    rows = await coordinator.list_tenants()
    return [
        TenantSummaryResponse.model_validate(tenant).model_copy(update={"total_unpaid_amount": total})
        for tenant, total in rows
    ]


@router.post("", response_model=TenantResponse, status_code=201)
async def create_tenant(
    payload: TenantCreate,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    data = payload.model_dump(exclude={"username", "password", "room_number"})
    return await coordinator.create_tenant(
        payload.username, payload.password, payload.room_number, **data
    )


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    tenant_id: uuid.UUID,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    return await coordinator.get_tenant(tenant_id)


@router.put("/{tenant_id}", response_model=TenantResponse)
@router.patch("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    tenant_id: uuid.UUID,
    payload: TenantUpdate,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    return await coordinator.update_tenant(tenant_id, payload.model_dump(exclude_unset=True))


@router.delete("/{tenant_id}", status_code=204)
async def delete_tenant(
    tenant_id: uuid.UUID,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    await coordinator.delete_tenant(tenant_id)
