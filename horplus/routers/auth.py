from fastapi import APIRouter, Depends, Request

from horplus.core.deps import get_coordinator
from horplus.core.errors import AccountLocked, AuthenticationFailed
from horplus.core.ratelimit import limiter
from horplus.core.redis import clear_login_failures, is_locked_out, record_login_failure
from horplus.models.tenancy import Tenant
from horplus.schemas.tenancy import LoginRequest, TenantCreate, TenantResponse
from horplus.services.coordinator import ConsistencyCoordinator

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=TenantResponse, status_code=201)
@limiter.limit("20/hour")
async def register(
    request: Request,
    payload: TenantCreate,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    data = payload.model_dump(exclude={"username", "password", "room_number"})
    return await coordinator.create_tenant(
        payload.username, payload.password, payload.room_number, **data
    )


async def _login(payload: LoginRequest, coordinator: ConsistencyCoordinator, *, require_admin: bool) -> Tenant:
    # Lockout check before hitting the DB
    if await is_locked_out(payload.username):
        raise AccountLocked()

    try:
        tenant = await coordinator.authenticate(
            payload.username, payload.password, require_admin=require_admin
        )
    except AuthenticationFailed:
        await record_login_failure(payload.username)
        raise

    await clear_login_failures(payload.username)
    return tenant


@router.post("/login", response_model=TenantResponse)
@limiter.limit("10/minute;30/hour")
async def login(
    request: Request,
    payload: LoginRequest,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    return await _login(payload, coordinator, require_admin=False)


@router.post("/login-admin", response_model=TenantResponse)
@limiter.limit("10/minute;30/hour")
async def login_admin(
    request: Request,
    payload: LoginRequest,
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    return await _login(payload, coordinator, require_admin=True)
