from fastapi import Request

from horplus.core.config import settings
from horplus.core.database import Store
from horplus.core.security import PasswordHasher
from horplus.services.coordinator import ConsistencyCoordinator


def build_coordinator(store: Store, hasher: PasswordHasher | None = None) -> ConsistencyCoordinator:
    return ConsistencyCoordinator(
        store,
        hasher or PasswordHasher(),
        water_rate=settings.billing_water_rate,
        electricity_rate=settings.billing_electricity_rate,
        min_password_length=settings.min_password_length,
    )


def get_coordinator(request: Request) -> ConsistencyCoordinator:
    return request.app.state.coordinator
