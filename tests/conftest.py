"""
Shared fixtures: a throwaway SQLite store per test, a fast bcrypt hasher and
a coordinator wired with the default 20 / 8 utility rates.

Run with:
    pip install -e ".[test]" && python -m pytest -v
"""
import os
import tempfile
from decimal import Decimal

# Settings are read at import time; point them away from Postgres/Redis first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="horplus-uploads-"))

import pytest  # noqa: E402
from passlib.context import CryptContext  # noqa: E402

from horplus.core.database import Store  # noqa: E402
from horplus.core.security import PasswordHasher  # noqa: E402
from horplus.services.coordinator import ConsistencyCoordinator  # noqa: E402

WATER_RATE = Decimal("20")
ELECTRICITY_RATE = Decimal("8")


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(CryptContext(schemes=["bcrypt"], bcrypt__rounds=4))


@pytest.fixture
async def store(tmp_path):
    store = Store(f"sqlite+aiosqlite:///{tmp_path / 'horplus.db'}").open()
    await store.create_all()
    yield store
    await store.close()


@pytest.fixture
def coordinator(store, hasher) -> ConsistencyCoordinator:
    return ConsistencyCoordinator(
        store, hasher, water_rate=WATER_RATE, electricity_rate=ELECTRICITY_RATE
    )
