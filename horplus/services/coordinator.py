"""
Consistency coordinator: the transactional envelope around the core.

Every operation here opens exactly one store transaction, builds a
TenancyRegistry and a BillingLedger on that session and commits only after
the whole operation returned.  Any exception (domain error, store error,
cancellation) rolls the transaction back, so a room move or a bill payment
is never left half applied.

Retry policy:
  reads   -> retried once on StorageFailure
  writes  -> never retried blindly; a failed bill payment is re-checked and
            reported as success only if the bill is already paid
"""
import logging
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from typing import TypeVar

from horplus.core.database import Store
from horplus.core.errors import StorageFailure
from horplus.core.security import PasswordHasher
from horplus.models.billing import Bill, PaymentState
from horplus.models.tenancy import Room, Tenant
from horplus.services.billing import BillingLedger, PaymentHistoryEntry, RoomBill
from horplus.services.tenancy import TenancyRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConsistencyCoordinator:
    def __init__(
        self,
        store: Store,
        hasher: PasswordHasher,
        *,
        water_rate: Decimal,
        electricity_rate: Decimal,
        min_password_length: int = 6,
    ):
        self.store = store
        self.hasher = hasher
        self.water_rate = water_rate
        self.electricity_rate = electricity_rate
        self.min_password_length = min_password_length

    @asynccontextmanager
    async def _unit(self) -> AsyncIterator[tuple[TenancyRegistry, BillingLedger]]:
        async with self.store.transaction() as session:
            yield (
                TenancyRegistry(session, self.hasher, min_password_length=self.min_password_length),
                BillingLedger(
                    session, water_rate=self.water_rate, electricity_rate=self.electricity_rate
                ),
            )

    async def _write(self, op: Callable[[TenancyRegistry, BillingLedger], Awaitable[T]]) -> T:
        async with self._unit() as (tenancy, billing):
            return await op(tenancy, billing)

    async def _read(self, op: Callable[[TenancyRegistry, BillingLedger], Awaitable[T]]) -> T:
        try:
            return await self._write(op)
        except StorageFailure:
            logger.warning("Read failed on the store; retrying once", exc_info=True)
        return await self._write(op)

    # ─── Rooms ───────────────────────────────────────────────────────────────

    async def create_room(self, room_number: str, rent, description: str | None = None) -> Room:
        return await self._write(lambda t, _: t.create_room(room_number, rent, description))

    async def update_room(self, room_id: uuid.UUID, fields: dict) -> Room:
        return await self._write(lambda t, _: t.update_room(room_id, fields))

    async def delete_room(self, room_id: uuid.UUID) -> None:
        await self._write(lambda t, _: t.delete_room(room_id))

    async def get_room(self, room_id: uuid.UUID) -> Room:
        return await self._read(lambda t, _: t.get_room(room_id))

    async def list_rooms(self, status: str | None = None) -> list[Room]:
        return await self._read(lambda t, _: t.list_rooms(status))

    # ─── Tenants ─────────────────────────────────────────────────────────────

    async def create_tenant(self, username: str, password: str, room_number: str | None = None, **profile) -> Tenant:
        return await self._write(
            lambda t, _: t.create_tenant(username, password, room_number, **profile)
        )

    async def update_tenant(self, tenant_id: uuid.UUID, fields: dict) -> Tenant:
        return await self._write(lambda t, _: t.update_tenant(tenant_id, fields))

    async def delete_tenant(self, tenant_id: uuid.UUID) -> None:
        await self._write(lambda t, _: t.delete_tenant(tenant_id))

    async def get_tenant(self, tenant_id: uuid.UUID) -> Tenant:
        return await self._read(lambda t, _: t.get_tenant(tenant_id))

    async def list_tenants(self) -> list[tuple[Tenant, Decimal]]:
        return await self._read(lambda t, _: t.list_tenants())

    async def authenticate(self, username: str, password: str, *, require_admin: bool = False) -> Tenant:
        return await self._read(
            lambda t, _: t.authenticate(username, password, require_admin=require_admin)
        )

    # ─── Bills ───────────────────────────────────────────────────────────────

    async def create_bill(
        self,
        tenant_id: uuid.UUID,
        room_number: str,
        water_units,
        electricity_units,
        due_date: date,
        meter: str | None = None,
    ) -> Bill:
        return await self._write(
            lambda _, b: b.create_bill(
                tenant_id, room_number, water_units, electricity_units, due_date, meter
            )
        )

    async def update_bill(self, bill_id: uuid.UUID, patch: dict, *, today: date | None = None) -> Bill:
        try:
            return await self._write(lambda _, b: b.update_bill(bill_id, patch, today=today))
        except StorageFailure:
            if patch.get("payment_state") != PaymentState.PAID:
                raise
            # The commit may have landed before the failure; the paid state is the idempotency check
            bill = await self.get_bill(bill_id)
            if bill.payment_state != PaymentState.PAID:
                raise
            logger.warning("Bill %s update failed on the store but the bill is paid; treating as success", bill_id)
            return bill

    async def delete_bill(self, bill_id: uuid.UUID) -> None:
        await self._write(lambda _, b: b.delete_bill(bill_id))

    async def get_bill(self, bill_id: uuid.UUID) -> Bill:
        return await self._read(lambda _, b: b.get_bill(bill_id))

    async def list_bills(self, tenant_id: uuid.UUID | None = None) -> list[Bill]:
        return await self._read(lambda _, b: b.list_bills(tenant_id))

    async def list_bills_for_room(self, room_number: str, *, include_settled: bool) -> list[RoomBill]:
        return await self._read(
            lambda _, b: b.list_bills_for_room(room_number, include_settled=include_settled)
        )

    async def payment_history(self, tenant_id: uuid.UUID) -> list[PaymentHistoryEntry]:
        return await self._read(lambda _, b: b.payment_history(tenant_id))
