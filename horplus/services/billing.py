"""
Billing ledger: bills and the append-only payment history.

    total = water_units * water_rate
          + electricity_units * electricity_rate
          + rent_amount

``rent_amount`` and both rates are copied onto the bill when it is created;
later room or configuration changes never reach existing bills.  The total is
recomputed from those snapshots whenever usage is edited.

A bill is settled by a conditional write

    UPDATE bills SET payment_state='paid', paid_date=:d
    WHERE id = :id AND payment_state = 'unpaid'

and only the writer that actually flipped the row appends the payment
record, in the same transaction.  Re-submitting "paid" is a no-op.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from horplus.core.errors import InvalidInput, NotFound
from horplus.models.billing import Bill, PaymentRecord, PaymentState
from horplus.models.tenancy import Room, Tenant

logger = logging.getLogger(__name__)

_USAGE_FIELDS = ("water_units", "electricity_units")
_PLAIN_FIELDS = ("slip_path", "meter", "due_date")
_VALID_STATES = frozenset({PaymentState.UNPAID, PaymentState.PAID})


# ── Result types ────────────────────────────────────────────────────────────

@dataclass
class RoomBill:
    bill: Bill
    username: str | None
    full_name: str | None


@dataclass
class PaymentHistoryEntry:
    payment_id: uuid.UUID
    bill_id: uuid.UUID
    amount_paid: Decimal
    payment_date: date
    slip_path: str | None
    created_at: datetime
    total_amount: Decimal
    due_date: date
    room_number: str


def compute_total(
    water_units: Decimal,
    electricity_units: Decimal,
    water_rate: Decimal,
    electricity_rate: Decimal,
    rent_amount: Decimal,
) -> Decimal:
    return (
        Decimal(water_units) * Decimal(water_rate)
        + Decimal(electricity_units) * Decimal(electricity_rate)
        + Decimal(rent_amount)
    )


def _check_units(field: str, value) -> Decimal:
    if value is None:
        raise InvalidInput(field, "usage is required")
    units = Decimal(str(value))
    if not units.is_finite() or units < 0:
        raise InvalidInput(field, "usage must not be negative")
    return units


class BillingLedger:
    """Owns Bill and PaymentRecord rows for one unit of work."""

    def __init__(self, session: AsyncSession, *, water_rate: Decimal, electricity_rate: Decimal):
        self.session = session
        self.water_rate = Decimal(water_rate)
        self.electricity_rate = Decimal(electricity_rate)

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
        water = _check_units("water_units", water_units)
        electricity = _check_units("electricity_units", electricity_units)

        room = (
            await self.session.execute(select(Room).where(Room.room_number == room_number))
        ).scalar_one_or_none()
        if room is None:
            raise NotFound("Room", room_number)
        if await self.session.get(Tenant, tenant_id) is None:
            raise NotFound("Tenant", tenant_id)

        bill = Bill(
            tenant_id=tenant_id,
            room_number=room.room_number,
            water_units=water,
            electricity_units=electricity,
            water_rate=self.water_rate,
            electricity_rate=self.electricity_rate,
            rent_amount=room.rent,
            total_amount=compute_total(
                water, electricity, self.water_rate, self.electricity_rate, room.rent
            ),
            due_date=due_date,
            meter=meter,
            payment_state=PaymentState.UNPAID,
        )
        self.session.add(bill)
        await self.session.flush()
        logger.info(
            "Bill %s created for room %s (total=%s, due=%s)",
            bill.id, bill.room_number, bill.total_amount, due_date,
        )
        return bill

    async def get_bill(self, bill_id: uuid.UUID, *, for_update: bool = False) -> Bill:
        query = select(Bill).where(Bill.id == bill_id)
        if for_update:
            query = query.with_for_update()
        bill = (await self.session.execute(query)).scalar_one_or_none()
        if bill is None:
            raise NotFound("Bill", bill_id)
        return bill

    async def update_bill(self, bill_id: uuid.UUID, patch: dict, *, today: date | None = None) -> Bill:
        """
        Merge-patch a bill.  Omitted keys keep their value.

        Usage edits recompute the total under the bill's own snapshots.  A
        ``payment_state`` of "paid" settles the bill (once); reopening a paid
        bill is not supported.  ``paid_date`` is only accepted together with
        the "paid" state and only takes effect on the settling write.
        """
        bill = await self.get_bill(bill_id, for_update=True)
        target_state = patch.get("payment_state")

        if target_state is not None and target_state not in _VALID_STATES:
            raise InvalidInput("payment_state", f"unknown payment state '{target_state}'")
        if target_state == PaymentState.UNPAID and bill.payment_state == PaymentState.PAID:
            raise InvalidInput("payment_state", "a paid bill cannot be reopened")
        if patch.get("paid_date") is not None and target_state != PaymentState.PAID:
            raise InvalidInput("paid_date", "paid date can only be set when paying the bill")
        if "due_date" in patch and patch["due_date"] is None:
            raise InvalidInput("due_date", "due date is required")

        usage_changed = False
        for field in _USAGE_FIELDS:
            if field in patch:
                units = _check_units(field, patch[field])
                if units != getattr(bill, field):
                    if bill.payment_state == PaymentState.PAID:
                        raise InvalidInput(field, "usage of a paid bill cannot change")
                    setattr(bill, field, units)
                    usage_changed = True

        for field in _PLAIN_FIELDS:
            if field in patch:
                setattr(bill, field, patch[field])

        if usage_changed:
            bill.total_amount = compute_total(
                bill.water_units,
                bill.electricity_units,
                bill.water_rate,
                bill.electricity_rate,
                bill.rent_amount,
            )
            logger.info("Bill %s total recomputed: %s", bill.id, bill.total_amount)

        await self.session.flush()

        if target_state == PaymentState.PAID:
            await self.settle(bill, patch.get("paid_date"), today=today)
        return bill

    async def settle(self, bill: Bill, paid_date: date | None = None, *, today: date | None = None) -> PaymentRecord | None:
        """Flip ``bill`` to paid and append its payment record; None if it was already paid."""
        payment_date = paid_date or today or date.today()
        result = await self.session.execute(
            update(Bill)
            .where(Bill.id == bill.id, Bill.payment_state == PaymentState.UNPAID)
            .values(payment_state=PaymentState.PAID, paid_date=payment_date)
            .execution_options(synchronize_session=False)
        )
        await self.session.refresh(bill)
        if result.rowcount == 0:
            logger.info("Bill %s already paid; no payment record written", bill.id)
            return None

        record = PaymentRecord(
            bill_id=bill.id,
            amount_paid=bill.total_amount,
            payment_date=payment_date,
            slip_path=bill.slip_path,
        )
        self.session.add(record)
        await self.session.flush()
        logger.info("Bill %s paid: %s on %s", bill.id, record.amount_paid, payment_date)
        return record

    async def delete_bill(self, bill_id: uuid.UUID) -> None:
        bill = await self.get_bill(bill_id, for_update=True)
        await self.session.execute(delete(PaymentRecord).where(PaymentRecord.bill_id == bill.id))
        await self.session.delete(bill)
        await self.session.flush()
        logger.info("Bill %s deleted", bill_id)

    # ─── Queries ─────────────────────────────────────────────────────────────

    async def list_bills(self, tenant_id: uuid.UUID | None = None) -> list[Bill]:
        """All bills (admin scope) or the bills of one tenant."""
        query = select(Bill).order_by(Bill.due_date.desc(), Bill.created_at.desc())
        if tenant_id is not None:
            query = query.where(Bill.tenant_id == tenant_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_bills_for_room(self, room_number: str, *, include_settled: bool) -> list[RoomBill]:
        query = (
            select(Bill, Tenant.username, Tenant.full_name)
            .outerjoin(Tenant, Bill.tenant_id == Tenant.id)
            .where(Bill.room_number == room_number)
            .order_by(Bill.created_at.desc())
        )
        if not include_settled:
            query = query.where(Bill.payment_state != PaymentState.PAID)
        result = await self.session.execute(query)
        return [RoomBill(bill=b, username=u, full_name=f) for b, u, f in result.all()]

    async def payment_history(self, tenant_id: uuid.UUID) -> list[PaymentHistoryEntry]:
        result = await self.session.execute(
            select(PaymentRecord, Bill)
            .join(Bill, PaymentRecord.bill_id == Bill.id)
            .where(Bill.tenant_id == tenant_id)
            .order_by(PaymentRecord.created_at.desc())
        )
        return [
            PaymentHistoryEntry(
                payment_id=record.id,
                bill_id=record.bill_id,
                amount_paid=record.amount_paid,
                payment_date=record.payment_date,
                slip_path=record.slip_path,
                created_at=record.created_at,
                total_amount=bill.total_amount,
                due_date=bill.due_date,
                room_number=bill.room_number,
            )
            for record, bill in result.all()
        ]
