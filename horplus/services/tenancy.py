"""
Tenancy registry: rooms, tenants and the one-tenant-per-room invariant.

Room status is never written directly by callers.  It flips only through
``_claim_room`` / ``_release_room``, which run inside the caller's
transaction alongside the tenant write they belong to:

    claim    UPDATE rooms SET status='occupied'
             WHERE room_number = :n AND status = 'available'
             (affected rows == 0  →  missing or already taken)
    release  UPDATE rooms SET status='available' WHERE room_number = :n

The unique constraint on ``tenants.room_number`` backs the conditional write
if two transactions ever get past it together.
"""
import logging
import uuid
from decimal import Decimal

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from horplus.core.errors import AuthenticationFailed, Conflict, ConflictKind, InvalidInput, NotFound
from horplus.core.security import PasswordHasher
from horplus.models.billing import Bill, PaymentState
from horplus.models.tenancy import Room, RoomStatus, Tenant, TenantRole

logger = logging.getLogger(__name__)

MAX_RENT = Decimal("99999999")

_VALID_ROLES = frozenset({TenantRole.USER, TenantRole.ADMIN})
_PROFILE_FIELDS = ("full_name", "phone_number", "line_id")


def _clean_room_number(value: str | None, field: str = "room_number") -> str:
    number = (value or "").strip()
    if not number:
        raise InvalidInput(field, "room number is required")
    return number


def _validate_rent(rent) -> Decimal:
    try:
        amount = Decimal(str(rent))
    except ArithmeticError:
        raise InvalidInput("rent", "rent must be a number") from None
    if not amount.is_finite() or amount < 0 or amount > MAX_RENT:
        raise InvalidInput("rent", f"rent must be between 0 and {MAX_RENT}")
    return amount


class TenancyRegistry:
    """Owns Room and Tenant rows for one unit of work (one session/transaction)."""

    def __init__(self, session: AsyncSession, hasher: PasswordHasher, *, min_password_length: int = 6):
        self.session = session
        self.hasher = hasher
        self.min_password_length = min_password_length

    # ─── Rooms ───────────────────────────────────────────────────────────────

    async def get_room(self, room_id: uuid.UUID) -> Room:
        room = await self.session.get(Room, room_id)
        if room is None:
            raise NotFound("Room", room_id)
        return room

    async def list_rooms(self, status: str | None = None) -> list[Room]:
        query = select(Room).order_by(Room.room_number)
        if status:
            query = query.where(Room.status == status)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create_room(self, room_number: str, rent, description: str | None = None) -> Room:
        number = _clean_room_number(room_number)
        amount = _validate_rent(rent)
        if await self._room_by_number(number) is not None:
            raise Conflict(ConflictKind.DUPLICATE_ROOM_NUMBER, number)

        room = Room(
            room_number=number,
            rent=amount,
            description=description or "",
            status=RoomStatus.AVAILABLE,
        )
        self.session.add(room)
        await self._flush_room(number)
        logger.info("Room %s created (rent=%s)", number, amount)
        return room

    async def update_room(self, room_id: uuid.UUID, fields: dict) -> Room:
        """Merge-patch ``room_number``, ``rent`` and ``description``; status is derived."""
        room = await self.get_room(room_id)

        if "room_number" in fields:
            number = _clean_room_number(fields["room_number"])
            if number != room.room_number:
                existing = await self.session.execute(
                    select(Room.id).where(Room.room_number == number, Room.id != room.id)
                )
                if existing.first() is not None:
                    raise Conflict(ConflictKind.DUPLICATE_ROOM_NUMBER, number)
                # tenants.room_number follows via ON UPDATE CASCADE
                room.room_number = number
        if "rent" in fields:
            room.rent = _validate_rent(fields["rent"])
        if "description" in fields:
            room.description = fields["description"] or ""

        await self._flush_room(room.room_number)
        return room

    async def delete_room(self, room_id: uuid.UUID) -> None:
        room = await self.get_room(room_id)
        result = await self.session.execute(
            delete(Room)
            .where(Room.id == room.id, Room.status == RoomStatus.AVAILABLE)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise Conflict(ConflictKind.ROOM_OCCUPIED, room.room_number)
        self.session.expunge(room)
        logger.info("Room %s deleted", room.room_number)

    # ─── Tenants ─────────────────────────────────────────────────────────────

    async def get_tenant(self, tenant_id: uuid.UUID, *, for_update: bool = False) -> Tenant:
        query = select(Tenant).where(Tenant.id == tenant_id)
        if for_update:
            query = query.with_for_update()
        tenant = (await self.session.execute(query)).scalar_one_or_none()
        if tenant is None:
            raise NotFound("Tenant", tenant_id)
        return tenant

    async def list_tenants(self) -> list[tuple[Tenant, Decimal]]:
        """Every tenant with the sum of unpaid bills for the room they hold."""
        unpaid = (
            select(func.coalesce(func.sum(Bill.total_amount), 0))
            .where(Bill.room_number == Tenant.room_number, Bill.payment_state == PaymentState.UNPAID)
            .correlate(Tenant)
            .scalar_subquery()
        )
        result = await self.session.execute(
            select(Tenant, unpaid.label("total_unpaid_amount")).order_by(Tenant.created_at)
        )
        return [(tenant, Decimal(str(total or 0))) for tenant, total in result.all()]

    async def create_tenant(
        self,
        username: str,
        password: str,
        room_number: str | None = None,
        *,
        full_name: str | None = None,
        phone_number: str | None = None,
        line_id: str | None = None,
        role: str = TenantRole.USER,
    ) -> Tenant:
        username = self._clean_username(username)
        self._check_password(password)
        self._check_role(role)
        if await self._tenant_by_username(username) is not None:
            raise Conflict(ConflictKind.DUPLICATE_USERNAME, username)

        number = _clean_room_number(room_number) if room_number else None
        if number:
            await self._claim_room(number)

        tenant = Tenant(
            username=username,
            hashed_password=self.hasher.hash(password),
            full_name=full_name or None,
            phone_number=phone_number or None,
            line_id=line_id or None,
            role=role,
            room_number=number,
        )
        self.session.add(tenant)
        await self._flush_tenant(username, number)
        logger.info("Tenant %s registered (room=%s)", username, number)
        return tenant

    async def update_tenant(self, tenant_id: uuid.UUID, fields: dict) -> Tenant:
        """
        Merge-patch a tenant.  A ``room_number`` key moves the tenant: the
        target is claimed, the old room released and the reference swapped,
        all in the caller's transaction.  ``room_number=None`` unbinds.
        """
        tenant = await self.get_tenant(tenant_id, for_update=True)

        if "username" in fields and fields["username"] is not None:
            username = self._clean_username(fields["username"])
            if username != tenant.username:
                if await self._tenant_by_username(username, exclude_id=tenant.id) is not None:
                    raise Conflict(ConflictKind.DUPLICATE_USERNAME, username)
                tenant.username = username

        if fields.get("password"):
            self._check_password(fields["password"])
            tenant.hashed_password = self.hasher.hash(fields["password"])

        if fields.get("role") is not None:
            self._check_role(fields["role"])
            tenant.role = fields["role"]

        for field in _PROFILE_FIELDS:
            if field in fields:
                setattr(tenant, field, fields[field] or None)

        if "room_number" in fields:
            target = _clean_room_number(fields["room_number"]) if fields["room_number"] else None
            current = tenant.room_number
            # Moving to the room already held is not a move
            if target != current:
                if target is not None:
                    await self._claim_room(target)
                if current is not None:
                    await self._release_room(current)
                tenant.room_number = target
                logger.info("Tenant %s moved: %s -> %s", tenant.username, current, target)

        await self._flush_tenant(tenant.username, tenant.room_number)
        return tenant

    async def delete_tenant(self, tenant_id: uuid.UUID) -> None:
        tenant = await self.get_tenant(tenant_id, for_update=True)
        room_number = tenant.room_number
        await self.session.delete(tenant)
        await self.session.flush()
        if room_number is not None:
            await self._release_room(room_number)
        logger.info("Tenant %s deleted (released room=%s)", tenant.username, room_number)

    async def authenticate(self, username: str, password: str, *, require_admin: bool = False) -> Tenant:
        tenant = await self._tenant_by_username((username or "").strip())
        if tenant is None or not self.hasher.verify(password, tenant.hashed_password):
            raise AuthenticationFailed()
        if require_admin and tenant.role != TenantRole.ADMIN:
            raise AuthenticationFailed("You are not allowed to sign in as an administrator")
        return tenant

    # ─── Occupancy transitions ───────────────────────────────────────────────

    async def _claim_room(self, room_number: str) -> None:
        result = await self.session.execute(
            update(Room)
            .where(Room.room_number == room_number, Room.status == RoomStatus.AVAILABLE)
            .values(status=RoomStatus.OCCUPIED)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            logger.info("Room %s claimed", room_number)
            return
        if await self._room_by_number(room_number) is None:
            raise NotFound("Room", room_number)
        raise Conflict(ConflictKind.ROOM_OCCUPIED, room_number)

    async def _release_room(self, room_number: str) -> None:
        await self.session.execute(
            update(Room)
            .where(Room.room_number == room_number)
            .values(status=RoomStatus.AVAILABLE)
            .execution_options(synchronize_session=False)
        )
        logger.info("Room %s released", room_number)

    # ─── Helpers ─────────────────────────────────────────────────────────────

    async def _room_by_number(self, room_number: str) -> Room | None:
        result = await self.session.execute(select(Room).where(Room.room_number == room_number))
        return result.scalar_one_or_none()

    async def _tenant_by_username(self, username: str, exclude_id: uuid.UUID | None = None) -> Tenant | None:
        query = select(Tenant).where(Tenant.username == username)
        if exclude_id is not None:
            query = query.where(Tenant.id != exclude_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def _flush_room(self, room_number: str) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise Conflict(ConflictKind.DUPLICATE_ROOM_NUMBER, room_number) from exc

    async def _flush_tenant(self, username: str, room_number: str | None) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            # Lost a race the pre-checks could not see; name the constraint that fired
            detail = str(exc.orig)
            if "room_number" in detail and room_number is not None:
                raise Conflict(ConflictKind.ROOM_OCCUPIED, room_number) from exc
            if "username" in detail:
                raise Conflict(ConflictKind.DUPLICATE_USERNAME, username) from exc
            raise

    def _clean_username(self, username: str) -> str:
        username = (username or "").strip()
        if not username:
            raise InvalidInput("username", "username is required")
        return username

    def _check_password(self, password: str) -> None:
        if not password or len(password) < self.min_password_length:
            raise InvalidInput(
                "password", f"password must be at least {self.min_password_length} characters"
            )

    def _check_role(self, role: str) -> None:
        if role not in _VALID_ROLES:
            raise InvalidInput("role", f"role must be one of: {', '.join(sorted(_VALID_ROLES))}")
