"""
HTTP surface: routing, status codes and the domain error mapping.

The app is driven in-process through httpx; the lifespan is not run, the
test store and coordinator are installed on ``app.state`` directly.
"""
import uuid
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from horplus.main import app
from horplus.routers import auth


@pytest.fixture
async def client(store, coordinator):
    app.state.store = store
    app.state.coordinator = coordinator
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
def no_lockout(monkeypatch):
    """Replace the Redis-backed login lockout with an in-memory counter."""
    failures: dict[str, int] = {}

    async def record(username):
        failures[username] = failures.get(username, 0) + 1
        return failures[username]

    async def locked(username):
        return failures.get(username, 0) >= 5

    async def clear(username):
        failures.pop(username, None)

    monkeypatch.setattr(auth, "record_login_failure", record)
    monkeypatch.setattr(auth, "is_locked_out", locked)
    monkeypatch.setattr(auth, "clear_login_failures", clear)
    return failures


async def _room(client, number="101", rent="2500") -> dict:
    resp = await client.post("/api/rooms", json={"room_number": number, "rent": rent})
    assert resp.status_code == 201
    return resp.json()


async def _tenant(client, username="somchai", room_number="101") -> dict:
    resp = await client.post(
        "/api/users",
        json={"username": username, "password": "secret1", "room_number": room_number},
    )
    assert resp.status_code == 201
    return resp.json()


# ── Health ───────────────────────────────────────────────────────────────────

class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_health_db(self, client):
        resp = await client.get("/health/db")
        assert resp.status_code == 200
        assert resp.json()["database"] == "connected"

    async def test_security_headers(self, client):
        resp = await client.get("/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"


# ── Rooms and tenants ────────────────────────────────────────────────────────

class TestTenancyEndpoints:
    async def test_registration_flow(self, client):
        room = await _room(client)
        tenant = await _tenant(client)

        assert tenant["room_number"] == "101"
        assert "hashed_password" not in tenant
        resp = await client.get(f"/api/rooms/{room['id']}")
        assert resp.json()["status"] == "occupied"

    async def test_occupied_room_is_409(self, client):
        await _room(client)
        await _tenant(client)

        resp = await client.post(
            "/api/users", json={"username": "somsri", "password": "secret2", "room_number": "101"}
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == "room_occupied"

    async def test_duplicate_username_is_409(self, client):
        await _tenant(client, room_number=None)
        resp = await client.post("/api/users", json={"username": "somchai", "password": "secret2"})
        assert resp.status_code == 409
        assert resp.json()["code"] == "duplicate_username"

    async def test_unknown_room_is_404(self, client):
        resp = await client.post(
            "/api/users", json={"username": "somchai", "password": "secret1", "room_number": "999"}
        )
        assert resp.status_code == 404
        assert resp.json()["entity"] == "Room"

    async def test_short_password_is_422(self, client):
        resp = await client.post("/api/users", json={"username": "somchai", "password": "123"})
        assert resp.status_code == 422
        assert resp.json()["field"] == "password"

    async def test_move_with_patch(self, client):
        old = await _room(client, "101")
        new = await _room(client, "102")
        tenant = await _tenant(client)

        resp = await client.patch(f"/api/users/{tenant['id']}", json={"room_number": "102"})

        assert resp.status_code == 200
        assert resp.json()["room_number"] == "102"
        assert (await client.get(f"/api/rooms/{old['id']}")).json()["status"] == "available"
        assert (await client.get(f"/api/rooms/{new['id']}")).json()["status"] == "occupied"

    async def test_rooms_filter(self, client):
        await _room(client, "101")
        await _room(client, "102")
        await _tenant(client)

        resp = await client.get("/api/rooms", params={"status": "available"})
        assert [r["room_number"] for r in resp.json()] == ["102"]

    async def test_delete_tenant_is_204(self, client):
        room = await _room(client)
        tenant = await _tenant(client)

        resp = await client.delete(f"/api/users/{tenant['id']}")

        assert resp.status_code == 204
        assert (await client.get(f"/api/users/{tenant['id']}")).status_code == 404
        assert (await client.get(f"/api/rooms/{room['id']}")).json()["status"] == "available"

    async def test_delete_occupied_room_is_409(self, client):
        room = await _room(client)
        await _tenant(client)
        resp = await client.delete(f"/api/rooms/{room['id']}")
        assert resp.status_code == 409

    async def test_unknown_tenant_is_404(self, client):
        resp = await client.get(f"/api/users/{uuid.uuid4()}")
        assert resp.status_code == 404


# ── Bills ────────────────────────────────────────────────────────────────────

class TestBillEndpoints:
    async def test_bill_lifecycle(self, client):
        await _room(client)
        tenant = await _tenant(client)

        resp = await client.post(
            "/api/bills",
            json={
                "tenant_id": tenant["id"],
                "room_number": "101",
                "water_units": "10",
                "electricity_units": "20",
                "due_date": "2024-05-05",
            },
        )
        assert resp.status_code == 201
        bill = resp.json()
        assert Decimal(bill["total_amount"]) == Decimal("2860")
        assert bill["payment_state"] == "unpaid"

        resp = await client.put(
            f"/api/bills/{bill['id']}", json={"payment_state": "paid", "paid_date": "2024-05-10"}
        )
        assert resp.status_code == 200
        assert resp.json()["paid_date"] == "2024-05-10"

        # Paying again does not add a second record
        await client.put(f"/api/bills/{bill['id']}", json={"payment_state": "paid"})
        history = (await client.get(f"/api/payment-history/{tenant['id']}")).json()
        assert len(history) == 1
        assert Decimal(history[0]["amount_paid"]) == Decimal("2860")
        assert history[0]["payment_date"] == "2024-05-10"

        assert (await client.get("/api/bills/room/101")).json() == []
        room_bills = (await client.get("/api/bills/room-admin/101")).json()
        assert room_bills[0]["bill"]["id"] == bill["id"]
        assert room_bills[0]["username"] == "somchai"

    async def test_unknown_payment_state_is_rejected(self, client):
        await _room(client)
        tenant = await _tenant(client)
        bill = (
            await client.post(
                "/api/bills",
                json={
                    "tenant_id": tenant["id"],
                    "room_number": "101",
                    "water_units": "1",
                    "electricity_units": "1",
                    "due_date": "2024-05-05",
                },
            )
        ).json()

        resp = await client.patch(f"/api/bills/{bill['id']}", json={"payment_state": "refunded"})
        assert resp.status_code == 422

        resp = await client.put(f"/api/bills/{bill['id']}", json={"due_date": None})
        assert resp.status_code == 422
        assert resp.json()["field"] == "due_date"

    async def test_tenant_summary_includes_unpaid_total(self, client):
        await _room(client)
        tenant = await _tenant(client)
        await client.post(
            "/api/bills",
            json={
                "tenant_id": tenant["id"],
                "room_number": "101",
                "water_units": "10",
                "electricity_units": "20",
                "due_date": "2024-05-05",
            },
        )

        summary = (await client.get("/api/users")).json()
        assert Decimal(summary[0]["total_unpaid_amount"]) == Decimal("2860")

    async def test_unknown_bill_is_404(self, client):
        resp = await client.get(f"/api/bills/{uuid.uuid4()}")
        assert resp.status_code == 404


# ── Sign-in ──────────────────────────────────────────────────────────────────

class TestAuthEndpoints:
    async def test_register_and_login(self, client, no_lockout):
        resp = await client.post("/api/register", json={"username": "somchai", "password": "secret1"})
        assert resp.status_code == 201

        resp = await client.post("/api/login", json={"username": "somchai", "password": "secret1"})
        assert resp.status_code == 200
        assert resp.json()["username"] == "somchai"

    async def test_wrong_password_is_401_and_counted(self, client, no_lockout):
        await client.post("/api/register", json={"username": "somchai", "password": "secret1"})

        resp = await client.post("/api/login", json={"username": "somchai", "password": "nope-nope"})

        assert resp.status_code == 401
        assert no_lockout["somchai"] == 1

    async def test_lockout_is_429(self, client, no_lockout):
        await client.post("/api/register", json={"username": "somchai", "password": "secret1"})
        no_lockout["somchai"] = 5

        resp = await client.post("/api/login", json={"username": "somchai", "password": "secret1"})
        assert resp.status_code == 429

    async def test_admin_login_refuses_regular_user(self, client, no_lockout):
        await client.post("/api/register", json={"username": "somchai", "password": "secret1"})
        resp = await client.post("/api/login-admin", json={"username": "somchai", "password": "secret1"})
        assert resp.status_code == 401


# ── Repairs, announcements and uploads ───────────────────────────────────────

class TestAuxiliaryEndpoints:
    async def test_repair_status_is_shown_in_thai(self, client):
        await _room(client)
        tenant = await _tenant(client)

        resp = await client.post(
            "/api/repairs",
            json={"tenant_id": tenant["id"], "room_number": "101", "description": "Leaking tap"},
        )
        assert resp.status_code == 201
        repair = resp.json()
        assert repair["status"] == "รอรับเรื่อง"

        resp = await client.put(f"/api/repairs/{repair['id']}", json={"status": "complete"})
        assert resp.json()["status"] == "เสร็จสิ้น"

        listed = (await client.get(f"/api/repairs/user/{tenant['id']}")).json()
        assert [r["id"] for r in listed] == [repair["id"]]

    async def test_repair_for_unknown_tenant_is_404(self, client):
        await _room(client)
        resp = await client.post(
            "/api/repairs",
            json={"tenant_id": str(uuid.uuid4()), "room_number": "101", "description": "Broken fan"},
        )
        assert resp.status_code == 404

    async def test_announcement_crud(self, client):
        resp = await client.post("/api/announcements", json={"title": "Water cut", "detail": "Sunday 9-12"})
        assert resp.status_code == 201
        announcement = resp.json()

        resp = await client.put(
            f"/api/announcements/{announcement['id']}", json={"title": "Water cut", "detail": "Sunday 9-15"}
        )
        assert resp.json()["detail"] == "Sunday 9-15"

        assert len((await client.get("/api/announcements")).json()) == 1
        assert (await client.delete(f"/api/announcements/{announcement['id']}")).status_code == 204
        assert (await client.get("/api/announcements")).json() == []

    async def test_upload_slip(self, client):
        resp = await client.post(
            "/api/upload", files={"image": ("slip.png", b"\x89PNG\r\n\x1a\nfake", "image/png")}
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["original_name"] == "slip.png"
        assert body["path"].startswith("/uploads/")
        assert body["content_type"] == "image/png"

    async def test_upload_rejects_unknown_type(self, client):
        resp = await client.post(
            "/api/upload", files={"image": ("script.sh", b"echo hi", "text/plain")}
        )
        assert resp.status_code == 400
