"""
Integration tests for the REST API endpoints.

The app runs on the in-memory storage and presence backends; the acting
user is passed in the ``X-User-Id`` header.
"""

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from src.config import Settings
from tests.conftest import GUARDIAN, OTHER_GUARDIAN, RIDER, SECOND_RIDER


def as_user(user_id: int) -> dict[str, str]:
    return {"X-User-Id": str(user_id)}


async def create(client: AsyncClient, pet_id: int = 1, hospital_id: int = 1) -> dict:
    resp = await client.post(
        "/api/v1/requests",
        json={
            "pet_id": pet_id,
            "hospital_id": hospital_id,
            "symptoms": "vomiting",
            "pickup_latitude": 37.4979,
            "pickup_longitude": 127.0276,
        },
        headers=as_user(GUARDIAN),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def accept(client: AsyncClient, request_id: int, rider_id: int = RIDER):
    return await client.post(
        f"/api/v1/riders/requests/{request_id}/accept", headers=as_user(rider_id)
    )


async def advance(client: AsyncClient, request_id: int, rider_id: int = RIDER):
    return await client.post(
        f"/api/v1/riders/requests/{request_id}/advance", headers=as_user(rider_id)
    )


# ── Admin ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/admin/health")
    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "storage_backend": "memory",
        "presence_backend": "memory",
    }


@pytest.mark.asyncio
async def test_client_config(client: AsyncClient):
    resp = await client.get("/api/v1/admin/client-config")
    assert resp.status_code == 200
    data = resp.json()
    assert data["guardian_poll_seconds"] == 5
    assert data["rider_poll_seconds"] == 3


# ── Guardian flow ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_request_returns_201(client: AsyncClient):
    data = await create(client)
    assert data["status"] == "pending"
    assert data["rider_id"] is None
    assert data["guardian_id"] == GUARDIAN
    assert data["can_cancel"] is True
    assert data["next_action_label"] is None
    assert data["pet"]["name"] == "Mungchi"
    assert data["hospital"]["is_24hour"] is True


@pytest.mark.asyncio
async def test_create_request_validation(client: AsyncClient):
    resp = await client.post(
        "/api/v1/requests",
        json={"pet_id": 1, "hospital_id": 1, "symptoms": "", "pickup_latitude": 95,
              "pickup_longitude": 127.0},
        headers=as_user(GUARDIAN),
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_create_requires_user_header(client: AsyncClient):
    resp = await client.post("/api/v1/requests", json={})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_create_with_foreign_pet_is_forbidden(client: AsyncClient):
    resp = await client.post(
        "/api/v1/requests",
        json={"pet_id": 3, "hospital_id": 1, "symptoms": "x",
              "pickup_latitude": 37.5, "pickup_longitude": 127.0},
        headers=as_user(GUARDIAN),
    )
    assert resp.status_code == 403
    assert resp.json()["error"] == "forbidden"


@pytest.mark.asyncio
async def test_create_with_unknown_hospital(client: AsyncClient):
    resp = await client.post(
        "/api/v1/requests",
        json={"pet_id": 1, "hospital_id": 99, "symptoms": "x",
              "pickup_latitude": 37.5, "pickup_longitude": 127.0},
        headers=as_user(GUARDIAN),
    )
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_my_requests_and_get(client: AsyncClient):
    created = await create(client)
    resp = await client.get("/api/v1/requests/my", headers=as_user(GUARDIAN))
    assert resp.status_code == 200
    assert [r["id"] for r in resp.json()] == [created["id"]]

    resp = await client.get(f"/api/v1/requests/{created['id']}", headers=as_user(GUARDIAN))
    assert resp.status_code == 200
    assert resp.json()["symptoms"] == "vomiting"


@pytest.mark.asyncio
async def test_get_request_not_found(client: AsyncClient):
    resp = await client.get("/api/v1/requests/9999", headers=as_user(GUARDIAN))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_other_guardian_cannot_view(client: AsyncClient):
    created = await create(client)
    resp = await client.get(
        f"/api/v1/requests/{created['id']}", headers=as_user(OTHER_GUARDIAN)
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_cancel_pending_request(client: AsyncClient):
    created = await create(client)
    resp = await client.patch(
        f"/api/v1/requests/{created['id']}/cancel", headers=as_user(GUARDIAN)
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"
    assert resp.json()["can_cancel"] is False


@pytest.mark.asyncio
async def test_cancel_already_cancelled_request_fails(client: AsyncClient):
    created = await create(client)
    await client.patch(f"/api/v1/requests/{created['id']}/cancel", headers=as_user(GUARDIAN))
    resp = await client.patch(
        f"/api/v1/requests/{created['id']}/cancel", headers=as_user(GUARDIAN)
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "invalid_transition"


@pytest.mark.asyncio
async def test_rider_cannot_cancel_by_default(client: AsyncClient):
    created = await create(client)
    await accept(client, created["id"])
    resp = await client.patch(
        f"/api/v1/requests/{created['id']}/cancel", headers=as_user(RIDER)
    )
    assert resp.status_code == 403


# ── Rider flow ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_accept_and_advance_to_completed(client: AsyncClient):
    created = await create(client)

    resp = await accept(client, created["id"])
    assert resp.status_code == 200
    assert resp.json()["status"] == "rider_assigned"
    assert resp.json()["rider_id"] == RIDER
    assert resp.json()["next_action_label"] == "Start pickup"

    for expected in ("picking_up", "on_way_to_hospital", "completed"):
        resp = await advance(client, created["id"])
        assert resp.status_code == 200
        assert resp.json()["status"] == expected
        assert resp.json()["rider_id"] == RIDER

    resp = await advance(client, created["id"])
    assert resp.status_code == 409

    resp = await client.get("/api/v1/requests/my", headers=as_user(GUARDIAN))
    assert resp.json()[0]["status"] == "completed"


@pytest.mark.asyncio
async def test_available_requests_fifo(client: AsyncClient):
    first = await create(client)
    second = await create(client, pet_id=2)
    resp = await client.get("/api/v1/riders/requests/available", headers=as_user(RIDER))
    assert resp.status_code == 200
    assert [r["id"] for r in resp.json()] == [first["id"], second["id"]]

    await accept(client, first["id"])
    resp = await client.get("/api/v1/riders/requests/available", headers=as_user(RIDER))
    assert [r["id"] for r in resp.json()] == [second["id"]]


@pytest.mark.asyncio
async def test_guardian_cannot_list_available(client: AsyncClient):
    resp = await client.get("/api/v1/riders/requests/available", headers=as_user(GUARDIAN))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_second_rider_gets_already_assigned(client: AsyncClient):
    created = await create(client)
    assert (await accept(client, created["id"])).status_code == 200
    resp = await accept(client, created["id"], SECOND_RIDER)
    assert resp.status_code == 409
    assert resp.json()["error"] == "already_assigned"


@pytest.mark.asyncio
async def test_racing_accepts_one_winner(client: AsyncClient):
    created = await create(client)
    responses = await asyncio.gather(
        accept(client, created["id"], RIDER),
        accept(client, created["id"], SECOND_RIDER),
    )
    codes = sorted(r.status_code for r in responses)
    assert codes == [200, 409]


@pytest.mark.asyncio
async def test_other_rider_cannot_advance(client: AsyncClient):
    created = await create(client)
    await accept(client, created["id"])
    resp = await advance(client, created["id"], SECOND_RIDER)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_rider_my_requests(client: AsyncClient):
    created = await create(client)
    await accept(client, created["id"])
    resp = await client.get("/api/v1/riders/my-requests", headers=as_user(RIDER))
    assert [r["id"] for r in resp.json()] == [created["id"]]
    resp = await client.get("/api/v1/riders/my-requests", headers=as_user(SECOND_RIDER))
    assert resp.json() == []


# ── Presence / rider location ─────────────────────────────────────────


@pytest.mark.asyncio
async def test_presence_and_rider_location(client: AsyncClient):
    created = await create(client)
    await accept(client, created["id"])

    resp = await client.put(
        "/api/v1/riders/presence",
        json={"latitude": 37.5065, "longitude": 127.0538, "is_active": True},
        headers=as_user(RIDER),
    )
    assert resp.status_code == 204

    resp = await client.get(
        f"/api/v1/requests/{created['id']}/rider-location", headers=as_user(GUARDIAN)
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "rider_assigned"
    assert data["latitude"] == pytest.approx((37.5065 + 37.4979) / 2)
    assert data["longitude"] == pytest.approx((127.0538 + 127.0276) / 2)

    await advance(client, created["id"])
    await advance(client, created["id"])
    resp = await client.get(
        f"/api/v1/requests/{created['id']}/rider-location", headers=as_user(GUARDIAN)
    )
    assert resp.json()["latitude"] == pytest.approx(37.49955)
    assert resp.json()["longitude"] == pytest.approx(127.0336)


@pytest.mark.asyncio
async def test_rider_location_defaults_without_presence(client: AsyncClient):
    created = await create(client)
    resp = await client.get(
        f"/api/v1/requests/{created['id']}/rider-location", headers=as_user(GUARDIAN)
    )
    assert resp.status_code == 200
    assert resp.json()["latitude"] == pytest.approx(37.5065)
    assert resp.json()["longitude"] == pytest.approx(127.0538)


@pytest.mark.asyncio
async def test_guardian_cannot_report_presence(client: AsyncClient):
    resp = await client.put(
        "/api/v1/riders/presence",
        json={"latitude": 37.5, "longitude": 127.0},
        headers=as_user(GUARDIAN),
    )
    assert resp.status_code == 403


# ── Reference data ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_status_vocabulary(client: AsyncClient):
    resp = await client.get("/api/v1/requests/statuses")
    assert resp.status_code == 200
    by_status = {s["status"]: s for s in resp.json()}
    assert len(by_status) == 6
    assert by_status["pending"]["next_status"] is None
    assert by_status["pending"]["can_cancel"] is True
    assert by_status["rider_assigned"]["next_status"] == "picking_up"
    assert by_status["picking_up"]["can_cancel"] is False
    assert by_status["completed"]["terminal"] is True
    assert by_status["cancelled"]["terminal"] is True


@pytest.mark.asyncio
async def test_pets_list_and_create(client: AsyncClient):
    resp = await client.get("/api/v1/pets", headers=as_user(GUARDIAN))
    assert [p["name"] for p in resp.json()] == ["Mungchi", "Nabi"]

    resp = await client.post(
        "/api/v1/pets",
        json={"name": "Bori", "species": "dog", "size": "medium"},
        headers=as_user(GUARDIAN),
    )
    assert resp.status_code == 201
    assert resp.json()["id"] == 5
    assert resp.json()["owner_id"] == GUARDIAN

    # the new pet can be used right away
    created = await create(client, pet_id=5)
    assert created["pet"]["name"] == "Bori"


@pytest.mark.asyncio
async def test_rider_cannot_register_pet(client: AsyncClient):
    resp = await client.post(
        "/api/v1/pets", json={"name": "Bori", "species": "dog"}, headers=as_user(RIDER)
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_nearby_hospitals(client: AsyncClient):
    resp = await client.get(
        "/api/v1/hospitals/nearby", params={"lat": 37.4979, "lng": 127.0276, "radius": 3}
    )
    assert resp.status_code == 200
    ids = [h["id"] for h in resp.json()]
    assert ids[0] == 3
    assert 4 not in ids


@pytest.mark.asyncio
async def test_get_hospital(client: AsyncClient):
    resp = await client.get("/api/v1/hospitals/4")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Companion Animal Emergency Center"
    assert (await client.get("/api/v1/hospitals/99")).status_code == 404


@pytest.mark.asyncio
async def test_update_pet(client: AsyncClient):
    resp = await client.put(
        "/api/v1/pets/1", json={"age": 4, "medical_notes": "Recovered"},
        headers=as_user(GUARDIAN),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert (data["name"], data["age"], data["medical_notes"]) == ("Mungchi", 4, "Recovered")


@pytest.mark.asyncio
async def test_update_pet_errors(client: AsyncClient):
    resp = await client.put("/api/v1/pets/3", json={"age": 1}, headers=as_user(GUARDIAN))
    assert resp.status_code == 403
    resp = await client.put("/api/v1/pets/99", json={"age": 1}, headers=as_user(GUARDIAN))
    assert resp.status_code == 404
    resp = await client.put("/api/v1/pets/1", json={"name": ""}, headers=as_user(GUARDIAN))
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_delete_pet_keeps_request_history(client: AsyncClient):
    created = await create(client, pet_id=2)

    resp = await client.delete("/api/v1/pets/2", headers=as_user(GUARDIAN))
    assert resp.status_code == 204

    resp = await client.get("/api/v1/pets", headers=as_user(GUARDIAN))
    assert [p["id"] for p in resp.json()] == [1]

    resp = await client.get(f"/api/v1/requests/{created['id']}", headers=as_user(GUARDIAN))
    assert resp.json()["pet"]["name"] == "Nabi"

    assert (await client.delete("/api/v1/pets/2", headers=as_user(GUARDIAN))).status_code == 404
    assert (await client.delete("/api/v1/pets/3", headers=as_user(GUARDIAN))).status_code == 403


# ── Unknown callers ───────────────────────────────────────────────────


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path",
    [
        "/api/v1/requests/my",
        "/api/v1/riders/my-requests",
        "/api/v1/riders/requests/available",
        "/api/v1/pets",
    ],
)
async def test_unknown_user_gets_404(client: AsyncClient, path: str):
    resp = await client.get(path, headers=as_user(999))
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


# ── Admin: active riders and rate limit ───────────────────────────────


@pytest.mark.asyncio
async def test_active_riders(client: AsyncClient):
    assert (await client.get("/api/v1/admin/active-riders")).json() == []

    await client.put(
        "/api/v1/riders/presence",
        json={"latitude": 37.5, "longitude": 127.0, "is_active": True},
        headers=as_user(RIDER),
    )
    await client.put(
        "/api/v1/riders/presence",
        json={"latitude": 37.5, "longitude": 127.0, "is_active": False},
        headers=as_user(SECOND_RIDER),
    )
    assert (await client.get("/api/v1/admin/active-riders")).json() == [RIDER]


@pytest.mark.asyncio
async def test_rate_limit_comes_from_app_settings():
    from src.api.app import create_app
    from src.api.middleware import limiter

    limiter.reset()
    app = create_app(
        Settings(
            storage_backend="memory",
            presence_backend="memory",
            seed_demo_data=False,
            rate_limit="2/minute",
        )
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        codes = [(await ac.get("/api/v1/hospitals/1")).status_code for _ in range(3)]
    assert codes == [200, 200, 429]
