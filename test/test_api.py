from datetime import timedelta

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from codeshare import create_app
from codeshare.api.v1.schema.code import MASKED_CODE
from codeshare.api.v1.services.code_registry import CODES
from codeshare.core.exception import StoreUnavailable
from codeshare.extension.eventbus.adapter_ws import WebSocketAdapter

from conftest import ADMIN_EMAIL, PASSWORD, USER_EMAIL, code_doc


@pytest.fixture
def app(container, settings):
    return create_app(container, settings=settings, init_logging=False)


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _signup(client, email=USER_EMAIL):
    resp = await client.post("/v1/auth/signup", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    return {"Authorization": f"Bearer {data['idToken']}"}, data


def _draft(today, code="promo1"):
    return {"code": code, "coin": "BTC", "maxClaims": 2, "expiryDate": (today + timedelta(days=3)).isoformat()}


@pytest.mark.asyncio
async def test_signup_and_session(client):
    headers, data = await _signup(client)

    assert data["state"] == "authenticated"
    assert data["points"] == 0
    assert data["isAdmin"] is False

    resp = await client.get("/v1/auth/session", headers=headers)
    assert resp.json()["data"]["email"] == USER_EMAIL

    anon = await client.get("/v1/auth/session")
    assert anon.json()["data"]["state"] == "unauthenticated"


@pytest.mark.asyncio
async def test_login_failure_reports_auth_kind(client):
    await _signup(client)

    resp = await client.post("/v1/auth/login", json={"email": USER_EMAIL, "password": "nope-nope"})

    assert resp.status_code == 401
    assert resp.json()["kind"] == "auth_error"


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(client):
    resp = await client.get("/v1/user/points", headers={"Authorization": "Bearer forged"})

    assert resp.status_code == 401
    assert resp.json()["kind"] == "auth_error"


@pytest.mark.asyncio
async def test_code_list_is_masked_for_anonymous_visitors(client, store, today):
    await store.set(CODES, "c1", code_doc("SECRET1", expiry=today))
    await store.set(CODES, "old", code_doc("OLD", expiry=today - timedelta(days=1)))

    anon = (await client.get("/v1/codes")).json()["data"]
    headers, _ = await _signup(client)
    member = (await client.get("/v1/codes", headers=headers)).json()["data"]

    assert [c["code"] for c in anon] == [MASKED_CODE]
    assert [c["code"] for c in member] == ["SECRET1"]
    assert member[0]["maxClaims"] == 2
    assert member[0]["expiryDate"] == today.isoformat()


@pytest.mark.asyncio
async def test_publish_flow_with_ad_rewards(client, today):
    headers, _ = await _signup(client)

    resp = await client.post("/v1/codes", json=_draft(today), headers=headers)
    assert resp.status_code == 402
    assert resp.json()["kind"] == "insufficient_points"

    ad = await client.post("/v1/user/watch-ad", headers=headers)
    assert ad.json()["data"] == {"reward": 10, "points": 10}

    resp = await client.post("/v1/codes", json=_draft(today), headers=headers)
    assert resp.status_code == 200
    code_id = resp.json()["data"]["id"]

    points = (await client.get("/v1/user/points", headers=headers)).json()["data"]
    assert points == {"uid": points["uid"], "points": 5, "canPublish": True, "publishCost": 5}

    stats = (await client.get("/v1/codes/stats")).json()["data"]
    assert stats == {"availableCodes": 1, "totalClaims": 0}

    claimed = await client.post(f"/v1/codes/{code_id}/claim", headers=headers)
    assert claimed.json()["data"]["claimedCount"] == 1
    assert claimed.json()["data"]["code"] == "PROMO1"


@pytest.mark.asyncio
async def test_publish_validation_error(client, container, today):
    headers, data = await _signup(client)
    await container.ledger.credit(data["uid"], 10)

    resp = await client.post("/v1/codes", json=_draft(today) | {"coin": "XRP"}, headers=headers)

    assert resp.status_code == 422
    assert resp.json()["kind"] == "validation_error"


@pytest.mark.asyncio
async def test_claim_requires_login_and_respects_max(client, store, today):
    await store.set(CODES, "c1", code_doc("ONCE", expiry=today, max_claims=1))

    anon = await client.post("/v1/codes/c1/claim")
    assert anon.status_code == 401

    headers, _ = await _signup(client)
    assert (await client.post("/v1/codes/c1/claim", headers=headers)).status_code == 200
    again = await client.post("/v1/codes/c1/claim", headers=headers)
    assert again.status_code == 409
    assert again.json()["kind"] == "fully_claimed"


@pytest.mark.asyncio
async def test_cms_requires_admin(client, today):
    headers, _ = await _signup(client)

    assert (await client.get("/cms/codes", headers=headers)).status_code == 403
    assert (await client.post("/cms/codes", json=_draft(today), headers=headers)).status_code == 403
    assert (await client.post("/cms/codes/purge", headers=headers)).status_code == 403
    assert (await client.post("/cms/updates", json={"text": "hi"}, headers=headers)).status_code == 403
    assert (await client.get("/cms/codes")).status_code == 401


@pytest.mark.asyncio
async def test_admin_manages_codes_and_updates(client, store, today):
    headers, data = await _signup(client, ADMIN_EMAIL)
    assert data["isAdmin"] is True
    await store.set(CODES, "old", code_doc("OLD", expiry=today - timedelta(days=5)))

    added = await client.post("/cms/codes", json=_draft(today, "adminpromo"), headers=headers)
    code_id = added.json()["data"]["id"]

    listed = (await client.get("/cms/codes", headers=headers)).json()["data"]
    assert sorted(c["code"] for c in listed) == ["ADMINPROMO", "OLD"]
    assert {c["publishedBy"] for c in listed} == {"admin"}

    purged = await client.post("/cms/codes/purge", headers=headers)
    assert purged.json()["data"] == {"deleted": 1}

    deleted = await client.delete(f"/cms/codes/{code_id}", headers=headers)
    assert deleted.status_code == 200
    assert (await client.get("/cms/codes", headers=headers)).json()["data"] == []

    await client.post("/cms/updates", json={"text": "first"}, headers=headers)
    empty = await client.post("/cms/updates", json={"text": "   "}, headers=headers)
    assert empty.status_code == 422

    updates = (await client.get("/v1/updates")).json()["data"]
    assert [u["text"] for u in updates] == ["first"]


@pytest.mark.asyncio
async def test_logout_invalidates_token(client):
    headers, _ = await _signup(client)

    resp = await client.post("/v1/auth/logout", headers=headers)
    assert resp.json()["data"]["state"] == "unauthenticated"

    assert (await client.get("/v1/user/points", headers=headers)).status_code == 401


@pytest.mark.asyncio
async def test_store_outage_surfaces_as_503(client, store):
    store.available = False

    resp = await client.get("/v1/codes")

    assert resp.status_code == 503
    assert resp.json()["kind"] == "store_unavailable"


@pytest.mark.asyncio
async def test_lifespan_starts_and_stops_background_services(app, container):
    adapter = next(a for a in container.services._services.values() if isinstance(a, WebSocketAdapter))

    async with app.router.lifespan_context(app):
        assert container.sweeper._task is not None
        assert adapter.ready is True

    assert container.sweeper._task is None
    assert adapter.ready is False


ERROR_KEYS = {"code", "msg", "error_code", "kind", "request", "trace_id"}


@pytest.mark.asyncio
async def test_errors_share_one_body_shape(client, store, today):
    headers, _ = await _signup(client)

    # 业务操作失败（经 run_operation）
    publish = await client.post("/v1/codes", json=_draft(today), headers=headers)
    # 依赖 / 查询直接抛出
    forbidden = await client.get("/cms/codes", headers=headers)
    store.available = False
    outage = await client.get("/v1/codes")

    for resp, kind in ((publish, "insufficient_points"), (forbidden, "permission_denied"), (outage, "store_unavailable")):
        body = resp.json()
        assert set(body) == ERROR_KEYS
        assert body["kind"] == kind
        assert body["code"] == body["error_code"]

    assert publish.json()["request"] == "POST /v1/codes"


@pytest.mark.asyncio
async def test_boolean_max_claims_is_rejected(client, container, today):
    headers, data = await _signup(client)
    await container.ledger.credit(data["uid"], 10)

    resp = await client.post("/v1/codes", json=_draft(today) | {"maxClaims": True}, headers=headers)

    assert resp.status_code == 422
    assert resp.json()["kind"] == "validation_error"
    assert await container.ledger.get_points(data["uid"]) == 10


@pytest.mark.asyncio
async def test_listing_survives_malformed_code_documents(client, store, today):
    await store.set(CODES, "good", code_doc("GOOD", expiry=today))
    await store.set(CODES, "bad", code_doc("BAD", expiry=today) | {"maxClaims": float("nan")})

    listed = await client.get("/v1/codes")
    stats = await client.get("/v1/codes/stats")

    assert listed.status_code == 200
    assert [c["id"] for c in listed.json()["data"]] == ["good"]
    assert stats.json()["data"] == {"availableCodes": 1, "totalClaims": 0}


def test_event_socket_rejects_invalid_token(app):
    with pytest.raises(WebSocketDisconnect) as exc:
        with TestClient(app).websocket_connect("/v1/ws/events?token=forged"):
            pass

    assert exc.value.code == 1008


def test_event_socket_closes_when_identity_backend_is_down(app, container, monkeypatch):
    async def unavailable(id_token):
        raise StoreUnavailable()

    monkeypatch.setattr(container.identity, "verify", unavailable)

    with pytest.raises(WebSocketDisconnect) as exc:
        with TestClient(app).websocket_connect("/v1/ws/events?token=any"):
            pass

    assert exc.value.code == 1011
