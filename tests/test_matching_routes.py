import datetime as dt

import pytest

from conftest import auth, make_incubator, make_startup
from incubridge.security import Role


@pytest.fixture
async def accounts(session):
    startup = await make_startup(session, "Acme", problem_statement="Paperwork", solution="Automation")
    alpha = await make_incubator(session, "Alpha Labs", created_at=dt.datetime(2024, 1, 1))
    beta = await make_incubator(session, "Beta Hub", created_at=dt.datetime(2024, 2, 1))
    return startup, alpha, beta


async def _create(client, account, domain="AI/ML", role=Role.STARTUP):
    return await client.post(
        "/api/matching/request",
        json={"startupDomain": domain},
        headers=auth(account, role),
    )


async def test_end_to_end_match(client, accounts):
    startup, alpha, beta = accounts

    resp = await _create(client, startup)
    assert resp.status_code == 200
    body = resp.json()
    assert body["incubatorsCount"] == 2
    assert body["message"] == "Request sent to 2 incubators!"
    request_id = body["requestId"]

    resp = await client.put(
        f"/api/matching/request/{request_id}/respond",
        json={"status": "interested", "feedback": "Great fit", "contactEmail": "team@alpha.io"},
        headers=auth(alpha, Role.INCUBATOR),
    )
    assert resp.status_code == 200
    assert resp.json()["matchScore"] == 100.0

    resp = await client.put(
        f"/api/matching/request/{request_id}/respond",
        json={"status": "rejected"},
        headers=auth(beta, Role.INCUBATOR),
    )
    assert resp.json()["matchScore"] == 50.0

    resp = await client.get("/api/matching/my-requests", headers=auth(startup, Role.STARTUP))
    summary = resp.json()["requests"][0]
    assert summary["status"] == "in-progress"
    assert summary["interestedCount"] == 1
    assert summary["totalIncubators"] == 2
    assert [s["incubatorName"] for s in summary["sentToIncubators"]] == ["Alpha Labs", "Beta Hub"]

    resp = await client.get(
        f"/api/matching/request/{request_id}/interested", headers=auth(startup, Role.STARTUP)
    )
    interested = resp.json()
    assert interested["count"] == 1
    assert interested["interestedIncubators"][0]["email"] == "team@alpha.io"

    resp = await client.put(
        f"/api/matching/request/{request_id}/select/{alpha.id}", headers=auth(startup, Role.STARTUP)
    )
    assert resp.status_code == 200
    assert resp.json()["selectedIncubator"]["incubatorId"] == alpha.id

    resp = await client.get("/api/matching/my-requests", headers=auth(startup, Role.STARTUP))
    summary = resp.json()["requests"][0]
    assert summary["status"] == "matched"
    assert summary["matchScore"] == 50.0


async def test_create_with_unknown_domain_returns_404(client, accounts):
    startup, *_ = accounts
    resp = await _create(client, startup, domain="Blockchain")

    assert resp.status_code == 404
    assert resp.json() == {
        "success": False,
        "error": {
            "kind": "not_found",
            "message": "No incubators found for Blockchain domain. Try another domain!",
            "details": {"domain": "Blockchain"},
        },
    }


async def test_create_with_invalid_domain_is_a_validation_error(client, accounts):
    startup, *_ = accounts
    resp = await _create(client, startup, domain="Space")

    assert resp.status_code == 400
    assert resp.json()["error"]["kind"] == "validation"


async def test_incubator_sees_only_its_own_response(client, accounts):
    startup, alpha, beta = accounts
    request_id = (await _create(client, startup)).json()["requestId"]
    await client.put(
        f"/api/matching/request/{request_id}/respond",
        json={"status": "interested"},
        headers=auth(alpha, Role.INCUBATOR),
    )

    resp = await client.get(f"/api/matching/request/{request_id}", headers=auth(beta, Role.INCUBATOR))
    view = resp.json()["request"]
    assert view["myResponse"]["incubatorId"] == beta.id
    assert view["myResponse"]["status"] == "pending"
    assert "responses" not in view

    pending = await client.get("/api/matching/pending-requests", headers=auth(alpha, Role.INCUBATOR))
    assert pending.json()["count"] == 0
    pending = await client.get("/api/matching/pending-requests", headers=auth(beta, Role.INCUBATOR))
    assert pending.json()["count"] == 1

    filtered = await client.get(
        "/api/matching/requests", params={"status": "interested"}, headers=auth(alpha, Role.INCUBATOR)
    )
    assert [r["id"] for r in filtered.json()["requests"]] == [request_id]


async def test_select_uninterested_incubator_is_400(client, accounts):
    startup, alpha, beta = accounts
    request_id = (await _create(client, startup)).json()["requestId"]

    resp = await client.put(
        f"/api/matching/request/{request_id}/select/{beta.id}", headers=auth(startup, Role.STARTUP)
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "This incubator is not interested"


async def test_role_guards(client, accounts):
    startup, alpha, _ = accounts

    resp = await client.post("/api/matching/request", json={"startupDomain": "AI/ML"})
    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "No token provided"

    resp = await _create(client, alpha, role=Role.INCUBATOR)
    assert resp.status_code == 403
    assert resp.json()["error"]["kind"] == "forbidden"

    resp = await client.get("/api/matching/pending-requests", headers=auth(startup, Role.STARTUP))
    assert resp.status_code == 403

    resp = await client.get(
        "/api/matching/pending-requests", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "Invalid token"


async def test_outsider_incubator_cannot_respond(client, accounts, session):
    startup, *_ = accounts
    outsider = await make_incubator(session, "Green Garage", domain="ClimaTech")
    request_id = (await _create(client, startup)).json()["requestId"]

    resp = await client.put(
        f"/api/matching/request/{request_id}/respond",
        json={"status": "interested"},
        headers=auth(outsider, Role.INCUBATOR),
    )
    assert resp.status_code == 403


async def test_respond_rejects_unknown_status(client, accounts):
    startup, alpha, _ = accounts
    request_id = (await _create(client, startup)).json()["requestId"]

    resp = await client.put(
        f"/api/matching/request/{request_id}/respond",
        json={"status": "maybe"},
        headers=auth(alpha, Role.INCUBATOR),
    )
    assert resp.status_code == 400
