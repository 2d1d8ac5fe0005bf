import datetime as dt

import pytest

from conftest import auth, make_admin, make_incubator, make_startup
from incubridge.security import Role


@pytest.fixture
async def admin(session):
    return await make_admin(session)


async def test_dashboard_stats(client, session, admin):
    await make_startup(session, "Acme", revenue=1000.0, team_size=3, is_approved=True)
    await make_startup(session, "Bolt", revenue=5000.0, team_size=8, funding_stage="Series A")
    await make_incubator(session, "Alpha Labs")

    resp = await client.get("/api/admin/dashboard-stats", headers=auth(admin, Role.ADMIN))
    assert resp.status_code == 200
    stats = resp.json()

    assert stats["totalStartups"] == 2
    assert stats["approvedStartups"] == 1
    assert stats["pendingStartups"] == 1
    assert stats["totalRevenue"] == 6000.0
    assert stats["totalTeamSize"] == 11
    assert stats["largestTeam"] == {"name": "Bolt", "value": 8}
    assert stats["topRevenueStartup"] == {"name": "Bolt", "value": 5000.0}
    assert stats["totalAdmins"] == 2
    assert stats["totalIncubators"] == 1
    assert stats["startupsThisMonth"] == 2
    breakdown = {row["key"]: row["count"] for row in stats["fundingStageBreakdown"]}
    assert breakdown == {"Seed": 1, "Series A": 1}
    assert stats["totalMatchingRequests"] == 0


async def test_incubator_can_use_staff_routes(client, session):
    incubator = await make_incubator(session, "Alpha Labs")
    resp = await client.get("/api/admin/profile", headers=auth(incubator, Role.INCUBATOR))
    assert resp.status_code == 200
    assert resp.json()["user"]["userType"] == "incubator"


async def test_approve_startup(client, session, admin):
    startup = await make_startup(session, "Acme")

    resp = await client.post(
        "/api/admin/approve-startup", json={"id": startup.id}, headers=auth(admin, Role.ADMIN)
    )
    assert resp.status_code == 200

    resp = await client.get(f"/api/admin/all-startups/{startup.id}", headers=auth(admin, Role.ADMIN))
    assert resp.json()["startup"]["isApproved"] is True

    resp = await client.post(
        "/api/admin/approve-startup", json={"id": "missing"}, headers=auth(admin, Role.ADMIN)
    )
    assert resp.status_code == 404


async def test_events_and_announcements(client, session, admin):
    headers = auth(admin, Role.ADMIN)
    future = (dt.datetime.now() + dt.timedelta(days=7)).isoformat()

    resp = await client.post(
        "/api/admin/create-event",
        json={"title": "Demo Day", "location": "Hall A", "date": future},
        headers=headers,
    )
    assert resp.status_code == 201
    event_id = resp.json()["id"]

    resp = await client.post(
        "/api/admin/create-announcement", json={"title": "Welcome", "message": "Hi all"}, headers=headers
    )
    announcement_id = resp.json()["id"]

    events = (await client.get("/api/user/events")).json()["events"]
    assert [e["title"] for e in events] == ["Demo Day"]
    announcements = (await client.get("/api/user/announcements")).json()["announcements"]
    assert [a["title"] for a in announcements] == ["Welcome"]

    startup = await make_startup(session, "Acme")
    stats = (await client.get("/api/user/dashboard-stats", headers=auth(startup, Role.STARTUP))).json()
    assert stats["upcomingEvent"] == "Demo Day"
    assert stats["totalAnnouncements"] == 1

    resp = await client.post("/api/admin/remove-event", json={"eventId": event_id}, headers=headers)
    assert resp.status_code == 200
    resp = await client.post("/api/admin/remove-event", json={"eventId": event_id}, headers=headers)
    assert resp.status_code == 404
    resp = await client.post(
        "/api/admin/remove-announcement", json={"announcementId": announcement_id}, headers=headers
    )
    assert resp.status_code == 200
    assert (await client.get("/api/user/announcements")).json()["announcements"] == []


async def test_schedule_meeting(client, session, admin):
    startup = await make_startup(session, "Acme")
    headers = auth(admin, Role.ADMIN)

    resp = await client.post(
        "/api/admin/schedule-meeting",
        json={"startupId": startup.id, "date": "2030-05-01", "time": "10:00", "description": "Intro"},
        headers=headers,
    )
    assert resp.status_code == 201
    schedule = resp.json()["schedule"]
    assert schedule["startupName"] == "Acme"

    resp = await client.get(f"/api/admin/schedule/{schedule['id']}", headers=headers)
    assert resp.json()["schedule"]["time"] == "10:00"

    mine = (await client.get("/api/user/my-schedules", headers=auth(startup, Role.STARTUP))).json()
    assert [s["description"] for s in mine["schedules"]] == ["Intro"]

    resp = await client.post(
        "/api/admin/schedule-meeting",
        json={"startupId": "missing", "date": "2030-05-01"},
        headers=headers,
    )
    assert resp.status_code == 404
