"""Startup accounts -- registration, login, dashboard, events and schedules."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from incubridge.database import get_session
from incubridge.errors import Conflict, NotFound, Unauthorized
from incubridge.models import Announcement, Event, Meeting, Startup, utcnow
from incubridge.schemas import (
    AccountBrief,
    AnnouncementOut,
    EventOut,
    LoginRequest,
    MeetingOut,
    ProfileResponse,
    StartupApply,
    StartupApplyResponse,
    StartupDashboardStats,
    StartupLoginResponse,
    StartupProfile,
)
from incubridge.security import (
    Caller,
    Role,
    create_access_token,
    hash_password,
    require_startup,
    verify_password,
)
from incubridge.services.profile import refresh_completeness

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["user"])


def meeting_out(meeting: Meeting) -> MeetingOut:
    return MeetingOut(
        id=meeting.id,
        startup_id=meeting.startup_id,
        startup_name=meeting.startup.name if meeting.startup else None,
        date=meeting.date,
        time=meeting.time or "",
        description=meeting.description or "",
        created_at=meeting.created_at,
    )


@router.post("/apply", response_model=StartupApplyResponse, status_code=201)
async def apply(
    req: StartupApply,
    session: AsyncSession = Depends(get_session),
):
    email = req.email.lower()
    existing = (
        await session.execute(select(Startup.id).where(Startup.email == email))
    ).scalar()
    if existing:
        raise Conflict("User already exists")

    startup = Startup(
        email=email,
        password_hash=hash_password(req.password),
        name=req.name,
        industry=req.industry.value,
        funding_stage=req.funding_stage.value,
        revenue=req.revenue,
        team_size=req.team_size,
        stage=req.stage.value if req.stage else None,
        domain=req.domain.value if req.domain else None,
        founders=[],
        advisors=[],
        skill_tags=[],
        partnerships=[],
        media_mentions=[],
        previous_funding=[],
        shareholding=[],
        documents={},
        social_links={},
    )
    refresh_completeness(startup)
    session.add(startup)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise Conflict("User already exists")

    logger.info("Startup %s registered (%s)", startup.id, email)
    return StartupApplyResponse(
        message="User created successfully",
        user=AccountBrief(id=startup.id, email=startup.email, name=startup.name),
    )


@router.post("/login", response_model=StartupLoginResponse)
async def login(
    req: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    email = req.email.lower()
    startup = (
        await session.execute(select(Startup).where(Startup.email == email))
    ).scalar_one_or_none()
    if startup is None:
        raise NotFound("User not found")
    if not verify_password(req.password, startup.password_hash):
        logger.warning("Failed startup login for %s", email)
        raise Unauthorized("Incorrect password")

    token = create_access_token(startup.id, Role.STARTUP, startup.email)
    return StartupLoginResponse(
        message="Login successful",
        token=token,
        user_id=startup.id,
        name=startup.name,
        email=startup.email,
    )


@router.get("/profile", response_model=ProfileResponse)
async def profile(
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    startup = await session.get(Startup, caller.id)
    if startup is None:
        raise NotFound("User not found")
    return ProfileResponse(startup=StartupProfile.model_validate(startup))


@router.get("/dashboard-stats", response_model=StartupDashboardStats)
async def dashboard_stats(
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    startup = await session.get(Startup, caller.id)
    if startup is None:
        raise NotFound("Startup not found")

    total_events = (await session.execute(select(func.count(Event.id)))).scalar() or 0
    total_announcements = (
        await session.execute(select(func.count(Announcement.id)))
    ).scalar() or 0
    upcoming = (
        await session.execute(
            select(Event.title)
            .where(Event.date >= utcnow())
            .order_by(Event.date)
            .limit(1)
        )
    ).scalar()

    return StartupDashboardStats(
        name=startup.name,
        email=startup.email,
        industry=startup.industry,
        funding_stage=startup.funding_stage,
        revenue=startup.revenue,
        team_size=startup.team_size,
        account_created=startup.created_at,
        total_events=total_events,
        total_announcements=total_announcements,
        upcoming_event=upcoming or "No upcoming event",
    )


@router.get("/events")
async def events(session: AsyncSession = Depends(get_session)):
    rows = (await session.execute(select(Event).order_by(Event.date))).scalars().all()
    return {"events": [EventOut.model_validate(e).model_dump(by_alias=True) for e in rows]}


@router.get("/announcements")
async def announcements(session: AsyncSession = Depends(get_session)):
    rows = (
        await session.execute(select(Announcement).order_by(Announcement.created_at.desc()))
    ).scalars().all()
    return {
        "announcements": [
            AnnouncementOut.model_validate(a).model_dump(by_alias=True) for a in rows
        ]
    }


@router.get("/my-schedules")
async def my_schedules(
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    rows = (
        await session.execute(
            select(Meeting).where(Meeting.startup_id == caller.id).order_by(Meeting.date)
        )
    ).scalars().all()
    return {"schedules": [meeting_out(m).model_dump(by_alias=True) for m in rows]}
