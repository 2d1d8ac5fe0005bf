"""Admin endpoint -- admin / incubator accounts, dashboard statistics, content management."""

from __future__ import annotations

import datetime as dt
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from incubridge.database import get_session
from incubridge.errors import Conflict, NotFound, Unauthorized, ValidationFailed
from incubridge.models import (
    AccountType,
    Admin,
    Announcement,
    Event,
    MatchingRequest,
    Meeting,
    Startup,
    utcnow,
)
from incubridge.routes.user import meeting_out
from incubridge.schemas import (
    AdminDashboardStats,
    AdminLoginResponse,
    AdminOut,
    AdminRegister,
    AdminRegisterResponse,
    AnnouncementCreate,
    AnnouncementOut,
    AnnouncementRemove,
    ApproveStartup,
    CountByKey,
    EventCreate,
    EventOut,
    EventRemove,
    LoginRequest,
    MeetingCreate,
    MessageResponse,
    NamedValue,
    StartupProfile,
)
from incubridge.security import (
    Caller,
    Role,
    create_access_token,
    hash_password,
    require_staff,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

@router.post("/register", response_model=AdminRegisterResponse, status_code=201)
async def register(
    req: AdminRegister,
    session: AsyncSession = Depends(get_session),
):
    is_incubator = req.user_type == AccountType.INCUBATOR
    if is_incubator and req.specialization is None:
        raise ValidationFailed("Specialization is required for incubators")

    email = req.email.lower()
    existing = (await session.execute(select(Admin.id).where(Admin.email == email))).scalar()
    if existing:
        raise Conflict("Admin already exists")

    admin = Admin(
        email=email,
        password_hash=hash_password(req.password),
        name=req.name,
        user_type=req.user_type.value,
        specialization=req.specialization.value if is_incubator else None,
        incubator_name=req.incubator_name if is_incubator else None,
        contact_number=req.contact_number,
        location=req.location if is_incubator else None,
        website=req.website if is_incubator else None,
    )
    session.add(admin)
    try:
        await session.commit()
    except IntegrityError:
        # lost a race with a concurrent registration of the same email
        await session.rollback()
        raise Conflict("Admin already exists")

    logger.info("%s account %s registered (%s)", admin.user_type, admin.id, email)
    return AdminRegisterResponse(message="Admin created", admin=AdminOut.model_validate(admin))


@router.post("/login", response_model=AdminLoginResponse)
async def login(
    req: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    email = req.email.lower()
    admin = (await session.execute(select(Admin).where(Admin.email == email))).scalar_one_or_none()
    if admin is None:
        raise NotFound("Admin not found")
    if not verify_password(req.password, admin.password_hash):
        logger.warning("Failed admin login for %s", email)
        raise Unauthorized("Incorrect password")

    role = Role.INCUBATOR if admin.user_type == AccountType.INCUBATOR.value else Role.ADMIN
    token = create_access_token(admin.id, role, admin.email)
    return AdminLoginResponse(
        message="Login successful",
        token=token,
        user=AdminOut.model_validate(admin),
    )


@router.get("/profile")
async def profile(
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    admin = await session.get(Admin, caller.id)
    if admin is None:
        raise NotFound("User not found")
    return {"success": True, "user": AdminOut.model_validate(admin).model_dump(by_alias=True)}


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

async def _count(session: AsyncSession, column, *where) -> int:
    stmt = select(func.count(column))
    if where:
        stmt = stmt.where(*where)
    return (await session.execute(stmt)).scalar() or 0


@router.get("/dashboard-stats", response_model=AdminDashboardStats)
async def dashboard_stats(
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    now = utcnow()
    today = now.date()
    month_start = dt.datetime(now.year, now.month, 1)

    total_startups = await _count(session, Startup.id)
    approved = await _count(session, Startup.id, Startup.is_approved.is_(True))
    total_revenue = (
        await session.execute(select(func.coalesce(func.sum(Startup.revenue), 0)))
    ).scalar() or 0
    total_team = (
        await session.execute(select(func.coalesce(func.sum(Startup.team_size), 0)))
    ).scalar() or 0

    largest = (
        await session.execute(
            select(Startup.name, Startup.team_size).order_by(Startup.team_size.desc()).limit(1)
        )
    ).first()
    top_revenue = (
        await session.execute(
            select(Startup.name, Startup.revenue).order_by(Startup.revenue.desc()).limit(1)
        )
    ).first()

    funding_rows = (
        await session.execute(
            select(Startup.funding_stage, func.count(Startup.id)).group_by(Startup.funding_stage)
        )
    ).all()
    matching_rows = (
        await session.execute(
            select(MatchingRequest.status, func.count(MatchingRequest.id))
            .group_by(MatchingRequest.status)
        )
    ).all()

    return AdminDashboardStats(
        total_startups=total_startups,
        approved_startups=approved,
        pending_startups=total_startups - approved,
        total_revenue=float(total_revenue),
        total_team_size=int(total_team),
        largest_team=NamedValue(name=largest[0], value=largest[1] or 0) if largest else None,
        top_revenue_startup=(
            NamedValue(name=top_revenue[0], value=top_revenue[1] or 0) if top_revenue else None
        ),
        total_events=await _count(session, Event.id),
        upcoming_events=await _count(session, Event.id, Event.date >= now),
        total_announcements=await _count(session, Announcement.id),
        announcements_last_30_days=await _count(
            session, Announcement.id, Announcement.created_at >= now - dt.timedelta(days=30)
        ),
        total_meetings=await _count(session, Meeting.id),
        meetings_today=await _count(session, Meeting.id, Meeting.date == today),
        startups_this_month=await _count(session, Startup.id, Startup.created_at >= month_start),
        total_admins=await _count(session, Admin.id),
        total_incubators=await _count(
            session, Admin.id, Admin.user_type == AccountType.INCUBATOR.value
        ),
        funding_stage_breakdown=[CountByKey(key=k, count=c) for k, c in funding_rows],
        total_matching_requests=sum(c for _, c in matching_rows),
        matching_status_breakdown=[CountByKey(key=k, count=c) for k, c in matching_rows],
    )


# ---------------------------------------------------------------------------
# Startups
# ---------------------------------------------------------------------------

@router.get("/all-startups")
async def all_startups(
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    rows = (
        await session.execute(select(Startup).order_by(Startup.created_at.desc()))
    ).scalars().all()
    return {"startups": [StartupProfile.model_validate(s).model_dump(by_alias=True) for s in rows]}


@router.get("/all-startups/{startup_id}")
async def startup_detail(
    startup_id: str,
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    startup = await session.get(Startup, startup_id)
    if startup is None:
        raise NotFound("Startup not found")
    return {"startup": StartupProfile.model_validate(startup).model_dump(by_alias=True)}


@router.post("/approve-startup", response_model=MessageResponse)
async def approve_startup(
    req: ApproveStartup,
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    startup = await session.get(Startup, req.id)
    if startup is None:
        raise NotFound("Startup not found")
    startup.is_approved = True
    await session.commit()
    logger.info("Startup %s approved by %s", startup.id, caller.id)
    return MessageResponse(message="Startup approved")


# ---------------------------------------------------------------------------
# Events & announcements
# ---------------------------------------------------------------------------

@router.post("/create-event", response_model=EventOut, status_code=201)
async def create_event(
    req: EventCreate,
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    event = Event(title=req.title, description=req.description, location=req.location, date=req.date)
    session.add(event)
    await session.commit()
    return EventOut.model_validate(event)


@router.post("/remove-event", response_model=MessageResponse)
async def remove_event(
    req: EventRemove,
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    result = await session.execute(delete(Event).where(Event.id == req.event_id))
    if not result.rowcount:
        raise NotFound("Event not found")
    await session.commit()
    return MessageResponse(message="Event deleted")


@router.post("/create-announcement", response_model=AnnouncementOut, status_code=201)
async def create_announcement(
    req: AnnouncementCreate,
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    announcement = Announcement(title=req.title, message=req.message)
    session.add(announcement)
    await session.commit()
    return AnnouncementOut.model_validate(announcement)


@router.post("/remove-announcement", response_model=MessageResponse)
async def remove_announcement(
    req: AnnouncementRemove,
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    result = await session.execute(
        delete(Announcement).where(Announcement.id == req.announcement_id)
    )
    if not result.rowcount:
        raise NotFound("Announcement not found")
    await session.commit()
    return MessageResponse(message="Announcement deleted")


# ---------------------------------------------------------------------------
# Meetings
# ---------------------------------------------------------------------------

@router.post("/schedule-meeting", status_code=201)
async def schedule_meeting(
    req: MeetingCreate,
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    startup = await session.get(Startup, req.startup_id)
    if startup is None:
        raise NotFound("Startup not found")

    meeting = Meeting(
        startup_id=startup.id,
        date=req.date,
        time=req.time,
        description=req.description,
    )
    meeting.startup = startup
    session.add(meeting)
    await session.commit()
    return {"success": True, "message": "Schedule created", "schedule": meeting_out(meeting).model_dump(by_alias=True)}


@router.get("/all-schedules")
async def all_schedules(
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    rows = (await session.execute(select(Meeting).order_by(Meeting.date))).scalars().all()
    return {"schedules": [meeting_out(m).model_dump(by_alias=True) for m in rows]}


@router.get("/schedule/{schedule_id}")
async def schedule_detail(
    schedule_id: str,
    caller: Caller = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
):
    meeting = await session.get(Meeting, schedule_id)
    if meeting is None:
        raise NotFound("Schedule not found")
    return {"schedule": meeting_out(meeting).model_dump(by_alias=True)}
