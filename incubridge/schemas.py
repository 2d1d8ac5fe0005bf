"""Pydantic schemas for FastAPI request / response models.

Fields are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from incubridge.models import (
    AccountType,
    Domain,
    FundingStage,
    Industry,
    Stage,
    Visibility,
)


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(ApiModel):
    success: bool = True
    message: str


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1)


class StartupApply(ApiModel):
    email: EmailStr
    password: str = Field(min_length=3)
    name: str = Field(min_length=1)
    industry: Industry
    funding_stage: FundingStage
    revenue: float = Field(default=0, ge=0)
    team_size: int = Field(default=1, ge=0)
    stage: Optional[Stage] = None
    domain: Optional[Domain] = None


class AccountBrief(ApiModel):
    id: str
    email: str
    name: str


class StartupApplyResponse(ApiModel):
    message: str
    user: AccountBrief


class StartupLoginResponse(ApiModel):
    message: str
    token: str
    user_id: str
    name: str
    email: str


class AdminRegister(ApiModel):
    email: EmailStr
    password: str = Field(min_length=3)
    name: str = Field(min_length=1)
    user_type: AccountType = AccountType.ADMIN
    specialization: Optional[Domain] = None
    incubator_name: Optional[str] = None
    contact_number: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None


class AdminOut(ApiModel):
    id: str
    email: str
    name: str
    user_type: str
    specialization: Optional[str] = None
    incubator_name: Optional[str] = None
    contact_number: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None


class AdminRegisterResponse(ApiModel):
    success: bool = True
    message: str
    admin: AdminOut


class AdminLoginResponse(ApiModel):
    success: bool = True
    message: str
    token: str
    user: AdminOut


# ---------------------------------------------------------------------------
# Startup profile
# ---------------------------------------------------------------------------

class Founder(ApiModel):
    name: str
    role: str
    linkedin: Optional[str] = None
    experience: Optional[str] = None


class Advisor(ApiModel):
    name: Optional[str] = None
    expertise: Optional[str] = None
    linkedin: Optional[str] = None


class FundingRound(ApiModel):
    round: Optional[str] = None
    amount: Optional[float] = None
    date: Optional[dt.date] = None
    investors: list[str] = Field(default_factory=list)


class ShareholdingEntry(ApiModel):
    holder_name: Optional[str] = None
    holder_type: Optional[Literal["Founder", "Investor", "Employee", "Advisor"]] = None
    percentage: Optional[float] = Field(default=None, ge=0, le=100)


class SocialLinks(ApiModel):
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    crunchbase: Optional[str] = None


class BasicInfoUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1)
    tagline: Optional[str] = Field(default=None, max_length=100)
    website: Optional[str] = None
    industry: Optional[Industry] = None
    stage: Optional[Stage] = None
    founded_date: Optional[dt.date] = None
    domain: Optional[Domain] = None


class ProblemSolutionUpdate(ApiModel):
    problem_statement: Optional[str] = Field(default=None, max_length=500)
    solution: Optional[str] = Field(default=None, max_length=500)
    unique_approach: Optional[str] = Field(default=None, max_length=500)


class TeamUpdate(ApiModel):
    founders: Optional[list[Founder]] = None
    team_size: Optional[int] = Field(default=None, ge=1)
    advisors: Optional[list[Advisor]] = None
    skill_tags: Optional[list[str]] = None


class TractionUpdate(ApiModel):
    active_users: Optional[int] = Field(default=None, ge=0)
    customers: Optional[int] = Field(default=None, ge=0)
    monthly_revenue: Optional[float] = Field(default=None, ge=0)
    growth_percentage: Optional[float] = None
    partnerships: Optional[list[str]] = None
    media_mentions: Optional[list[str]] = None


class FinancialsUpdate(ApiModel):
    aov: Optional[float] = None
    cac: Optional[float] = None
    burn_rate: Optional[float] = None
    gross_margin: Optional[float] = None
    runway_months: Optional[float] = None
    tam: Optional[float] = None
    sam: Optional[float] = None
    som: Optional[float] = None


class FundingUpdate(ApiModel):
    current_ask: Optional[float] = Field(default=None, ge=0)
    equity_offered: Optional[float] = Field(default=None, ge=0, le=100)
    funding_stage: Optional[FundingStage] = None
    previous_funding: Optional[list[FundingRound]] = None
    total_raised: Optional[float] = Field(default=None, ge=0)


class VisibilityUpdate(ApiModel):
    visibility: Visibility


class ProfileSaveAll(
    BasicInfoUpdate,
    ProblemSolutionUpdate,
    TeamUpdate,
    TractionUpdate,
    FinancialsUpdate,
    FundingUpdate,
):
    revenue: Optional[float] = Field(default=None, ge=0)
    current_valuation: Optional[float] = None
    shareholding: Optional[list[ShareholdingEntry]] = None
    social_links: Optional[SocialLinks] = None
    profile_visibility: Optional[Visibility] = None


class StartupProfile(ApiModel):
    id: str
    email: str
    name: str
    logo: Optional[str] = None
    website: Optional[str] = None
    tagline: Optional[str] = None
    industry: Optional[str] = None
    stage: Optional[str] = None
    founded_date: Optional[dt.date] = None
    domain: Optional[str] = None
    problem_statement: Optional[str] = None
    solution: Optional[str] = None
    unique_approach: Optional[str] = None
    founders: list = Field(default_factory=list)
    team_size: Optional[int] = None
    advisors: list = Field(default_factory=list)
    skill_tags: list = Field(default_factory=list)
    active_users: Optional[int] = None
    customers: Optional[int] = None
    monthly_revenue: Optional[float] = None
    growth_percentage: Optional[float] = None
    partnerships: list = Field(default_factory=list)
    media_mentions: list = Field(default_factory=list)
    aov: Optional[float] = None
    cac: Optional[float] = None
    burn_rate: Optional[float] = None
    gross_margin: Optional[float] = None
    runway_months: Optional[float] = None
    tam: Optional[float] = None
    sam: Optional[float] = None
    som: Optional[float] = None
    revenue: Optional[float] = None
    funding_stage: Optional[str] = None
    current_ask: Optional[float] = None
    equity_offered: Optional[float] = None
    previous_funding: list = Field(default_factory=list)
    total_raised: Optional[float] = None
    current_valuation: Optional[float] = None
    shareholding: list = Field(default_factory=list)
    documents: dict = Field(default_factory=dict)
    social_links: dict = Field(default_factory=dict)
    profile_visibility: Optional[str] = None
    is_approved: bool = False
    is_profile_complete: bool = False
    profile_completeness: int = 0
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class ProfileResponse(ApiModel):
    success: bool = True
    startup: StartupProfile
    profile_completeness: Optional[int] = None
    is_profile_complete: Optional[bool] = None


class LogoUploadResponse(ApiModel):
    success: bool = True
    logo_url: str
    startup: StartupProfile


class DocumentUploadResponse(ApiModel):
    success: bool = True
    document_url: str
    startup: StartupProfile


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

class MatchingRequestCreate(ApiModel):
    startup_id: Optional[str] = None
    startup_name: Optional[str] = None
    startup_domain: Domain
    startup_logo: Optional[str] = None
    founder_name: Optional[str] = None
    founder_email: Optional[EmailStr] = None
    problem_statement: Optional[str] = None
    solution: Optional[str] = None


class MatchingRequestCreated(ApiModel):
    success: bool = True
    message: str
    request_id: str
    incubators_count: int


class RespondRequest(ApiModel):
    status: Literal["interested", "rejected"]
    feedback: Optional[str] = None
    contact_person: Optional[str] = None
    contact_email: Optional[EmailStr] = None


class RespondResult(ApiModel):
    success: bool = True
    message: str
    match_score: float


class FanoutOut(ApiModel):
    incubator_id: str
    incubator_name: Optional[str] = None
    incubator_specialization: Optional[str] = None
    sent_at: Optional[dt.datetime] = None


class ResponseOut(ApiModel):
    incubator_id: str
    incubator_name: Optional[str] = None
    status: str
    feedback: Optional[str] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    responded_at: Optional[dt.datetime] = None


class SelectedIncubatorOut(ApiModel):
    incubator_id: str
    incubator_name: Optional[str] = None
    selected_at: Optional[dt.datetime] = None


class IncubatorRequestView(ApiModel):
    """A request as one fanned-out incubator sees it (only its own response)."""

    id: str
    startup_id: str
    startup_name: Optional[str] = None
    startup_domain: str
    startup_logo: Optional[str] = None
    founder_name: Optional[str] = None
    founder_email: Optional[str] = None
    problem_statement: Optional[str] = None
    solution: Optional[str] = None
    status: str
    match_score: float = 0
    total_incubators: int = 0
    created_at: Optional[dt.datetime] = None
    my_response: ResponseOut


class IncubatorRequestList(ApiModel):
    success: bool = True
    count: int
    requests: list[IncubatorRequestView]


class IncubatorRequestDetail(ApiModel):
    success: bool = True
    request: IncubatorRequestView


class StartupRequestSummary(ApiModel):
    id: str
    domain: str
    status: str
    match_score: float = 0
    interested_count: int = 0
    total_incubators: int = 0
    selected_incubator: Optional[SelectedIncubatorOut] = None
    sent_to_incubators: list[FanoutOut] = Field(default_factory=list)
    created_at: Optional[dt.datetime] = None


class StartupRequestList(ApiModel):
    success: bool = True
    requests: list[StartupRequestSummary]


class InterestedIncubator(ApiModel):
    incubator_id: str
    name: Optional[str] = None
    specialization: Optional[str] = None
    email: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    contact_person: Optional[str] = None
    feedback: Optional[str] = None
    responded_at: Optional[dt.datetime] = None


class InterestedIncubatorList(ApiModel):
    success: bool = True
    count: int
    interested_incubators: list[InterestedIncubator]


class SelectResult(ApiModel):
    success: bool = True
    message: str
    selected_incubator: SelectedIncubatorOut


# ---------------------------------------------------------------------------
# Legal chatbot
# ---------------------------------------------------------------------------

class ChatRequest(ApiModel):
    message: str = Field(min_length=1, max_length=2000)
    user_id: str = Field(min_length=1, max_length=128)


class ChatMessageOut(ApiModel):
    role: Literal["user", "bot"]
    content: str
    timestamp: dt.datetime


class ChatReply(ApiModel):
    success: bool = True
    user_message: str
    bot_response: str
    topic: Optional[str] = None
    timestamp: dt.datetime


class ChatHistoryResponse(ApiModel):
    success: bool = True
    history: list[ChatMessageOut]


# ---------------------------------------------------------------------------
# Events, announcements, meetings
# ---------------------------------------------------------------------------

class EventCreate(ApiModel):
    title: str = Field(min_length=1)
    description: str = ""
    location: str = ""
    date: Optional[dt.datetime] = None


class EventOut(EventCreate):
    id: str
    created_at: Optional[dt.datetime] = None


class EventRemove(ApiModel):
    event_id: str


class AnnouncementCreate(ApiModel):
    title: str = Field(min_length=1)
    message: str = ""


class AnnouncementOut(AnnouncementCreate):
    id: str
    created_at: Optional[dt.datetime] = None


class AnnouncementRemove(ApiModel):
    announcement_id: str


class MeetingCreate(ApiModel):
    startup_id: str
    date: dt.date
    time: str = ""
    description: str = ""


class MeetingOut(MeetingCreate):
    id: str
    startup_name: Optional[str] = None
    created_at: Optional[dt.datetime] = None


class ApproveStartup(ApiModel):
    id: str


# ---------------------------------------------------------------------------
# Dashboards
# ---------------------------------------------------------------------------

class NamedValue(ApiModel):
    name: str
    value: float


class CountByKey(ApiModel):
    key: Optional[str] = None
    count: int


class AdminDashboardStats(ApiModel):
    total_startups: int = 0
    approved_startups: int = 0
    pending_startups: int = 0
    total_revenue: float = 0
    total_team_size: int = 0
    largest_team: Optional[NamedValue] = None
    top_revenue_startup: Optional[NamedValue] = None
    total_events: int = 0
    upcoming_events: int = 0
    total_announcements: int = 0
    announcements_last_30_days: int = 0
    total_meetings: int = 0
    meetings_today: int = 0
    startups_this_month: int = 0
    total_admins: int = 0
    total_incubators: int = 0
    funding_stage_breakdown: list[CountByKey] = Field(default_factory=list)
    total_matching_requests: int = 0
    matching_status_breakdown: list[CountByKey] = Field(default_factory=list)


class StartupDashboardStats(ApiModel):
    name: str
    email: str
    industry: Optional[str] = None
    funding_stage: Optional[str] = None
    revenue: Optional[float] = None
    team_size: Optional[int] = None
    account_created: Optional[dt.datetime] = None
    total_events: int = 0
    total_announcements: int = 0
    upcoming_event: str = "No upcoming event"
