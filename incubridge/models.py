"""
SQLAlchemy ORM models -- database schema for IncuBridge.

Tables
------
startups              -- startup accounts + profile
admins                -- admin and incubator accounts
matching_requests     -- startup -> incubators matching requests
matching_fanout       -- ordered snapshot of incubators a request was sent to
matching_responses    -- one response per fanned-out incubator
events                -- platform events
announcements         -- platform announcements
meetings              -- meetings scheduled with startups
"""

from __future__ import annotations

import datetime as dt
import enum
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.orm.collections import attribute_keyed_dict

from .database import Base


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> dt.datetime:
    """Naive UTC timestamp (SQLite drops tzinfo anyway)."""
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Closed value sets
# ---------------------------------------------------------------------------

class Domain(str, enum.Enum):
    TECHNOLOGY = "Technology"
    HEALTHCARE = "Healthcare"
    FINANCE = "Finance"
    ECOMMERCE = "E-commerce"
    EDTECH = "EdTech"
    CLIMATECH = "ClimaTech"
    AGRITECH = "AgriTech"
    AI_ML = "AI/ML"
    BLOCKCHAIN = "Blockchain"
    OTHER = "Other"


class Industry(str, enum.Enum):
    AI = "AI"
    FINTECH = "Fintech"
    HEALTHTECH = "Healthtech"
    EDTECH = "Edtech"
    SAAS = "SaaS"
    ECOMMERCE = "E-commerce"
    SUSTAINABILITY = "Sustainability"
    D2C = "D2C"
    IOT = "IoT"
    OTHER = "Other"


class Stage(str, enum.Enum):
    IDEA = "Idea"
    MVP = "MVP"
    REVENUE = "Revenue"
    GROWTH = "Growth"
    SCALE = "Scale"


class FundingStage(str, enum.Enum):
    IDEATION = "Ideation"
    PRE_SEED = "Pre-Seed"
    SEED = "Seed"
    SERIES_A = "Series A"
    SERIES_B = "Series B"
    SERIES_C = "Series C"
    GROWTH = "Growth"


class Visibility(str, enum.Enum):
    PUBLIC = "Public"
    INCUBATORS_ONLY = "Incubators Only"
    PRIVATE = "Private"


class AccountType(str, enum.Enum):
    ADMIN = "admin"
    INCUBATOR = "incubator"


class ResponseStatus(str, enum.Enum):
    PENDING = "pending"
    INTERESTED = "interested"
    REJECTED = "rejected"


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    MATCHED = "matched"
    REJECTED = "rejected"


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

class Startup(Base):
    __tablename__ = "startups"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(320), unique=True, nullable=False, index=True)
    password_hash = Column(String(128), nullable=False)

    # Basic information
    name = Column(String(255), nullable=False)
    logo = Column(String(512), nullable=True)
    website = Column(String(512), nullable=True)
    tagline = Column(String(100), nullable=True)
    industry = Column(String(32), nullable=True, index=True)
    stage = Column(String(16), nullable=True)
    founded_date = Column(Date, nullable=True)
    domain = Column(String(32), nullable=True, index=True)

    # Problem & solution
    problem_statement = Column(Text, nullable=True)
    solution = Column(Text, nullable=True)
    unique_approach = Column(Text, nullable=True)

    # Team
    founders = Column(JSON, default=list)
    team_size = Column(Integer, default=1)
    advisors = Column(JSON, default=list)
    skill_tags = Column(JSON, default=list)

    # Traction
    active_users = Column(Integer, default=0)
    customers = Column(Integer, default=0)
    monthly_revenue = Column(Float, default=0)
    growth_percentage = Column(Float, default=0)
    partnerships = Column(JSON, default=list)
    media_mentions = Column(JSON, default=list)

    # Financial metrics
    aov = Column(Float, nullable=True)
    cac = Column(Float, nullable=True)
    burn_rate = Column(Float, nullable=True)
    gross_margin = Column(Float, nullable=True)
    runway_months = Column(Float, nullable=True)
    tam = Column(Float, nullable=True)
    sam = Column(Float, nullable=True)
    som = Column(Float, nullable=True)

    # Funding
    revenue = Column(Float, default=0)
    funding_stage = Column(String(16), nullable=True, index=True)
    current_ask = Column(Float, nullable=True)
    equity_offered = Column(Float, nullable=True)
    previous_funding = Column(JSON, default=list)
    total_raised = Column(Float, default=0)
    current_valuation = Column(Float, nullable=True)
    shareholding = Column(JSON, default=list)

    # Documents: {doc_type: "/uploads/..."} plus "otherDocuments": [{name, url}]
    documents = Column(JSON, default=dict)
    social_links = Column(JSON, default=dict)

    profile_visibility = Column(String(20), default=Visibility.INCUBATORS_ONLY.value)
    is_approved = Column(Boolean, default=False)
    is_profile_complete = Column(Boolean, default=False)
    profile_completeness = Column(Integer, default=0)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    matching_requests = relationship("MatchingRequest", back_populates="startup")
    meetings = relationship("Meeting", back_populates="startup")


class Admin(Base):
    """Admin account; ``user_type == "incubator"`` marks an incubator."""

    __tablename__ = "admins"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(320), unique=True, nullable=False, index=True)
    password_hash = Column(String(128), nullable=False)
    name = Column(String(255), nullable=False)
    user_type = Column(String(16), nullable=False, default=AccountType.ADMIN.value)
    specialization = Column(String(32), nullable=True)
    incubator_name = Column(String(255), nullable=True)
    contact_number = Column(String(32), nullable=True)
    location = Column(String(255), nullable=True)
    website = Column(String(512), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        Index("ix_admins_type_specialization", "user_type", "specialization"),
    )


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

class MatchingRequest(Base):
    __tablename__ = "matching_requests"

    id = Column(String(32), primary_key=True, default=new_id)
    startup_id = Column(String(32), ForeignKey("startups.id"), nullable=False, index=True)

    # Snapshot of the startup at request time
    startup_name = Column(String(255), default="")
    startup_domain = Column(String(32), nullable=False, index=True)
    startup_logo = Column(String(512), nullable=True)
    founder_name = Column(String(255), nullable=True)
    founder_email = Column(String(320), nullable=True)
    problem_statement = Column(Text, nullable=True)
    solution = Column(Text, nullable=True)

    match_score = Column(Float, nullable=False, default=0.0)
    status = Column(String(16), nullable=False, default=RequestStatus.PENDING.value, index=True)

    selected_incubator_id = Column(String(32), nullable=True)
    selected_incubator_name = Column(String(255), nullable=True)
    selected_at = Column(DateTime, nullable=True)

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow)

    startup = relationship("Startup", back_populates="matching_requests")
    sent_to = relationship(
        "MatchingFanout",
        back_populates="request",
        order_by="MatchingFanout.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    # Keyed by incubator id: responses are always located by id, never by position
    responses = relationship(
        "MatchingResponse",
        back_populates="request",
        collection_class=attribute_keyed_dict("incubator_id"),
        order_by="MatchingResponse.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def interested_count(self) -> int:
        return sum(
            1 for r in self.responses.values()
            if r.status == ResponseStatus.INTERESTED.value
        )

    @property
    def responded_count(self) -> int:
        return sum(1 for r in self.responses.values() if r.responded_at is not None)


class MatchingFanout(Base):
    __tablename__ = "matching_fanout"

    id = Column(Integer, primary_key=True, autoincrement=True)
    request_id = Column(String(32), ForeignKey("matching_requests.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    incubator_id = Column(String(32), nullable=False)
    incubator_name = Column(String(255), default="")
    incubator_specialization = Column(String(32), nullable=True)
    sent_at = Column(DateTime, default=utcnow)

    request = relationship("MatchingRequest", back_populates="sent_to")

    __table_args__ = (
        Index("ix_fanout_request_incubator", "request_id", "incubator_id", unique=True),
    )


class MatchingResponse(Base):
    __tablename__ = "matching_responses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    request_id = Column(String(32), ForeignKey("matching_requests.id"), nullable=False)
    incubator_id = Column(String(32), nullable=False, index=True)
    incubator_name = Column(String(255), default="")
    status = Column(String(16), nullable=False, default=ResponseStatus.PENDING.value)
    feedback = Column(Text, nullable=True)
    contact_person = Column(String(255), nullable=True)
    contact_email = Column(String(320), nullable=True)
    responded_at = Column(DateTime, nullable=True)

    request = relationship("MatchingRequest", back_populates="responses")

    __table_args__ = (
        Index("ix_response_request_incubator", "request_id", "incubator_id", unique=True),
    )


# ---------------------------------------------------------------------------
# Events, announcements, meetings
# ---------------------------------------------------------------------------

class Event(Base):
    __tablename__ = "events"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    description = Column(Text, default="")
    location = Column(String(255), default="")
    date = Column(DateTime, nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow)


class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    message = Column(Text, default="")
    created_at = Column(DateTime, default=utcnow, index=True)


class Meeting(Base):
    __tablename__ = "meetings"

    id = Column(String(32), primary_key=True, default=new_id)
    startup_id = Column(String(32), ForeignKey("startups.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(16), default="")
    description = Column(Text, default="")
    created_at = Column(DateTime, default=utcnow)

    startup = relationship("Startup", back_populates="meetings", lazy="joined")
