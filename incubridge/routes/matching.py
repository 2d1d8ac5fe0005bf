"""Matching endpoints -- startups send requests, incubators respond, startups select."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from incubridge.database import get_session
from incubridge.models import MatchingRequest, ResponseStatus
from incubridge.schemas import (
    FanoutOut,
    IncubatorRequestDetail,
    IncubatorRequestList,
    IncubatorRequestView,
    InterestedIncubator,
    InterestedIncubatorList,
    MatchingRequestCreate,
    MatchingRequestCreated,
    RespondRequest,
    RespondResult,
    ResponseOut,
    SelectedIncubatorOut,
    SelectResult,
    StartupRequestList,
    StartupRequestSummary,
)
from incubridge.security import Caller, require_incubator, require_startup
from incubridge.services import matching

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/matching", tags=["matching"])


def _selected(request: MatchingRequest) -> Optional[SelectedIncubatorOut]:
    if request.selected_incubator_id is None:
        return None
    return SelectedIncubatorOut(
        incubator_id=request.selected_incubator_id,
        incubator_name=request.selected_incubator_name,
        selected_at=request.selected_at,
    )


def _incubator_view(request: MatchingRequest, incubator_id: str) -> IncubatorRequestView:
    """Project a request for one incubator; other incubators' answers stay hidden."""
    return IncubatorRequestView(
        id=request.id,
        startup_id=request.startup_id,
        startup_name=request.startup_name,
        startup_domain=request.startup_domain,
        startup_logo=request.startup_logo,
        founder_name=request.founder_name,
        founder_email=request.founder_email,
        problem_statement=request.problem_statement,
        solution=request.solution,
        status=request.status,
        match_score=request.match_score,
        total_incubators=len(request.sent_to),
        created_at=request.created_at,
        my_response=ResponseOut.model_validate(request.responses[incubator_id]),
    )


def _startup_summary(request: MatchingRequest) -> StartupRequestSummary:
    return StartupRequestSummary(
        id=request.id,
        domain=request.startup_domain,
        status=request.status,
        match_score=request.match_score,
        interested_count=request.interested_count,
        total_incubators=len(request.responses),
        selected_incubator=_selected(request),
        sent_to_incubators=[FanoutOut.model_validate(f) for f in request.sent_to],
        created_at=request.created_at,
    )


# ---------------------------------------------------------------------------
# Startup side
# ---------------------------------------------------------------------------

@router.post("/request", response_model=MatchingRequestCreated)
async def create_request(
    payload: MatchingRequestCreate,
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    request = await matching.create_request(session, caller.id, payload)
    count = len(request.sent_to)
    return MatchingRequestCreated(
        message=f"Request sent to {count} incubators!",
        request_id=request.id,
        incubators_count=count,
    )


@router.get("/my-requests", response_model=StartupRequestList)
async def my_requests(
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    requests = await matching.list_for_startup(session, caller.id)
    return StartupRequestList(requests=[_startup_summary(r) for r in requests])


@router.get("/request/{request_id}/interested", response_model=InterestedIncubatorList)
async def interested_incubators(
    request_id: str,
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    contacts = await matching.interested_incubators(session, request_id, caller.id)
    items = [InterestedIncubator.model_validate(c) for c in contacts]
    return InterestedIncubatorList(count=len(items), interested_incubators=items)


@router.put("/request/{request_id}/select/{incubator_id}", response_model=SelectResult)
async def select_incubator(
    request_id: str,
    incubator_id: str,
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    request = await matching.select_incubator(session, request_id, caller.id, incubator_id)
    return SelectResult(
        message="Successfully matched with incubator!",
        selected_incubator=_selected(request),
    )


# ---------------------------------------------------------------------------
# Incubator side
# ---------------------------------------------------------------------------

@router.get("/requests", response_model=IncubatorRequestList)
async def incubator_requests(
    status: Optional[ResponseStatus] = Query(default=None),
    caller: Caller = Depends(require_incubator),
    session: AsyncSession = Depends(get_session),
):
    """All requests sent to the caller; ``?status=`` filters on the caller's own response."""
    requests = await matching.list_for_incubator(session, caller.id, status)
    views = [_incubator_view(r, caller.id) for r in requests]
    return IncubatorRequestList(count=len(views), requests=views)


@router.get("/pending-requests", response_model=IncubatorRequestList)
async def pending_requests(
    caller: Caller = Depends(require_incubator),
    session: AsyncSession = Depends(get_session),
):
    """Requests the caller has not answered yet."""
    requests = await matching.list_for_incubator(session, caller.id, ResponseStatus.PENDING)
    views = [_incubator_view(r, caller.id) for r in requests]
    return IncubatorRequestList(count=len(views), requests=views)


@router.get("/request/{request_id}", response_model=IncubatorRequestDetail)
async def request_detail(
    request_id: str,
    caller: Caller = Depends(require_incubator),
    session: AsyncSession = Depends(get_session),
):
    request = await matching.get_for_incubator(session, request_id, caller.id)
    return IncubatorRequestDetail(request=_incubator_view(request, caller.id))


@router.put("/request/{request_id}/respond", response_model=RespondResult)
async def respond(
    request_id: str,
    decision: RespondRequest,
    caller: Caller = Depends(require_incubator),
    session: AsyncSession = Depends(get_session),
):
    request = await matching.respond(session, request_id, caller.id, decision)
    return RespondResult(
        message=f"Request marked as {decision.status}",
        match_score=round(request.match_score, 1),
    )
