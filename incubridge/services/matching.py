"""
Matching workflow -- startup requests fanned out to incubators.

Lifecycle of a MatchingRequest:
    1. create    -- fan out to every incubator whose specialization equals the
                    request domain; one pending response per incubator.
    2. respond   -- an incubator from the fan-out overwrites its own response;
                    match_score = interested / responded * 100;
                    pending -> in-progress on the first "interested".
    3. select    -- the owning startup picks one interested incubator;
                    status -> matched (terminal).

Responses live in their own rows keyed by (request_id, incubator_id), so two
incubators never write the same row. The request row itself is locked with
SELECT ... FOR UPDATE where the backend supports it and is guarded by an ORM
version counter; a writer that loses the race is rolled back and retried.

Usage:
    from incubridge.services import matching
    request = await matching.create_request(session, startup_id, payload)
    score = await matching.respond(session, request.id, incubator_id, decision)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from incubridge.errors import Conflict, Forbidden, NotFound, ValidationFailed
from incubridge.models import (
    AccountType,
    Admin,
    MatchingFanout,
    MatchingRequest,
    MatchingResponse,
    RequestStatus,
    ResponseStatus,
    Startup,
    utcnow,
)
from incubridge.schemas import MatchingRequestCreate, RespondRequest

logger = logging.getLogger(__name__)

# Optimistic-concurrency retries for a response update
MAX_RESPOND_ATTEMPTS = 3


@dataclass
class InterestedContact:
    incubator_id: str
    name: Optional[str]
    specialization: Optional[str]
    email: Optional[str]
    location: Optional[str]
    website: Optional[str]
    contact_person: Optional[str]
    feedback: Optional[str]
    responded_at: Optional[object]


def compute_match_score(responses) -> float:
    """Percentage of *responded* incubators that are interested (0 if none responded)."""
    responded = [r for r in responses if r.responded_at is not None]
    if not responded:
        return 0.0
    interested = sum(1 for r in responded if r.status == ResponseStatus.INTERESTED.value)
    return interested / len(responded) * 100


async def _load_request(
    session: AsyncSession,
    request_id: str,
    for_update: bool = False,
) -> MatchingRequest:
    stmt = (
        select(MatchingRequest)
        .where(MatchingRequest.id == request_id)
        .execution_options(populate_existing=True)
    )
    if for_update:
        stmt = stmt.with_for_update(of=MatchingRequest)
    request = (await session.execute(stmt)).scalar_one_or_none()
    if request is None:
        raise NotFound("Request not found", {"request_id": request_id})
    return request


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

async def find_incubators(session: AsyncSession, domain: str) -> list[Admin]:
    """Incubators specializing in *domain*, in registration order."""
    stmt = (
        select(Admin)
        .where(
            Admin.user_type == AccountType.INCUBATOR.value,
            Admin.specialization == domain,
        )
        .order_by(Admin.created_at, Admin.id)
    )
    return list((await session.execute(stmt)).scalars().all())


async def create_request(
    session: AsyncSession,
    startup_id: str,
    payload: MatchingRequestCreate,
) -> MatchingRequest:
    if payload.startup_id and payload.startup_id != startup_id:
        raise Forbidden("Cannot create a request on behalf of another startup")

    startup = await session.get(Startup, startup_id)
    if startup is None:
        raise NotFound("Startup not found", {"startup_id": startup_id})

    domain = payload.startup_domain.value
    incubators = await find_incubators(session, domain)
    if not incubators:
        raise NotFound(
            f"No incubators found for {domain} domain. Try another domain!",
            {"domain": domain},
        )

    founder_name = payload.founder_name
    if founder_name is None and startup.founders:
        founder_name = (startup.founders[0] or {}).get("name")

    now = utcnow()
    request = MatchingRequest(
        startup_id=startup.id,
        startup_name=payload.startup_name or startup.name,
        startup_domain=domain,
        startup_logo=payload.startup_logo or startup.logo,
        founder_name=founder_name,
        founder_email=payload.founder_email or startup.email,
        problem_statement=payload.problem_statement or startup.problem_statement,
        solution=payload.solution or startup.solution,
        match_score=0.0,
        status=RequestStatus.PENDING.value,
        created_at=now,
        updated_at=now,
    )

    # Fan-out list and response map are built from the same pass
    for position, incubator in enumerate(incubators):
        request.sent_to.append(
            MatchingFanout(
                position=position,
                incubator_id=incubator.id,
                incubator_name=incubator.name,
                incubator_specialization=incubator.specialization,
                sent_at=now,
            )
        )
        request.responses[incubator.id] = MatchingResponse(
            incubator_id=incubator.id,
            incubator_name=incubator.name,
            status=ResponseStatus.PENDING.value,
        )

    session.add(request)
    await session.commit()

    logger.info(
        "Matching request %s created for startup %s (domain=%s, incubators=%d)",
        request.id, startup.id, domain, len(incubators),
    )
    return request


# ---------------------------------------------------------------------------
# Respond
# ---------------------------------------------------------------------------

async def _apply_response(
    session: AsyncSession,
    request_id: str,
    incubator_id: str,
    decision: RespondRequest,
) -> MatchingRequest:
    request = await _load_request(session, request_id, for_update=True)

    response = request.responses.get(incubator_id)
    if response is None:
        raise Forbidden("Not authorized to respond to this request")

    if request.status == RequestStatus.MATCHED.value:
        raise Conflict(
            "Request is already matched; responses are closed",
            {"selected_incubator_id": request.selected_incubator_id},
        )

    now = utcnow()
    response.status = decision.status
    response.feedback = decision.feedback
    response.contact_person = decision.contact_person
    response.contact_email = decision.contact_email
    response.responded_at = now

    request.match_score = compute_match_score(request.responses.values())
    if (
        decision.status == ResponseStatus.INTERESTED.value
        and request.status == RequestStatus.PENDING.value
    ):
        request.status = RequestStatus.IN_PROGRESS.value
    request.updated_at = now

    await session.commit()
    return request


async def respond(
    session: AsyncSession,
    request_id: str,
    incubator_id: str,
    decision: RespondRequest,
) -> MatchingRequest:
    """Record *incubator_id*'s decision and recompute the match score."""
    for attempt in range(1, MAX_RESPOND_ATTEMPTS + 1):
        try:
            request = await _apply_response(session, request_id, incubator_id, decision)
        except StaleDataError:
            await session.rollback()
            logger.info(
                "Concurrent update on request %s, retrying response (attempt %d)",
                request_id, attempt,
            )
            continue
        except (Forbidden, Conflict, NotFound):
            await session.rollback()
            raise

        logger.info(
            "Incubator %s marked request %s as %s (score=%.1f, status=%s)",
            incubator_id, request_id, decision.status, request.match_score, request.status,
        )
        return request

    raise Conflict("Request is being updated concurrently, please retry")


# ---------------------------------------------------------------------------
# Select
# ---------------------------------------------------------------------------

async def select_incubator(
    session: AsyncSession,
    request_id: str,
    startup_id: str,
    incubator_id: str,
) -> MatchingRequest:
    request = await _load_request(session, request_id, for_update=True)

    if request.startup_id != startup_id:
        raise Forbidden("Not authorized to select for this request")

    if request.selected_incubator_id is not None:
        if request.selected_incubator_id == incubator_id:
            # Same choice again: nothing to change
            return request
        raise Conflict(
            "An incubator has already been selected for this request",
            {"selected_incubator_id": request.selected_incubator_id},
        )

    response = request.responses.get(incubator_id)
    if response is None or response.status != ResponseStatus.INTERESTED.value:
        raise ValidationFailed(
            "This incubator is not interested",
            {"incubator_id": incubator_id},
        )

    incubator = await session.get(Admin, incubator_id)
    now = utcnow()
    request.selected_incubator_id = incubator_id
    request.selected_incubator_name = incubator.name if incubator else response.incubator_name
    request.selected_at = now
    request.status = RequestStatus.MATCHED.value
    request.updated_at = now

    try:
        await session.commit()
    except StaleDataError:
        await session.rollback()
        raise Conflict("Request changed while selecting, please retry")

    logger.info(
        "Request %s matched with incubator %s by startup %s",
        request_id, incubator_id, startup_id,
    )
    return request


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

async def list_for_incubator(
    session: AsyncSession,
    incubator_id: str,
    response_status: Optional[ResponseStatus] = None,
) -> list[MatchingRequest]:
    """Every request fanned out to *incubator_id*, newest first.

    With *response_status* only requests where the incubator's own response
    has that status are returned (``pending`` -> not yet answered).
    """
    stmt = (
        select(MatchingRequest)
        .join(MatchingResponse, MatchingResponse.request_id == MatchingRequest.id)
        .where(MatchingResponse.incubator_id == incubator_id)
        .order_by(MatchingRequest.created_at.desc())
    )
    if response_status is not None:
        stmt = stmt.where(MatchingResponse.status == ResponseStatus(response_status).value)
    return list((await session.execute(stmt)).scalars().unique().all())


async def get_for_incubator(
    session: AsyncSession,
    request_id: str,
    incubator_id: str,
) -> MatchingRequest:
    request = await _load_request(session, request_id)
    if incubator_id not in request.responses:
        raise Forbidden("Not authorized to view this request")
    return request


async def list_for_startup(session: AsyncSession, startup_id: str) -> list[MatchingRequest]:
    stmt = (
        select(MatchingRequest)
        .where(MatchingRequest.startup_id == startup_id)
        .order_by(MatchingRequest.created_at.desc())
    )
    return list((await session.execute(stmt)).scalars().all())


async def interested_incubators(
    session: AsyncSession,
    request_id: str,
    startup_id: str,
) -> list[InterestedContact]:
    request = await _load_request(session, request_id)
    if request.startup_id != startup_id:
        raise Forbidden("Not authorized to view this request")

    interested = [
        r for r in request.responses.values()
        if r.status == ResponseStatus.INTERESTED.value
    ]
    if not interested:
        return []

    ids = [r.incubator_id for r in interested]
    accounts = {
        a.id: a
        for a in (await session.execute(select(Admin).where(Admin.id.in_(ids)))).scalars().all()
    }

    contacts = []
    for response in interested:
        account = accounts.get(response.incubator_id)
        contacts.append(
            InterestedContact(
                incubator_id=response.incubator_id,
                name=account.name if account else response.incubator_name,
                specialization=account.specialization if account else None,
                email=response.contact_email or (account.email if account else None),
                location=account.location if account else None,
                website=account.website if account else None,
                contact_person=response.contact_person,
                feedback=response.feedback,
                responded_at=response.responded_at,
            )
        )
    return contacts
