"""Startup profile endpoints -- section updates, uploads, public view."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from incubridge.database import get_session
from incubridge.errors import Forbidden, NotFound
from incubridge.models import Startup, Visibility
from incubridge.schemas import (
    BasicInfoUpdate,
    DocumentUploadResponse,
    FinancialsUpdate,
    FundingUpdate,
    LogoUploadResponse,
    ProblemSolutionUpdate,
    ProfileResponse,
    ProfileSaveAll,
    StartupProfile,
    TeamUpdate,
    TractionUpdate,
    VisibilityUpdate,
)
from incubridge.security import Caller, require_startup
from incubridge.services import profile as profile_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/startup", tags=["startup"])

# Never shown on the public profile
PRIVATE_FIELDS = {"burn_rate", "shareholding"}


async def _own_startup(session: AsyncSession, caller: Caller) -> Startup:
    startup = await session.get(Startup, caller.id)
    if startup is None:
        raise NotFound("Startup not found")
    return startup


def _profile_response(startup: Startup) -> ProfileResponse:
    return ProfileResponse(
        startup=StartupProfile.model_validate(startup),
        profile_completeness=startup.profile_completeness,
        is_profile_complete=startup.is_profile_complete,
    )


async def _update(session: AsyncSession, caller: Caller, update: BaseModel) -> ProfileResponse:
    startup = await _own_startup(session, caller)
    changed = profile_service.apply_update(startup, update)
    await session.commit()
    logger.info("Startup %s updated %s", startup.id, ", ".join(changed) or "nothing")
    return _profile_response(startup)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    return _profile_response(await _own_startup(session, caller))


@router.put("/profile/basic", response_model=ProfileResponse)
async def update_basic(
    update: BasicInfoUpdate,
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    return await _update(session, caller, update)


@router.put("/profile/problem-solution", response_model=ProfileResponse)
async def update_problem_solution(
    update: ProblemSolutionUpdate,
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    return await _update(session, caller, update)


@router.put("/profile/team", response_model=ProfileResponse)
async def update_team(
    update: TeamUpdate,
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    return await _update(session, caller, update)


@router.put("/profile/traction", response_model=ProfileResponse)
async def update_traction(
    update: TractionUpdate,
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    return await _update(session, caller, update)


@router.put("/profile/financials", response_model=ProfileResponse)
async def update_financials(
    update: FinancialsUpdate,
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    return await _update(session, caller, update)


@router.put("/profile/funding", response_model=ProfileResponse)
async def update_funding(
    update: FundingUpdate,
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    return await _update(session, caller, update)


@router.put("/profile/visibility", response_model=ProfileResponse)
async def update_visibility(
    update: VisibilityUpdate,
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    return await _update(session, caller, update)


@router.put("/profile/save-all", response_model=ProfileResponse)
async def save_all(
    update: ProfileSaveAll,
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    return await _update(session, caller, update)


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------

@router.post("/profile/upload-logo", response_model=LogoUploadResponse)
async def upload_logo(
    logo: UploadFile = File(...),
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    startup = await _own_startup(session, caller)
    url = profile_service.store_upload(logo.filename, await logo.read())
    startup.logo = url
    profile_service.refresh_completeness(startup)
    await session.commit()
    return LogoUploadResponse(logo_url=url, startup=StartupProfile.model_validate(startup))


@router.post("/profile/upload-document", response_model=DocumentUploadResponse)
async def upload_document(
    document: UploadFile = File(...),
    type: str = Form(...),
    name: str = Form(default=""),
    caller: Caller = Depends(require_startup),
    session: AsyncSession = Depends(get_session),
):
    profile_service.check_document_type(type)
    startup = await _own_startup(session, caller)
    url = profile_service.store_upload(document.filename, await document.read())
    profile_service.attach_document(startup, type, url, name or document.filename or "")
    await session.commit()
    logger.info("Startup %s uploaded %s document", startup.id, type)
    return DocumentUploadResponse(document_url=url, startup=StartupProfile.model_validate(startup))


# ---------------------------------------------------------------------------
# Public profile
# ---------------------------------------------------------------------------

@router.get("/public/{startup_id}")
async def public_profile(
    startup_id: str,
    session: AsyncSession = Depends(get_session),
):
    startup = await session.get(Startup, startup_id)
    if startup is None:
        raise NotFound("Startup not found")
    if startup.profile_visibility == Visibility.PRIVATE.value:
        raise Forbidden("This profile is private")

    data = StartupProfile.model_validate(startup).model_dump(
        by_alias=True, exclude=PRIVATE_FIELDS
    )
    return {"success": True, "startup": data}
