from fastapi import APIRouter, Depends, Query
from typing import Optional

from pulsehustle.api.deps import get_current_user_id, respond
from pulsehustle.auth import require_api_key
from pulsehustle.platform import Platform, get_platform
from pulsehustle.schemas import (
    ApplicationResponse,
    ApplicationStatusUpdate,
    ProfileResponse,
    ProfileUpdate,
)

router = APIRouter()


@router.get("")
async def get_profile(
    user_id: Optional[str] = Depends(get_current_user_id),
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.profiles.get_profile, user_id, label="Profile retrieval", context={"user_id": user_id}
    )
    return respond(result, ProfileResponse)


@router.put("", dependencies=[Depends(require_api_key)])
async def update_profile(
    update: ProfileUpdate,
    user_id: Optional[str] = Depends(get_current_user_id),
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.profiles.update_profile,
        user_id,
        update.model_dump(exclude_none=True),
        label="Profile update",
        context={"user_id": user_id},
        message="Profile updated successfully",
    )
    return respond(result, ProfileResponse)


@router.get("/search")
async def get_profiles_by_skills(
    skills: Optional[list[str]] = Query(None),
    limit: int = Query(10, ge=1, le=100),
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.profiles.get_profiles_by_skills, skills, limit, label="Profile search", context={"skills": skills}
    )
    return respond(result, list[ProfileResponse])


@router.get("/applications")
async def get_user_applications(
    user_id: Optional[str] = Depends(get_current_user_id),
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.profiles.get_user_applications,
        user_id,
        label="Application retrieval",
        context={"user_id": user_id},
    )
    return respond(result, list[ApplicationResponse])


@router.patch("/applications/{application_id}/status", dependencies=[Depends(require_api_key)])
async def update_application_status(
    application_id: str,
    request: ApplicationStatusUpdate,
    user_id: Optional[str] = Depends(get_current_user_id),
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.profiles.update_application_status,
        application_id,
        request.status,
        user_id,
        label="Application update",
        context={"application_id": application_id, "user_id": user_id},
        message=f"Application status changed to {request.status}",
    )
    return respond(result, ApplicationResponse)


@router.get("/{profile_id}")
async def get_public_profile(profile_id: str, platform: Platform = Depends(get_platform)):
    result = await platform.operations.run(
        platform.profiles.get_profile, profile_id, label="Profile retrieval", context={"user_id": profile_id}
    )
    return respond(result, ProfileResponse)
