from fastapi import APIRouter, Depends, Query
from typing import Optional

from pulsehustle.api.deps import get_current_user_id, respond
from pulsehustle.auth import require_api_key
from pulsehustle.platform import Platform, get_platform
from pulsehustle.schemas import (
    ApplicationCreate,
    ApplicationResponse,
    GigCreate,
    GigListResponse,
    GigMatchesResponse,
    GigResponse,
    GigStatusUpdate,
    GigUpdate,
    SocialShareCreate,
    SocialShareResponse,
)

router = APIRouter()


@router.post("", dependencies=[Depends(require_api_key)])
async def create_gig(
    request: GigCreate,
    user_id: Optional[str] = Depends(get_current_user_id),
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.gigs.create_gig,
        request.model_dump(exclude_none=True),
        user_id,
        label="Gig creation",
        context={"user_id": user_id},
        message="Gig created successfully",
    )
    return respond(result, GigResponse, status_code=201)


@router.get("")
async def list_gigs(
    search: Optional[str] = Query(None),
    payment_type: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    min_pay: Optional[float] = Query(None),
    max_pay: Optional[float] = Query(None),
    user_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    remote: Optional[bool] = Query(None),
    skills: Optional[list[str]] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    platform: Platform = Depends(get_platform),
):
    filters = {
        "search": search,
        "payment_type": payment_type,
        "location": location,
        "user_id": user_id,
        "status": status,
        "remote": remote,
        "skills": skills,
        "page": page,
        "per_page": per_page,
    }
    # The pay range applies only when both bounds are given
    if min_pay is not None and max_pay is not None:
        filters["rate_range"] = [min_pay, max_pay]

    result = await platform.operations.run(
        platform.gigs.get_gigs, filters, label="Gig retrieval", context={"filters": filters}
    )
    if result.success:
        page_data = result.data
        result.data = GigListResponse(
            gigs=[GigResponse.model_validate(gig) for gig in page_data.items],
            total=page_data.total,
            page=page_data.page,
            per_page=page_data.per_page,
        )
    return respond(result, GigListResponse)


@router.get("/{gig_id}")
async def get_gig(gig_id: str, platform: Platform = Depends(get_platform)):
    result = await platform.operations.run(
        platform.gigs.get_gig_by_id, gig_id, label="Gig retrieval", context={"gig_id": gig_id}
    )
    return respond(result, GigResponse)


@router.put("/{gig_id}", dependencies=[Depends(require_api_key)])
async def update_gig(
    gig_id: str,
    request: GigUpdate,
    user_id: Optional[str] = Depends(get_current_user_id),
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.gigs.update_gig,
        gig_id,
        request.model_dump(exclude_none=True),
        user_id,
        label="Gig update",
        context={"gig_id": gig_id, "user_id": user_id},
        message="Gig updated successfully",
    )
    return respond(result, GigResponse)


@router.patch("/{gig_id}/status", dependencies=[Depends(require_api_key)])
async def change_gig_status(
    gig_id: str,
    request: GigStatusUpdate,
    user_id: Optional[str] = Depends(get_current_user_id),
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.gigs.change_gig_status,
        gig_id,
        request.status,
        user_id,
        label="Status change",
        context={"gig_id": gig_id, "status": request.status, "user_id": user_id},
        message=f"Gig status changed to {request.status}",
    )
    return respond(result, GigResponse)


@router.get("/{gig_id}/matches")
async def get_gig_matches(gig_id: str, platform: Platform = Depends(get_platform)):
    result = await platform.operations.run(
        platform.matching.get_gig_matches, gig_id, label="Match retrieval", context={"gig_id": gig_id}
    )
    if result.success:
        result.message = result.data["message"]
    return respond(result, GigMatchesResponse)


@router.post("/{gig_id}/applications", dependencies=[Depends(require_api_key)])
async def apply_for_gig(
    gig_id: str,
    request: ApplicationCreate,
    user_id: Optional[str] = Depends(get_current_user_id),
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.profiles.apply_for_gig,
        gig_id,
        user_id,
        request.model_dump(exclude_none=True),
        label="Application",
        context={"gig_id": gig_id, "user_id": user_id},
        message="Application submitted successfully",
    )
    return respond(result, ApplicationResponse, status_code=201)


@router.post("/{gig_id}/shares", dependencies=[Depends(require_api_key)])
async def record_share(
    gig_id: str,
    request: SocialShareCreate,
    user_id: Optional[str] = Depends(get_current_user_id),
    platform: Platform = Depends(get_platform),
):
    result = await platform.operations.run(
        platform.stats.record_social_share,
        gig_id,
        request.platform,
        user_id,
        label="Share recording",
        context={"gig_id": gig_id, "platform": request.platform},
    )
    return respond(result, SocialShareResponse, status_code=201)
