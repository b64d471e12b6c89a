"""
Profile Service - worker profiles and gig applications

Profiles are keyed by the auth user id. ``update_profile`` is an upsert
restricted to the public profile fields; the id and timestamps are never
taken from caller input.

Applications: one per (gig, applicant). Only the gig owner may move an
application between submitted / reviewing / accepted / rejected.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from pulsehustle.errors import (
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    UpstreamError,
    ValidationError,
)
from pulsehustle.models import Application, Gig, Profile

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("username", "full_name", "bio", "avatar_url", "website", "location", "skills", "hourly_rate")
APPLICATION_STATUSES = ("submitted", "reviewing", "accepted", "rejected")
GIG_SUMMARY_FIELDS = ("id", "title", "description", "pay", "status")


class ProfileService:
    def __init__(self, gateway, operations):
        self.gateway = gateway
        self.operations = operations

    async def get_profile(self, user_id: Optional[str]) -> Profile:
        if not user_id:
            raise ValidationError("User ID is required")

        await self.operations.log("get_profile", "profiles", {"user_id": user_id}, user_id=user_id)

        profile = await self.gateway.get(Profile, user_id)
        if not profile:
            raise NotFoundError(f"Profile for user {user_id} not found")
        return profile

    async def update_profile(self, user_id: Optional[str], data: Dict[str, Any]) -> Profile:
        if not user_id:
            raise ValidationError("User ID is required")

        await self.operations.log("update_profile", "profiles", {"user_id": user_id}, user_id=user_id)

        values = {field: data[field] for field in PROFILE_FIELDS if data.get(field) is not None}
        if "skills" in values:
            values["skills"] = list(values["skills"])

        async with self.gateway.transaction() as uow:
            if await uow.get(Profile, user_id) is None:
                return await uow.insert(Profile, id=user_id, **values)
            return await uow.update(Profile, user_id, **values)

    async def get_profiles_by_skills(self, skills: Optional[List[str]], limit: int = 10) -> List[Profile]:
        """Profiles offering every one of ``skills``."""
        await self.operations.log("get_by_skills", "profiles", {"skills": list(skills or [])})

        statement = select(Profile)
        if skills:
            statement = statement.where(self.gateway.contains_all(Profile.skills, skills))
        return await self.gateway.all(statement.order_by(Profile.created_at.asc()).limit(limit))

    async def apply_for_gig(self, gig_id: str, user_id: Optional[str], data: Optional[Dict[str, Any]] = None) -> Application:
        if not user_id:
            raise ValidationError("User ID is required")

        await self.operations.log("apply_gig", "applications", {"gig_id": gig_id, "user_id": user_id}, user_id=user_id)

        gig = await self.gateway.get(Gig, gig_id) if gig_id else None
        if not gig:
            raise NotFoundError(f"Gig with ID {gig_id} not found")

        existing = await self.gateway.first(
            select(Application).where(Application.gig_id == gig_id, Application.user_id == user_id)
        )
        if existing:
            raise InvalidStateError("You have already applied for this gig")

        try:
            return await self.gateway.insert(
                Application,
                gig_id=gig_id,
                user_id=user_id,
                cover_letter=(data or {}).get("cover_letter") or "",
                status="submitted",
            )
        except UpstreamError as exc:
            # Lost a race with a concurrent application from the same user
            if isinstance(exc.__cause__, IntegrityError):
                raise InvalidStateError("You have already applied for this gig") from exc
            raise

    async def get_user_applications(self, user_id: Optional[str]) -> List[Dict[str, Any]]:
        """The user's applications, newest first, each with a ``gig`` summary."""
        if not user_id:
            raise ValidationError("User ID is required")

        await self.operations.log("get_applications", "applications", {"user_id": user_id}, user_id=user_id)

        async with self.gateway.transaction() as uow:
            result = await uow.session.execute(
                select(Application, Gig)
                .join(Gig, Gig.id == Application.gig_id)
                .where(Application.user_id == user_id)
                .order_by(Application.created_at.desc())
            )
            rows = result.all()

        applications = []
        for application, gig in rows:
            entry = application.as_dict()
            entry["gig"] = {field: getattr(gig, field) for field in GIG_SUMMARY_FIELDS}
            applications.append(entry)
        return applications

    async def update_application_status(self, application_id: str, status: str, user_id: Optional[str]) -> Application:
        if status not in APPLICATION_STATUSES:
            raise ValidationError(f"Invalid application status: {status}")

        application = await self.gateway.get(Application, application_id) if application_id else None
        if not application:
            raise NotFoundError(f"Application with ID {application_id} not found")

        gig = await self.gateway.get(Gig, application.gig_id)
        if not gig or not user_id or gig.user_id != user_id:
            raise PermissionDeniedError("Only the gig owner can update this application")

        application = await self.gateway.update(Application, application_id, status=status)
        await self.operations.log(
            "update_application",
            "applications",
            {"application_id": application_id, "status": status},
            user_id=user_id,
        )
        return application
