"""
Gig Service - gig creation, search and lifecycle

Creating a gig fans out to two best-effort side effects once the gig row
has committed:

    create_gig → StatsService.record_job_creation (jobs_created += 1)
               → MatchingService.create_matching_job (pending job)

A failure in either side effect is logged; the gig itself stays created.

Status Flow:
    posted / processing / paid / completed / cancelled, any-to-any.
    completed and cancelled block update_gig but not change_gig_status.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, func, or_, select

from pulsehustle.errors import InvalidStateError, NotFoundError, PermissionDeniedError, ValidationError
from pulsehustle.middleware.metrics import record_gig_created
from pulsehustle.models import Gig
from pulsehustle.services.pricing import PriceQuote, split_pay

logger = logging.getLogger(__name__)

DEFAULT_HOURS = 40
DEFAULT_PAY = 600.0
DEFAULT_PER_PAGE = 10

VALID_STATUSES = ("posted", "processing", "paid", "completed", "cancelled")
TERMINAL_STATUSES = ("completed", "cancelled")
PAYMENT_TYPES = ("fixed", "hourly")

# Fields update_gig accepts; pay is handled separately
UPDATABLE_FIELDS = ("title", "description", "hours", "location", "remote", "skills_required", "duration")
MATCHING_FIELDS = ("title", "description", "skills_required")


@dataclass
class GigPage:
    items: List[Gig]
    page: int
    per_page: int
    total: int


def _positive(value: Any, field: str) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
        raise ValidationError(f"{field} must be a positive number")
    return value


def _whole_hours(value: Any) -> int:
    hours = _positive(value, "Hours")
    if hours != int(hours):
        raise ValidationError("Hours must be a whole number")
    return int(hours)


class GigService:
    def __init__(self, gateway, operations, stats, matching, pricing):
        self.gateway = gateway
        self.operations = operations
        self.stats = stats
        self.matching = matching
        self.pricing = pricing

    async def create_gig(self, data: Dict[str, Any], owner_id: Optional[str]) -> Gig:
        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Gig title is required")
        title = title.strip()
        if not owner_id:
            raise ValidationError("User ID is required")

        await self.operations.log("create_gig", "gigs", {"user_id": owner_id}, user_id=owner_id)

        hours = data.get("hours")
        hours = DEFAULT_HOURS if hours is None else _whole_hours(hours)
        pay = data.get("pay")
        pay = DEFAULT_PAY if pay is None else float(_positive(pay, "Pay"))
        payment_type = data.get("payment_type") or "fixed"
        if payment_type not in PAYMENT_TYPES:
            raise ValidationError(f"Invalid payment type: {payment_type}")

        worker_rate, platform_fee = split_pay(pay)
        gig = await self.gateway.insert(
            Gig,
            title=title,
            description=data.get("description") or "",
            hours=hours,
            pay=pay,
            worker_rate=worker_rate,
            platform_fee=platform_fee,
            payment_type=payment_type,
            location=data.get("location") or "remote",
            remote=data.get("remote") is not False,
            user_id=owner_id,
            status="posted",
            skills_required=list(data.get("skills_required") or []),
            duration=data.get("duration") or f"{hours} hours",
        )
        record_gig_created()
        logger.info(f"Created gig {gig.id} for user {owner_id}")

        await self.after_create(gig)
        return gig

    async def after_create(self, gig: Gig) -> None:
        """Post-commit side effects of a new gig: stats and matching."""
        try:
            await self.stats.record_job_creation(gig.id)
        except Exception as e:
            logger.error(f"Failed to record creation of gig {gig.id}: {e}")

        try:
            await self.matching.create_matching_job(gig.id)
        except Exception as e:
            logger.error(f"Failed to enqueue matching for gig {gig.id}: {e}")

    def _filter_clauses(self, filters: Dict[str, Any]) -> list:
        clauses = []

        search = filters.get("search")
        if search:
            pattern = f"%{search}%"
            clauses.append(or_(Gig.title.ilike(pattern), Gig.description.ilike(pattern)))

        if filters.get("payment_type"):
            clauses.append(Gig.payment_type == filters["payment_type"])

        if filters.get("location"):
            clauses.append(Gig.location == filters["location"])

        rate_range = filters.get("rate_range")
        if rate_range is not None and len(rate_range) == 2:
            low, high = rate_range
            clauses.append(and_(Gig.pay >= low, Gig.pay <= high))

        if filters.get("user_id"):
            clauses.append(Gig.user_id == filters["user_id"])

        if filters.get("status"):
            clauses.append(Gig.status == filters["status"])

        if filters.get("remote") is not None:
            clauses.append(Gig.remote == filters["remote"])

        skills = filters.get("skills")
        if skills:
            clauses.append(self.gateway.contains_all(Gig.skills_required, skills))

        return clauses

    async def get_gigs(self, filters: Optional[Dict[str, Any]] = None) -> GigPage:
        """
        Filtered, newest-first page of gigs.

        Filters (all optional, combined with AND):
            search        case-insensitive substring of title or description
            payment_type  exact
            location      exact
            rate_range    (min, max) inclusive on pay
            user_id       owner
            status        exact
            remote        bool
            skills        every skill must be in skills_required
            page          1-indexed (default 1)
            per_page      default 10
        """
        filters = {k: v for k, v in (filters or {}).items() if v is not None}
        await self.operations.log("get_gigs", "gigs", dict(filters))

        page = int(filters.get("page", 1))
        per_page = int(filters.get("per_page", DEFAULT_PER_PAGE))
        if page < 1 or per_page < 1:
            raise ValidationError("page and per_page must be at least 1")

        clauses = self._filter_clauses(filters)

        async with self.gateway.transaction() as uow:
            total = await uow.scalar(select(func.count(Gig.id)).where(*clauses))
            items = await uow.all(
                select(Gig)
                .where(*clauses)
                .order_by(Gig.created_at.desc())
                .offset((page - 1) * per_page)
                .limit(per_page)
            )

        return GigPage(items=items, page=page, per_page=per_page, total=total or 0)

    async def get_gig_by_id(self, gig_id: str) -> Gig:
        await self.operations.log("get_gig", "gigs", {"gig_id": gig_id})

        gig = await self.gateway.get(Gig, gig_id) if gig_id else None
        if not gig:
            raise NotFoundError(f"Gig with ID {gig_id} not found")
        return gig

    async def _owned_gig(self, gig_id: str, user_id: Optional[str]) -> Gig:
        gig = await self.gateway.get(Gig, gig_id) if gig_id else None
        if not gig:
            raise NotFoundError(f"Gig with ID {gig_id} not found")
        if not user_id or gig.user_id != user_id:
            raise PermissionDeniedError("You do not have permission to update this gig")
        return gig

    async def update_gig(self, gig_id: str, updates: Dict[str, Any], user_id: Optional[str]) -> Gig:
        await self.operations.log("update_gig", "gigs", {"gig_id": gig_id, "user_id": user_id}, user_id=user_id)

        gig = await self._owned_gig(gig_id, user_id)
        if gig.status in TERMINAL_STATUSES:
            raise InvalidStateError("Cannot update a completed or cancelled gig")

        values = {
            field: updates[field]
            for field in UPDATABLE_FIELDS
            if updates.get(field) is not None
        }
        if "title" in values and not str(values["title"]).strip():
            raise ValidationError("Gig title is required")
        if "hours" in values:
            values["hours"] = _whole_hours(values["hours"])

        pay = updates.get("pay")
        if pay is not None:
            if gig.status == "paid":
                logger.info(f"Ignoring pay update for paid gig {gig_id}")
            else:
                pay = float(_positive(pay, "Pay"))
                values["pay"] = pay
                values["worker_rate"], values["platform_fee"] = split_pay(pay)

        rematch = any(
            field in values and values[field] != getattr(gig, field)
            for field in MATCHING_FIELDS
        )

        if values:
            gig = await self.gateway.update(Gig, gig_id, **values)

        if rematch:
            try:
                await self.matching.create_matching_job(gig_id)
            except Exception as e:
                logger.error(f"Failed to enqueue matching for gig {gig_id}: {e}")

        return gig

    async def change_gig_status(self, gig_id: str, new_status: str, user_id: Optional[str]) -> Gig:
        await self.operations.log(
            "change_status", "gigs", {"gig_id": gig_id, "status": new_status, "user_id": user_id}, user_id=user_id
        )

        gig = await self._owned_gig(gig_id, user_id)
        if new_status not in VALID_STATUSES:
            raise ValidationError("Invalid status")
        previous = gig.status

        if new_status != "completed":
            gig = await self.gateway.update(Gig, gig_id, status=new_status)
            logger.info(f"Gig {gig_id} status {previous} -> {new_status}")
            return gig

        # Only the caller whose write moves the gig into completed does the accounting
        completed = await self.gateway.update_where(Gig, gig_id, Gig.status != "completed", status="completed")
        if completed is None:
            logger.info(f"Gig {gig_id} already completed")
            return await self.gateway.get(Gig, gig_id) or gig

        logger.info(f"Gig {gig_id} status {previous} -> completed")
        try:
            await self.stats.record_job_completion(gig_id)
        except Exception as e:
            logger.error(f"Failed to record completion of gig {gig_id}: {e}")
        return completed

    async def calculate_gig_price(self, hours: float = DEFAULT_HOURS) -> PriceQuote:
        return await self.pricing.calculate_price(hours)
