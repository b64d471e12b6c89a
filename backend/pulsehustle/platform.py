"""
Service wiring

One ``Platform`` holds the change feed, the persistence gateway and every
domain service built on top of them. The API gets the process-wide
instance through ``get_platform()``; tests and the Celery worker build
their own around a different session factory.
"""

import random
from functools import lru_cache
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from pulsehustle.config import Settings, get_settings
from pulsehustle.database import async_session
from pulsehustle.feed import ChangeFeed
from pulsehustle.gateway import PersistenceGateway
from pulsehustle.services.auth import AuthService
from pulsehustle.services.cache import MatchCache
from pulsehustle.services.contact import ContactService
from pulsehustle.services.gigs import GigService
from pulsehustle.services.matcher import get_scorer
from pulsehustle.services.matching import MatchingDispatcher, MatchingService
from pulsehustle.services.operations import Operations
from pulsehustle.services.payments import PaymentService
from pulsehustle.services.pricing import PricingService
from pulsehustle.services.profiles import ProfileService
from pulsehustle.services.realtime import RealtimeRelay
from pulsehustle.services.stats import StatsService


class Platform:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        cache: Optional[MatchCache] = None,
        dispatch_mode: Optional[str] = None,
    ):
        settings = settings or get_settings()
        self.settings = settings

        if cache is None and settings.cache_enabled:
            cache = MatchCache(settings.redis_url)
        self.cache = cache

        self.feed = ChangeFeed()
        self.gateway = PersistenceGateway(session_factory, self.feed)
        self.operations = Operations(self.gateway)
        self.dispatcher = MatchingDispatcher(
            dispatch_mode or settings.matching_dispatch,
            settings.matching_delay_seconds,
        )

        self.pricing = PricingService(self.operations, rng)
        self.stats = StatsService(self.gateway, self.operations)
        self.matching = MatchingService(
            self.gateway,
            self.operations,
            get_scorer(settings.matching_scorer, rng),
            self.dispatcher,
            top_k=settings.matching_top_k,
            cache=self.cache,
        )
        self.gigs = GigService(self.gateway, self.operations, self.stats, self.matching, self.pricing)
        self.payments = PaymentService(
            self.gateway,
            self.operations,
            provider_url=settings.payment_provider_url,
            recipient_handle=settings.payment_recipient_handle,
            gig_price=settings.gig_price,
            gigs=self.gigs,
        )
        self.contact = ContactService(self.gateway, self.operations)
        self.profiles = ProfileService(self.gateway, self.operations)
        self.auth = AuthService(
            self.gateway,
            self.operations,
            secret_key=settings.secret_key,
            token_expire_days=settings.token_expire_days,
        )
        self.realtime = RealtimeRelay(self.gateway, self.operations)

    async def close(self) -> None:
        """Finish in-flight background matching and release the cache connection."""
        await self.dispatcher.drain()
        if self.cache is not None:
            await self.cache.close()


@lru_cache
def get_platform() -> Platform:
    return Platform(async_session)
