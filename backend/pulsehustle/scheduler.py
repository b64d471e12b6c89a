"""
Background Scheduler - periodic platform stats refresh

The event-driven counters in the ``stats`` row are kept honest by a full
recompute from gigs and completed payments every STATS_REFRESH_MINUTES.
"""

import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pulsehustle.config import get_settings
from pulsehustle.platform import get_platform

logger = logging.getLogger(__name__)

settings = get_settings()
scheduler = AsyncIOScheduler()


async def refresh_platform_stats():
    """Recompute the stats row; failures are logged and retried next interval."""
    try:
        stats = await get_platform().stats.get_platform_stats()
    except Exception as e:
        logger.error(f"Stats refresh failed: {e}")
        return None

    logger.info(
        f"Stats refreshed: {stats.jobs_created} created, "
        f"{stats.jobs_completed} completed, {stats.total_earnings:.2f} earned"
    )
    return stats


def start_scheduler():
    scheduler.add_job(
        refresh_platform_stats,
        trigger=IntervalTrigger(minutes=settings.stats_refresh_minutes),
        id="refresh_stats",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(f"Scheduler started: refreshing stats every {settings.stats_refresh_minutes} minutes")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()
