"""
Background Scheduler
====================
Runs one recurring job:

  cleanup_cache — every CACHE_CLEANUP_MINUTES (default 10)
      • evicts every expired entry from the shared HolidayCache
      • reads already evict lazily; this bounds memory for keys
        that are never requested again
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
import logging
import os

from calendar_app.services.cache import HolidayCache

logger = logging.getLogger(__name__)

CLEANUP_MINUTES = int(os.getenv("CACHE_CLEANUP_MINUTES", "10"))


def start_scheduler(cache: HolidayCache, minutes: int = CLEANUP_MINUTES) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        cleanup_cache,
        trigger=IntervalTrigger(minutes=minutes),
        args=[cache],
        id="cleanup_cache",
        name=f"Evict expired cache entries (every {minutes} min)",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(f"Scheduler started — cache cleanup: every {minutes} min")
    return scheduler


def stop_scheduler(scheduler: AsyncIOScheduler):
    scheduler.shutdown(wait=False)
    logger.info("Scheduler stopped.")


# ──────────────────────────────────────────────
# Job: cache cleanup
# ──────────────────────────────────────────────

async def cleanup_cache(cache: HolidayCache) -> int:
    try:
        removed = cache.cleanup()
    except Exception as e:
        logger.error(f"Cache cleanup failed: {e}", exc_info=True)
        return 0
    stats = cache.stats()
    logger.info(
        f"Cache cleanup done — removed {removed}, "
        f"{stats['valid_entries']} valid / {stats['total_entries']} total entries."
    )
    return removed
