"""
Background scheduler for periodic dashboard maintenance
Handles:
- Hourly refresh of every user's weekly stats cache
- Daily pruning of streak history to the retention window
"""

import logging
from datetime import datetime
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from backend.database import SessionLocal
from backend.repositories.user_repository import UserRepository
from backend.services.dashboard_service import DashboardService
from backend.constants import (
    CACHE_REFRESH_MINUTE,
    STREAK_CLEANUP_HOUR,
    STREAK_CLEANUP_MINUTE,
)

logger = logging.getLogger("balance.scheduler")

# Create scheduler instance
scheduler = AsyncIOScheduler()


def refresh_all_weekly_caches(db, now: datetime) -> tuple[int, int]:
    """
    Recompute the weekly stats cache for every user.

    A failure for one user is logged and the loop moves on.

    Returns:
        Tuple of (updated, total)
    """
    service = DashboardService(db)
    user_repo = UserRepository()
    user_ids = user_repo.get_all_ids(db)
    updated = 0

    for user_id in user_ids:
        try:
            user = user_repo.get_by_id(db, user_id)
            if user is None:
                continue
            service.refresh_weekly_stats_cache(user, now)
            updated += 1
        except Exception as e:
            db.rollback()
            logger.error(f"Weekly cache update failed for user {user_id}: {e}")

    return updated, len(user_ids)


async def run_weekly_stats_refresh():
    """Task: refresh weekly stats cache for all users"""
    db = SessionLocal()
    try:
        logger.info("Starting weekly stats cache update")
        updated, total = refresh_all_weekly_caches(db, datetime.now())
        logger.info(f"Weekly stats cache updated for {updated}/{total} users")
    except Exception as e:
        logger.error(f"Scheduler Error (Weekly Stats): {e}")
    finally:
        db.close()


async def run_streak_cleanup():
    """Task: prune streak history older than the retention window"""
    db = SessionLocal()
    try:
        logger.info("Starting streak history cleanup")
        cleaned = DashboardService(db).cleanup_streak_history(datetime.now())
        logger.info(f"Cleaned streak history for {cleaned} users")
    except Exception as e:
        logger.error(f"Scheduler Error (Streak Cleanup): {e}")
    finally:
        db.close()


def start_scheduler():
    """Start the background scheduler"""
    if not scheduler.running:
        scheduler.add_job(
            run_weekly_stats_refresh,
            CronTrigger(minute=CACHE_REFRESH_MINUTE),
            id='weekly_stats_refresh',
            replace_existing=True
        )

        scheduler.add_job(
            run_streak_cleanup,
            CronTrigger(hour=STREAK_CLEANUP_HOUR, minute=STREAK_CLEANUP_MINUTE),
            id='streak_cleanup',
            replace_existing=True
        )

        # Warm the cache once on startup
        scheduler.add_job(
            run_weekly_stats_refresh,
            id='weekly_stats_initial',
            replace_existing=True
        )

        scheduler.start()
        logger.info(">>> APScheduler STARTED <<<")
        logger.info(f"Scheduled jobs: {[job.id for job in scheduler.get_jobs()]}")


def stop_scheduler():
    """Stop the background scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("APScheduler stopped")
