"""
Dashboard service.
Fetches a user's records, runs the aggregation and streak engine, and writes
the derived streak state back.

There is no read-modify-write isolation: concurrent requests for the same user
may overwrite each other's streak state. Every update is an idempotent union
followed by a full recompute, so the next update repairs any lost write.
"""
import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional
from sqlalchemy.orm import Session

from backend.models import User
from backend.repositories.user_repository import UserRepository
from backend.repositories.task_repository import TaskRepository
from backend.repositories.activity_repository import BreakRepository, MoodRepository
from backend.services.activity_service import ActivityService, WeeklyBuckets, get_field
from backend.services.date_service import DateService, WeeklyWindow
from backend.services.progress_service import ProgressService, TaskProgress
from backend.services.streak_service import StreakService, StreakState
from backend.constants import (
    MOOD_SCORE_SCALE,
    PROGRESS_PERSIST_THRESHOLD,
    WEEKLY_WINDOW_DAYS,
)

logger = logging.getLogger("balance.dashboard")


def _mean(values: Iterable) -> Optional[float]:
    numbers = [
        float(v) for v in values
        if isinstance(v, (int, float)) and not isinstance(v, bool)
    ]
    if not numbers:
        return None
    return round(sum(numbers) / len(numbers), 2)


def serialize_task_progress(progress: Optional[TaskProgress]) -> Optional[dict]:
    """Flatten TaskProgress into the live-timer payload"""
    if progress is None:
        return None
    return {
        "task_id": progress.task_id,
        "type": progress.task_type,
        "start_time": progress.start_time,
        "end_time": progress.end_time,
        "is_pomodoro_enabled": progress.is_pomodoro_enabled,
        "progress": progress.progress,
        "timer_progress": progress.timer_progress,
        "total_duration_ms": progress.total_duration_ms,
        "elapsed_ms": progress.elapsed_ms,
        "remaining_ms": progress.remaining_ms,
        "elapsed_hours": progress.elapsed_hours,
        "total_hours": progress.total_hours,
        "remaining_hours": progress.remaining_hours,
        "is_active": progress.is_active,
        "is_future": progress.is_future,
    }


class DashboardService:
    """Service for weekly dashboard data and streak persistence"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository()
        self.task_repo = TaskRepository()
        self.break_repo = BreakRepository()
        self.mood_repo = MoodRepository()

    def apply_streak_update(
        self,
        user: User,
        now: datetime,
        newly_active_days: Iterable[str]
    ) -> StreakState:
        """Run the streak engine on the user's persisted state and save the result"""
        state = StreakService.update_streak(
            now,
            user.get_streak_history(),
            newly_active_days,
            prior_longest=user.longest_streak or 0,
            prior_last_active=user.last_task_date,
        )
        self.user_repo.save_streak_state(
            self.db,
            user,
            state.history,
            state.current_streak,
            state.longest_streak,
            state.last_active_day,
        )
        logger.info(
            f"Streak for user {user.id}: current={state.current_streak}, "
            f"longest={state.longest_streak}, history={len(state.history)} days"
        )
        return state

    def record_active_day(self, user: User, now: datetime) -> StreakState:
        """Mark today as active for the user (a work task was just recorded)"""
        return self.apply_streak_update(user, now, {DateService.day_key(now)})

    def compute_buckets(self, user_id: int, now: datetime) -> WeeklyBuckets:
        """Fetch the user's recent records and bucket them into the window"""
        window_start = WeeklyWindow(now).start
        tasks = self.task_repo.get_since(self.db, user_id, window_start)
        breaks = self.break_repo.get_since(self.db, user_id, window_start)
        moods = self.mood_repo.get_since(self.db, user_id, window_start)
        logger.debug(
            f"User {user_id}: {len(tasks)} tasks, {len(breaks)} breaks, "
            f"{len(moods)} moods since {window_start}"
        )
        return ActivityService.compute_weekly_buckets(now, tasks, breaks, moods)

    def get_weekly_data(self, user: User, now: datetime) -> dict:
        """
        Weekly chart data plus a streak refresh.

        Days in the window with counted work tasks are folded into the streak
        history before streaks are recomputed and saved.
        """
        buckets = self.compute_buckets(user.id, now)
        state = self.apply_streak_update(user, now, buckets.active_days())
        history = set(state.history)

        return {
            "labels": buckets.labels,
            "day_keys": buckets.day_keys,
            "tasks_per_day": buckets.tasks_per_day,
            "breaks_per_day": buckets.breaks_per_day,
            "mood_avg_per_day": buckets.mood_avg_per_day,
            "mood_counts_per_day": buckets.mood_counts_per_day,
            "current_streak": state.current_streak,
            "longest_streak": state.longest_streak,
            "streak_data": [key in history for key in buckets.day_keys],
        }

    def get_user_stats(self, user: User, now: datetime) -> dict:
        """
        Weekly hours, goal progress and the live task for the profile card.

        Progress is written back only when it moved noticeably.
        """
        week_start = DateService.week_start(now)
        tasks = self.task_repo.get_for_week(self.db, user.id, week_start)
        stats = ProgressService.compute_user_stats(now, tasks, user.weekly_goal)

        if abs((user.progress or 0) - stats.progress_pct) > PROGRESS_PERSIST_THRESHOLD:
            user.progress = stats.progress_pct
            self.user_repo.update(self.db, user)

        moods = self.mood_repo.get_since(self.db, user.id, week_start)
        if moods:
            total = sum(get_field(m, "mood") or 0 for m in moods)
            mood_score = round(total / len(moods) * MOOD_SCORE_SCALE)
        else:
            mood_score = 0

        return {
            "progress": stats.progress_pct,
            "mood_score": mood_score,
            "longest_streak": user.longest_streak or 0,
            "weekly_goal": user.weekly_goal,
            "hours_worked": stats.hours_worked,
            "current_task_in_progress": serialize_task_progress(stats.current_task_in_progress),
            "tasks_completed": stats.tasks_completed,
            "total_tasks": stats.total_tasks,
        }

    def get_weekly_summary(self, user: User, now: datetime) -> dict:
        """Totals over the last 7 x 24 hours (not calendar-aligned)"""
        week_ago = now - timedelta(days=WEEKLY_WINDOW_DAYS)
        tasks_completed = self.task_repo.count_ended_since(self.db, user.id, week_ago)
        breaks = self.break_repo.get_since(self.db, user.id, week_ago)
        moods = self.mood_repo.get_since(self.db, user.id, week_ago)

        return {
            "tasks_completed": tasks_completed,
            "breaks_weekly": len(breaks),
            "mood_checkins": len(moods),
            "average_mood": _mean(get_field(m, "mood") for m in moods),
            "average_stress": _mean(get_field(m, "stress") for m in moods),
        }

    def get_streak(self, user: User) -> dict:
        """Persisted streak state, as last written"""
        return {
            "current_streak": user.current_streak or 0,
            "longest_streak": user.longest_streak or 0,
            "last_active_day": user.last_task_date,
            "history": user.get_streak_history(),
        }

    def refresh_weekly_stats_cache(self, user: User, now: datetime) -> dict:
        """Recompute the user's weekly counts and store them as a snapshot"""
        buckets = self.compute_buckets(user.id, now)
        cache = {
            "total_tasks": buckets.total_tasks,
            "total_breaks": buckets.total_breaks,
            "total_mood_checkins": buckets.total_mood_checkins,
            "tasks_per_day": buckets.tasks_per_day,
            "breaks_per_day": buckets.breaks_per_day,
            "mood_counts_per_day": buckets.mood_counts_per_day,
            "last_updated": now,
        }
        self.user_repo.save_weekly_stats_cache(self.db, user, cache)
        return cache

    def cleanup_streak_history(self, now: datetime) -> int:
        """
        Prune every user's streak history to the retention window.

        Only users whose history actually changed are written.

        Returns:
            Number of users updated
        """
        cleaned = 0
        for user in self.user_repo.get_with_history(self.db):
            history = user.get_streak_history()
            pruned = StreakService.prune_history(now, history)
            if pruned != history:
                user.set_streak_history(pruned)
                self.user_repo.update(self.db, user)
                cleaned += 1
        return cleaned
