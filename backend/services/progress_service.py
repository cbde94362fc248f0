"""
Task progress and weekly hours service.
Derives real-time progress for a timed task and the hours worked this week.
"""
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Optional

from backend.constants import DEFAULT_WEEKLY_GOAL_HOURS, MS_PER_HOUR
from backend.services.activity_service import get_field, is_work_task, resolve_timestamp
from backend.services.date_service import DateService

STATE_COMPLETED = "completed"
STATE_ACTIVE = "active"
STATE_FUTURE = "future"


@dataclass
class TaskProgress:
    task_id: Any
    state: str
    start_time: datetime
    end_time: datetime
    total_duration_ms: int
    elapsed_ms: int
    remaining_ms: int
    progress: float          # 0-100, unrounded
    hours_worked: float      # Only non-zero for active tasks
    task_type: Optional[str] = None
    is_pomodoro_enabled: bool = False

    @property
    def is_active(self) -> bool:
        return self.state == STATE_ACTIVE

    @property
    def is_future(self) -> bool:
        return self.state == STATE_FUTURE

    @property
    def timer_progress(self) -> float:
        return round(self.progress, 2)

    @property
    def elapsed_hours(self) -> float:
        return round(self.elapsed_ms / MS_PER_HOUR, 2)

    @property
    def total_hours(self) -> float:
        return round(self.total_duration_ms / MS_PER_HOUR, 2)

    @property
    def remaining_hours(self) -> float:
        return round(self.remaining_ms / MS_PER_HOUR, 2)


@dataclass
class UserStats:
    hours_worked: float
    progress_pct: int
    current_task_in_progress: Optional[TaskProgress]
    tasks_completed: int
    total_tasks: int


def _ms_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() * 1000)


def _interval(task: Any) -> Optional[tuple[datetime, datetime]]:
    start = resolve_timestamp(task, ("start_time",))
    end = resolve_timestamp(task, ("end_time",))
    if start is None or end is None:
        return None
    return start, end


class ProgressService:
    """Service for task progress and weekly hours"""

    @staticmethod
    def task_progress(task: Any, now: datetime) -> Optional[TaskProgress]:
        """
        Compute progress of a single timed task relative to now.

        - end <= now: completed, full duration elapsed
        - start <= now < end: active, progress = elapsed / total
        - now < start: future, nothing elapsed

        A zero-length (or inverted) interval counts as already complete.

        Returns:
            TaskProgress, or None when the task has no usable interval
        """
        interval = _interval(task)
        if interval is None:
            return None
        start, end = interval
        now = DateService.to_local_datetime(now)

        total_ms = max(0, _ms_between(start, end))

        if end <= now or total_ms == 0:
            state = STATE_COMPLETED
            elapsed_ms = total_ms
            remaining_ms = 0
            progress = 100.0
            hours_worked = 0.0
        elif start <= now:
            state = STATE_ACTIVE
            elapsed_ms = _ms_between(start, now)
            remaining_ms = _ms_between(now, end)
            progress = min(100.0, elapsed_ms / total_ms * 100)
            hours_worked = elapsed_ms / MS_PER_HOUR
        else:
            state = STATE_FUTURE
            elapsed_ms = 0
            remaining_ms = _ms_between(now, end)
            progress = 0.0
            hours_worked = 0.0

        return TaskProgress(
            task_id=get_field(task, "id"),
            state=state,
            start_time=start,
            end_time=end,
            total_duration_ms=total_ms,
            elapsed_ms=elapsed_ms,
            remaining_ms=max(0, remaining_ms),
            progress=progress,
            hours_worked=hours_worked,
            task_type=get_field(task, "type"),
            is_pomodoro_enabled=bool(get_field(task, "is_pomodoro_enabled", False)),
        )

    @staticmethod
    def task_hours_in_week(task: Any, week_start: datetime, now: datetime) -> float:
        """
        Hours a single task contributes to the week starting at week_start.

        Completed tasks started in the week count fully, tasks that began
        before the week count from week_start, active tasks count what has
        elapsed so far and future tasks count nothing.
        """
        progress = ProgressService.task_progress(task, now)
        if progress is None:
            return 0.0

        if progress.state == STATE_ACTIVE:
            return progress.hours_worked
        if progress.state == STATE_FUTURE:
            return 0.0

        if progress.start_time >= week_start:
            return progress.total_duration_ms / MS_PER_HOUR
        if progress.end_time >= week_start:
            return max(0.0, _ms_between(week_start, progress.end_time) / MS_PER_HOUR)
        return 0.0

    @staticmethod
    def weekly_hours(tasks: Iterable[Any], now: datetime) -> float:
        """Total work hours in the trailing week, rounded to 2 decimals"""
        now = DateService.to_local_datetime(now)
        week_start = DateService.week_start(now)
        total = sum(
            ProgressService.task_hours_in_week(t, week_start, now)
            for t in tasks
            if is_work_task(t)
        )
        return round(total, 2)

    @staticmethod
    def weekly_progress(hours: float, weekly_goal_hours: Optional[float]) -> int:
        """Weekly goal completion percent, clamped to 0-100"""
        goal = weekly_goal_hours if weekly_goal_hours and weekly_goal_hours > 0 else DEFAULT_WEEKLY_GOAL_HOURS
        return max(0, min(100, math.floor(hours / goal * 100 + 0.5)))

    @staticmethod
    def current_task(tasks: Iterable[Any], now: datetime) -> Optional[TaskProgress]:
        """
        Pick the task to show in the live timer.

        The newest-created work task that has not ended yet (active or future).
        """
        candidates: List[tuple[datetime, int, TaskProgress]] = []
        for order, task in enumerate(tasks):
            if not is_work_task(task):
                continue
            progress = ProgressService.task_progress(task, now)
            if progress is None or progress.state == STATE_COMPLETED:
                continue
            created = resolve_timestamp(task, ("created_at", "start_time")) or progress.start_time
            candidates.append((created, -order, progress))

        if not candidates:
            return None
        candidates.sort(key=lambda c: (c[0], c[1]), reverse=True)
        return candidates[0][2]

    @staticmethod
    def compute_user_stats(
        now: datetime,
        tasks: Iterable[Any],
        weekly_goal_hours: Optional[float] = DEFAULT_WEEKLY_GOAL_HOURS,
    ) -> UserStats:
        """
        Aggregate weekly hours, goal progress and task counts for one user.

        Args:
            now: Current time (injected)
            tasks: The user's tasks intersecting the trailing week
            weekly_goal_hours: Weekly goal; non-positive values use the default

        Returns:
            UserStats
        """
        now = DateService.to_local_datetime(now)
        tasks = list(tasks)
        work_tasks = [t for t in tasks if is_work_task(t)]

        hours = ProgressService.weekly_hours(work_tasks, now)
        progress_pct = ProgressService.weekly_progress(hours, weekly_goal_hours)

        tasks_completed = 0
        for task in work_tasks:
            interval = _interval(task)
            if interval is not None and interval[1] <= now:
                tasks_completed += 1

        return UserStats(
            hours_worked=hours,
            progress_pct=progress_pct,
            current_task_in_progress=ProgressService.current_task(work_tasks, now),
            tasks_completed=tasks_completed,
            total_tasks=len(work_tasks),
        )
