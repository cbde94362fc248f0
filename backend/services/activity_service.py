"""
Activity aggregation service.
Buckets tasks, breaks and mood check-ins into the trailing 7-day window.

Records may be ORM rows or plain mappings from legacy exports; field names are
looked up in snake_case first, then camelCase.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence

from backend.constants import (
    TASK_TYPE_WORK,
    TASK_DAY_FIELDS,
    BREAK_DAY_FIELDS,
    MOOD_DAY_FIELDS,
)
from backend.exceptions import InvalidTimestampException
from backend.services.date_service import DateService, WeeklyWindow

logger = logging.getLogger("balance.activity")


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from an ORM row or mapping, accepting the camelCase alias"""
    for key in (name, _camel_case(name)):
        if isinstance(record, dict):
            value = record.get(key)
        else:
            value = getattr(record, key, None)
        if value is not None:
            return value
    return default


def resolve_timestamp(record: Any, fields: Sequence[str]) -> Optional[datetime]:
    """
    Resolve a record's timestamp using an ordered fallback list.

    The first non-empty field wins. A malformed value is skipped (not an
    error for the caller), and None is returned when nothing usable exists.
    """
    for name in fields:
        value = get_field(record, name)
        if value is None or value == "":
            continue
        try:
            return DateService.to_local_datetime(value)
        except InvalidTimestampException as e:
            logger.debug(f"Skipping field {name}: {e}")
            return None
    return None


def is_work_task(task: Any) -> bool:
    return get_field(task, "type") == TASK_TYPE_WORK


def _mood_value(checkin: Any) -> Optional[float]:
    value = get_field(checkin, "mood")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value != value:  # NaN
        return None
    return float(value)


@dataclass
class WeeklyBuckets:
    """Per-day breakdown aligned to a WeeklyWindow"""
    labels: List[str]
    day_keys: List[str]
    tasks_per_day: List[int]
    breaks_per_day: List[int]
    mood_avg_per_day: List[Optional[float]]
    mood_counts_per_day: List[int]

    @property
    def total_tasks(self) -> int:
        return sum(self.tasks_per_day)

    @property
    def total_breaks(self) -> int:
        return sum(self.breaks_per_day)

    @property
    def total_mood_checkins(self) -> int:
        return sum(self.mood_counts_per_day)

    def active_days(self) -> set[str]:
        """Day keys that had at least one counted work task"""
        return {
            key for key, count in zip(self.day_keys, self.tasks_per_day) if count > 0
        }


class ActivityService:
    """Service for weekly activity bucketing"""

    @staticmethod
    def task_index(window: WeeklyWindow, task: Any) -> int:
        """Window slot for a task, or -1 if it does not count"""
        if not is_work_task(task):
            return -1
        if not get_field(task, "completed", False):
            return -1
        return window.index_for(resolve_timestamp(task, TASK_DAY_FIELDS))

    @staticmethod
    def count_tasks(window: WeeklyWindow, tasks: Iterable[Any]) -> List[int]:
        counts = [0] * len(window)
        for task in tasks:
            idx = ActivityService.task_index(window, task)
            if idx >= 0:
                counts[idx] += 1
        return counts

    @staticmethod
    def count_breaks(window: WeeklyWindow, breaks: Iterable[Any]) -> List[int]:
        counts = [0] * len(window)
        for activity in breaks:
            idx = window.index_for(resolve_timestamp(activity, BREAK_DAY_FIELDS))
            if idx >= 0:
                counts[idx] += 1
        return counts

    @staticmethod
    def aggregate_moods(
        window: WeeklyWindow, moods: Iterable[Any]
    ) -> tuple[List[Optional[float]], List[int]]:
        """
        Count check-ins per day and average their mood values.

        Every check-in in the window is counted, with or without a mood value;
        the sum of numeric moods is divided by that count. Days without
        check-ins average to None.
        """
        counts = [0] * len(window)
        sums = [0.0] * len(window)
        for checkin in moods:
            idx = window.index_for(resolve_timestamp(checkin, MOOD_DAY_FIELDS))
            if idx < 0:
                continue
            counts[idx] += 1
            mood = _mood_value(checkin)
            if mood is not None:
                sums[idx] += mood

        averages = [
            round(sums[i] / counts[i], 2) if counts[i] > 0 else None
            for i in range(len(window))
        ]
        return averages, counts

    @staticmethod
    def compute_weekly_buckets(
        now: datetime,
        tasks: Iterable[Any],
        breaks: Iterable[Any],
        moods: Iterable[Any],
    ) -> WeeklyBuckets:
        """
        Build the 7-day breakdown of tasks, breaks and moods ending today.

        Args:
            now: Current time (injected)
            tasks: Task records, only completed work tasks are counted
            breaks: Break activity records
            moods: Mood check-in records

        Returns:
            WeeklyBuckets aligned to the window (index 6 = today)
        """
        window = WeeklyWindow(now)

        tasks_per_day = ActivityService.count_tasks(window, tasks)
        breaks_per_day = ActivityService.count_breaks(window, breaks)
        mood_avg_per_day, mood_counts = ActivityService.aggregate_moods(window, moods)

        logger.debug(
            f"Window {window.start_key}..{window.today_key}: "
            f"tasks={tasks_per_day} breaks={breaks_per_day} moods={mood_counts}"
        )

        return WeeklyBuckets(
            labels=window.labels(),
            day_keys=list(window.day_keys),
            tasks_per_day=tasks_per_day,
            breaks_per_day=breaks_per_day,
            mood_avg_per_day=mood_avg_per_day,
            mood_counts_per_day=mood_counts,
        )
