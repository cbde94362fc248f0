"""
Streak calculation service.
Maintains the per-user set of active days and recomputes current/longest streaks.

The update is a pure function: union the newly observed days, prune to the
retention window, then recompute from scratch. Applying the same observation
twice gives the same state, and the longest streak never goes down, so
concurrent writers that overwrite each other converge on the next update.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from backend.constants import STREAK_RETENTION_DAYS
from backend.services.date_service import DateService

logger = logging.getLogger("balance.streaks")


@dataclass
class StreakState:
    history: List[str] = field(default_factory=list)  # YYYY-MM-DD, sorted ascending
    current_streak: int = 0
    longest_streak: int = 0
    last_active_day: Optional[str] = None


def _valid_keys(keys: Iterable[str]) -> set[str]:
    valid = set()
    for key in keys:
        if not isinstance(key, str):
            continue
        try:
            day = DateService.parse_day_key(key)
        except ValueError:
            logger.debug(f"Dropping malformed day key {key!r}")
            continue
        valid.add(day.isoformat())  # "2024-6-9" -> "2024-06-09"
    return valid


class StreakService:
    """Service for streak calculations"""

    @staticmethod
    def prune_history(now: datetime, history: Iterable[str]) -> List[str]:
        """
        Deduplicate, drop days older than the retention window and sort.

        The day exactly STREAK_RETENTION_DAYS before today is kept.
        """
        cutoff = DateService.add_days(DateService.day_key(now), -STREAK_RETENTION_DAYS)
        return sorted(key for key in _valid_keys(history) if key >= cutoff)

    @staticmethod
    def current_streak(today_key: str, active_days: set[str]) -> int:
        """Count consecutive active days walking backwards from today"""
        streak = 0
        check = DateService.parse_day_key(today_key)
        while streak < STREAK_RETENTION_DAYS:
            if check.isoformat() not in active_days:
                break
            streak += 1
            check -= timedelta(days=1)
        return streak

    @staticmethod
    def longest_streak(sorted_days: List[str]) -> int:
        """Longest run of consecutive days in a sorted list of day keys"""
        if not sorted_days:
            return 0

        longest = 0
        run = 0
        prev = None
        for key in sorted_days:
            curr = DateService.parse_day_key(key)
            if prev is not None and (curr - prev).days == 1:
                run += 1
            else:
                longest = max(longest, run)
                run = 1
            prev = curr
        return max(longest, run)

    @staticmethod
    def update_streak(
        now: datetime,
        history: Iterable[str],
        newly_active_days: Iterable[str],
        prior_longest: int = 0,
        prior_last_active: Optional[str] = None,
    ) -> StreakState:
        """
        Fold newly observed active days into the history and recompute streaks.

        Args:
            now: Current time (injected)
            history: Persisted streak history (any order, may contain duplicates)
            newly_active_days: Day keys observed as active by this request
            prior_longest: Persisted longest streak
            prior_last_active: Persisted last active day, kept when history is empty

        Returns:
            StreakState with the pruned, sorted history and recomputed streaks
        """
        merged = set(history or []) | set(newly_active_days or [])
        cleaned = StreakService.prune_history(now, merged)
        active = set(cleaned)

        current = StreakService.current_streak(DateService.day_key(now), active)
        longest_in_history = StreakService.longest_streak(cleaned)
        longest = max(prior_longest or 0, longest_in_history, current)

        last_active = cleaned[-1] if cleaned else prior_last_active

        return StreakState(
            history=cleaned,
            current_streak=current,
            longest_streak=longest,
            last_active_day=last_active,
        )
