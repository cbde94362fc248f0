"""
Date calculation service.
Handles local calendar day keys, day arithmetic and the trailing weekly window.

All day keys use the server-local calendar (never UTC-shifted), so two
timestamps on the same local day always map to the same key.
"""
from datetime import datetime, timedelta, date
from typing import List

from backend.constants import WEEKLY_WINDOW_DAYS
from backend.exceptions import InvalidTimestampException

DAY_KEY_FORMAT = "%Y-%m-%d"


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def to_local_datetime(value) -> datetime:
        """
        Interpret a record timestamp as a naive server-local datetime.

        Accepts datetime, date, ISO-8601 strings (trailing "Z" allowed) and
        epoch milliseconds. Aware datetimes are converted to local time.

        Raises:
            InvalidTimestampException: If the value cannot be interpreted
        """
        if value is None or isinstance(value, bool):
            raise InvalidTimestampException(value)

        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, date):
            return datetime.combine(value, datetime.min.time())
        elif isinstance(value, (int, float)):
            try:
                return datetime.fromtimestamp(value / 1000)
            except (OverflowError, OSError, ValueError):
                raise InvalidTimestampException(value)
        elif isinstance(value, str):
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                dt = datetime.fromisoformat(text)
            except ValueError:
                raise InvalidTimestampException(value)
        else:
            raise InvalidTimestampException(value)

        if dt.tzinfo is not None:
            dt = dt.astimezone().replace(tzinfo=None)
        return dt

    @staticmethod
    def day_key(value) -> str:
        """
        Get the local calendar day key (YYYY-MM-DD) for a timestamp.

        Raises:
            InvalidTimestampException: If the value cannot be interpreted
        """
        return DateService.to_local_datetime(value).strftime(DAY_KEY_FORMAT)

    @staticmethod
    def parse_day_key(key: str) -> date:
        """
        Parse a day key back into a date.

        Raises:
            ValueError: If the key is not YYYY-MM-DD
        """
        return datetime.strptime(key, DAY_KEY_FORMAT).date()

    @staticmethod
    def add_days(key: str, days: int) -> str:
        """Shift a day key by a number of calendar days"""
        return (DateService.parse_day_key(key) + timedelta(days=days)).strftime(DAY_KEY_FORMAT)

    @staticmethod
    def start_of_day(value) -> datetime:
        """Local midnight of the day containing the timestamp"""
        dt = DateService.to_local_datetime(value)
        return datetime.combine(dt.date(), datetime.min.time())

    @staticmethod
    def get_day_range(target_date: date) -> tuple[datetime, datetime]:
        """
        Get datetime range for a full day (midnight to midnight).

        Args:
            target_date: Date to get range for

        Returns:
            Tuple of (day_start, day_end) datetimes
        """
        day_start = datetime.combine(target_date, datetime.min.time())
        day_end = datetime.combine(target_date + timedelta(days=1), datetime.min.time())
        return day_start, day_end

    @staticmethod
    def week_start(now: datetime) -> datetime:
        """Local midnight of the first day of the trailing window ending today"""
        today = DateService.start_of_day(now)
        return today - timedelta(days=WEEKLY_WINDOW_DAYS - 1)


class WeeklyWindow:
    """
    Fixed trailing window of day keys ending at (and including) today.

    Index 0 is today - 6 days, index 6 is today. Lookups compare day keys as
    strings, so daylight-saving shifts never move a record to another slot.
    """

    def __init__(self, now: datetime, days: int = WEEKLY_WINDOW_DAYS):
        self.now = now
        today_key = DateService.day_key(now)
        self.start_key = DateService.add_days(today_key, -(days - 1))
        self.day_keys: List[str] = [
            DateService.add_days(self.start_key, offset) for offset in range(days)
        ]
        self._positions = {key: i for i, key in enumerate(self.day_keys)}

    def __len__(self) -> int:
        return len(self.day_keys)

    @property
    def today_key(self) -> str:
        return self.day_keys[-1]

    @property
    def start(self) -> datetime:
        """Local midnight at the start of the window"""
        return datetime.combine(
            DateService.parse_day_key(self.start_key), datetime.min.time()
        )

    def index_for(self, value) -> int:
        """
        Map a timestamp to its window slot.

        Returns:
            Index in [0, days - 1], or -1 if the timestamp is missing, invalid
            or outside the window
        """
        if value is None:
            return -1
        try:
            key = DateService.day_key(value)
        except InvalidTimestampException:
            return -1
        return self._positions.get(key, -1)

    def labels(self) -> List[str]:
        """Chart labels like "Mon 6/10" (weekday + month/day)"""
        result = []
        for key in self.day_keys:
            d = DateService.parse_day_key(key)
            result.append(f"{d.strftime('%a')} {d.month}/{d.day}")
        return result
