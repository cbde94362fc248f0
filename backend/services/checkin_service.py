"""
Check-in service.
Records break activities and mood check-ins.
"""
from datetime import datetime, date
from typing import List, Optional
from sqlalchemy.orm import Session

from backend.models import BreakActivity, MoodCheckin
from backend.schemas import BreakCreate, MoodCreate
from backend.repositories.activity_repository import BreakRepository, MoodRepository
from backend.services.date_service import DateService
from backend.exceptions import MoodCheckinNotFoundException


class CheckinService:
    """Service for breaks and mood check-ins"""

    def __init__(self, db: Session):
        self.db = db
        self.break_repo = BreakRepository()
        self.mood_repo = MoodRepository()

    def create_break(self, user_id: int, data: BreakCreate, now: Optional[datetime] = None) -> BreakActivity:
        """Record a break, stamped now unless a time is given"""
        activity = BreakActivity(
            user_id=user_id,
            activity=data.activity,
            duration_minutes=data.duration_minutes,
            timestamp=DateService.to_local_datetime(data.timestamp or now or datetime.now()),
        )
        return self.break_repo.create(self.db, activity)

    def get_breaks(self, user_id: int) -> List[BreakActivity]:
        return self.break_repo.get_all(self.db, user_id)

    def create_mood(self, user_id: int, data: MoodCreate, now: Optional[datetime] = None) -> MoodCheckin:
        """Record a mood check-in, stamped now unless a time is given"""
        checkin = MoodCheckin(
            user_id=user_id,
            mood=data.mood,
            stress=data.stress,
            timestamp=DateService.to_local_datetime(data.timestamp or now or datetime.now()),
        )
        return self.mood_repo.create(self.db, checkin)

    def get_moods(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[MoodCheckin]:
        """Get check-ins, optionally limited to an inclusive date range"""
        start = DateService.get_day_range(start_date)[0] if start_date else None
        end = DateService.get_day_range(end_date)[1] if end_date else None
        return self.mood_repo.get_range(self.db, user_id, start, end)

    def get_mood(self, user_id: int, checkin_id: int) -> MoodCheckin:
        """
        Get a check-in owned by the user.

        Raises:
            MoodCheckinNotFoundException: If it does not exist for this user
        """
        checkin = self.mood_repo.get_by_id(self.db, user_id, checkin_id)
        if not checkin:
            raise MoodCheckinNotFoundException(checkin_id)
        return checkin

    def delete_mood(self, user_id: int, checkin_id: int) -> None:
        checkin = self.get_mood(user_id, checkin_id)
        self.mood_repo.delete(self.db, checkin)
