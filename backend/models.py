from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, ForeignKey, Text
from datetime import datetime
import json

from backend.database import Base
from backend.constants import DEFAULT_WEEKLY_GOAL_HOURS, TASK_TYPE_WORK


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=True)
    email = Column(String, nullable=False, unique=True, index=True)

    # Streak tracking
    current_streak = Column(Integer, default=0)
    longest_streak = Column(Integer, default=0)        # All-time record, never decreases
    last_task_date = Column(String, nullable=True)     # YYYY-MM-DD of last active day
    streak_history = Column(Text, default="[]")        # JSON array of YYYY-MM-DD, sorted ascending

    # Weekly goal
    progress = Column(Float, default=0.0)              # Weekly progress percentage (0-100)
    weekly_goal = Column(Float, default=DEFAULT_WEEKLY_GOAL_HOURS)  # Hours per week

    # Batch refresher snapshot (JSON)
    weekly_stats_cache = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    def get_streak_history(self) -> list[str]:
        """Decode persisted streak history"""
        if not self.streak_history:
            return []
        try:
            history = json.loads(self.streak_history)
        except (json.JSONDecodeError, TypeError):
            return []
        return [d for d in history if isinstance(d, str)]

    def set_streak_history(self, history: list[str]) -> None:
        self.streak_history = json.dumps(sorted(set(history)))

    def get_weekly_stats_cache(self) -> dict | None:
        if not self.weekly_stats_cache:
            return None
        try:
            return json.loads(self.weekly_stats_cache)
        except (json.JSONDecodeError, TypeError):
            return None


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String, default=TASK_TYPE_WORK)      # work, break
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    completed = Column(Boolean, default=False)
    is_pomodoro_enabled = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.now)


class BreakActivity(Base):
    __tablename__ = "break_activities"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    activity = Column(String, nullable=True)           # e.g. "walk", "stretch"
    duration_minutes = Column(Integer, nullable=True)
    timestamp = Column(DateTime, nullable=True)
    time_stamp = Column(DateTime, nullable=True)       # Legacy alternate-cased field
    created_at = Column(DateTime, default=datetime.now)


class MoodCheckin(Base):
    __tablename__ = "mood_checkins"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    mood = Column(Float, nullable=True)                # 1-10
    stress = Column(Float, nullable=True)              # 1-10
    timestamp = Column(DateTime, nullable=True)
    time_stamp = Column(DateTime, nullable=True)       # Legacy alternate-cased field
    created_at = Column(DateTime, default=datetime.now)
