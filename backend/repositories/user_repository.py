"""
User repository - Data access layer for User model.
Handles reads and writes of per-user streak state and caches.
"""
import json
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from backend.models import User


class UserRepository:
    """Repository for User data access"""

    @staticmethod
    def get_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email"""
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def get_all_ids(db: Session) -> List[int]:
        """Get IDs of all users"""
        return [row[0] for row in db.query(User.id).order_by(User.id).all()]

    @staticmethod
    def get_with_history(db: Session) -> List[User]:
        """Get users that have a non-empty streak history"""
        return db.query(User).filter(
            User.streak_history.isnot(None),
            User.streak_history != "[]",
            User.streak_history != ""
        ).all()

    @staticmethod
    def create(db: Session, user: User) -> User:
        """Create new user"""
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def update(db: Session, user: User) -> User:
        """Update existing user"""
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def save_streak_state(
        db: Session,
        user: User,
        history: List[str],
        current_streak: int,
        longest_streak: int,
        last_task_date: Optional[str]
    ) -> User:
        """Overwrite the user's streak fields (last writer wins)"""
        user.set_streak_history(history)
        user.current_streak = current_streak
        user.longest_streak = longest_streak
        user.last_task_date = last_task_date
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def save_weekly_stats_cache(db: Session, user: User, cache: dict) -> User:
        """Store the batch-computed weekly snapshot"""
        payload = dict(cache)
        if isinstance(payload.get("last_updated"), datetime):
            payload["last_updated"] = payload["last_updated"].isoformat()
        user.weekly_stats_cache = json.dumps(payload)
        db.commit()
        db.refresh(user)
        return user
