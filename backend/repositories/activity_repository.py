"""
Activity repository - Data access layer for breaks and mood check-ins.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_

from backend.models import BreakActivity, MoodCheckin


class BreakRepository:
    """Repository for BreakActivity data access"""

    @staticmethod
    def get_all(db: Session, user_id: int) -> List[BreakActivity]:
        """Get all breaks of the user, newest first"""
        return db.query(BreakActivity).filter(
            BreakActivity.user_id == user_id
        ).order_by(BreakActivity.created_at.desc(), BreakActivity.id.desc()).all()

    @staticmethod
    def get_since(db: Session, user_id: int, since: datetime) -> List[BreakActivity]:
        """Get breaks with any timestamp field on/after `since`"""
        return db.query(BreakActivity).filter(
            and_(
                BreakActivity.user_id == user_id,
                or_(
                    BreakActivity.timestamp >= since,
                    BreakActivity.time_stamp >= since,
                    BreakActivity.created_at >= since
                )
            )
        ).all()

    @staticmethod
    def create(db: Session, activity: BreakActivity) -> BreakActivity:
        """Create new break activity"""
        db.add(activity)
        db.commit()
        db.refresh(activity)
        return activity


class MoodRepository:
    """Repository for MoodCheckin data access"""

    @staticmethod
    def get_by_id(db: Session, user_id: int, checkin_id: int) -> Optional[MoodCheckin]:
        """Get a check-in owned by the user"""
        return db.query(MoodCheckin).filter(
            and_(MoodCheckin.id == checkin_id, MoodCheckin.user_id == user_id)
        ).first()

    @staticmethod
    def get_range(
        db: Session,
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> List[MoodCheckin]:
        """Get check-ins of the user, optionally bounded by timestamp, newest first"""
        query = db.query(MoodCheckin).filter(MoodCheckin.user_id == user_id)
        if start is not None:
            query = query.filter(MoodCheckin.timestamp >= start)
        if end is not None:
            query = query.filter(MoodCheckin.timestamp < end)
        return query.order_by(MoodCheckin.timestamp.desc(), MoodCheckin.id.desc()).all()

    @staticmethod
    def get_since(db: Session, user_id: int, since: datetime) -> List[MoodCheckin]:
        """Get check-ins with any timestamp field on/after `since`"""
        return db.query(MoodCheckin).filter(
            and_(
                MoodCheckin.user_id == user_id,
                or_(
                    MoodCheckin.timestamp >= since,
                    MoodCheckin.time_stamp >= since,
                    MoodCheckin.created_at >= since
                )
            )
        ).all()

    @staticmethod
    def create(db: Session, checkin: MoodCheckin) -> MoodCheckin:
        """Create new mood check-in"""
        db.add(checkin)
        db.commit()
        db.refresh(checkin)
        return checkin

    @staticmethod
    def delete(db: Session, checkin: MoodCheckin) -> None:
        """Delete a mood check-in"""
        db.delete(checkin)
        db.commit()
