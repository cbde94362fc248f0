"""
Task repository - Data access layer for Task model.
Handles all database queries related to tasks.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_

from backend.models import Task


class TaskRepository:
    """Repository for Task data access"""

    @staticmethod
    def get_by_id(db: Session, user_id: int, task_id: int) -> Optional[Task]:
        """Get a task owned by the user"""
        return db.query(Task).filter(
            and_(Task.id == task_id, Task.user_id == user_id)
        ).first()

    @staticmethod
    def get_all(db: Session, user_id: int) -> List[Task]:
        """Get all tasks of the user, newest first"""
        return db.query(Task).filter(
            Task.user_id == user_id
        ).order_by(Task.created_at.desc(), Task.id.desc()).all()

    @staticmethod
    def get_upcoming(db: Session, user_id: int, now: datetime) -> List[Task]:
        """Get tasks that have not ended yet (active and future), by start time"""
        return db.query(Task).filter(
            and_(Task.user_id == user_id, Task.end_time > now)
        ).order_by(Task.start_time).all()

    @staticmethod
    def get_since(db: Session, user_id: int, since: datetime) -> List[Task]:
        """
        Get tasks touching the range starting at `since`.

        Deliberately wide (any of created/start/end on or after `since`);
        callers re-check each record against the window.
        """
        return db.query(Task).filter(
            and_(
                Task.user_id == user_id,
                or_(
                    Task.created_at >= since,
                    Task.start_time >= since,
                    Task.end_time >= since
                )
            )
        ).all()

    @staticmethod
    def get_for_week(db: Session, user_id: int, week_start: datetime) -> List[Task]:
        """Get tasks ending or starting on/after week_start, newest created first"""
        return db.query(Task).filter(
            and_(
                Task.user_id == user_id,
                or_(
                    Task.end_time >= week_start,
                    Task.start_time >= week_start
                )
            )
        ).order_by(Task.created_at.desc(), Task.id.desc()).all()

    @staticmethod
    def count_ended_since(db: Session, user_id: int, since: datetime) -> int:
        """Count tasks whose end time is on/after `since`"""
        return db.query(Task).filter(
            and_(Task.user_id == user_id, Task.end_time >= since)
        ).count()

    @staticmethod
    def create(db: Session, task: Task) -> Task:
        """Create new task"""
        db.add(task)
        db.commit()
        db.refresh(task)
        return task

    @staticmethod
    def update(db: Session, task: Task) -> Task:
        """Update existing task"""
        db.commit()
        db.refresh(task)
        return task

    @staticmethod
    def delete(db: Session, task: Task) -> None:
        """Delete a task"""
        db.delete(task)
        db.commit()
