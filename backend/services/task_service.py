"""
Task management service.
Handles task CRUD and folds new work tasks into the owner's streak.
"""
import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.models import Task
from backend.schemas import TaskCreate, TaskUpdate
from backend.repositories.task_repository import TaskRepository
from backend.services.dashboard_service import DashboardService
from backend.services.date_service import DateService
from backend.services.user_service import UserService
from backend.exceptions import TaskNotFoundException, TrackerException, ValidationException
from backend.constants import TASK_TYPE_WORK

logger = logging.getLogger("balance.tasks")


class TaskService:
    """Service for task management"""

    def __init__(self, db: Session):
        self.db = db
        self.task_repo = TaskRepository()
        self.user_service = UserService(db)
        self.dashboard_service = DashboardService(db)

    def get_task(self, user_id: int, task_id: int) -> Task:
        """
        Get a task owned by the user.

        Raises:
            TaskNotFoundException: If the task does not exist for this user
        """
        task = self.task_repo.get_by_id(self.db, user_id, task_id)
        if not task:
            raise TaskNotFoundException(task_id)
        return task

    def get_tasks(self, user_id: int) -> List[Task]:
        """Get all tasks, newest first"""
        return self.task_repo.get_all(self.db, user_id)

    def get_upcoming(self, user_id: int, now: datetime) -> List[Task]:
        """Get active and future tasks, by start time"""
        return self.task_repo.get_upcoming(self.db, user_id, now)

    def create_task(self, user_id: int, task_data: TaskCreate, now: Optional[datetime] = None) -> Task:
        """
        Create a task and, for work tasks, mark today as active in the streak.

        A failing streak update is logged and does not undo the task.
        """
        now = now or datetime.now()
        user = self.user_service.get_user(user_id)

        values = task_data.model_dump()
        values["start_time"] = DateService.to_local_datetime(values["start_time"])
        values["end_time"] = DateService.to_local_datetime(values["end_time"])
        task = Task(user_id=user.id, created_at=now, **values)
        task = self.task_repo.create(self.db, task)
        logger.info(f"Task {task.id} ({task.type}) created for user {user.id}")

        if task.type == TASK_TYPE_WORK:
            try:
                self.dashboard_service.record_active_day(user, now)
            except (SQLAlchemyError, TrackerException) as e:
                self.db.rollback()
                logger.error(f"Failed to update streak for user {user.id}: {e}")

        return task

    def update_task(self, user_id: int, task_id: int, task_update: TaskUpdate) -> Task:
        """
        Partially update a task (e.g. mark it completed).

        Raises:
            TaskNotFoundException: If the task does not exist for this user
            ValidationException: If the resulting interval ends before it starts
        """
        task = self.get_task(user_id, task_id)
        changes = task_update.model_dump(exclude_unset=True)
        for key in ("start_time", "end_time"):
            if changes.get(key) is not None:
                changes[key] = DateService.to_local_datetime(changes[key])

        start = changes.get("start_time", task.start_time)
        end = changes.get("end_time", task.end_time)
        if start is not None and end is not None and end < start:
            raise ValidationException("end_time", "must not be before start_time")

        for key, value in changes.items():
            setattr(task, key, value)
        task = self.task_repo.update(self.db, task)
        logger.info(f"Task {task.id} updated, completed={task.completed}")
        return task

    def delete_task(self, user_id: int, task_id: int) -> None:
        """Delete a task"""
        task = self.get_task(user_id, task_id)
        self.task_repo.delete(self.db, task)
