"""
Tests for TaskService, CheckinService and UserService.
"""
import pytest
from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch
from pydantic import ValidationError

from backend.schemas import TaskCreate, TaskUpdate, BreakCreate, MoodCreate, UserCreate
from backend.services.task_service import TaskService
from backend.services.checkin_service import CheckinService
from backend.services.dashboard_service import DashboardService
from backend.services.user_service import UserService
from backend.exceptions import (
    TaskNotFoundException, UserNotFoundException,
    MoodCheckinNotFoundException, ValidationException, TrackerException
)


class TestCreateTask:
    """Tests for task creation and its streak side effect"""

    def test_work_task_marks_today_active(self, db_session, user, now):
        data = TaskCreate(start_time=now, end_time=now + timedelta(hours=1))

        task = TaskService(db_session).create_task(user.id, data, now=now)
        db_session.refresh(user)

        assert task.id is not None
        assert task.created_at == now
        assert user.get_streak_history() == ["2024-06-10"]
        assert user.current_streak == 1
        assert user.last_task_date == "2024-06-10"

    def test_break_task_leaves_streak_alone(self, db_session, user, now):
        data = TaskCreate(type="break", start_time=now, end_time=now + timedelta(minutes=15))

        TaskService(db_session).create_task(user.id, data, now=now)
        db_session.refresh(user)

        assert user.get_streak_history() == []
        assert user.current_streak == 0

    def test_streak_failure_keeps_task(self, db_session, user, now):
        data = TaskCreate(start_time=now, end_time=now + timedelta(hours=1))

        with patch.object(DashboardService, "record_active_day", side_effect=TrackerException("boom")):
            task = TaskService(db_session).create_task(user.id, data, now=now)

        assert TaskService(db_session).get_task(user.id, task.id).id == task.id

    def test_aware_times_stored_as_local(self, db_session, user, now):
        start = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)
        data = TaskCreate(start_time=start, end_time=start + timedelta(hours=1))

        task = TaskService(db_session).create_task(user.id, data, now=now)

        assert task.start_time == start.astimezone().replace(tzinfo=None)

    def test_unknown_user(self, db_session, now):
        data = TaskCreate(start_time=now, end_time=now + timedelta(hours=1))

        with pytest.raises(UserNotFoundException):
            TaskService(db_session).create_task(999, data, now=now)

    def test_end_before_start_rejected(self, now):
        with pytest.raises(ValidationError):
            TaskCreate(start_time=now, end_time=now - timedelta(minutes=1))


class TestTaskCrud:
    """Tests for reading, updating and deleting tasks"""

    def test_update_marks_completed(self, db_session, user, now):
        service = TaskService(db_session)
        task = service.create_task(user.id, TaskCreate(start_time=now, end_time=now + timedelta(hours=1)), now=now)

        updated = service.update_task(user.id, task.id, TaskUpdate(completed=True))

        assert updated.completed is True
        assert updated.start_time == now

    def test_update_rejects_end_before_start(self, db_session, user, now):
        service = TaskService(db_session)
        task = service.create_task(user.id, TaskCreate(start_time=now, end_time=now + timedelta(hours=1)), now=now)

        with pytest.raises(ValidationException):
            service.update_task(user.id, task.id, TaskUpdate(end_time=now - timedelta(hours=1)))

        db_session.refresh(task)
        assert task.end_time == now + timedelta(hours=1)

    def test_update_schema_rejects_inverted_interval(self, now):
        with pytest.raises(ValidationError):
            TaskUpdate(start_time=now, end_time=now - timedelta(minutes=1))

    def test_other_users_task_not_found(self, db_session, user, now):
        service = TaskService(db_session)
        task = service.create_task(user.id, TaskCreate(start_time=now, end_time=now + timedelta(hours=1)), now=now)

        with pytest.raises(TaskNotFoundException):
            service.get_task(user.id + 1, task.id)

    def test_delete(self, db_session, user, now):
        service = TaskService(db_session)
        task = service.create_task(user.id, TaskCreate(start_time=now, end_time=now + timedelta(hours=1)), now=now)

        service.delete_task(user.id, task.id)

        assert service.get_tasks(user.id) == []

    def test_upcoming_excludes_ended(self, db_session, user, now):
        service = TaskService(db_session)
        service.create_task(user.id, TaskCreate(start_time=now - timedelta(hours=2), end_time=now - timedelta(hours=1)), now=now)
        future = service.create_task(user.id, TaskCreate(start_time=now + timedelta(hours=1), end_time=now + timedelta(hours=2)), now=now)

        upcoming = service.get_upcoming(user.id, now)

        assert [t.id for t in upcoming] == [future.id]


class TestCheckins:
    """Tests for breaks and mood check-ins"""

    def test_break_defaults_to_now(self, db_session, user, now):
        activity = CheckinService(db_session).create_break(user.id, BreakCreate(activity="stretch"), now=now)

        assert activity.timestamp == now

    def test_mood_date_range(self, db_session, user, now):
        service = CheckinService(db_session)
        service.create_mood(user.id, MoodCreate(mood=5, timestamp=datetime(2024, 6, 8, 23, 59)))
        service.create_mood(user.id, MoodCreate(mood=6, timestamp=datetime(2024, 6, 9, 0, 0)))
        service.create_mood(user.id, MoodCreate(mood=7, timestamp=datetime(2024, 6, 10, 23, 59)))
        service.create_mood(user.id, MoodCreate(mood=8, timestamp=datetime(2024, 6, 11, 0, 0)))

        moods = service.get_moods(user.id, date(2024, 6, 9), date(2024, 6, 10))

        assert [m.mood for m in moods] == [7, 6]

    def test_mood_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            MoodCreate(mood=11)

    def test_delete_mood(self, db_session, user, now):
        service = CheckinService(db_session)
        checkin = service.create_mood(user.id, MoodCreate(mood=5), now=now)

        service.delete_mood(user.id, checkin.id)

        with pytest.raises(MoodCheckinNotFoundException):
            service.get_mood(user.id, checkin.id)


class TestUsers:
    """Tests for UserService"""

    def test_create_user(self, db_session):
        user = UserService(db_session).create_user(UserCreate(email="new@example.com"))

        assert user.weekly_goal == 40
        assert user.get_streak_history() == []

    def test_duplicate_email(self, db_session, user):
        with pytest.raises(ValidationException):
            UserService(db_session).create_user(UserCreate(email=user.email))

    def test_update_weekly_goal(self, db_session, user):
        updated = UserService(db_session).update_weekly_goal(user.id, 25)

        assert updated.weekly_goal == 25

    def test_invalid_weekly_goal(self, db_session, user):
        with pytest.raises(ValidationException):
            UserService(db_session).update_weekly_goal(user.id, 0)
