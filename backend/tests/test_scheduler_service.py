"""
Tests for the scheduled maintenance jobs.
"""
import asyncio
from datetime import datetime
from unittest.mock import patch

from backend.models import User
from backend.services import scheduler_service
from backend.services.dashboard_service import DashboardService
from backend.exceptions import TrackerException
from backend.tests.factories import make_task


def add_user(db, email):
    user = User(email=email)
    user.set_streak_history([])
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


class TestRefreshAllWeeklyCaches:
    """Tests for refresh_all_weekly_caches"""

    def test_refreshes_every_user(self, db_session, user, now):
        other = add_user(db_session, "other@example.com")
        make_task(db_session, other, datetime(2024, 6, 9, 9, 0), datetime(2024, 6, 9, 10, 0))

        updated, total = scheduler_service.refresh_all_weekly_caches(db_session, now)

        assert (updated, total) == (2, 2)
        db_session.refresh(other)
        assert other.get_weekly_stats_cache()["total_tasks"] == 1
        db_session.refresh(user)
        assert user.get_weekly_stats_cache()["total_tasks"] == 0

    def test_failure_for_one_user_does_not_stop_others(self, db_session, user, now):
        other = add_user(db_session, "other@example.com")
        original = DashboardService.refresh_weekly_stats_cache

        def flaky(self, target, when):
            if target.id == user.id:
                raise TrackerException("broken record")
            return original(self, target, when)

        with patch.object(DashboardService, "refresh_weekly_stats_cache", flaky):
            updated, total = scheduler_service.refresh_all_weekly_caches(db_session, now)

        assert (updated, total) == (1, 2)
        db_session.refresh(other)
        assert other.get_weekly_stats_cache() is not None

    def test_unexpected_error_for_one_user_does_not_stop_others(self, db_session, user, now):
        other = add_user(db_session, "other@example.com")
        original = DashboardService.refresh_weekly_stats_cache

        def flaky(self, target, when):
            if target.id == user.id:
                raise KeyError("tasks_per_day")
            return original(self, target, when)

        with patch.object(DashboardService, "refresh_weekly_stats_cache", flaky):
            updated, total = scheduler_service.refresh_all_weekly_caches(db_session, now)

        assert (updated, total) == (1, 2)
        db_session.refresh(other)
        assert other.get_weekly_stats_cache() is not None

    def test_no_users(self, db_session, now):
        assert scheduler_service.refresh_all_weekly_caches(db_session, now) == (0, 0)


class TestScheduledJobs:
    """Tests for the async job wrappers"""

    def test_streak_cleanup_job(self, db_session, user):
        user.set_streak_history(["2000-01-01"])
        db_session.commit()
        user_id = user.id

        with patch.object(scheduler_service, "SessionLocal", return_value=db_session):
            asyncio.run(scheduler_service.run_streak_cleanup())

        assert db_session.get(User, user_id).get_streak_history() == []

    def test_weekly_refresh_job(self, db_session, user):
        user_id = user.id

        with patch.object(scheduler_service, "SessionLocal", return_value=db_session):
            asyncio.run(scheduler_service.run_weekly_stats_refresh())

        assert db_session.get(User, user_id).get_weekly_stats_cache() is not None

    def test_job_errors_are_logged(self, caplog):
        with patch.object(scheduler_service, "SessionLocal") as session_factory:
            session_factory.return_value.query.side_effect = RuntimeError("db down")
            asyncio.run(scheduler_service.run_weekly_stats_refresh())

        assert "Scheduler Error (Weekly Stats)" in caplog.text
        session_factory.return_value.close.assert_called_once()
