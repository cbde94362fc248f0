"""Helpers for building persisted records in tests"""
from backend.models import Task, BreakActivity, MoodCheckin


def make_task(db, user, start, end, type="work", completed=True, created_at=None):
    task = Task(
        user_id=user.id,
        type=type,
        start_time=start,
        end_time=end,
        completed=completed,
        created_at=created_at or start,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def make_break(db, user, timestamp, activity="walk"):
    record = BreakActivity(user_id=user.id, activity=activity, timestamp=timestamp, created_at=timestamp)
    db.add(record)
    db.commit()
    return record


def make_mood(db, user, timestamp, mood=None, stress=None):
    checkin = MoodCheckin(user_id=user.id, mood=mood, stress=stress, timestamp=timestamp, created_at=timestamp)
    db.add(checkin)
    db.commit()
    return checkin
