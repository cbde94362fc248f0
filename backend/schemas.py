from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import List, Optional


# User schemas
class UserCreate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    weekly_goal: float = Field(default=40, gt=0, le=168)  # Hours per week


class WeeklyGoalUpdate(BaseModel):
    weekly_goal: float = Field(..., gt=0, le=168)


class UserResponse(BaseModel):
    id: int
    name: Optional[str]
    email: str
    current_streak: int = 0
    longest_streak: int = 0
    last_task_date: Optional[str] = None
    progress: float = 0.0
    weekly_goal: float = 40
    created_at: datetime

    class Config:
        from_attributes = True


# Task schemas
class TaskBase(BaseModel):
    type: str = Field(default="work", pattern="^(work|break)$")
    start_time: datetime
    end_time: datetime
    is_pomodoro_enabled: bool = False

    @model_validator(mode="after")
    def check_interval(self):
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class TaskCreate(TaskBase):
    pass


class TaskUpdate(BaseModel):
    type: Optional[str] = Field(None, pattern="^(work|break)$")
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    completed: Optional[bool] = None
    is_pomodoro_enabled: Optional[bool] = None

    @model_validator(mode="after")
    def check_interval(self):
        if self.start_time and self.end_time and self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class TaskResponse(BaseModel):
    id: int
    user_id: int
    type: str
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    completed: bool = False
    is_pomodoro_enabled: bool = False
    created_at: datetime

    class Config:
        from_attributes = True


# Break schemas
class BreakCreate(BaseModel):
    activity: Optional[str] = Field(None, max_length=200)
    duration_minutes: Optional[int] = Field(None, ge=0, le=1440)
    timestamp: Optional[datetime] = None


class BreakResponse(BaseModel):
    id: int
    user_id: int
    activity: Optional[str]
    duration_minutes: Optional[int]
    timestamp: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


# Mood schemas
class MoodCreate(BaseModel):
    mood: Optional[float] = Field(None, ge=1, le=10)
    stress: Optional[float] = Field(None, ge=1, le=10)
    timestamp: Optional[datetime] = None


class MoodResponse(BaseModel):
    id: int
    user_id: int
    mood: Optional[float]
    stress: Optional[float]
    timestamp: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


# Dashboard schemas
class WeeklyDataResponse(BaseModel):
    labels: List[str]
    day_keys: List[str]
    tasks_per_day: List[int]
    breaks_per_day: List[int]
    mood_avg_per_day: List[Optional[float]]
    mood_counts_per_day: List[int]
    current_streak: int
    longest_streak: int
    streak_data: List[bool]  # Window day present in streak history


class CurrentTaskProgress(BaseModel):
    task_id: Optional[int]
    type: Optional[str]
    start_time: datetime
    end_time: datetime
    is_pomodoro_enabled: bool = False
    progress: float
    timer_progress: float
    total_duration_ms: int
    elapsed_ms: int
    remaining_ms: int
    elapsed_hours: float
    total_hours: float
    remaining_hours: float
    is_active: bool
    is_future: bool


class UserStatsResponse(BaseModel):
    progress: int
    mood_score: int
    longest_streak: int
    weekly_goal: float
    hours_worked: float
    current_task_in_progress: Optional[CurrentTaskProgress]
    tasks_completed: int
    total_tasks: int


class WeeklySummaryResponse(BaseModel):
    tasks_completed: int
    breaks_weekly: int
    mood_checkins: int
    average_mood: Optional[float]
    average_stress: Optional[float]


class StreakResponse(BaseModel):
    current_streak: int
    longest_streak: int
    last_active_day: Optional[str]
    history: List[str]
