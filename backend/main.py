from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date, datetime
import logging
import os
from pathlib import Path

from backend.database import engine, get_db, Base
from backend import models  # Import all models to register them with Base
from backend.schemas import (
    UserCreate, UserResponse, WeeklyGoalUpdate,
    TaskCreate, TaskUpdate, TaskResponse,
    BreakCreate, BreakResponse,
    MoodCreate, MoodResponse,
    WeeklyDataResponse, UserStatsResponse, WeeklySummaryResponse, StreakResponse
)
from backend.auth import verify_api_key, get_current_user_id
from backend.exceptions import (
    UserNotFoundException, TaskNotFoundException,
    MoodCheckinNotFoundException, ValidationException
)
from backend.services.user_service import UserService
from backend.services.task_service import TaskService
from backend.services.checkin_service import CheckinService
from backend.services.dashboard_service import DashboardService
from backend.services.scheduler_service import start_scheduler, stop_scheduler
from backend.constants import (
    DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV, DEFAULT_LOG_FILE,
    CORS_ALLOWED_ORIGINS
)

LOG_DIR = os.getenv("BALANCE_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("BALANCE_LOG_FILE", DEFAULT_LOG_FILE)

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()  # Also log to console
    ]
)

logger = logging.getLogger("balance")

SCHEDULER_ENABLED = os.getenv("BALANCE_SCHEDULER_ENABLED", "true").lower() in ("1", "true", "yes")

cors_env = os.getenv("BALANCE_CORS_ORIGINS")
cors_origins = [o.strip() for o in cors_env.split(",") if o.strip()] if cors_env else CORS_ALLOWED_ORIGINS

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Balance Tracker API",
    description="Work/break intervals, mood check-ins, weekly stats and daily streaks",
    version="1.0.0"
)

# CORS settings for React frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Startup event
@app.on_event("startup")
async def startup_event():
    logger.info(f"Balance Tracker API started. Logging to: {log_path}")
    if SCHEDULER_ENABLED:
        start_scheduler()

# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Balance Tracker API")
    stop_scheduler()


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> models.User:
    """Resolve the calling user or fail with 404"""
    try:
        return UserService(db).get_user(user_id)
    except UserNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))


# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "Balance Tracker API", "status": "active"}


# ===== USER ENDPOINTS =====

@app.post("/api/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
async def create_user(user: UserCreate, db: Session = Depends(get_db)):
    """Register a user"""
    try:
        return UserService(db).create_user(user)
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/users/me", response_model=UserResponse)
async def get_me(user: models.User = Depends(get_current_user)):
    """Get the calling user's profile"""
    return user

@app.put("/api/users/me/weekly-goal", response_model=UserResponse)
async def update_weekly_goal(
    goal: WeeklyGoalUpdate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Set the weekly hours goal"""
    try:
        return UserService(db).update_weekly_goal(user.id, goal.weekly_goal)
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))


# ===== TASK ENDPOINTS =====

@app.post("/api/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TaskCreate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a task; work tasks also count today toward the streak"""
    return TaskService(db).create_task(user.id, task)

@app.get("/api/tasks", response_model=List[TaskResponse])
async def get_tasks(user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get all tasks, newest first"""
    return TaskService(db).get_tasks(user.id)

@app.get("/api/tasks/upcoming", response_model=List[TaskResponse])
async def get_upcoming_tasks(user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get tasks that have not ended yet, by start time"""
    return TaskService(db).get_upcoming(user.id, datetime.now())

@app.get("/api/tasks/{task_id}", response_model=TaskResponse)
async def get_task(task_id: int, user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get a specific task"""
    try:
        return TaskService(db).get_task(user.id, task_id)
    except TaskNotFoundException:
        raise HTTPException(status_code=404, detail="Task not found")

@app.patch("/api/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    task_update: TaskUpdate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Partially update a task (e.g. mark completed)"""
    try:
        return TaskService(db).update_task(user.id, task_id, task_update)
    except TaskNotFoundException:
        raise HTTPException(status_code=404, detail="Task not found")
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.delete("/api/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: int, user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete a task"""
    try:
        TaskService(db).delete_task(user.id, task_id)
    except TaskNotFoundException:
        raise HTTPException(status_code=404, detail="Task not found")


# ===== BREAK ENDPOINTS =====

@app.post("/api/breaks", response_model=BreakResponse, status_code=status.HTTP_201_CREATED)
async def create_break(
    activity: BreakCreate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Log a break activity"""
    return CheckinService(db).create_break(user.id, activity)

@app.get("/api/breaks", response_model=List[BreakResponse])
async def get_breaks(user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get all break activities"""
    return CheckinService(db).get_breaks(user.id)


# ===== MOOD ENDPOINTS =====

@app.post("/api/moods", response_model=MoodResponse, status_code=status.HTTP_201_CREATED)
async def create_mood(
    checkin: MoodCreate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Log a mood check-in (timestamp defaults to now)"""
    return CheckinService(db).create_mood(user.id, checkin)

@app.get("/api/moods", response_model=List[MoodResponse])
async def get_moods(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get mood check-ins, optionally within an inclusive date range"""
    return CheckinService(db).get_moods(user.id, start_date, end_date)

@app.get("/api/moods/{checkin_id}", response_model=MoodResponse)
async def get_mood(checkin_id: int, user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get a single mood check-in"""
    try:
        return CheckinService(db).get_mood(user.id, checkin_id)
    except MoodCheckinNotFoundException:
        raise HTTPException(status_code=404, detail="Check-in not found")

@app.delete("/api/moods/{checkin_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_mood(checkin_id: int, user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Delete a mood check-in"""
    try:
        CheckinService(db).delete_mood(user.id, checkin_id)
    except MoodCheckinNotFoundException:
        raise HTTPException(status_code=404, detail="Check-in not found")


# ===== DASHBOARD ENDPOINTS =====

@app.get("/api/dashboard/weekly-data", response_model=WeeklyDataResponse)
async def get_weekly_data(user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Last 7 days of tasks, breaks and moods; refreshes the streak"""
    return DashboardService(db).get_weekly_data(user, datetime.now())

@app.get("/api/dashboard/user-stats", response_model=UserStatsResponse)
async def get_user_stats(user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Weekly hours, goal progress and the live task"""
    return DashboardService(db).get_user_stats(user, datetime.now())

@app.get("/api/dashboard/summary", response_model=WeeklySummaryResponse)
async def get_weekly_summary(user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Totals over the last 7 days"""
    return DashboardService(db).get_weekly_summary(user, datetime.now())

@app.get("/api/dashboard/streak", response_model=StreakResponse)
async def get_streak(user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Persisted streak state"""
    return DashboardService(db).get_streak(user)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("backend.main:app", host="0.0.0.0", port=8000, reload=False)
