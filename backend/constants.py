"""
Application constants.
Environment-driven settings are read in the modules that use them; defaults live here.
"""

# Database
DEFAULT_DATABASE_URL = "sqlite:///./balance.db"

# Logging
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/balance"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"
DEFAULT_LOG_FILE = "app.log"

# Auth
DEFAULT_API_KEY = "your-secret-key-change-me"

# CORS
CORS_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

# Task types
TASK_TYPE_WORK = "work"   # "break" tasks never count toward stats or streaks

# Calendar windows
WEEKLY_WINDOW_DAYS = 7
STREAK_RETENTION_DAYS = 365

# Weekly goal (hours)
DEFAULT_WEEKLY_GOAL_HOURS = 40

# Progress is only written back when it moved more than this many percent
PROGRESS_PERSIST_THRESHOLD = 0.5

# Mood score is the mean mood scaled to 0-100 (moods are 1-10)
MOOD_SCORE_SCALE = 10

# Timestamp fallbacks, first non-null wins
TASK_DAY_FIELDS = ("end_time", "created_at", "start_time")
BREAK_DAY_FIELDS = ("timestamp", "time_stamp", "created_at")
MOOD_DAY_FIELDS = ("timestamp", "time_stamp", "created_at")

# Scheduler (cron expressions)
CACHE_REFRESH_MINUTE = "0"          # every hour at :00
STREAK_CLEANUP_HOUR = "2"           # daily at 02:00
STREAK_CLEANUP_MINUTE = "0"

MS_PER_HOUR = 1000 * 60 * 60
