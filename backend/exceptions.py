"""
Custom exceptions for the tracker application.
Provides specific exception types for better error handling and recovery.
"""


class TrackerException(Exception):
    """Base exception for tracker application"""
    pass


class UserNotFoundException(TrackerException):
    """Raised when a user is not found"""
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class TaskNotFoundException(TrackerException):
    """Raised when a task is not found"""
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found")


class MoodCheckinNotFoundException(TrackerException):
    """Raised when a mood check-in is not found"""
    def __init__(self, checkin_id: int):
        self.checkin_id = checkin_id
        super().__init__(f"Mood check-in with ID {checkin_id} not found")


class InvalidTimestampException(TrackerException):
    """Raised when a record timestamp cannot be interpreted"""
    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid timestamp: {value!r}")


class ValidationException(TrackerException):
    """Raised when data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error for {field}: {message}")
