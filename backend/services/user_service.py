"""
User service.
Looks up users and manages their weekly goal.
"""
import logging
from sqlalchemy.orm import Session

from backend.models import User
from backend.schemas import UserCreate
from backend.repositories.user_repository import UserRepository
from backend.exceptions import UserNotFoundException, ValidationException

logger = logging.getLogger("balance.users")


class UserService:
    """Service for user management"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository()

    def get_user(self, user_id: int) -> User:
        """
        Get user by ID.

        Raises:
            UserNotFoundException: If the user does not exist
        """
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise UserNotFoundException(user_id)
        return user

    def create_user(self, data: UserCreate) -> User:
        """
        Create a user with empty streak state.

        Raises:
            ValidationException: If the email is already registered
        """
        if self.user_repo.get_by_email(self.db, data.email):
            raise ValidationException("email", "already registered")

        user = User(name=data.name, email=data.email, weekly_goal=data.weekly_goal)
        user.set_streak_history([])
        user = self.user_repo.create(self.db, user)
        logger.info(f"Created user {user.id}")
        return user

    def update_weekly_goal(self, user_id: int, weekly_goal: float) -> User:
        """Set the user's weekly goal in hours"""
        if weekly_goal <= 0:
            raise ValidationException("weekly_goal", "must be positive")
        user = self.get_user(user_id)
        user.weekly_goal = weekly_goal
        return self.user_repo.update(self.db, user)
