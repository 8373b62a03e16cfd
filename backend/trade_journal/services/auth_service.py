import logging
from typing import Optional, Union

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from ..models import SettingsDefaults, UserRead
from ..repositories import UserRepository

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class AuthService:
    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        try:
            return pwd_context.verify(plain_password, hashed_password)
        except UnknownHashError:
            # Stored value is not a hash this context recognises
            logger.warning("Password hash format not recognised")
            return False

    def get_password_hash(self, password: str) -> str:
        return pwd_context.hash(password)

    def register_user(
        self,
        username: str,
        email: str,
        password: str,
        settings: Optional[Union[SettingsDefaults, dict]] = None,
    ) -> int:
        """Sign up: hash the password and create the user with their settings.

        A taken username or email raises ``DuplicateError`` and leaves nothing behind.
        """
        hashed_password = self.get_password_hash(password)
        user_id = self.user_repository.create_user_with_settings(
            username, email, hashed_password, settings
        )
        logger.info(f"Registered user {username} with ID {user_id}")
        return user_id

    def authenticate_user(self, email: str, password: str) -> Optional[UserRead]:
        user = self.user_repository.find_user_by_email(email)
        if not user:
            return None
        if not self.verify_password(password, user.password_hash):
            logger.warning(f"Failed login for user ID {user.id}")
            return None
        return user
