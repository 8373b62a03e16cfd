import logging
from typing import Optional, Union

from sqlalchemy import insert, select

from ..database import Database
from ..errors import JournalError
from ..models import (
    SettingsDefaults,
    UserRead,
    UserSettingsRead,
    user_settings_table,
    users_table,
)
from ..time_utils import utc_now_iso

logger = logging.getLogger(__name__)


class UserRepository:
    """Users and their one-to-one settings row.

    Password hashing happens before these calls; ``password_hash`` is stored as-is.
    """

    def __init__(self, database: Database):
        self.database = database

    # User operations
    def create_user(self, username: str, email: str, password_hash: str) -> int:
        now = utc_now_iso()
        statement = insert(users_table).values(
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        try:
            result = self.database.run(statement)
        except JournalError as e:
            logger.error(f"Error creating user: {e}")
            raise
        logger.info(f"User created with ID: {result.last_insert_id}")
        return result.last_insert_id

    def find_user_by_id(self, user_id: int) -> Optional[UserRead]:
        return self._find_user(users_table.c.id == user_id)

    def find_user_by_email(self, email: str) -> Optional[UserRead]:
        return self._find_user(users_table.c.email == email)

    def find_user_by_username(self, username: str) -> Optional[UserRead]:
        return self._find_user(users_table.c.username == username)

    def _find_user(self, condition) -> Optional[UserRead]:
        row = self.database.get(select(users_table).where(condition))
        return UserRead.model_validate(dict(row)) if row else None

    # Signup: user + settings in one transaction
    def create_user_with_settings(
        self,
        username: str,
        email: str,
        password_hash: str,
        settings_defaults: Optional[Union[SettingsDefaults, dict]] = None,
    ) -> int:
        """Create a user and their settings row atomically.

        Omitted settings fall back to USD / light. If either insert fails both
        are rolled back and the underlying error (e.g. ``DuplicateError`` for a
        taken email) is raised.
        """
        if settings_defaults is None:
            settings_defaults = SettingsDefaults()
        elif isinstance(settings_defaults, dict):
            settings_defaults = SettingsDefaults(**settings_defaults)
        settings = settings_defaults.resolved()
        now = utc_now_iso()

        try:
            with self.database.transaction() as db:
                user_result = db.run(
                    insert(users_table).values(
                        username=username,
                        email=email,
                        password_hash=password_hash,
                        created_at=now,
                        updated_at=now,
                    )
                )
                user_id = user_result.last_insert_id
                logger.info(f"User inserted with ID: {user_id}")

                db.run(
                    insert(user_settings_table).values(
                        user_id=user_id,
                        default_currency=settings["default_currency"],
                        theme=settings["theme"],
                        created_at=now,
                        updated_at=now,
                    )
                )
                logger.info(f"User settings inserted for user ID: {user_id}")
        except JournalError as e:
            logger.error(f"Error creating user with settings, transaction rolled back: {e}")
            raise

        logger.info(f"User {username} created with ID {user_id} and default settings")
        return user_id

    # Settings operations
    def find_settings_by_user_id(self, user_id: int) -> Optional[UserSettingsRead]:
        row = self.database.get(
            select(user_settings_table).where(user_settings_table.c.user_id == user_id)
        )
        return UserSettingsRead.model_validate(dict(row)) if row else None
