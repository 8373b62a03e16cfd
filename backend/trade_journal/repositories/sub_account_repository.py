import logging
from typing import List, Optional

from sqlalchemy import delete, insert, select, update

from ..database import Database
from ..errors import JournalError
from ..models import SubAccountRead, sub_accounts_table
from ..time_utils import utc_now_iso

logger = logging.getLogger(__name__)


class SubAccountRepository:
    def __init__(self, database: Database):
        self.database = database

    def create_sub_account(self, user_id: int, name: str, description: Optional[str] = None) -> int:
        """Create a sub-account; names are unique per user."""
        now = utc_now_iso()
        statement = insert(sub_accounts_table).values(
            user_id=user_id,
            name=name,
            description=description,
            created_at=now,
            updated_at=now,
        )
        try:
            result = self.database.run(statement)
        except JournalError as e:
            logger.error(f"Error creating sub-account: {e}")
            raise
        logger.info(f"Sub-account created with ID: {result.last_insert_id}")
        return result.last_insert_id

    def find_sub_account_by_id(self, sub_account_id: int) -> Optional[SubAccountRead]:
        row = self.database.get(
            select(sub_accounts_table).where(sub_accounts_table.c.id == sub_account_id)
        )
        return SubAccountRead.model_validate(dict(row)) if row else None

    def find_sub_accounts_by_user_id(self, user_id: int) -> List[SubAccountRead]:
        rows = self.database.all(
            select(sub_accounts_table)
            .where(sub_accounts_table.c.user_id == user_id)
            .order_by(sub_accounts_table.c.name.asc())
        )
        return [SubAccountRead.model_validate(dict(row)) for row in rows]

    def update_sub_account(
        self,
        sub_account_id: int,
        name: str,
        description: Optional[str] = None,
        broker: Optional[str] = None,
    ) -> bool:
        """Overwrite name, description and broker (omitted values become NULL).

        Returns False when no sub-account has this id.
        """
        statement = (
            update(sub_accounts_table)
            .where(sub_accounts_table.c.id == sub_account_id)
            .values(name=name, description=description, broker=broker, updated_at=utc_now_iso())
        )
        try:
            result = self.database.run(statement)
        except JournalError as e:
            logger.error(f"Error updating sub-account: {e}")
            raise
        logger.info(f"Sub-account {sub_account_id} rows updated: {result.rows_affected}")
        return result.rows_affected > 0

    def delete_sub_account(self, sub_account_id: int) -> bool:
        # trades.sub_account_id is ON DELETE SET NULL, so trades survive
        result = self.database.run(
            delete(sub_accounts_table).where(sub_accounts_table.c.id == sub_account_id)
        )
        logger.info(f"Sub-account {sub_account_id} rows deleted: {result.rows_affected}")
        return result.rows_affected > 0
