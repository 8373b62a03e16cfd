import logging
from typing import List, Optional, Union

from sqlalchemy import delete, func, insert, select, update

from ..database import Database
from ..errors import JournalError
from ..models import (
    TradeClose,
    TradeCreate,
    TradeDetailsUpdate,
    TradeRead,
    TradeStatus,
    sub_accounts_table,
    trades_table,
)
from ..time_utils import utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50

# Closed trades and sub-account listings: most recently exited first
_RECENT_FIRST = (trades_table.c.exit_date.desc(), trades_table.c.entry_date.desc())


class TradeRepository:
    """Trades and their ``open -> closed`` lifecycle.

    ``close_trade`` is the only way a trade changes status, and it only applies
    to open trades. Notes and commission stay editable after closing through
    ``update_trade_details``.
    """

    def __init__(self, database: Database):
        self.database = database

    def create_trade(self, data: Union[TradeCreate, dict]) -> int:
        """Insert a trade, open unless ``data.status`` says otherwise.

        Raises ``ConstraintViolationError`` for a non-positive quantity, an unknown
        direction/status (CHECK) or an unknown user/sub-account (FOREIGN KEY).
        """
        data = TradeCreate.model_validate(data)
        now = utc_now_iso()
        statement = insert(trades_table).values(
            user_id=data.user_id,
            sub_account_id=data.sub_account_id,
            ticker=data.ticker,
            quantity=data.quantity,
            entry_price=data.entry_price,
            direction=data.direction,
            entry_date=data.entry_date,
            exit_date=data.exit_date,
            exit_price=data.exit_price,
            notes=data.notes,
            commission=data.commission,
            status=data.status or TradeStatus.OPEN.value,
            created_at=now,
            updated_at=now,
        )
        try:
            result = self.database.run(statement)
        except JournalError as e:
            logger.error(f"Error creating trade: {e}")
            raise
        logger.info(f"Trade created with ID: {result.last_insert_id}")
        return result.last_insert_id

    # Queries
    def find_trade_by_id(self, trade_id: int) -> Optional[TradeRead]:
        row = self.database.get(select(trades_table).where(trades_table.c.id == trade_id))
        return TradeRead.model_validate(dict(row)) if row else None

    def find_open_trades_by_user_id(self, user_id: int) -> List[TradeRead]:
        statement = (
            select(trades_table)
            .where(
                trades_table.c.user_id == user_id,
                trades_table.c.status == TradeStatus.OPEN.value,
            )
            .order_by(trades_table.c.entry_date.asc())
        )
        return self._fetch_trades(statement)

    def find_closed_trades_by_user_id(
        self, user_id: int, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> List[TradeRead]:
        statement = (
            select(trades_table)
            .where(
                trades_table.c.user_id == user_id,
                trades_table.c.status == TradeStatus.CLOSED.value,
            )
            .order_by(*_RECENT_FIRST)
            .limit(limit)
            .offset(offset)
        )
        return self._fetch_trades(statement)

    def find_trades_by_sub_account_id(
        self, sub_account_id: int, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> List[TradeRead]:
        """Trades of one sub-account, restricted to the sub-account's owner.

        An unknown sub-account yields an empty list.
        """
        owner = self.database.get(
            select(sub_accounts_table.c.user_id).where(sub_accounts_table.c.id == sub_account_id)
        )
        if owner is None:
            return []

        statement = (
            select(trades_table)
            .where(
                trades_table.c.sub_account_id == sub_account_id,
                trades_table.c.user_id == owner["user_id"],
            )
            .order_by(*_RECENT_FIRST)
            .limit(limit)
            .offset(offset)
        )
        return self._fetch_trades(statement)

    def _fetch_trades(self, statement) -> List[TradeRead]:
        return [TradeRead.model_validate(dict(row)) for row in self.database.all(statement)]

    # State transition
    def close_trade(self, close: Union[TradeClose, dict]) -> bool:
        """Close an open trade.

        Notes and commission are only replaced when given (COALESCE keeps the
        stored value otherwise). Returns False when the trade does not exist or
        is already closed; the two cases are not distinguished.
        """
        close = TradeClose.model_validate(close)
        statement = (
            update(trades_table)
            .where(
                trades_table.c.id == close.id,
                trades_table.c.status == TradeStatus.OPEN.value,
            )
            .values(
                exit_price=close.exit_price,
                exit_date=close.exit_date,
                status=TradeStatus.CLOSED.value,
                updated_at=utc_now_iso(),
                notes=func.coalesce(close.notes, trades_table.c.notes),
                commission=func.coalesce(close.commission, trades_table.c.commission),
            )
        )
        try:
            result = self.database.run(statement)
        except JournalError as e:
            logger.error(f"Error closing trade: {e}")
            raise
        logger.info(f"Attempted to close trade with ID: {close.id}. Rows affected: {result.rows_affected}")
        return result.rows_affected == 1

    def update_trade_details(self, trade_id: int, updates: Union[TradeDetailsUpdate, dict]) -> bool:
        """Write only the notes/commission fields that were explicitly set.

        An explicit None clears the column; an omitted field is left alone.
        Returns False without touching the database when nothing was set.
        """
        changes = TradeDetailsUpdate.model_validate(updates).changes()
        if not changes:
            return False

        statement = (
            update(trades_table)
            .where(trades_table.c.id == trade_id)
            .values(updated_at=utc_now_iso(), **changes)
        )
        try:
            result = self.database.run(statement)
        except JournalError as e:
            logger.error(f"Error updating trade details: {e}")
            raise
        logger.info(f"Updated details for trade with ID: {trade_id}. Rows affected: {result.rows_affected}")
        return result.rows_affected > 0

    def delete_trade(self, trade_id: int) -> bool:
        result = self.database.run(delete(trades_table).where(trades_table.c.id == trade_id))
        logger.info(f"Deleted trade with ID: {trade_id}. Rows affected: {result.rows_affected}")
        return result.rows_affected > 0
