import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, RowMapping
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from .errors import ConnectionFailureError, JournalError, TransactionError, translate_integrity_error

load_dotenv()

logger = logging.getLogger(__name__)

# Define the base directory of the trade_journal package
APP_DIR = Path(__file__).resolve().parent
# Go up one level to get the backend directory
BACKEND_DIR = APP_DIR.parent

DATABASE_FILENAME = "trading_app.db"
TEST_DATABASE_FILENAME = "trading_app_test.db"


def is_test_environment() -> bool:
    return os.getenv("TRADE_JOURNAL_ENV", "").strip().lower() == "test"


def get_database_url() -> str:
    """Resolve the database URL: DATABASE_URL first, then the test/production file."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    filename = TEST_DATABASE_FILENAME if is_test_environment() else DATABASE_FILENAME
    return f"sqlite:///{BACKEND_DIR / filename}"


def _sql_echo_enabled() -> bool:
    return os.getenv("TRADE_JOURNAL_SQL_ECHO", "false").strip().lower() in ("1", "true", "yes")


def _enable_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with foreign keys off; it has to be enabled per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@dataclass(frozen=True)
class ExecutionResult:
    last_insert_id: Optional[int]
    rows_affected: int


class Database:
    """Single shared connection to the journal database.

    Owns the SQLAlchemy engine and one connection that every repository
    executes against. Statements run outside :meth:`transaction` commit on
    their own; statements inside it commit or roll back together.

    Usage:
        database = Database("sqlite:///journal.db")
        with database.transaction():
            database.run(insert(users_table).values(...))
        database.close()
    """

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        self.database_url = database_url or get_database_url()
        if echo is None:
            echo = _sql_echo_enabled()

        if self.database_url.startswith("sqlite"):
            # One DBAPI connection for the whole process; also keeps :memory: alive.
            self.engine = create_engine(
                self.database_url,
                echo=echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
            event.listen(self.engine, "connect", _enable_foreign_keys)
        else:
            self.engine = create_engine(self.database_url, echo=echo)

        self._connection: Optional[Connection] = None
        self._transaction = None

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def database_path(self) -> Optional[Path]:
        """Filesystem path of the SQLite file, or None for in-memory databases."""
        name = self.engine.url.database
        if not name or name == ":memory:" or name.startswith("file::memory:"):
            return None
        return Path(name)

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> Connection:
        """Open the shared connection, or return it if it is already open."""
        if self._connection is not None and not self._connection.closed:
            return self._connection
        try:
            self._connection = self.engine.connect()
        except DBAPIError as e:
            self._connection = None
            logger.error(f"Error opening database at {self.database_url}: {e.orig}")
            raise ConnectionFailureError(
                f"Could not open database at {self.database_url}: {e.orig}"
            ) from e
        logger.info(f"Connected to database: {self.database_url}")
        return self._connection

    def close(self) -> None:
        """Release the shared connection. Safe to call repeatedly."""
        if self._connection is None:
            return
        try:
            self._connection.close()
        finally:
            self._connection = None
            self._transaction = None
            self.engine.dispose()
        logger.info("Database connection closed.")

    def health_check(self) -> bool:
        try:
            return self.get(text("SELECT 1 AS ok")) is not None
        except (SQLAlchemyError, JournalError) as e:
            logger.error(f"Database health check failed: {e}")
            return False

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    @contextmanager
    def _statement_scope(self) -> Iterator[Connection]:
        connection = self.connect()
        if self._transaction is not None:
            yield connection
            return
        with connection.begin():
            yield connection

    @staticmethod
    def _execute(connection: Connection, statement, params: Optional[Mapping[str, Any]]):
        if params:
            return connection.execute(statement, dict(params))
        return connection.execute(statement)

    def run(self, statement, params: Optional[Mapping[str, Any]] = None) -> ExecutionResult:
        """Execute a mutating statement and report the new row id and rows affected."""
        try:
            with self._statement_scope() as connection:
                result = self._execute(connection, statement, params)
                return ExecutionResult(last_insert_id=result.lastrowid, rows_affected=result.rowcount)
        except IntegrityError as e:
            raise translate_integrity_error(e) from e

    def get(self, statement, params: Optional[Mapping[str, Any]] = None) -> Optional[RowMapping]:
        """Execute a query and return its first row, or None."""
        with self._statement_scope() as connection:
            return self._execute(connection, statement, params).mappings().first()

    def all(self, statement, params: Optional[Mapping[str, Any]] = None) -> List[RowMapping]:
        """Execute a query and return every row (possibly an empty list)."""
        with self._statement_scope() as connection:
            return list(self._execute(connection, statement, params).mappings().all())

    @contextmanager
    def transaction(self) -> Iterator["Database"]:
        """Run the enclosed statements in order as one atomic unit.

        Any exception rolls back every statement issued inside the block before
        it propagates. Constraint failures surface as the journal error for the
        constraint; other database failures surface as ``TransactionError``.
        If the rollback itself fails it is logged and the original error is
        still the one raised.
        """
        if self._transaction is not None:
            raise TransactionError("A transaction is already in progress on this connection")

        connection = self.connect()
        try:
            self._transaction = connection.begin()
        except SQLAlchemyError as e:
            logger.error(f"Could not begin transaction: {e}")
            raise TransactionError(f"Could not begin transaction: {e}") from e
        try:
            yield self
            self._transaction.commit()
            logger.debug("Transaction committed.")
        except Exception as e:
            self._rollback(e)
            if isinstance(e, IntegrityError):
                raise translate_integrity_error(e) from e
            if isinstance(e, SQLAlchemyError):
                raise TransactionError(f"Transaction failed: {e}") from e
            raise
        finally:
            self._transaction = None

    def _rollback(self, cause: BaseException) -> None:
        try:
            self._transaction.rollback()
            logger.info(f"Transaction rolled back after error: {cause}")
        except SQLAlchemyError as rollback_error:
            logger.critical(
                f"Rollback failed ({rollback_error!r}) while handling: {cause!r}"
            )
