"""SQLite persistence layer for a personal trading journal."""
from .database import Database, ExecutionResult, get_database_url
from .errors import (
    ConnectionFailureError,
    ConstraintViolationError,
    DuplicateError,
    JournalError,
    TransactionError,
)
from .init_db import init_db
from .repositories import SubAccountRepository, TradeRepository, UserRepository

__version__ = "1.0.0"

__all__ = [
    'Database',
    'ExecutionResult',
    'get_database_url',
    'init_db',
    'JournalError',
    'DuplicateError',
    'ConstraintViolationError',
    'TransactionError',
    'ConnectionFailureError',
    'UserRepository',
    'SubAccountRepository',
    'TradeRepository',
]
