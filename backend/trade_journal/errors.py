"""Error taxonomy for the trade journal persistence layer.

Every failure surfaced by the repositories is a ``JournalError`` subclass whose
``kind`` lets callers pattern-match on the failure category. "Not found" is never
an error: lookups return ``None`` and conditional writes return ``False``.
"""
from typing import Optional

from sqlalchemy.exc import IntegrityError


class JournalError(Exception):
    kind = "JOURNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateError(JournalError):
    """A UNIQUE constraint rejected the write (username, email, sub-account name)."""

    kind = "DUPLICATE"

    def __init__(self, message: str, constraint: Optional[str] = None):
        super().__init__(message)
        self.constraint = constraint


class ConstraintViolationError(JournalError):
    """A CHECK, FOREIGN KEY or NOT NULL constraint rejected the write."""

    kind = "CONSTRAINT_VIOLATION"

    def __init__(self, message: str, constraint_type: str, constraint: Optional[str] = None):
        super().__init__(message)
        self.constraint_type = constraint_type
        self.constraint = constraint


class TransactionError(JournalError):
    kind = "TRANSACTION_FAILURE"


class ConnectionFailureError(JournalError):
    kind = "CONNECTION_FAILURE"


_CONSTRAINT_PREFIXES = (
    ("CHECK constraint failed", "CHECK"),
    ("FOREIGN KEY constraint failed", "FOREIGN KEY"),
    ("NOT NULL constraint failed", "NOT NULL"),
)


def _constraint_name(message: str, prefix: str) -> Optional[str]:
    remainder = message[len(prefix):].lstrip(": ").strip()
    return remainder or None


def translate_integrity_error(exc: IntegrityError) -> JournalError:
    """Map a SQLAlchemy ``IntegrityError`` onto the journal taxonomy.

    The SQLite diagnostic (e.g. ``CHECK constraint failed: ck_trades_direction``)
    is kept verbatim as the message, and the constraint name is extracted when
    SQLite reports one.
    """
    message = str(exc.orig) if exc.orig is not None else str(exc)

    if message.startswith("UNIQUE constraint failed"):
        error: JournalError = DuplicateError(
            message, constraint=_constraint_name(message, "UNIQUE constraint failed")
        )
    else:
        for prefix, constraint_type in _CONSTRAINT_PREFIXES:
            if message.startswith(prefix):
                error = ConstraintViolationError(
                    message,
                    constraint_type=constraint_type,
                    constraint=_constraint_name(message, prefix),
                )
                break
        else:
            error = ConstraintViolationError(message, constraint_type="UNKNOWN")

    error.__cause__ = exc
    return error
