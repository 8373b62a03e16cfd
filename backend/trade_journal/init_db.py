import logging

from sqlalchemy.exc import SQLAlchemyError

from .database import Database
from .errors import JournalError
from .models.db_models import Base

logger = logging.getLogger(__name__)


def init_db(database: Database) -> None:
    """Create every table and index that does not exist yet.

    Safe to call on every start. DDL failures are logged and re-raised.
    """
    logger.info(f"Initializing database schema at {database.database_url}")
    try:
        with database.transaction() as db:
            connection = db.connect()
            Base.metadata.create_all(bind=connection, checkfirst=True)
            # create_all only builds indexes together with a new table
            for table in Base.metadata.sorted_tables:
                for index in table.indexes:
                    index.create(bind=connection, checkfirst=True)
    except (SQLAlchemyError, JournalError) as e:
        logger.error(f"Database schema initialization failed: {e}")
        raise
    logger.info("Database schema initialization complete.")


def drop_db(database: Database) -> None:
    """Drop every journal table (test and reset use only)."""
    logger.warning(f"Dropping all tables at {database.database_url}")
    with database.transaction() as db:
        Base.metadata.drop_all(bind=db.connect(), checkfirst=True)
