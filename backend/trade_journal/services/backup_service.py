import datetime
import logging
import os
import shutil
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import List, Optional

from ..database import Database

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "trade_journal_"
BACKUP_SUFFIX = ".db"


def _copy_database(source_path: str, destination_path: str) -> None:
    # SQLite online backup API: consistent even while the source is in use
    with closing(sqlite3.connect(source_path)) as source, closing(sqlite3.connect(destination_path)) as destination:
        source.backup(destination)


class BackupService:
    def __init__(self, database: Database, backup_dir: str = "backups"):
        if database.database_path is None:
            raise ValueError("In-memory databases cannot be backed up")
        self.database = database
        self.db_path = str(database.database_path)
        self.backup_dir = backup_dir
        self._ensure_backup_dir()

    def _ensure_backup_dir(self):
        """Ensure backup directory exists."""
        os.makedirs(self.backup_dir, exist_ok=True)

    def _get_backup_filename(self, timestamp: Optional[datetime.datetime] = None) -> str:
        if timestamp is None:
            timestamp = datetime.datetime.now()
        return f"{BACKUP_PREFIX}{timestamp.strftime('%Y%m%d_%H%M%S_%f')}{BACKUP_SUFFIX}"

    def create_backup(self) -> str:
        """Create a timestamped copy of the journal database and return its path."""
        backup_path = os.path.join(self.backup_dir, self._get_backup_filename())
        try:
            _copy_database(self.db_path, backup_path)
        except sqlite3.Error as e:
            logger.error(f"Error creating database backup: {e}")
            raise
        logger.info(f"Database backup created: {backup_path}")
        return backup_path

    def restore_backup(self, backup_path: str) -> None:
        """Replace the journal database with a backup.

        The shared connection is closed first and reopens on next use. If the
        restore fails, the previous database file is put back.
        """
        if not os.path.exists(backup_path):
            raise FileNotFoundError(f"Backup file not found: {backup_path}")

        self.database.close()

        temp_backup_path = os.path.join(self.backup_dir, self._get_backup_filename() + ".temp")
        if os.path.exists(self.db_path):
            shutil.copy2(self.db_path, temp_backup_path)

        try:
            _copy_database(backup_path, self.db_path)
        except sqlite3.Error as e:
            logger.error(f"Error restoring database backup {backup_path}: {e}")
            if os.path.exists(temp_backup_path):
                shutil.copy2(temp_backup_path, self.db_path)
            raise
        finally:
            if os.path.exists(temp_backup_path):
                os.remove(temp_backup_path)

        logger.info(f"Database restored from backup: {backup_path}")

    def list_backups(self) -> List[str]:
        """All backups in the backup directory, newest first."""
        backups = [
            os.path.join(self.backup_dir, name)
            for name in os.listdir(self.backup_dir)
            if name.startswith(BACKUP_PREFIX) and name.endswith(BACKUP_SUFFIX)
        ]
        return sorted(backups, reverse=True)

    def cleanup_old_backups(self, keep_last_n: int = 5) -> List[str]:
        """Remove all but the ``keep_last_n`` newest backups; returns the removed paths."""
        removed = []
        for backup in self.list_backups()[max(keep_last_n, 0):]:
            os.remove(backup)
            removed.append(backup)
            logger.info(f"Removed old backup: {backup}")
        return removed

    def get_backup_info(self, backup_path: str) -> dict:
        if not os.path.exists(backup_path):
            raise FileNotFoundError(f"Backup file not found: {backup_path}")

        with closing(sqlite3.connect(backup_path)) as conn:
            cursor = conn.cursor()
            counts = {}
            for table in ("users", "sub_accounts", "trades"):
                cursor.execute(f"SELECT COUNT(*) FROM {table}")
                counts[f"{table[:-1]}_count"] = cursor.fetchone()[0]
            cursor.execute("SELECT status, COUNT(*) FROM trades GROUP BY status")
            by_status = dict(cursor.fetchall())

        file_stats = Path(backup_path).stat()
        return {
            "path": backup_path,
            "size": file_stats.st_size,
            "created_at": datetime.datetime.fromtimestamp(file_stats.st_mtime),
            **counts,
            "open_trade_count": by_status.get("open", 0),
            "closed_trade_count": by_status.get("closed", 0),
        }
