import argparse
import logging
import os
import sys
from typing import List, Optional

from .database import Database
from .init_db import drop_db, init_db
from .services.backup_service import BackupService


def _backup_service(database: Database) -> BackupService:
    return BackupService(database, os.getenv("TRADE_JOURNAL_BACKUP_DIR", "backups"))


def init_database(args, database: Database):
    init_db(database)
    print(f"Database initialized successfully at {database.database_url}")


def reset_database(args, database: Database):
    drop_db(database)
    init_db(database)
    print(f"Database reset at {database.database_url}")


def create_backup(args, database: Database):
    backup_path = _backup_service(database).create_backup()
    print(f"Backup created successfully: {backup_path}")


def restore_backup(args, database: Database):
    _backup_service(database).restore_backup(args.backup_path)
    print(f"Database restored from backup: {args.backup_path}")


def list_backups(args, database: Database):
    backup_service = _backup_service(database)
    backups = backup_service.list_backups()

    if not backups:
        print("No backups found")
        return

    print("Available backups:")
    for i, backup in enumerate(backups, 1):
        info = backup_service.get_backup_info(backup)
        print(f"{i}. {backup}")
        print(f"   Created: {info['created_at']}")
        print(f"   Size: {info['size'] / 1024:.2f} KB")
        print(f"   Records: {info['user_count']} users, {info['sub_account_count']} sub-accounts, "
              f"{info['trade_count']} trades")


def cleanup_backups(args, database: Database):
    removed = _backup_service(database).cleanup_old_backups(args.keep)
    print(f"Cleanup completed. Removed {len(removed)} backups, kept the {args.keep} most recent.")


def get_backup_info(args, database: Database):
    info = _backup_service(database).get_backup_info(args.backup_path)

    print(f"Backup Information for {args.backup_path}:")
    print(f"Created: {info['created_at']}")
    print(f"Size: {info['size'] / 1024:.2f} KB")
    print("Records:")
    print(f"  - Users: {info['user_count']}")
    print(f"  - Sub-accounts: {info['sub_account_count']}")
    print(f"  - Trades: {info['trade_count']} "
          f"({info['open_trade_count']} open, {info['closed_trade_count']} closed)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trade-journal", description="Manage the trade journal database")
    parser.add_argument("--database-url", help="SQLAlchemy URL (defaults to DATABASE_URL / TRADE_JOURNAL_ENV)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser("init-db", help="Create missing tables and indexes")
    init_parser.set_defaults(func=init_database)

    reset_parser = subparsers.add_parser("reset-db", help="Drop and recreate all tables")
    reset_parser.set_defaults(func=reset_database)

    backup_parser = subparsers.add_parser("backup", help="Manage database backups")
    backup_subparsers = backup_parser.add_subparsers(dest="backup_command", help="Backup commands")

    create_parser = backup_subparsers.add_parser("create", help="Create a new backup")
    create_parser.set_defaults(func=create_backup)

    restore_parser = backup_subparsers.add_parser("restore", help="Restore from a backup")
    restore_parser.add_argument("backup_path", help="Path to the backup file")
    restore_parser.set_defaults(func=restore_backup)

    list_parser = backup_subparsers.add_parser("list", help="List available backups")
    list_parser.set_defaults(func=list_backups)

    cleanup_parser = backup_subparsers.add_parser("cleanup", help="Cleanup old backups")
    cleanup_parser.add_argument("--keep", type=int, default=5, help="Number of backups to keep")
    cleanup_parser.set_defaults(func=cleanup_backups)

    info_parser = backup_subparsers.add_parser("info", help="Get information about a backup")
    info_parser.add_argument("backup_path", help="Path to the backup file")
    info_parser.set_defaults(func=get_backup_info)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO)
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    with Database(args.database_url) as database:
        args.func(args, database)
    return 0


if __name__ == "__main__":
    sys.exit(main())
