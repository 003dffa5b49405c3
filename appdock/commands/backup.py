"""backup, backups and restore commands."""

import logging

from appdock.catalog import get_app
from appdock.commands import add_dry_run_argument, command_context

logger = logging.getLogger(__name__)


def handle_backup(args):
    """Handle the backup command."""
    _, store, _ = command_context(args)
    get_app(args.app)
    logger.info(f"Backing up {args.app}...")
    archive = store.backup(args.app)
    logger.info(f"Backup created: {archive}")


def handle_backups(args):
    """Handle the backups command."""
    _, store, _ = command_context(args)
    entries = store.list_backups()
    logger.info("Available backups:")
    if not entries:
        logger.info("No backups found.")
        return
    for entry in entries:
        logger.info(f"{entry.app_name} - {entry.timestamp:%Y-%m-%d %H:%M:%S} - {entry.path}")


def handle_restore(args):
    """Handle the restore command."""
    _, store, driver = command_context(args)
    logger.info(f"Restoring from backup: {args.file}")
    app_name = store.restore(args.file, driver)
    if args.dry_run:
        logger.info(f"{app_name}: dry-run (not restored).")
    else:
        logger.info(f"{app_name} has been restored from backup.")


def register_backup_commands(subparsers):
    """Register backup, backups and restore."""
    parser = subparsers.add_parser("backup", help="Create a backup of the specified application")
    parser.add_argument("app", help="Application name")
    parser.set_defaults(func=handle_backup)

    parser = subparsers.add_parser("backups", help="List available backups")
    parser.set_defaults(func=handle_backups)

    parser = subparsers.add_parser("restore", help="Restore application from a backup file")
    parser.add_argument("file", help="Path to a {app}_{timestamp}.tar.gz backup")
    add_dry_run_argument(parser)
    parser.set_defaults(func=handle_restore)
