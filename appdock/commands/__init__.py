"""Helpers shared by the CLI command handlers."""

from appdock.config import load_config_or_defaults, resolve_app_root
from appdock.driver import ComposeDriver
from appdock.store import StateStore


def command_context(args):
    """(config, store, driver) for handlers that do not need a full setup."""
    config = load_config_or_defaults(resolve_app_root())
    store = StateStore(config.app_root, config.backup_dir)
    driver = ComposeDriver(dry_run=getattr(args, "dry_run", False))
    return config, store, driver


def add_dry_run_argument(parser):
    parser.add_argument("--dry-run", action="store_true", help="Print docker commands without executing")
