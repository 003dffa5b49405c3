"""list, start, stop, restart and logs commands."""

import logging

from appdock.catalog import list_apps
from appdock.commands import add_dry_run_argument, command_context
from appdock.orchestrate import manage_app

logger = logging.getLogger(__name__)

MANAGE_ACTIONS = {
    "start": "Start the specified application",
    "stop": "Stop the specified application",
    "restart": "Restart the specified application",
    "logs": "Show logs for the specified application",
}


def handle_list(args):
    """Handle the list command."""
    _, store, _ = command_context(args)

    installed = [d for d in list_apps() if store.exists(d.name)]
    logger.info("Installed Applications:")
    if not installed:
        logger.info("No applications installed.")
        return

    for descriptor in installed:
        domain = store.read_env(descriptor.name).get(descriptor.domain_key)
        line = f"✓ {descriptor.display_name} - {descriptor.description}"
        if domain:
            line += f" (https://{domain})"
        logger.info(line)


def handle_manage(args):
    """Handle start/stop/restart/logs."""
    _, store, driver = command_context(args)
    manage_app(args.command, args.app, store, driver)


def register_list_command(subparsers):
    """Register the list subcommand."""
    parser = subparsers.add_parser("list", help="List all installed applications")
    parser.set_defaults(func=handle_list)


def register_manage_commands(subparsers):
    """Register start, stop, restart and logs."""
    for action, help_text in MANAGE_ACTIONS.items():
        parser = subparsers.add_parser(action, help=help_text)
        parser.add_argument("app", help="Application name")
        add_dry_run_argument(parser)
        parser.set_defaults(func=handle_manage)
