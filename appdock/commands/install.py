"""install command: set up the proxy if needed, then the requested application."""

import logging
import sys

from appdock.catalog import get_app
from appdock.commands import add_dry_run_argument
from appdock.config import load_config, resolve_app_root, setup_config
from appdock.driver import ComposeDriver
from appdock.errors import ConfigMissing
from appdock.orchestrate import Installer

logger = logging.getLogger(__name__)


def _prompt_subdomain(descriptor):
    return input(
        f"Enter subdomain for {descriptor.display_name} (default: {descriptor.default_subdomain}): "
    ).strip()


def _label(key):
    return key.replace("_", " ").title()


def print_result(result):
    """Show where the app lives and its one-time credentials."""
    if result.already_installed:
        logger.info(f"\n{result.display_name} is already installed.")
    else:
        logger.info(f"\n{result.display_name} has been installed.")
    if result.domain:
        logger.info(f"URL: https://{result.domain}")
    if result.already_installed:
        return
    for key, value in result.credentials.items():
        logger.info(f"{_label(key)}: {value}")
    for note in result.notes:
        logger.info(note)


def handle_install(args):
    """Handle the install command."""
    # Unknown names fail before config, network or directories are touched
    get_app(args.app)

    app_root = resolve_app_root()
    try:
        config = load_config(app_root)
    except ConfigMissing:
        config = setup_config(app_root)

    interactive = sys.stdin.isatty() and not args.subdomain
    installer = Installer(
        config,
        ComposeDriver(dry_run=args.dry_run),
        prompt_subdomain=_prompt_subdomain if interactive else None,
    )
    installer.install(args.app, subdomain=args.subdomain)

    for result in installer.results:
        print_result(result)


def register_install_command(subparsers):
    """Register the install subcommand."""
    parser = subparsers.add_parser("install", help="Install the specified application")
    parser.add_argument("app", help="Application name (see 'appdock help')")
    parser.add_argument("--subdomain", default=None, help="Subdomain for the application (default: per application)")
    add_dry_run_argument(parser)
    parser.set_defaults(func=handle_install)
