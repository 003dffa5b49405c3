#!/usr/bin/env python3
"""Self-hosted application installer: CLI entrypoint."""

import argparse
import logging
import sys

from appdock.catalog import list_apps
from appdock.commands.apps import register_list_command, register_manage_commands
from appdock.commands.backup import register_backup_commands
from appdock.commands.install import register_install_command
from appdock.commands.setup import register_setup_command
from appdock.config import GlobalConfig, resolve_app_root
from appdock.errors import AppdockError
from appdock.logging_setup import add_file_handler, setup_cli_logging

logger = logging.getLogger(__name__)


class CliParser(argparse.ArgumentParser):
    """Usage errors print the full help and exit 1 instead of argparse's 2."""

    def error(self, message):
        sys.stderr.write(f"Error: {message}\n\n")
        self.print_help(sys.stderr)
        sys.exit(1)


def _epilog():
    apps = "\n".join(f"  {d.name:<14}{d.description}" for d in list_apps())
    return f"""Available applications:
{apps}

Examples:
  appdock setup --domain example.com
  appdock install activepieces
  appdock install twenty --subdomain crm
  appdock backup odoo
  appdock restore /opt/apps/backups/odoo_20240101120000.tar.gz
"""


def build_parser():
    parser = CliParser(
        prog="appdock",
        description="Install and manage self-hosted applications behind a Traefik proxy",
        epilog=_epilog(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output")
    subparsers = parser.add_subparsers(dest="command", parser_class=CliParser)

    register_setup_command(subparsers)
    register_install_command(subparsers)
    register_list_command(subparsers)
    register_manage_commands(subparsers)
    register_backup_commands(subparsers)

    help_parser = subparsers.add_parser("help", help="Show this help message")
    help_parser.set_defaults(func=lambda args: parser.print_help())

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return

    setup_cli_logging(verbose=args.verbose)
    if args.command != "help":
        # Log directory depends only on the root; the config file is not parsed here
        add_file_handler(GlobalConfig(app_root=resolve_app_root()).log_dir)

    try:
        args.func(args)
    except AppdockError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.error("Interrupted.")
        sys.exit(1)


if __name__ == "__main__":
    main()
