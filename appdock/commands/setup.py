"""setup command: create the global configuration file."""

from appdock.config import resolve_app_root, setup_config


def handle_setup(args):
    """Handle the setup command."""
    setup_config(
        resolve_app_root(),
        domain=args.domain,
        email=args.email,
        http_port=args.http_port,
        https_port=args.https_port,
        interactive=False if args.non_interactive else None,
        force=args.force,
    )


def register_setup_command(subparsers):
    """Register the setup subcommand."""
    parser = subparsers.add_parser("setup", help="Configure global settings")
    parser.add_argument("--domain", default=None, help="Domain suffix, e.g. example.com")
    parser.add_argument("--email", default=None, help="Email for Let's Encrypt certificates (default: admin@DOMAIN)")
    parser.add_argument("--http-port", type=int, default=None, help="HTTP port (default: 80)")
    parser.add_argument("--https-port", type=int, default=None, help="HTTPS port (default: 443)")
    parser.add_argument("--non-interactive", action="store_true", help="Never prompt; use defaults for missing values")
    parser.add_argument("--force", action="store_true", help="Overwrite an existing configuration")
    parser.set_defaults(func=handle_setup)
