"""Global configuration: domain, ACME email, proxy ports and filesystem root."""

import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from dotenv import dotenv_values

from appdock.errors import ConfigMissing, InvalidConfig

logger = logging.getLogger(__name__)

DEFAULT_APP_ROOT = "/opt/apps"
APP_ROOT_ENV = "APP_ROOT"
CONFIG_FILENAME = ".env"


def resolve_app_root(override=None) -> Path:
    """Application root: explicit override, then $APP_ROOT, then /opt/apps."""
    return Path(override or os.environ.get(APP_ROOT_ENV) or DEFAULT_APP_ROOT)


def _parse_port(key, value) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise InvalidConfig(key, value) from None
    if not 1 <= port <= 65535:
        raise InvalidConfig(key, value)
    return port


@dataclass
class GlobalConfig:
    """Settings shared by every command. Loaded once and passed explicitly."""

    app_root: Path
    domain_suffix: str = "example.com"
    admin_email: str = ""
    http_port: int = 80
    https_port: int = 443

    def __post_init__(self):
        self.app_root = Path(self.app_root)
        self.http_port = _parse_port("HTTP_PORT", self.http_port)
        self.https_port = _parse_port("HTTPS_PORT", self.https_port)
        if not self.admin_email:
            self.admin_email = f"admin@{self.domain_suffix}"

    @property
    def config_path(self) -> Path:
        return self.app_root / CONFIG_FILENAME

    @property
    def proxy_dir(self) -> Path:
        return self.app_root / "traefik"

    @property
    def log_dir(self) -> Path:
        return self.app_root / "logs"

    @property
    def backup_dir(self) -> Path:
        return self.app_root / "backups"

    def domain_for(self, subdomain: str) -> str:
        return f"{subdomain}.{self.domain_suffix}"


def load_config(app_root) -> GlobalConfig:
    """Read {app_root}/.env. Raises ConfigMissing if it does not exist."""
    app_root = Path(app_root)
    path = app_root / CONFIG_FILENAME
    if not path.is_file():
        raise ConfigMissing(path)

    values = dotenv_values(path, interpolate=False)
    return GlobalConfig(
        app_root=app_root,
        domain_suffix=values.get("DOMAIN_SUFFIX") or "example.com",
        admin_email=values.get("ADMIN_EMAIL") or "",
        http_port=values.get("HTTP_PORT") or 80,
        https_port=values.get("HTTPS_PORT") or 443,
    )


def load_config_or_defaults(app_root) -> GlobalConfig:
    """For read-only commands: fall back to defaults when setup never ran."""
    try:
        return load_config(app_root)
    except ConfigMissing:
        return GlobalConfig(app_root=Path(app_root))


def render_config(config: GlobalConfig, created=None) -> str:
    created = created or datetime.now()
    return f"""# Global settings for appdock
# Created on: {created:%Y-%m-%d %H:%M:%S}

# Domain settings
DOMAIN_SUFFIX={config.domain_suffix}
ADMIN_EMAIL={config.admin_email}

# Paths
APP_ROOT={config.app_root}
TRAEFIK_DIR={config.proxy_dir}
LOG_DIR={config.log_dir}
BACKUP_DIR={config.backup_dir}

# Network settings
HTTP_PORT={config.http_port}
HTTPS_PORT={config.https_port}
"""


def save_config(config: GlobalConfig) -> Path:
    """Write the config file and create the proxy and backup directories."""
    config.app_root.mkdir(parents=True, exist_ok=True)
    config.config_path.write_text(render_config(config))
    config.proxy_dir.mkdir(parents=True, exist_ok=True)
    config.backup_dir.mkdir(parents=True, exist_ok=True)
    return config.config_path


def _ask(prompt_fn, question, default):
    answer = prompt_fn(f"{question} (default: {default}): ").strip()
    return answer or default


def setup_config(
    app_root,
    domain=None,
    email=None,
    http_port=None,
    https_port=None,
    interactive=None,
    force=False,
    prompt_fn=input,
) -> GlobalConfig:
    """Create the global config, or reuse the existing one unless force is set.

    Values passed explicitly win; remaining values are prompted for when
    interactive (defaults to stdin being a TTY), otherwise defaults apply.
    """
    app_root = Path(app_root)
    if not force:
        try:
            config = load_config(app_root)
            logger.info("Configuration file found. Using existing settings.")
            return config
        except ConfigMissing:
            pass

    if interactive is None:
        interactive = sys.stdin.isatty()

    logger.info("Setting up configuration...")
    if interactive:
        domain = domain or _ask(prompt_fn, "Enter your domain suffix, e.g. example.com", "example.com")
        email = email or _ask(prompt_fn, "Enter email for Let's Encrypt certificates", f"admin@{domain}")
        http_port = http_port or _ask(prompt_fn, "Enter HTTP port", "80")
        https_port = https_port or _ask(prompt_fn, "Enter HTTPS port", "443")

    domain = domain or "example.com"
    config = GlobalConfig(
        app_root=app_root,
        domain_suffix=domain,
        admin_email=email or f"admin@{domain}",
        http_port=http_port or 80,
        https_port=https_port or 443,
    )
    path = save_config(config)
    logger.info(f"Configuration saved to {path}")
    return config
