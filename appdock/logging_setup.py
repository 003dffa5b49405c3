"""CLI logging setup: plain console output plus a dated log file under LOG_DIR."""

import logging
import sys
from datetime import datetime
from pathlib import Path

from appdock.redact import SecretRedactingFilter


def setup_cli_logging(verbose=False):
    """Configure root logger with plain message format for CLI commands.

    Produces output identical to print(). Call add_file_handler() once the
    application root is known to also append to the daily log file.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)


def add_file_handler(log_dir) -> str | None:
    """Add a file handler that appends to {log_dir}/appdock-YYYYMMDD.log.

    Secrets are redacted in the file only. Returns the log file path, or
    None when the directory cannot be created (e.g. unprivileged user and
    the default /opt/apps root).
    """
    log_dir = Path(log_dir)
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"appdock-{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError as e:
        logging.getLogger(__name__).debug(f"File logging disabled: {e}")
        return None

    file_handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    file_handler.addFilter(SecretRedactingFilter())
    logging.getLogger().addHandler(file_handler)
    return str(log_file)
