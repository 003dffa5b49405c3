"""Filesystem state store: instance directories, env files, backup archives.

Directory presence is the only record of what is installed. An instance
counts as installed once its docker-compose.yml exists; that file is written
last by persist() so an interrupted write is not mistaken for an install.
"""

import logging
import os
import re
import tarfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path, PurePosixPath

from dotenv import dotenv_values

from appdock.driver import COMPOSE_FILE
from appdock.errors import ArchiveNotFound, InvalidArchive, NotInstalled

logger = logging.getLogger(__name__)

ENV_FILE = ".env"
ENV_FILE_MODE = 0o600
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
BACKUP_NAME_RE = re.compile(r"^(?P<app>[^_]+)_(?P<timestamp>\d{14})\.tar\.gz$")


@dataclass
class BackupEntry:
    app_name: str
    timestamp: datetime
    path: Path


def write_private_file(path, content):
    """Write content readable and writable by the owner only (mode 600)."""
    path = Path(path)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, ENV_FILE_MODE)
    with os.fdopen(fd, "w") as f:
        f.write(content)
    # os.open only applies the mode on creation; overwrites keep the old one
    os.chmod(path, ENV_FILE_MODE)


class StateStore:
    def __init__(self, app_root, backup_dir=None):
        self.app_root = Path(app_root)
        self.backup_dir = Path(backup_dir) if backup_dir else self.app_root / "backups"

    def instance_dir(self, app_name) -> Path:
        return self.app_root / app_name

    def exists(self, app_name) -> bool:
        return (self.instance_dir(app_name) / COMPOSE_FILE).is_file()

    def installed_apps(self, names) -> list[str]:
        return [name for name in names if self.exists(name)]

    def persist(self, app_name, rendered):
        """Write compose, env and extra files for one instance."""
        instance_dir = self.instance_dir(app_name)
        instance_dir.mkdir(parents=True, exist_ok=True)

        for rel in rendered.dirs:
            (instance_dir / rel).mkdir(parents=True, exist_ok=True)
        for rel, content in rendered.files.items():
            path = instance_dir / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        for rel in rendered.executables:
            os.chmod(instance_dir / rel, 0o755)

        write_private_file(instance_dir / ENV_FILE, rendered.env)
        (instance_dir / COMPOSE_FILE).write_text(rendered.compose)
        logger.debug(f"Wrote {instance_dir / COMPOSE_FILE} and {instance_dir / ENV_FILE}")
        return instance_dir

    def read_env(self, app_name) -> dict[str, str]:
        path = self.instance_dir(app_name) / ENV_FILE
        if not path.is_file():
            return {}
        return {k: v for k, v in dotenv_values(path, interpolate=False).items() if v is not None}

    # ── Backups ─────────────────────────────────────────────────────

    def backup(self, app_name, now=None) -> Path:
        """Archive the whole instance directory to {backup_dir}/{app}_{ts}.tar.gz.

        The instance is not stopped first, so a live database may be captured
        mid-write.
        """
        instance_dir = self.instance_dir(app_name)
        if not instance_dir.is_dir():
            raise NotInstalled(app_name)

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
        archive = self.backup_dir / f"{app_name}_{timestamp}.tar.gz"
        with tarfile.open(archive, "w:gz") as tar:
            tar.add(instance_dir, arcname=app_name)
        return archive

    def list_backups(self) -> list[BackupEntry]:
        if not self.backup_dir.is_dir():
            return []

        entries = []
        for path in self.backup_dir.iterdir():
            match = BACKUP_NAME_RE.match(path.name)
            if not match or not path.is_file():
                continue
            try:
                timestamp = datetime.strptime(match["timestamp"], TIMESTAMP_FORMAT)
            except ValueError:
                continue
            entries.append(BackupEntry(match["app"], timestamp, path))
        return sorted(entries, key=lambda e: (e.timestamp, e.app_name))

    def restore(self, archive, driver, now=None) -> str:
        """Replace an instance with the archived copy and start it.

        A live instance is stopped and moved aside to {app}_old_{ts}; it is
        never deleted. With a dry-run driver the archive is still validated
        but nothing on disk is moved or extracted. Returns the restored
        application name.
        """
        archive = Path(archive)
        if not archive.is_file():
            raise ArchiveNotFound(archive)

        app_name = archive.name.split("_", 1)[0]
        if not app_name or app_name in (".", ".."):
            raise InvalidArchive(archive, "cannot derive application name from file name")

        dry_run = driver.dry_run
        try:
            with tarfile.open(archive, "r:gz") as tar:
                _check_members(archive, tar.getnames(), app_name)

                instance_dir = self.instance_dir(app_name)
                if (instance_dir / COMPOSE_FILE).is_file():
                    logger.info(f"Stopping existing {app_name}...")
                    driver.down(instance_dir)
                if instance_dir.exists():
                    timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
                    aside = self.app_root / f"{app_name}_old_{timestamp}"
                    if dry_run:
                        logger.info(f"[dry-run] move {instance_dir} to {aside}")
                    else:
                        logger.info(f"Moving existing installation to {aside}")
                        instance_dir.rename(aside)

                if dry_run:
                    logger.info(f"[dry-run] extract {archive} into {self.app_root}")
                else:
                    logger.info("Extracting backup...")
                    self.app_root.mkdir(parents=True, exist_ok=True)
                    tar.extractall(self.app_root, filter="data")
        except tarfile.TarError as e:
            raise InvalidArchive(archive, str(e)) from e

        logger.info(f"Starting restored {app_name}...")
        driver.up(instance_dir)
        return app_name


def _check_members(archive, names, app_name):
    if not names:
        raise InvalidArchive(archive, "archive is empty")
    for name in names:
        parts = PurePosixPath(name).parts
        if not parts or parts[0] != app_name or ".." in parts:
            raise InvalidArchive(archive, f"entry {name!r} is outside {app_name}/")
