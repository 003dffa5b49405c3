"""Shared pytest fixtures for all test modules."""

import os
import subprocess
import sys

import pytest

from appdock.config import GlobalConfig, save_config
from appdock.errors import DriverInvocationFailed
from appdock.redact import clear_secrets
from appdock.store import StateStore


PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def run_cli(project_root, tmp_path):
    """Return a callable that invokes the appdock CLI as a subprocess.

    APP_ROOT points at a per-test directory and stdin is not a TTY, so
    nothing prompts and nothing touches /opt/apps.
    """

    def _run(*args, app_root=None):
        env = dict(os.environ)
        env["APP_ROOT"] = str(app_root or tmp_path / "apps")
        result = subprocess.run(
            [sys.executable, "-m", "appdock.appdock", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env=env,
            stdin=subprocess.DEVNULL,
        )
        return result.returncode, result.stdout, result.stderr

    return _run


@pytest.fixture(autouse=True)
def _reset_secrets():
    """Registered secrets are process-global; start every test clean."""
    clear_secrets()
    yield
    clear_secrets()


# ── Unit-test fixtures ──────────────────────────────────────────────


@pytest.fixture
def app_root(tmp_path):
    """Empty application root."""
    root = tmp_path / "apps"
    root.mkdir()
    return root


@pytest.fixture
def global_config(app_root):
    """Saved GlobalConfig for example.com on the default ports."""
    config = GlobalConfig(app_root=app_root, domain_suffix="example.com")
    save_config(config)
    return config


@pytest.fixture
def store(global_config):
    return StateStore(global_config.app_root, global_config.backup_dir)


class FakeDriver:
    """Records driver calls instead of running docker.

    running: container names reported by is_running()
    fail_up: instance directory names whose up() fails
    """

    def __init__(self, running=(), networks=(), fail_up=(), dry_run=False):
        self.calls = []
        self.running = set(running)
        self.networks = set(networks)
        self.fail_up = set(fail_up)
        self.dry_run = dry_run

    def _call(self, op, target):
        self.calls.append((op, str(target)))

    def up(self, instance_dir):
        self._call("up", instance_dir)
        if os.path.basename(str(instance_dir)) in self.fail_up:
            raise DriverInvocationFailed(["docker", "compose", "up", "-d"], 1)

    def down(self, instance_dir):
        self._call("down", instance_dir)

    def restart(self, instance_dir):
        self._call("restart", instance_dir)

    def logs(self, instance_dir, follow=True):
        self._call("logs", instance_dir)

    def is_running(self, container):
        return container in self.running

    def network_exists(self, name):
        return name in self.networks

    def create_network(self, name):
        self._call("create_network", name)
        self.networks.add(name)

    def ops(self):
        """Calls as (op, basename) pairs for order assertions."""
        return [(op, os.path.basename(target)) for op, target in self.calls]


class FakeServices:
    """Stands in for systemctl."""

    def __init__(self, active=()):
        self.active = set(active)
        self.stopped = []

    def is_active(self, name):
        return name in self.active

    def stop_and_disable(self, name):
        self.stopped.append(name)
        self.active.discard(name)


@pytest.fixture
def fake_driver():
    return FakeDriver()


@pytest.fixture
def fake_services():
    return FakeServices()


@pytest.fixture
def free_ports():
    """Port check reporting every port as free."""
    return lambda port: False
