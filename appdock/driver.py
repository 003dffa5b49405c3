"""Container driver: thin wrapper around the docker / docker compose CLI."""

import logging
import subprocess

from appdock.errors import DriverInvocationFailed

logger = logging.getLogger(__name__)

COMPOSE_FILE = "docker-compose.yml"


def make_run_cmd(dry_run=False):
    """Create a run_cmd callable for local execution.

    run_cmd(args, cwd=None, stream=True) -> (returncode, stdout). With
    stream=True output goes straight to the terminal and stdout is "".
    """

    def run_cmd(args, cwd=None, stream=True):
        if dry_run:
            logger.info(f"[dry-run] {' '.join(args)}")
            return 0, ""

        try:
            result = subprocess.run(
                args,
                cwd=cwd,
                text=True,
                stdout=None if stream else subprocess.PIPE,
                stderr=None if stream else subprocess.PIPE,
            )
        except FileNotFoundError:
            logger.error(f"Error: '{args[0]}' not found. Is it installed and on PATH?")
            return 127, ""
        stdout = "" if stream else (result.stdout or "")
        return result.returncode, stdout

    return run_cmd


class ComposeDriver:
    """The only component that starts, stops or inspects containers.

    Every compose operation is scoped to an instance directory holding a
    docker-compose.yml. Exit status is the sole success signal.

    Read-only queries (is_running, network_exists) go through query_cmd,
    which never dry-runs, so a dry run sees the same host state as a real one.
    """

    def __init__(self, run_cmd=None, dry_run=False, query_cmd=None):
        self.run_cmd = run_cmd or make_run_cmd(dry_run=dry_run)
        self.query_cmd = query_cmd or run_cmd or make_run_cmd()
        self.dry_run = dry_run

    def _compose(self, instance_dir, *args, stream=True):
        command = ["docker", "compose", "-f", COMPOSE_FILE, *args]
        rc, _ = self.run_cmd(command, cwd=str(instance_dir), stream=stream)
        if rc != 0:
            raise DriverInvocationFailed(command, rc)

    def up(self, instance_dir):
        self._compose(instance_dir, "up", "-d")

    def down(self, instance_dir):
        self._compose(instance_dir, "down")

    def restart(self, instance_dir):
        self._compose(instance_dir, "restart")

    def logs(self, instance_dir, follow=True):
        args = ["logs", "-f"] if follow else ["logs"]
        self._compose(instance_dir, *args)

    def is_running(self, container) -> bool:
        """True if a running container has exactly this name."""
        rc, stdout = self.query_cmd(
            ["docker", "ps", "--filter", f"name=^{container}$", "--format", "{{.Names}}"],
            stream=False,
        )
        if rc != 0:
            return False
        return container in stdout.split()

    def network_exists(self, name) -> bool:
        rc, _ = self.query_cmd(["docker", "network", "inspect", name], stream=False)
        return rc == 0

    def create_network(self, name):
        command = ["docker", "network", "create", name]
        rc, _ = self.run_cmd(command, stream=False)
        if rc != 0:
            raise DriverInvocationFailed(command, rc)
