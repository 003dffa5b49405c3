"""Tests for appdock.driver: docker CLI invocations."""

import pytest

from appdock.driver import ComposeDriver, make_run_cmd
from appdock.errors import DriverInvocationFailed


class RecordingRunCmd:
    def __init__(self, rc=0, stdout=""):
        self.rc = rc
        self.stdout = stdout
        self.calls = []

    def __call__(self, args, cwd=None, stream=True):
        self.calls.append((args, cwd))
        return self.rc, self.stdout


def test_up_runs_compose_in_instance_dir(tmp_path):
    run_cmd = RecordingRunCmd()
    ComposeDriver(run_cmd=run_cmd).up(tmp_path)
    assert run_cmd.calls == [(["docker", "compose", "-f", "docker-compose.yml", "up", "-d"], str(tmp_path))]


@pytest.mark.parametrize(
    "method, expected",
    [
        ("down", ["down"]),
        ("restart", ["restart"]),
        ("logs", ["logs", "-f"]),
    ],
)
def test_compose_subcommands(tmp_path, method, expected):
    run_cmd = RecordingRunCmd()
    getattr(ComposeDriver(run_cmd=run_cmd), method)(tmp_path)
    assert run_cmd.calls[0][0][4:] == expected


def test_nonzero_exit_raises(tmp_path):
    with pytest.raises(DriverInvocationFailed) as exc:
        ComposeDriver(run_cmd=RecordingRunCmd(rc=1)).up(tmp_path)
    assert exc.value.returncode == 1
    assert "docker compose" in str(exc.value)


def test_is_running_exact_name():
    run_cmd = RecordingRunCmd(stdout="twenty-server\n")
    driver = ComposeDriver(run_cmd=run_cmd)
    assert driver.is_running("twenty-server")
    assert run_cmd.calls[0][0][:4] == ["docker", "ps", "--filter", "name=^twenty-server$"]


def test_is_running_false_on_empty_output():
    assert not ComposeDriver(run_cmd=RecordingRunCmd(stdout="")).is_running("odoo")


def test_network_commands():
    assert ComposeDriver(run_cmd=RecordingRunCmd(rc=0)).network_exists("traefik-net")
    assert not ComposeDriver(run_cmd=RecordingRunCmd(rc=1)).network_exists("traefik-net")
    with pytest.raises(DriverInvocationFailed):
        ComposeDriver(run_cmd=RecordingRunCmd(rc=1)).create_network("traefik-net")


def test_dry_run_prints_and_succeeds(tmp_path, caplog):
    caplog.set_level("INFO")
    query = RecordingRunCmd(rc=1)
    driver = ComposeDriver(dry_run=True, query_cmd=query)
    driver.up(tmp_path)
    driver.create_network("traefik-net")

    assert "[dry-run] docker compose -f docker-compose.yml up -d" in caplog.text
    assert "[dry-run] docker network create traefik-net" in caplog.text
    assert query.calls == []


def test_dry_run_still_queries_host():
    query = RecordingRunCmd(stdout="traefik\n")
    driver = ComposeDriver(dry_run=True, query_cmd=query)

    assert driver.is_running("traefik")
    assert driver.network_exists("traefik-net")
    assert [args[:2] for args, _ in query.calls] == [["docker", "ps"], ["docker", "network"]]


def test_injected_run_cmd_answers_queries_in_dry_run():
    driver = ComposeDriver(run_cmd=RecordingRunCmd(stdout="traefik\n"), dry_run=True)
    assert driver.is_running("traefik")


def test_missing_binary_returns_127():
    run_cmd = make_run_cmd()
    rc, _ = run_cmd(["definitely-not-a-real-binary-xyz"], stream=False)
    assert rc == 127
