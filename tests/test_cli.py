"""End-to-end CLI tests. Nothing is started: commands either fail before
reaching docker or run with --dry-run, which only issues read-only queries."""

import os
import socket
import tarfile

import pytest


def _free_port():
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def configured_root(run_cli, tmp_path):
    """Application root set up on unused high ports instead of 80/443."""
    root = tmp_path / "apps"
    rc, _, stderr = run_cli(
        "setup",
        "--non-interactive",
        "--http-port",
        str(_free_port()),
        "--https-port",
        str(_free_port()),
        app_root=root,
    )
    assert rc == 0, stderr
    return root


# ── Help and usage ──────────────────────────────────────────────


def test_help_exits_zero(run_cli):
    rc, stdout, _ = run_cli("help")
    assert rc == 0
    assert "install" in stdout
    assert "activepieces" in stdout


def test_no_command_prints_help(run_cli):
    rc, stdout, _ = run_cli()
    assert rc == 0
    assert "usage: appdock" in stdout


def test_install_without_app_exits_one(run_cli):
    rc, _, stderr = run_cli("install")
    assert rc == 1
    assert "usage:" in stderr


def test_unknown_command_exits_one(run_cli):
    rc, _, _ = run_cli("frobnicate")
    assert rc == 1


# ── install ─────────────────────────────────────────────────────


def test_install_unknown_app(run_cli, tmp_path):
    root = tmp_path / "apps"
    rc, stdout, _ = run_cli("install", "unknown-app", app_root=root)

    assert rc == 1
    assert "Unknown application: unknown-app" in stdout
    assert not (root / "unknown-app").exists()
    assert not (root / "traefik").exists()


def test_install_dry_run(run_cli, configured_root):
    root = configured_root
    rc, stdout, stderr = run_cli("install", "windmill", "--subdomain", "flows", "--dry-run", app_root=root)

    assert rc == 0, stderr
    assert "[dry-run] docker compose -f docker-compose.yml up -d" in stdout
    assert "Windmill has been installed." in stdout
    assert "URL: https://flows.example.com" in stdout
    assert "Traefik Password:" in stdout
    assert (root / ".env").is_file()
    assert (root / "traefik" / "docker-compose.yml").is_file()
    assert (root / "windmill" / "docker-compose.yml").is_file()


def test_install_log_file_redacts_credentials(run_cli, configured_root):
    root = configured_root
    rc, _, _ = run_cli("install", "traefik", "--dry-run", app_root=root)
    assert rc == 0

    password = [
        line.split("=", 1)[1]
        for line in (root / "traefik" / ".env").read_text().splitlines()
        if line.startswith("TRAEFIK_PASSWORD=")
    ][0]
    log_files = os.listdir(root / "logs")
    assert len(log_files) == 1
    content = (root / "logs" / log_files[0]).read_text()
    assert "Traefik Password: ***" in content
    assert password not in content


# ── list / manage ───────────────────────────────────────────────


def test_list_empty(run_cli):
    rc, stdout, _ = run_cli("list")
    assert rc == 0
    assert "No applications installed." in stdout


def test_list_after_install(run_cli, configured_root):
    root = configured_root
    run_cli("install", "odoo", "--dry-run", app_root=root)

    rc, stdout, _ = run_cli("list", app_root=root)
    assert rc == 0
    assert "✓ Traefik - Reverse Proxy/Load Balancer (https://traefik.example.com)" in stdout
    assert "✓ Odoo" in stdout
    assert "https://erp.example.com" in stdout


def test_start_not_installed(run_cli):
    rc, stdout, _ = run_cli("start", "odoo")
    assert rc == 1
    assert "Application odoo is not installed." in stdout


def test_restart_dry_run(run_cli, configured_root):
    root = configured_root
    run_cli("install", "windmill", "--dry-run", app_root=root)

    rc, stdout, _ = run_cli("restart", "windmill", "--dry-run", app_root=root)
    assert rc == 0
    assert "[dry-run] docker compose -f docker-compose.yml restart" in stdout


# ── backup / restore ────────────────────────────────────────────


def test_backups_empty(run_cli):
    rc, stdout, _ = run_cli("backups")
    assert rc == 0
    assert "No backups found." in stdout


def test_backup_and_list(run_cli, configured_root):
    root = configured_root
    run_cli("install", "windmill", "--dry-run", app_root=root)

    rc, stdout, _ = run_cli("backup", "windmill", app_root=root)
    assert rc == 0
    assert "Backup created:" in stdout

    archives = os.listdir(root / "backups")
    assert len(archives) == 1
    assert archives[0].startswith("windmill_")
    with tarfile.open(root / "backups" / archives[0]) as tar:
        assert "windmill/docker-compose.yml" in tar.getnames()

    rc, stdout, _ = run_cli("backups", app_root=root)
    assert rc == 0
    assert "windmill - " in stdout


def test_backup_not_installed(run_cli):
    rc, stdout, _ = run_cli("backup", "mautic")
    assert rc == 1
    assert "not installed" in stdout


def test_restore_missing_file(run_cli, tmp_path):
    rc, stdout, _ = run_cli("restore", str(tmp_path / "odoo_20240101000000.tar.gz"))
    assert rc == 1
    assert "Backup file does not exist" in stdout


def test_restore_dry_run(run_cli, configured_root):
    root = configured_root
    run_cli("install", "windmill", "--dry-run", app_root=root)
    run_cli("backup", "windmill", app_root=root)
    archive = root / "backups" / os.listdir(root / "backups")[0]

    rc, stdout, _ = run_cli("restore", str(archive), "--dry-run", app_root=root)
    assert rc == 0
    assert "[dry-run] move" in stdout
    assert "windmill: dry-run (not restored)." in stdout
    assert not any(name.startswith("windmill_old_") for name in os.listdir(root))
    assert (root / "windmill" / "docker-compose.yml").is_file()


# ── configuration errors ────────────────────────────────────────


def test_invalid_port_in_config(run_cli, tmp_path):
    root = tmp_path / "apps"
    root.mkdir()
    (root / ".env").write_text("DOMAIN_SUFFIX=example.com\nHTTP_PORT=eighty\n")

    rc, stdout, stderr = run_cli("list", app_root=root)
    assert rc == 1
    assert "Invalid value for HTTP_PORT: 'eighty'" in stdout
    assert "Traceback" not in stderr


def test_setup_force_repairs_invalid_config(run_cli, tmp_path):
    root = tmp_path / "apps"
    root.mkdir()
    (root / ".env").write_text("HTTP_PORT=eighty\n")

    rc, _, _ = run_cli("setup", "--non-interactive", "--force", "--http-port", "8080", app_root=root)
    assert rc == 0
    assert "HTTP_PORT=8080" in (root / ".env").read_text()
