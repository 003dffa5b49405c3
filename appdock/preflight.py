"""Preflight checks run before any state is mutated: proxy ports and network."""

import logging
import socket

import psutil

from appdock.catalog import PROXY_NETWORK, get_app
from appdock.catalog.types import PROXY_APP
from appdock.driver import make_run_cmd
from appdock.errors import PortConflict

logger = logging.getLogger(__name__)

# System services that commonly hold 80/443 and may be stopped for the proxy
KNOWN_CONFLICTING_SERVICES = ("nginx", "apache2", "httpd")


def _listeners(port):
    """psutil connections listening on the given TCP port."""
    return [
        c
        for c in psutil.net_connections(kind="inet")
        if c.status == psutil.CONN_LISTEN and c.laddr and c.laddr.port == port
    ]


def is_port_in_use(port) -> bool:
    """True if something listens on the port.

    Falls back to a loopback connect when the platform refuses to list
    sockets for unprivileged users.
    """
    try:
        return bool(_listeners(port))
    except psutil.AccessDenied:
        try:
            with socket.create_connection(("127.0.0.1", port), timeout=1):
                return True
        except OSError:
            return False


def describe_listener(port) -> str | None:
    """Best-effort 'name (pid N)' of the process listening on the port."""
    try:
        conns = _listeners(port)
    except psutil.AccessDenied:
        return None
    for c in conns:
        if c.pid is None:
            continue
        try:
            return f"{psutil.Process(c.pid).name()} (pid {c.pid})"
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    return None


class SystemdServices:
    """systemctl wrapper for the services that may block the proxy ports.

    is_active() only reads, so it runs for real even in dry-run mode.
    """

    def __init__(self, run_cmd=None, dry_run=False):
        self.run_cmd = run_cmd or make_run_cmd(dry_run=dry_run)
        self.query_cmd = run_cmd or make_run_cmd()

    def is_active(self, name) -> bool:
        rc, _ = self.query_cmd(["systemctl", "is-active", "--quiet", name], stream=False)
        return rc == 0

    def stop_and_disable(self, name):
        self.run_cmd(["systemctl", "stop", name], stream=False)
        self.run_cmd(["systemctl", "disable", name], stream=False)


def ensure_network_exists(driver, name=PROXY_NETWORK):
    """Create the shared proxy network unless it already exists."""
    logger.info(f"Checking {name} network...")
    if driver.network_exists(name):
        logger.info(f"Network {name} already exists.")
        return False
    logger.info(f"Network {name} does not exist. Creating...")
    driver.create_network(name)
    logger.info(f"Network {name} created.")
    return True


def check_ports(config, driver, port_in_use=None, services=None, describe=None):
    """Make sure the proxy's HTTP/HTTPS ports are free or held by the proxy.

    free                        -> proceed
    held by the running proxy   -> proceed
    known web server active     -> stop and disable it, proceed once the port is free
    anything else               -> PortConflict; unknown processes are never killed

    In dry-run the stop is only printed, so the port is not checked again.
    """
    port_in_use = port_in_use or is_port_in_use
    describe = describe or describe_listener
    services = services or SystemdServices(dry_run=driver.dry_run)
    proxy_container = get_app(PROXY_APP).container

    logger.info("Checking port availability...")
    for port in dict.fromkeys((config.http_port, config.https_port)):
        if not port_in_use(port):
            logger.info(f"Port {port} is available.")
            continue

        logger.warning(f"Port {port} is already in use. Checking if it's Traefik or a known web server...")
        if driver.is_running(proxy_container):
            logger.info(f"Port {port} is being used by Traefik, which is fine.")
            continue

        active = [name for name in KNOWN_CONFLICTING_SERVICES if services.is_active(name)]
        if active:
            for name in active:
                logger.warning(f"{name} is active and blocking port {port}. Stopping and disabling...")
                services.stop_and_disable(name)
                logger.info(f"{name} stopped and disabled.")
            if driver.dry_run or not port_in_use(port):
                continue
            logger.warning(f"Port {port} is still in use after stopping {', '.join(active)}.")

        raise PortConflict(port, describe(port))
