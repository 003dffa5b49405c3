"""Install orchestration: preflight, proxy, render, persist, start.

Every step is safe to re-run. An instance that already exists keeps its
files and secrets; install then only makes sure its containers are up.
"""

import enum
import logging
import time
from dataclasses import dataclass, field

from appdock.catalog import dependencies_of, get_app
from appdock.credentials import generate_secrets
from appdock.errors import DriverInvocationFailed, NotInstalled
from appdock.preflight import check_ports, ensure_network_exists
from appdock.redact import register_secret
from appdock.store import StateStore

logger = logging.getLogger(__name__)

STARTUP_WAIT = 5  # seconds before the advisory liveness check


class InstallState(enum.Enum):
    PREFLIGHT_PENDING = "preflight-pending"
    PROXY_PENDING = "proxy-pending"
    RENDERING = "rendering"
    PERSISTING = "persisting"
    STARTING = "starting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class InstallResult:
    app_name: str
    display_name: str
    state: InstallState
    domain: str = ""
    credentials: dict[str, str] = field(default_factory=dict)
    notes: tuple[str, ...] = ()
    already_installed: bool = False
    running: bool | None = None  # None when the check was skipped


class Installer:
    """Brings an application, and the proxy it depends on, to running.

    Args:
        config: GlobalConfig
        driver: ComposeDriver (or a test double with the same methods)
        store: StateStore, defaults to one rooted at config.app_root
        port_in_use, services, describe: forwarded to preflight.check_ports
        prompt_subdomain: optional callable(descriptor) -> str | None used
            when no subdomain is given for a fresh install
        sleep: injectable for tests
    """

    def __init__(
        self,
        config,
        driver,
        store=None,
        port_in_use=None,
        services=None,
        describe=None,
        prompt_subdomain=None,
        sleep=time.sleep,
        startup_wait=STARTUP_WAIT,
    ):
        self.config = config
        self.driver = driver
        self.store = store or StateStore(config.app_root, config.backup_dir)
        self.port_in_use = port_in_use
        self.services = services
        self.describe = describe
        self.prompt_subdomain = prompt_subdomain
        self.sleep = sleep
        self.startup_wait = startup_wait
        self.transitions: list[tuple[str, InstallState]] = []
        self.results: list[InstallResult] = []  # every instance handled, dependencies first

    def _enter(self, app_name, state, reason=None):
        self.transitions.append((app_name, state))
        if state is InstallState.FAILED:
            logger.debug(f"[{app_name}] failed: {reason}")
        else:
            logger.debug(f"[{app_name}] {state.value}")

    def install(self, app_name, subdomain=None) -> InstallResult:
        """Install (or re-start) one application and everything it depends on.

        Raises UnknownApplication before touching the filesystem, and
        PortConflict before any instance is written or started.
        """
        descriptor = get_app(app_name)
        current = app_name
        try:
            self._enter(app_name, InstallState.PREFLIGHT_PENDING)
            check_ports(self.config, self.driver, self.port_in_use, self.services, self.describe)
            ensure_network_exists(self.driver)

            self._enter(app_name, InstallState.PROXY_PENDING)
            for dep in dependencies_of(app_name):
                current = dep
                self._ensure_running(dep)

            current = app_name
            result = self._install_instance(descriptor, subdomain)
        except Exception as e:
            self._enter(current, InstallState.FAILED, e)
            raise
        return result

    def _ensure_running(self, app_name):
        descriptor = get_app(app_name)
        if not self.store.exists(app_name):
            logger.info(f"{descriptor.display_name} is not installed. Setting it up first.")
            self._install_instance(descriptor, None, dependency=True)
            return

        if self.driver.is_running(descriptor.container):
            logger.info(f"{descriptor.display_name} is already running.")
            return

        logger.info(f"{descriptor.display_name} is not active. Starting...")
        self.driver.up(self.store.instance_dir(app_name))
        logger.info(f"{descriptor.display_name} started.")

    def _resolve_subdomain(self, descriptor, subdomain, prompt=True):
        if subdomain:
            return subdomain
        if prompt and self.prompt_subdomain is not None:
            answer = self.prompt_subdomain(descriptor)
            if answer:
                return answer
        return descriptor.default_subdomain

    def _install_instance(self, descriptor, subdomain, dependency=False) -> InstallResult:
        name = descriptor.name
        instance_dir = self.store.instance_dir(name)
        already_installed = self.store.exists(name)

        if already_installed:
            logger.info(f"{descriptor.display_name} is already installed. Reusing existing configuration.")
        else:
            logger.info(f"Installing {descriptor.display_name}...")
            self._enter(name, InstallState.RENDERING)
            # Dependencies installed on the way take their default subdomain
            subdomain = self._resolve_subdomain(descriptor, subdomain, prompt=not dependency)
            secrets = generate_secrets(descriptor.secrets)
            if descriptor.derive_secrets is not None:
                secrets.update(descriptor.derive_secrets(secrets))
            rendered = descriptor.render(self.config, secrets, subdomain)

            self._enter(name, InstallState.PERSISTING)
            self.store.persist(name, rendered)

        env = self.store.read_env(name)
        for key in descriptor.secrets:
            register_secret(env.get(key, ""))

        self._enter(name, InstallState.STARTING)
        running = self._start(descriptor, instance_dir)

        self._enter(name, InstallState.DONE)
        result = InstallResult(
            app_name=name,
            display_name=descriptor.display_name,
            state=InstallState.DONE,
            domain=env.get(descriptor.domain_key, ""),
            credentials={key: env[key] for key in descriptor.shown_secrets if key in env},
            notes=descriptor.notes,
            already_installed=already_installed,
            running=running,
        )
        self.results.append(result)
        return result

    def _start(self, descriptor, instance_dir):
        """Bring the stack up; the liveness check afterwards is advisory only."""
        try:
            self.driver.up(instance_dir)
        except DriverInvocationFailed as e:
            logger.warning(f"Warning: starting {descriptor.display_name} failed: {e}")

        if self.driver.dry_run:
            return None

        self.sleep(self.startup_wait)
        running = self.driver.is_running(descriptor.container)
        if running:
            logger.info(f"{descriptor.display_name} container is running!")
        else:
            logger.warning(
                f"Warning: {descriptor.display_name} container does not appear to be running yet. "
                f"Check the logs with 'appdock logs {descriptor.name}'."
            )
        return running


def manage_app(action, app_name, store, driver):
    """start / stop / restart / logs for an installed application."""
    descriptor = get_app(app_name)
    if not store.exists(app_name):
        raise NotInstalled(app_name)

    instance_dir = store.instance_dir(app_name)
    if action == "start":
        logger.info(f"Starting {app_name}...")
        driver.up(instance_dir)
        logger.info(f"{descriptor.display_name} has been started.")
    elif action == "stop":
        logger.info(f"Stopping {app_name}...")
        driver.down(instance_dir)
        logger.info(f"{descriptor.display_name} has been stopped.")
    elif action == "restart":
        logger.info(f"Restarting {app_name}...")
        driver.restart(instance_dir)
        logger.info(f"{descriptor.display_name} has been restarted.")
    elif action == "logs":
        logger.info(f"Showing logs for {app_name}...")
        driver.logs(instance_dir, follow=True)
    else:
        raise ValueError(f"Unknown action: {action}")
