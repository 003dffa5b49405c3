"""Catalog data types: application descriptors and rendered output."""

from collections.abc import Callable
from dataclasses import dataclass, field

PROXY_APP = "traefik"
PROXY_NETWORK = "traefik-net"


@dataclass
class RenderedApp:
    """Everything a renderer produces for one instance directory."""

    compose: str
    env: str
    files: dict[str, str] = field(default_factory=dict)  # relative path -> content
    dirs: tuple[str, ...] = ()
    executables: tuple[str, ...] = ()


@dataclass(frozen=True)
class AppDescriptor:
    """Static description of a supported application. Compiled in, not user data."""

    name: str
    display_name: str
    description: str
    default_subdomain: str
    render: Callable  # (config, secrets, subdomain) -> RenderedApp
    container: str  # container checked after start
    domain_key: str  # .env key holding the resolved domain
    secrets: dict[str, int] = field(default_factory=dict)  # key -> byte length
    dependencies: tuple[str, ...] = (PROXY_APP,)
    derive_secrets: Callable | None = None  # (secrets) -> extra values, e.g. hashes
    shown_secrets: tuple[str, ...] = ()  # printed once after install
    notes: tuple[str, ...] = ()


def router_labels(router, domain, port, indent=6):
    """Traefik labels routing https://{domain} to the container's port."""
    pad = " " * indent
    labels = [
        "traefik.enable=true",
        f"traefik.docker.network={PROXY_NETWORK}",
        f"traefik.http.routers.{router}-rt.rule=Host(`{domain}`)",
        f"traefik.http.routers.{router}-rt.entrypoints=websecure",
        f"traefik.http.routers.{router}-rt.tls=true",
        f"traefik.http.routers.{router}-rt.tls.certresolver=letsencrypt",
        f"traefik.http.services.{router}-svc.loadbalancer.server.port={port}",
    ]
    return "\n".join(f'{pad}- "{label}"' for label in labels)
