"""Application catalog: the fixed set of installable applications."""

from appdock.catalog import activepieces, mautic, odoo, traefik, twenty, windmill
from appdock.catalog.types import PROXY_APP, PROXY_NETWORK, AppDescriptor, RenderedApp
from appdock.errors import UnknownApplication

# Display order for help and list output
APPS: dict[str, AppDescriptor] = {
    d.name: d
    for d in (
        traefik.DESCRIPTOR,
        activepieces.DESCRIPTOR,
        twenty.DESCRIPTOR,
        windmill.DESCRIPTOR,
        odoo.DESCRIPTOR,
        mautic.DESCRIPTOR,
    )
}


def get_app(name) -> AppDescriptor:
    if name not in APPS:
        raise UnknownApplication(name, APPS)
    return APPS[name]


def list_apps() -> list[AppDescriptor]:
    return list(APPS.values())


def dependencies_of(name) -> list[str]:
    """Transitive dependencies of an app, deepest first, without duplicates."""
    ordered = []

    def _visit(app_name, chain):
        for dep in get_app(app_name).dependencies:
            if dep in chain:
                raise ValueError(f"Dependency cycle: {' -> '.join((*chain, dep))}")
            _visit(dep, (*chain, dep))
            if dep not in ordered:
                ordered.append(dep)

    _visit(name, (name,))
    return ordered


__all__ = [
    "APPS",
    "PROXY_APP",
    "PROXY_NETWORK",
    "AppDescriptor",
    "RenderedApp",
    "dependencies_of",
    "get_app",
    "list_apps",
]
