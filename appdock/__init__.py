"""appdock: install self-hosted web applications behind a shared Traefik proxy."""

__version__ = "0.1.0"
