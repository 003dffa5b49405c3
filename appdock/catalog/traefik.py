"""Traefik reverse proxy: static config, dashboard route and compose file."""

from appdock.catalog.types import PROXY_NETWORK, AppDescriptor, RenderedApp
from appdock.credentials import hash_password

DASHBOARD_USER = "admin"


def _derive(secrets):
    return {"TRAEFIK_PASSWORD_HASH": hash_password(secrets["TRAEFIK_PASSWORD"])}


def generate_static_config(config):
    """traefik.yml: entrypoints on the configured ports, docker + file providers, ACME."""
    return f"""global:
  checkNewVersion: true
  sendAnonymousUsage: false

api:
  dashboard: true
  insecure: false

entryPoints:
  web:
    address: ":{config.http_port}"
    http:
      redirections:
        entryPoint:
          to: websecure
          scheme: https
  websecure:
    address: ":{config.https_port}"
    http:
      tls:
        certResolver: letsencrypt

providers:
  docker:
    endpoint: "unix:///var/run/docker.sock"
    exposedByDefault: false
    network: {PROXY_NETWORK}
  file:
    directory: /etc/traefik/dynamic
    watch: true

certificatesResolvers:
  letsencrypt:
    acme:
      email: {config.admin_email}
      storage: /letsencrypt/acme.json
      httpChallenge:
        entryPoint: web
"""


def generate_dashboard_config(domain, user, password_hash):
    """Dynamic config exposing the dashboard behind basic auth."""
    return f"""http:
  routers:
    dashboard:
      rule: "Host(`{domain}`)"
      service: api@internal
      tls:
        certResolver: letsencrypt
      middlewares:
        - auth
      entryPoints:
        - websecure
  middlewares:
    auth:
      basicAuth:
        users:
          - "{user}:{password_hash}"
"""


def render(config, secrets, subdomain):
    domain = config.domain_for(subdomain)
    compose = f"""services:
  traefik:
    image: traefik:v2.10
    container_name: traefik
    restart: unless-stopped
    security_opt:
      - no-new-privileges:true
    ports:
      - "{config.http_port}:{config.http_port}"
      - "{config.https_port}:{config.https_port}"
    volumes:
      - /var/run/docker.sock:/var/run/docker.sock:ro
      - ./config/traefik.yml:/etc/traefik/traefik.yml:ro
      - ./config/dynamic:/etc/traefik/dynamic:ro
      - ./letsencrypt:/letsencrypt
    networks:
      - {PROXY_NETWORK}
    labels:
      - "traefik.enable=true"
      - "traefik.docker.network={PROXY_NETWORK}"

networks:
  {PROXY_NETWORK}:
    external: true
"""
    env = f"""# Traefik Configuration
TRAEFIK_USER={DASHBOARD_USER}
TRAEFIK_PASSWORD={secrets["TRAEFIK_PASSWORD"]}
TRAEFIK_DOMAIN={domain}
"""
    return RenderedApp(
        compose=compose,
        env=env,
        files={
            "config/traefik.yml": generate_static_config(config),
            "config/dynamic/dashboard.yml": generate_dashboard_config(
                domain, DASHBOARD_USER, secrets["TRAEFIK_PASSWORD_HASH"]
            ),
        },
        dirs=("letsencrypt",),
    )


DESCRIPTOR = AppDescriptor(
    name="traefik",
    display_name="Traefik",
    description="Reverse Proxy/Load Balancer",
    default_subdomain="traefik",
    render=render,
    container="traefik",
    domain_key="TRAEFIK_DOMAIN",
    secrets={"TRAEFIK_PASSWORD": 8},
    dependencies=(),
    derive_secrets=_derive,
    shown_secrets=("TRAEFIK_PASSWORD",),
    notes=(f"Dashboard username: {DASHBOARD_USER}",),
)
