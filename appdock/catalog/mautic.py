"""Mautic marketing automation with MySQL."""

from appdock.catalog.types import PROXY_NETWORK, AppDescriptor, RenderedApp, router_labels


def render(config, secrets, subdomain):
    domain = config.domain_for(subdomain)
    mysql_password = secrets["MYSQL_PASSWORD"]
    root_password = secrets["MYSQL_ROOT_PASSWORD"]
    compose = f"""services:
  mautic:
    image: mautic/mautic:v4-apache
    container_name: mautic
    restart: unless-stopped
    depends_on:
      - mautic-db
    environment:
      MAUTIC_DB_HOST: mautic-db
      MAUTIC_DB_USER: mautic
      MAUTIC_DB_PASSWORD: {mysql_password}
      MAUTIC_DB_NAME: mautic
      MAUTIC_RUN_CRON_JOBS: 'true'
      MAUTIC_TRUSTED_PROXIES: 'traefik'
    volumes:
      - mautic-data:/var/www/html
    networks:
      - {PROXY_NETWORK}
    labels:
{router_labels("mautic", domain, 80)}

  mautic-db:
    image: mysql:8.0
    container_name: mautic-db
    restart: unless-stopped
    environment:
      MYSQL_DATABASE: mautic
      MYSQL_USER: mautic
      MYSQL_PASSWORD: {mysql_password}
      MYSQL_ROOT_PASSWORD: {root_password}
    command: --character-set-server=utf8mb4 --collation-server=utf8mb4_unicode_ci --sql-mode=""
    volumes:
      - mautic-db-data:/var/lib/mysql
    networks:
      - {PROXY_NETWORK}

networks:
  {PROXY_NETWORK}:
    external: true

volumes:
  mautic-data:
  mautic-db-data:
"""
    env = f"""# Mautic Configuration
MYSQL_PASSWORD={mysql_password}
MYSQL_ROOT_PASSWORD={root_password}
MAUTIC_DOMAIN={domain}
"""
    return RenderedApp(compose=compose, env=env)


DESCRIPTOR = AppDescriptor(
    name="mautic",
    display_name="Mautic",
    description="Marketing Automation",
    default_subdomain="mautic",
    render=render,
    container="mautic",
    domain_key="MAUTIC_DOMAIN",
    secrets={"MYSQL_PASSWORD": 12, "MYSQL_ROOT_PASSWORD": 12},
    notes=(
        "You will need to create an admin account on first login.",
        "Initial setup may take a few minutes. If you see a database error, wait a moment and refresh.",
    ),
)
