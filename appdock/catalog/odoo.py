"""Odoo ERP with a PostgreSQL database."""

from appdock.catalog.types import PROXY_NETWORK, AppDescriptor, RenderedApp, router_labels


def render(config, secrets, subdomain):
    domain = config.domain_for(subdomain)
    postgres_password = secrets["POSTGRES_PASSWORD"]
    compose = f"""services:
  odoo:
    image: odoo:16
    container_name: odoo
    restart: unless-stopped
    depends_on:
      - db
    environment:
      - HOST=db
      - PORT=5432
      - USER=odoo
      - PASSWORD={postgres_password}
      - ADMIN_PASSWORD={secrets["ADMIN_PASSWORD"]}
    volumes:
      - odoo-data:/var/lib/odoo
      - ./addons:/mnt/extra-addons
    networks:
      - {PROXY_NETWORK}
    labels:
{router_labels("odoo", domain, 8069)}

  db:
    image: postgres:14
    container_name: odoo-db
    restart: unless-stopped
    environment:
      - POSTGRES_DB=postgres
      - POSTGRES_PASSWORD={postgres_password}
      - POSTGRES_USER=odoo
    volumes:
      - db-data:/var/lib/postgresql/data
    networks:
      - {PROXY_NETWORK}

networks:
  {PROXY_NETWORK}:
    external: true

volumes:
  odoo-data:
  db-data:
"""
    env = f"""# Odoo Configuration
POSTGRES_PASSWORD={postgres_password}
ADMIN_PASSWORD={secrets["ADMIN_PASSWORD"]}
ODOO_DOMAIN={domain}
"""
    return RenderedApp(compose=compose, env=env, dirs=("addons",))


DESCRIPTOR = AppDescriptor(
    name="odoo",
    display_name="Odoo",
    description="ERP System",
    default_subdomain="erp",
    render=render,
    container="odoo",
    domain_key="ODOO_DOMAIN",
    secrets={"POSTGRES_PASSWORD": 12, "ADMIN_PASSWORD": 12},
    shown_secrets=("ADMIN_PASSWORD",),
    notes=("Please save the admin password in a secure location!",),
)
