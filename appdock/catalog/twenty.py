"""Twenty CRM: server, worker, PostgreSQL and Redis on a private network."""

from appdock.catalog.types import PROXY_NETWORK, AppDescriptor, RenderedApp, router_labels

CRON_SCRIPT = "start-cron-jobs.sh"


def render(config, secrets, subdomain):
    domain = config.domain_for(subdomain)
    app_secret = secrets["APP_SECRET"]
    compose = f"""services:
  change-vol-ownership:
    image: ubuntu
    user: root
    volumes:
      - server-local-data:/tmp/server-local-data
      - docker-data:/tmp/docker-data
    command: >
      bash -c "
      chown -R 1000:1000 /tmp/server-local-data
      && chown -R 1000:1000 /tmp/docker-data"

  server:
    image: twentycrm/twenty:latest
    container_name: twenty-server
    volumes:
      - server-local-data:/app/packages/twenty-server/.local-storage
      - docker-data:/app/docker-data
    environment:
      NODE_PORT: 3000
      PG_DATABASE_URL: postgres://postgres:postgres@db:5432/default
      SERVER_URL: https://{domain}
      REDIS_URL: redis://redis:6379
      STORAGE_TYPE: local
      APP_SECRET: {app_secret}
    depends_on:
      change-vol-ownership:
        condition: service_completed_successfully
      db:
        condition: service_healthy
    healthcheck:
      test: curl --fail http://localhost:3000/healthz
      interval: 5s
      timeout: 5s
      retries: 10
    restart: always
    networks:
      - default
      - {PROXY_NETWORK}
    labels:
{router_labels("twenty", domain, 3000)}

  worker:
    image: twentycrm/twenty:latest
    container_name: twenty-worker
    command: ['yarn', 'worker:prod']
    environment:
      PG_DATABASE_URL: postgres://postgres:postgres@db:5432/default
      SERVER_URL: https://{domain}
      REDIS_URL: redis://redis:6379
      DISABLE_DB_MIGRATIONS: 'true'
      STORAGE_TYPE: local
      APP_SECRET: {app_secret}
    depends_on:
      db:
        condition: service_healthy
      server:
        condition: service_healthy
    restart: always
    networks:
      - default

  db:
    image: postgres:16
    container_name: twenty-db
    volumes:
      - db-data:/var/lib/postgresql/data
    environment:
      POSTGRES_USER: postgres
      POSTGRES_PASSWORD: postgres
    healthcheck:
      test: pg_isready -U postgres -h localhost -d postgres
      interval: 5s
      timeout: 5s
      retries: 10
    restart: always
    networks:
      - default

  redis:
    image: redis
    container_name: twenty-redis
    restart: always
    networks:
      - default

volumes:
  docker-data:
  db-data:
  server-local-data:

networks:
  default:
  {PROXY_NETWORK}:
    external: true
"""
    env = f"""# Twenty CRM Configuration
APP_SECRET={app_secret}
PG_DATABASE_PASSWORD=postgres
TWENTY_DOMAIN={domain}
STORAGE_TYPE=local
"""
    cron = """#!/bin/bash
docker exec twenty-server yarn workspace twenty-server cron:run
"""
    return RenderedApp(
        compose=compose,
        env=env,
        files={CRON_SCRIPT: cron},
        executables=(CRON_SCRIPT,),
    )


DESCRIPTOR = AppDescriptor(
    name="twenty",
    display_name="Twenty CRM",
    description="CRM",
    default_subdomain="crm",
    render=render,
    container="twenty-server",
    domain_key="TWENTY_DOMAIN",
    secrets={"APP_SECRET": 16},
    notes=(
        "You will need to create an admin account on first login.",
        "Initial setup may take a few minutes to complete.",
    ),
)
