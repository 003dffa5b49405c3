"""ActivePieces automation with PostgreSQL and Redis."""

from appdock.catalog.types import PROXY_NETWORK, AppDescriptor, RenderedApp, router_labels


def render(config, secrets, subdomain):
    domain = config.domain_for(subdomain)
    compose = f"""services:
  activepieces:
    image: activepieces/activepieces:latest
    container_name: activepieces
    restart: unless-stopped
    depends_on:
      - postgres
      - redis
    environment:
      - AP_ENCRYPTION_KEY={secrets["ENCRYPTION_KEY"]}
      - AP_JWT_SECRET={secrets["JWT_SECRET"]}
      - AP_FRONTEND_URL=https://{domain}
      - AP_POSTGRES_HOST=postgres
      - AP_POSTGRES_PORT=5432
      - AP_POSTGRES_DATABASE=activepieces
      - AP_POSTGRES_USERNAME=activepieces
      - AP_POSTGRES_PASSWORD=activepieces
      - AP_REDIS_HOST=redis
      - AP_REDIS_PORT=6379
      - AP_SIGN_UP_ENABLED=true
    networks:
      - {PROXY_NETWORK}
    labels:
{router_labels("activepieces", domain, 80)}

  postgres:
    image: postgres:14
    container_name: ap-postgres
    restart: unless-stopped
    environment:
      - POSTGRES_DB=activepieces
      - POSTGRES_PASSWORD=activepieces
      - POSTGRES_USER=activepieces
    volumes:
      - postgres_data:/var/lib/postgresql/data
    networks:
      - {PROXY_NETWORK}

  redis:
    image: redis:alpine
    container_name: ap-redis
    restart: unless-stopped
    networks:
      - {PROXY_NETWORK}

networks:
  {PROXY_NETWORK}:
    external: true

volumes:
  postgres_data:
"""
    env = f"""# ActivePieces Configuration
ENCRYPTION_KEY={secrets["ENCRYPTION_KEY"]}
JWT_SECRET={secrets["JWT_SECRET"]}
AP_DOMAIN={domain}
"""
    return RenderedApp(compose=compose, env=env)


DESCRIPTOR = AppDescriptor(
    name="activepieces",
    display_name="ActivePieces",
    description="Automation tool",
    default_subdomain="automation",
    render=render,
    container="activepieces",
    domain_key="AP_DOMAIN",
    secrets={"ENCRYPTION_KEY": 16, "JWT_SECRET": 16},
    notes=("You will need to create an admin account on first login.",),
)
