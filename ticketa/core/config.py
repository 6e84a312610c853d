import os

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./ticketa.db")

# Redis configuration (Celery broker and result backend)
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

TICKET_BRAND = os.getenv("TICKET_BRAND", "Ticketa Application")

AUDIT_ON_WRITE = os.getenv("AUDIT_ON_WRITE", "true").lower() in ("1", "true", "yes")


def get_database_url():
    return DATABASE_URL


def get_redis_url():
    return REDIS_URL


def get_log_level():
    return LOG_LEVEL


def get_ticket_brand():
    return TICKET_BRAND


def audit_on_write_enabled():
    return AUDIT_ON_WRITE
