from celery import Celery

from ticketa.core.config import get_redis_url

AUDIT_QUEUE = "inventory-audit"


def make_celery(app_name: str = "ticketa", redis_url: str | None = None) -> Celery:
    """Celery app for background inventory audits, with Redis as broker and result store."""
    redis_url = redis_url or get_redis_url()
    celery = Celery(app_name, broker=redis_url, backend=redis_url)
    celery.conf.update(
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        result_expires=3600,
        # An audit is read-only, so redelivery after a worker crash is harmless.
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        task_default_queue=AUDIT_QUEUE,
        task_routes={"ticketa.tasks.*": {"queue": AUDIT_QUEUE}},
        broker_connection_retry_on_startup=True,
    )
    return celery


celery_app = make_celery()
