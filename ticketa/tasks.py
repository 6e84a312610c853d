from loguru import logger

from ticketa.core.celery_config import celery_app
from ticketa.core.config import audit_on_write_enabled
from ticketa.database.db import SessionLocal
from ticketa.services.reports import get_event_stats


@celery_app.task(bind=True)
def audit_event_inventory_task(self, event_id: int) -> dict:
    """Check that an event's ticket counter matches its active reservations."""
    db = SessionLocal()
    try:
        stats = get_event_stats(db, event_id)
    finally:
        db.close()

    if not stats:
        logger.warning("Inventory audit skipped: event {} not found", event_id)
        return {}
    if not stats["consistent"]:
        logger.error(
            "Inventory drift on event {}: total={} available={} pending={} confirmed={}",
            event_id,
            stats["total_tickets"],
            stats["available_tickets"],
            stats["pending_count"],
            stats["confirmed_count"],
        )
    return stats


def enqueue_inventory_audit(event_id: int) -> None:
    """Schedule an audit without letting broker trouble fail the caller."""
    if not audit_on_write_enabled():
        return
    try:
        audit_event_inventory_task.delay(event_id)
    except Exception as exc:
        logger.warning("Could not enqueue inventory audit for event {}: {}", event_id, exc)
