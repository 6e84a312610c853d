from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ticketa.models.events import Event
from ticketa.models.reservations import Reservation, ReservationStatus
from ticketa.stores.sql import SqlReservationStore


def _status_counts(db: Session, event_id: int | None = None) -> dict[str, int]:
    stmt = select(Reservation.status, func.count(Reservation.id)).group_by(Reservation.status)
    if event_id is not None:
        stmt = stmt.where(Reservation.event_id == event_id)
    counts = {status.value: 0 for status in ReservationStatus}
    for status, count in db.execute(stmt):
        counts[status] = int(count)
    return counts


def get_event_stats(db: Session, event_id: int) -> dict:
    """Inventory figures of one event, plus whether the counter matches its reservations."""
    event = db.get(Event, event_id, populate_existing=True)
    if not event:
        return {}

    counts = _status_counts(db, event_id)
    active = SqlReservationStore(db).count_active(event_id)

    return {
        "event_id": event.id,
        "status": event.status,
        "total_tickets": event.total_tickets,
        "available_tickets": event.available_tickets,
        "pending_count": counts[ReservationStatus.PENDING.value],
        "confirmed_count": counts[ReservationStatus.CONFIRMED.value],
        "refused_count": counts[ReservationStatus.REFUSED.value],
        "cancelled_count": counts[ReservationStatus.CANCELLED.value],
        "consistent": event.total_tickets - event.available_tickets == active,
    }


def get_overall_report(db: Session) -> dict:
    """Return aggregated totals across all events."""
    total_tickets = db.scalar(select(func.sum(Event.total_tickets)))
    total_available = db.scalar(select(func.sum(Event.available_tickets)))
    counts = _status_counts(db)

    return {
        "total_tickets": int(total_tickets or 0),
        "total_available": int(total_available or 0),
        "total_reserved": int(total_tickets or 0) - int(total_available or 0),
        "total_pending": counts[ReservationStatus.PENDING.value],
        "total_confirmed": counts[ReservationStatus.CONFIRMED.value],
    }
