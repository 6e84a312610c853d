from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ticketa.core.principal import Principal, get_principal, require_admin
from ticketa.database.db import get_db
from ticketa.models.events import EventStatus
from ticketa.schemas.events import EventCreate, EventOut
from ticketa.stores.sql import SqlInventoryStore

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventOut, status_code=201)
def create_event(
    payload: EventCreate,
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return SqlInventoryStore(db).add(
        title=payload.title,
        description=payload.description,
        location=payload.location,
        starts_at=payload.starts_at,
        total_tickets=payload.total_tickets,
    )


@router.get("", response_model=list[EventOut])
def list_events(db: Session = Depends(get_db)):
    return SqlInventoryStore(db).list_events()


@router.get("/admin", response_model=list[EventOut])
def list_all_events(
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """All events, drafts and canceled ones included."""
    return SqlInventoryStore(db).list_events(include_unpublished=True)


@router.get("/{event_id}", response_model=EventOut)
def get_event(
    event_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    event = SqlInventoryStore(db).get(event_id)
    # Unpublished events stay invisible to participants.
    if not event or (not principal.is_admin and not event.is_published):
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.patch("/{event_id}/publish", response_model=EventOut)
def publish_event(
    event_id: int,
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _set_status(db, event_id, EventStatus.PUBLISHED)


@router.patch("/{event_id}/cancel", response_model=EventOut)
def cancel_event(
    event_id: int,
    _: Principal = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _set_status(db, event_id, EventStatus.CANCELED)


def _set_status(db: Session, event_id: int, status: EventStatus):
    event = SqlInventoryStore(db).set_status(event_id, status)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event
