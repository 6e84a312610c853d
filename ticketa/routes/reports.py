from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ticketa.core.principal import Principal, require_admin
from ticketa.database.db import get_db
from ticketa.schemas.reports import EventStatsOut, ReportOut
from ticketa.services.reports import get_event_stats, get_overall_report

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=ReportOut)
def overall_report(_: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    """Aggregate report across all events."""
    return get_overall_report(db)


@router.get("/events/{event_id}", response_model=EventStatsOut)
def event_report(event_id: int, _: Principal = Depends(require_admin), db: Session = Depends(get_db)):
    stats = get_event_stats(db, event_id)
    if not stats:
        raise HTTPException(status_code=404, detail="Event not found")
    return stats
