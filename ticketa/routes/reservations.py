from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ticketa.core.principal import Principal, get_principal, require_admin
from ticketa.database.db import get_db
from ticketa.models.reservations import ReservationStatus
from ticketa.schemas.reservations import ReservationCreate, ReservationOut
from ticketa.services.reservations import ReservationService
from ticketa.stores.interfaces import ReservationFilters
from ticketa.stores.sql import SqlInventoryStore, SqlReservationStore
from ticketa.tasks import enqueue_inventory_audit

router = APIRouter(prefix="/reservations", tags=["reservations"])


def get_reservation_service(db: Session = Depends(get_db)) -> ReservationService:
    return ReservationService(SqlInventoryStore(db), SqlReservationStore(db))


@router.post("", response_model=ReservationOut, status_code=201)
def create_reservation(
    payload: ReservationCreate,
    principal: Principal = Depends(get_principal),
    service: ReservationService = Depends(get_reservation_service),
):
    reservation = service.create(payload.event_id, principal.user_id)
    enqueue_inventory_audit(payload.event_id)
    return reservation


@router.get("", response_model=list[ReservationOut])
def list_reservations(
    event_id: int | None = Query(default=None, alias="eventId"),
    user_id: int | None = Query(default=None, alias="userId"),
    status: ReservationStatus | None = Query(default=None),
    principal: Principal = Depends(get_principal),
    service: ReservationService = Depends(get_reservation_service),
):
    filters = ReservationFilters(event_id=event_id, user_id=user_id, status=status)
    return service.find_all(principal, filters)


@router.get("/{reservation_id}", response_model=ReservationOut)
def get_reservation(
    reservation_id: int,
    principal: Principal = Depends(get_principal),
    service: ReservationService = Depends(get_reservation_service),
):
    return service.find_one(reservation_id, principal)


@router.patch("/{reservation_id}/confirm", response_model=ReservationOut)
def confirm_reservation(
    reservation_id: int,
    _: Principal = Depends(require_admin),
    service: ReservationService = Depends(get_reservation_service),
):
    return service.confirm(reservation_id)


@router.patch("/{reservation_id}/refuse", response_model=ReservationOut)
def refuse_reservation(
    reservation_id: int,
    _: Principal = Depends(require_admin),
    service: ReservationService = Depends(get_reservation_service),
):
    reservation = service.refuse(reservation_id)
    enqueue_inventory_audit(reservation.event_id)
    return reservation


@router.delete("/{reservation_id}", response_model=ReservationOut)
def cancel_reservation(
    reservation_id: int,
    principal: Principal = Depends(get_principal),
    service: ReservationService = Depends(get_reservation_service),
):
    reservation = service.cancel(reservation_id, principal)
    enqueue_inventory_audit(reservation.event_id)
    return reservation


@router.get("/{reservation_id}/pdf")
def download_ticket(
    reservation_id: int,
    principal: Principal = Depends(get_principal),
    service: ReservationService = Depends(get_reservation_service),
):
    document = service.issue_document(reservation_id, principal)
    return Response(
        content=document,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=ticket-{reservation_id}.pdf"},
    )
