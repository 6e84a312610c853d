"""SQLAlchemy implementations of the stores.

Each mutating call commits on its own: one call, one atomic storage
operation. Multi-step flows undo earlier steps explicitly.
"""

from contextlib import contextmanager

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ticketa.core.errors import (
    DuplicateActiveReservationError,
    InvalidTransitionError,
    StorageFaultError,
)
from ticketa.models.events import Event, EventStatus
from ticketa.models.reservations import ACTIVE_STATUSES, Reservation, ReservationStatus
from ticketa.stores.interfaces import InventoryStore, ReservationFilters, ReservationStore


@contextmanager
def storage_guard(db: Session, action: str):
    """Roll back and re-raise storage errors as StorageFaultError."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Storage fault while trying to {}: {}", action, exc)
        raise StorageFaultError(f"Storage failure while trying to {action}") from exc


class SqlInventoryStore(InventoryStore):
    def __init__(self, db: Session) -> None:
        self._db = db

    def try_reserve(self, event_id: int) -> Event | None:
        stmt = (
            update(Event)
            .where(Event.id == event_id)
            .where(Event.status == EventStatus.PUBLISHED.value)
            .where(Event.available_tickets > 0)
            .values(available_tickets=Event.available_tickets - 1)
            .execution_options(synchronize_session=False)
        )
        with storage_guard(self._db, f"reserve a ticket for event {event_id}"):
            res = self._db.execute(stmt)
            self._db.commit()
        if res.rowcount != 1:  # type: ignore
            return None
        return self.get(event_id)

    def release(self, event_id: int) -> Event:
        stmt = (
            update(Event)
            .where(Event.id == event_id)
            .values(available_tickets=Event.available_tickets + 1)
            .execution_options(synchronize_session=False)
        )
        with storage_guard(self._db, f"release a ticket of event {event_id}"):
            res = self._db.execute(stmt)
            self._db.commit()
        if res.rowcount != 1:  # type: ignore
            raise StorageFaultError(f"Could not release a ticket: event {event_id} did not match")
        return self.get(event_id)

    def get(self, event_id: int) -> Event | None:
        with storage_guard(self._db, f"load event {event_id}"):
            return self._db.get(Event, event_id, populate_existing=True)

    def add(
        self,
        *,
        title: str,
        total_tickets: int,
        description: str = "",
        location: str = "",
        starts_at=None,
    ) -> Event:
        event = Event(
            title=title,
            description=description,
            location=location,
            starts_at=starts_at,
            total_tickets=total_tickets,
            available_tickets=total_tickets,
            status=EventStatus.DRAFT.value,
        )
        with storage_guard(self._db, "create an event"):
            self._db.add(event)
            self._db.commit()
            self._db.refresh(event)
        return event

    def set_status(self, event_id: int, status: EventStatus) -> Event | None:
        event = self.get(event_id)
        if event is None:
            return None
        with storage_guard(self._db, f"set status of event {event_id}"):
            event.status = status.value
            self._db.commit()
            self._db.refresh(event)
        return event

    def list_events(self, *, include_unpublished: bool = False) -> list[Event]:
        stmt = select(Event)
        if not include_unpublished:
            stmt = stmt.where(Event.status == EventStatus.PUBLISHED.value)
        stmt = stmt.order_by(Event.starts_at.asc().nulls_last(), Event.id.asc())
        with storage_guard(self._db, "list events"):
            return list(self._db.scalars(stmt))


class SqlReservationStore(ReservationStore):
    def __init__(self, db: Session) -> None:
        self._db = db

    def find_active(self, event_id: int, user_id: int) -> Reservation | None:
        stmt = select(Reservation).where(
            Reservation.event_id == event_id,
            Reservation.user_id == user_id,
            Reservation.status.in_(ACTIVE_STATUSES),
        )
        with storage_guard(self._db, "look up active reservations"):
            return self._db.scalars(stmt.execution_options(populate_existing=True)).first()

    def insert(
        self,
        *,
        event_id: int,
        user_id: int,
        ticket_code: str,
        status: ReservationStatus = ReservationStatus.PENDING,
    ) -> Reservation:
        reservation = Reservation(
            event_id=event_id,
            user_id=user_id,
            ticket_code=ticket_code,
            status=status.value,
        )
        self._db.add(reservation)
        try:
            self._db.commit()
        except IntegrityError as exc:
            self._db.rollback()
            # A concurrent create by the same user won the partial unique index.
            if self.find_active(event_id, user_id) is not None:
                raise DuplicateActiveReservationError(event_id, user_id) from exc
            logger.error("Integrity error inserting reservation for event {}: {}", event_id, exc)
            raise StorageFaultError("Storage failure while trying to insert a reservation") from exc
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.error("Storage fault inserting reservation for event {}: {}", event_id, exc)
            raise StorageFaultError("Storage failure while trying to insert a reservation") from exc
        self._db.refresh(reservation)
        return reservation

    def get(self, reservation_id: int, *, populate: bool = False) -> Reservation | None:
        stmt = select(Reservation).where(Reservation.id == reservation_id)
        if populate:
            stmt = stmt.options(joinedload(Reservation.event), joinedload(Reservation.user))
        with storage_guard(self._db, f"load reservation {reservation_id}"):
            return self._db.scalars(stmt.execution_options(populate_existing=True)).first()

    def list_for_user(self, user_id: int, filters: ReservationFilters) -> list[Reservation]:
        stmt = select(Reservation).where(Reservation.user_id == user_id)
        return self._list(stmt, filters, scoped=True)

    def list_all(self, filters: ReservationFilters) -> list[Reservation]:
        stmt = select(Reservation)
        if filters.user_id is not None:
            stmt = stmt.where(Reservation.user_id == filters.user_id)
        return self._list(stmt, filters, scoped=False)

    def _list(self, stmt, filters: ReservationFilters, *, scoped: bool) -> list[Reservation]:
        if filters.event_id is not None:
            stmt = stmt.where(Reservation.event_id == filters.event_id)
        if filters.status is not None:
            stmt = stmt.where(Reservation.status == filters.status.value)
        stmt = stmt.options(joinedload(Reservation.event)).order_by(
            Reservation.created_at.desc(), Reservation.id.desc()
        )
        with storage_guard(self._db, "list reservations"):
            return list(self._db.scalars(stmt).unique())

    def save(
        self, reservation: Reservation, *, expected_status: ReservationStatus | None = None
    ) -> Reservation:
        if expected_status is None:
            with storage_guard(self._db, f"save reservation {reservation.id}"):
                self._db.add(reservation)
                self._db.commit()
                self._db.refresh(reservation)
            return reservation

        new_status = reservation.status
        # Drop the in-memory change; the conditional update below applies it.
        self._db.expire(reservation, ["status"])
        stmt = (
            update(Reservation)
            .where(Reservation.id == reservation.id)
            .where(Reservation.status == expected_status.value)
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        with storage_guard(self._db, f"save reservation {reservation.id}"):
            res = self._db.execute(stmt)
            self._db.commit()
        if res.rowcount != 1:  # type: ignore
            with storage_guard(self._db, f"reload reservation {reservation.id}"):
                current = self._db.scalar(select(Reservation.status).where(Reservation.id == reservation.id))
            raise InvalidTransitionError(
                f"Reservation {reservation.id} is no longer {expected_status.value}, current status: {current}"
            )
        self._db.refresh(reservation)
        return reservation

    def count_active(self, event_id: int) -> int:
        stmt = select(func.count(Reservation.id)).where(
            Reservation.event_id == event_id,
            Reservation.status.in_(ACTIVE_STATUSES),
        )
        with storage_guard(self._db, f"count reservations of event {event_id}"):
            return int(self._db.scalar(stmt) or 0)
