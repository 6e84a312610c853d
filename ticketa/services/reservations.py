"""Reservation lifecycle.

Inventory and reservation writes are separate atomic store calls, so the
service keeps them consistent by ordering and compensation:

* tickets are taken from the event before the reservation is written, and
  given back if that write fails;
* tickets are given back only after the reservation has left an active
  status, and the status is restored if the give-back fails.

A failure between two writes can therefore leave an event short of a
ticket for a moment, but never oversold.
"""

from datetime import datetime, timezone
from typing import Callable

from loguru import logger

from ticketa.core.errors import (
    DuplicateActiveReservationError,
    EventNotFoundError,
    EventNotPublishedError,
    InvalidStateError,
    ReservationError,
    ReservationNotFoundError,
    SoldOutError,
)
from ticketa.core.principal import Principal
from ticketa.models.reservations import Reservation, ReservationStatus
from ticketa.services.tickets import PdfTicketRenderer, TicketRenderer
from ticketa.services.transitions import (
    RELEASING_ACTIONS,
    Action,
    check_transition,
    ensure_can_access,
)
from ticketa.stores.interfaces import InventoryStore, ReservationFilters, ReservationStore


def make_ticket_code(event_id: int, user_id: int, at: datetime) -> str:
    """Human-readable ticket label. Not a credential."""
    micros = int(at.timestamp()) * 1_000_000 + at.microsecond
    return f"{event_id}-{user_id}-{micros}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReservationService:
    def __init__(
        self,
        inventory: InventoryStore,
        reservations: ReservationStore,
        renderer: TicketRenderer | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.inventory = inventory
        self.reservations = reservations
        self.renderer = renderer or PdfTicketRenderer()
        self._clock = clock

    def create(self, event_id: int, user_id: int) -> Reservation:
        """Reserve one ticket of ``event_id`` for ``user_id`` as a pending reservation."""
        if self.reservations.find_active(event_id, user_id) is not None:
            logger.info("User {} already holds an active reservation for event {}", user_id, event_id)
            raise DuplicateActiveReservationError(event_id, user_id)

        if self.inventory.try_reserve(event_id) is None:
            error = self._diagnose_reserve_failure(event_id)
            logger.info("Reservation for event {} by user {} rejected: {}", event_id, user_id, error.code.value)
            raise error

        ticket_code = make_ticket_code(event_id, user_id, self._clock())
        try:
            reservation = self.reservations.insert(
                event_id=event_id, user_id=user_id, ticket_code=ticket_code
            )
        except Exception:
            logger.warning("Reservation insert failed for event {}; releasing the ticket", event_id)
            self.inventory.release(event_id)
            raise

        logger.info(
            "Reservation {} created for event {} by user {} ({})",
            reservation.id,
            event_id,
            user_id,
            ticket_code,
        )
        return reservation

    def _diagnose_reserve_failure(self, event_id: int) -> ReservationError:
        event = self.inventory.get(event_id)
        if event is None:
            return EventNotFoundError(event_id)
        if not event.is_published:
            return EventNotPublishedError(event_id)
        # Also covers a ticket released between the update and this read.
        return SoldOutError(event_id)

    def confirm(self, reservation_id: int) -> Reservation:
        reservation = self._load(reservation_id)
        return self._transition(reservation, Action.CONFIRM)

    def refuse(self, reservation_id: int) -> Reservation:
        reservation = self._load(reservation_id)
        return self._transition(reservation, Action.REFUSE)

    def cancel(self, reservation_id: int, principal: Principal) -> Reservation:
        reservation = self._load(reservation_id)
        ensure_can_access(reservation, principal, "cancel")
        return self._transition(reservation, Action.CANCEL)

    def _transition(self, reservation: Reservation, action: Action) -> Reservation:
        previous = ReservationStatus(reservation.status)
        target = check_transition(reservation, action)

        reservation.status = target.value
        saved = self.reservations.save(reservation, expected_status=previous)

        if action in RELEASING_ACTIONS:
            try:
                self.inventory.release(saved.event_id)
            except Exception:
                logger.warning(
                    "Ticket release failed for reservation {}; restoring status {}",
                    saved.id,
                    previous.value,
                )
                self._restore(saved, previous, target)
                raise

        logger.info("Reservation {} {} -> {}", saved.id, previous.value, target.value)
        return saved

    def _restore(self, reservation: Reservation, previous: ReservationStatus, target: ReservationStatus) -> None:
        reservation.status = previous.value
        try:
            self.reservations.save(reservation, expected_status=target)
        except ReservationError:
            # Leaves the event one ticket short; the inventory audit reports it.
            logger.exception(
                "Could not restore reservation {} to {}; event {} is short one ticket",
                reservation.id,
                previous.value,
                reservation.event_id,
            )

    def find_one(self, reservation_id: int, principal: Principal | None = None) -> Reservation:
        reservation = self._load(reservation_id, populate=True)
        ensure_can_access(reservation, principal)
        return reservation

    def find_all(self, principal: Principal, filters: ReservationFilters | None = None) -> list[Reservation]:
        filters = filters or ReservationFilters()
        if principal.is_admin:
            return self.reservations.list_all(filters)
        # Participants are pinned to their own reservations whatever user filter they send.
        return self.reservations.list_for_user(principal.user_id, filters)

    def issue_document(self, reservation_id: int, principal: Principal | None = None) -> bytes:
        reservation = self._load(reservation_id, populate=True)
        ensure_can_access(reservation, principal)
        if reservation.status != ReservationStatus.CONFIRMED.value:
            raise InvalidStateError("Ticket can only be issued for confirmed reservations")
        document = self.renderer.render(reservation, reservation.event, reservation.user)
        logger.info("Issued ticket document for reservation {}", reservation.id)
        return document

    def _load(self, reservation_id: int, *, populate: bool = False) -> Reservation:
        reservation = self.reservations.get(reservation_id, populate=populate)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        return reservation
