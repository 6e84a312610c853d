"""Store interfaces (repository pattern).

The lifecycle engine depends only on these; ``ticketa.stores.sql`` provides
the SQLAlchemy implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ticketa.models.events import Event, EventStatus
from ticketa.models.reservations import Reservation, ReservationStatus


@dataclass(frozen=True)
class ReservationFilters:
    event_id: int | None = None
    user_id: int | None = None
    status: ReservationStatus | None = None


class InventoryStore(ABC):
    """Per-event ticket counters."""

    @abstractmethod
    def try_reserve(self, event_id: int) -> Event | None:
        """Take one ticket iff the event is published and not sold out.

        Check and decrement happen in a single conditional update. Returns
        the event after the decrement, or None when nothing matched.
        """
        ...

    @abstractmethod
    def release(self, event_id: int) -> Event:
        """Give one ticket back. Raises StorageFaultError if no event matched."""
        ...

    @abstractmethod
    def get(self, event_id: int) -> Event | None:
        ...

    @abstractmethod
    def add(
        self,
        *,
        title: str,
        total_tickets: int,
        description: str = "",
        location: str = "",
        starts_at=None,
    ) -> Event:
        """Create a draft event with every ticket available."""
        ...

    @abstractmethod
    def set_status(self, event_id: int, status: EventStatus) -> Event | None:
        ...

    @abstractmethod
    def list_events(self, *, include_unpublished: bool = False) -> list[Event]:
        """Events by start date; drafts and canceled events only on request."""
        ...


class ReservationStore(ABC):
    """Reservation persistence plus the active-reservation lookup."""

    @abstractmethod
    def find_active(self, event_id: int, user_id: int) -> Reservation | None:
        """Return the pending or confirmed reservation of this user for this event."""
        ...

    @abstractmethod
    def insert(
        self,
        *,
        event_id: int,
        user_id: int,
        ticket_code: str,
        status: ReservationStatus = ReservationStatus.PENDING,
    ) -> Reservation:
        ...

    @abstractmethod
    def get(self, reservation_id: int, *, populate: bool = False) -> Reservation | None:
        """Return a reservation, optionally with its event and user loaded."""
        ...

    @abstractmethod
    def list_for_user(self, user_id: int, filters: ReservationFilters) -> list[Reservation]:
        """Return the user's reservations; ``filters.user_id`` is ignored."""
        ...

    @abstractmethod
    def list_all(self, filters: ReservationFilters) -> list[Reservation]:
        ...

    @abstractmethod
    def save(
        self, reservation: Reservation, *, expected_status: ReservationStatus | None = None
    ) -> Reservation:
        """Persist ``reservation.status``.

        With ``expected_status`` the write only applies while the stored
        status still equals it, otherwise InvalidTransitionError is raised.
        """
        ...

    @abstractmethod
    def count_active(self, event_id: int) -> int:
        ...
