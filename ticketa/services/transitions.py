"""Reservation state machine and read-side access rule."""

import enum

from ticketa.core.errors import AlreadyCancelledError, ForbiddenError, InvalidTransitionError
from ticketa.core.principal import Principal
from ticketa.models.reservations import Reservation, ReservationStatus


class Action(str, enum.Enum):
    CONFIRM = "confirm"
    REFUSE = "refuse"
    CANCEL = "cancel"


# (current status, action) -> next status
TRANSITIONS: dict[tuple[ReservationStatus, Action], ReservationStatus] = {
    (ReservationStatus.PENDING, Action.CONFIRM): ReservationStatus.CONFIRMED,
    (ReservationStatus.PENDING, Action.REFUSE): ReservationStatus.REFUSED,
    (ReservationStatus.PENDING, Action.CANCEL): ReservationStatus.CANCELLED,
    (ReservationStatus.CONFIRMED, Action.CANCEL): ReservationStatus.CANCELLED,
}

# Actions that hand the reservation's ticket back to the event.
RELEASING_ACTIONS = frozenset({Action.REFUSE, Action.CANCEL})


def check_transition(reservation: Reservation, action: Action) -> ReservationStatus:
    """Return the status ``action`` leads to, or raise without side effects."""
    current = ReservationStatus(reservation.status)
    if action is Action.CANCEL and current is ReservationStatus.CANCELLED:
        raise AlreadyCancelledError(reservation.id)
    target = TRANSITIONS.get((current, action))
    if target is None:
        raise InvalidTransitionError(
            f"Cannot {action.value} a reservation with status: {current.value}"
        )
    return target


def ensure_can_access(reservation: Reservation, principal: Principal | None, verb: str = "access") -> None:
    """Admins reach every reservation, participants only their own.

    A missing principal means a trusted internal caller.
    """
    if principal is None or principal.is_admin:
        return
    if reservation.user_id != principal.user_id:
        raise ForbiddenError(f"You cannot {verb} this reservation")
