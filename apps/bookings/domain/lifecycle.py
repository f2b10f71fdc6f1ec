"""
Booking Lifecycle

Finite state machine of a reservation and the status sets the
availability checks are built on.

State transitions:
- PENDING -> APPROVED (owner approves)
- APPROVED -> CONFIRMED (payment completes)
- CONFIRMED -> CHECKED_IN -> CHECKED_OUT
- PENDING | APPROVED -> REJECTED (owner rejects with a reason)
- PENDING | APPROVED | CONFIRMED -> CANCELLED
A reservation created with a completed payment starts as CONFIRMED.
"""

from enum import Enum

from shared.domain.exceptions import InvalidTransition


class BookingStatus(str, Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    CONFIRMED = 'confirmed'
    CHECKED_IN = 'checked_in'
    CHECKED_OUT = 'checked_out'
    CANCELLED = 'cancelled'
    REJECTED = 'rejected'

    @classmethod
    def choices(cls):
        return [(status.value, status.value.replace('_', ' ').capitalize()) for status in cls]


class PaymentStatus(str, Enum):
    """Status of the reservation's payment sub-record"""
    PENDING = 'pending'
    PARTIAL = 'partial'
    COMPLETED = 'completed'
    FAILED = 'failed'
    REFUNDED = 'refunded'
    REFUND_PENDING = 'refund_pending'

    @classmethod
    def choices(cls):
        return [(status.value, status.value.replace('_', ' ').capitalize()) for status in cls]


TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({
        BookingStatus.APPROVED,
        BookingStatus.REJECTED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.APPROVED: frozenset({
        BookingStatus.CONFIRMED,
        BookingStatus.REJECTED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.CONFIRMED: frozenset({
        BookingStatus.CHECKED_IN,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT}),
    BookingStatus.CHECKED_OUT: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.REJECTED: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)

# Reservations in these statuses never occupy a bed in availability listings
RELEASED_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.REJECTED})

# Commit-time checks also let beds of checked-out reservations go
COMMIT_RELEASED_STATUSES = RELEASED_STATUSES | {BookingStatus.CHECKED_OUT}

# Occupying reservations in these statuses are shown as "approved" beds
APPROVED_OCCUPANCY = frozenset({BookingStatus.APPROVED, BookingStatus.CONFIRMED})

_REFUSALS = {
    (BookingStatus.CANCELLED, BookingStatus.CANCELLED): 'Booking is already cancelled.',
    (BookingStatus.CHECKED_IN, BookingStatus.CANCELLED): 'Cannot cancel booking after check-in.',
    (BookingStatus.APPROVED, BookingStatus.APPROVED): 'Booking is already approved.',
}


def can_transition(current, target) -> bool:
    return BookingStatus(target) in TRANSITIONS[BookingStatus(current)]


def ensure_transition(current, target) -> BookingStatus:
    """
    Validate a status change

    Returns:
        The target status

    Raises:
        InvalidTransition: If the state machine has no such edge
    """
    current, target = BookingStatus(current), BookingStatus(target)
    if target not in TRANSITIONS[current]:
        message = _REFUSALS.get(
            (current, target),
            f"Booking cannot move from '{current.value}' to '{target.value}'.",
        )
        raise InvalidTransition(message, bookingStatus=current.value)
    return target


def occupancy_label(status) -> str:
    """Bed status shown in availability listings for an occupying reservation"""
    return 'approved' if BookingStatus(status) in APPROVED_OCCUPANCY else 'booked'
