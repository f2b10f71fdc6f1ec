"""
Booking Domain Events

Events that represent things that have happened to a reservation.
These are published after successful transaction commits.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from shared.domain.base import DomainEvent


@dataclass
class BookingEvent(DomainEvent):
    """Common payload: who is affected by the change"""
    booking_id: int | None = None
    property_id: int | None = None
    user_id: int | None = None
    client_id: str = ''

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'booking_id': self.booking_id,
            'property_id': self.property_id,
            'user_id': self.user_id,
            'client_id': self.client_id,
        })
        return data


@dataclass
class BookingCreated(BookingEvent):
    """
    Event: A reservation was committed

    Triggers:
    - Notify the property owner of a new request
    """
    bed_identifiers: list[str] = field(default_factory=list)
    status: str = ''

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({'bed_identifiers': list(self.bed_identifiers), 'status': self.status})
        return data


@dataclass
class BookingApproved(BookingEvent):
    """Event: Owner approved a pending reservation (PENDING -> APPROVED)"""
    approved_by: int | None = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['approved_by'] = self.approved_by
        return data


@dataclass
class BookingRejected(BookingEvent):
    """Event: Owner rejected a reservation"""
    reason: str = ''

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['reason'] = self.reason
        return data


@dataclass
class BookingCancelled(BookingEvent):
    """
    Event: Reservation was cancelled

    Triggers:
    - Refund handling by the payments service
    """
    previous_status: str = ''

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['previous_status'] = self.previous_status
        return data


@dataclass
class BookingCheckedIn(BookingEvent):
    """Event: Tenant moved in (CONFIRMED -> CHECKED_IN)"""


@dataclass
class BookingCheckedOut(BookingEvent):
    """Event: Tenant moved out (CHECKED_IN -> CHECKED_OUT)"""


@dataclass
class PaymentRecorded(BookingEvent):
    """Event: A payment was added to the ledger"""
    amount: Decimal = Decimal('0.00')
    payment_status: str = ''
    outstanding_amount: Decimal = Decimal('0.00')

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'amount': str(self.amount),
            'payment_status': self.payment_status,
            'outstanding_amount': str(self.outstanding_amount),
        })
        return data
