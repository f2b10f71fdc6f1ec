"""
Concern Domain Events

Published after commit, like the booking events they extend, so the same
notification worker can address the booking's tenant and owner.
"""

from dataclasses import dataclass

from apps.bookings.domain.events import BookingEvent


@dataclass
class ConcernEvent(BookingEvent):
    concern_id: int | None = None
    concern_type: str = ''

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({'concern_id': self.concern_id, 'concern_type': self.concern_type})
        return data


@dataclass
class ConcernSubmitted(ConcernEvent):
    """Event: Tenant raised a concern about a booking"""


@dataclass
class ConcernStatusChanged(ConcernEvent):
    """Event: Owner moved a concern to another status"""
    previous_status: str = ''
    status: str = ''

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({'previous_status': self.previous_status, 'status': self.status})
        return data
