"""
Domain Exceptions

Every business-rule failure raised by the domain and application layers
derives from DomainError. Each class carries the HTTP status it maps to
and optional context that is rendered next to the message in the error
envelope (see shared.api.exception_handler).
"""

from typing import Any


class DomainError(Exception):
    """Base class for all expected business failures"""

    status_code = 400
    default_message = 'Request could not be processed.'

    def __init__(self, message: str | None = None, **context: Any):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {'success': False, 'message': self.message, **self.context}


class ValidationError(DomainError):
    """Missing or malformed input. Lists every offending field."""

    default_message = 'Validation failed.'


class InvalidDateRange(DomainError):
    default_message = 'End date must be after start date.'


class NotFound(DomainError):
    status_code = 404
    default_message = 'Not found.'


class BedNotFound(NotFound):
    """Requested bed is not part of the room catalog"""

    default_message = 'Bed not found in room configuration.'


class NotAvailable(NotFound):
    default_message = 'Property not available for booking.'


class InvalidUser(DomainError):
    default_message = 'User or clientId not found.'


class RoomTypeNotFound(DomainError):
    default_message = 'Selected room type not found.'


class MalformedIdentifier(DomainError):
    default_message = 'Invalid room format. Expected sharingType-roomNumber-bed.'


class SharingTypeMismatch(DomainError):
    """Token names a real bed under a sharing type its room does not have"""

    default_message = 'Bed does not belong to a room of this sharing type.'


class Conflict(DomainError):
    """One or more requested beds cannot be booked"""

    status_code = 409
    default_message = 'Some selected rooms are not available.'


class Forbidden(DomainError):
    status_code = 403
    default_message = 'You do not have permission to perform this action.'


class InvalidTransition(DomainError):
    default_message = 'Booking cannot change to the requested status.'


class StoreUnavailable(DomainError):
    status_code = 500
    default_message = 'Booking store is temporarily unavailable. Please retry.'
