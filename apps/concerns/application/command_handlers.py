"""
Concern Command Handlers

Commands:
- SubmitConcernCommand: Tenant raises a concern about one of their bookings
- UpdateConcernStatusCommand: Owner moves a concern along and answers it
- AddConcernNoteCommand: Owner adds an internal note
"""

from dataclasses import dataclass
import logging

from django.contrib.auth import get_user_model

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    Conflict,
    Forbidden,
    InvalidTransition,
    InvalidUser,
    NotFound,
    ValidationError,
)
from shared.domain.value_objects import DateRange
from apps.bookings.application.command_handlers import CONFLICT_SUGGESTION
from apps.bookings.domain.identifiers import ResolvedBed, canonical_identifier, resolve_token
from apps.bookings.domain.lifecycle import COMMIT_RELEASED_STATUSES, BookingStatus
from apps.bookings.models import Booking
from apps.bookings.services import overlapping_reservations
from apps.concerns.models import Concern
from apps.properties.selectors import get_catalog

logger = logging.getLogger(__name__)

CLOSED_BOOKING_STATUSES = frozenset({
    BookingStatus.CANCELLED.value,
    BookingStatus.REJECTED.value,
    BookingStatus.CHECKED_OUT.value,
})


# ===== Commands =====

@dataclass
class SubmitConcernCommand:
    user_id: int
    booking_id: int | None = None
    type: str = ''
    requested_room: str = ''
    requested_bed: str = ''
    requested_sharing_type: str = ''
    requested_floor: int | None = None
    comment: str = ''
    priority: str = Concern.Priority.MEDIUM

    def missing_fields(self) -> list[str]:
        required = {'type': self.type, 'currentBookingId': self.booking_id}
        if self.type == Concern.Type.BED_CHANGE:
            required.update(requestedRoom=self.requested_room, requestedBed=self.requested_bed)
        elif self.type == Concern.Type.ROOM_CHANGE:
            required.update(
                requestedSharingType=self.requested_sharing_type,
                requestedRoom=self.requested_room,
                requestedBed=self.requested_bed,
                requestedFloor=self.requested_floor,
            )
        elif self.type == Concern.Type.OTHER_SERVICES:
            required['comment'] = (self.comment or '').strip()
        return [name for name, value in required.items() if value in (None, '')]


@dataclass
class UpdateConcernStatusCommand:
    concern_id: int
    actor_id: int
    status: str
    admin_response: str = ''


@dataclass
class AddConcernNoteCommand:
    concern_id: int
    actor_id: int
    note: str = ''


# ===== Helpers =====

def _load_actor(actor_id):
    User = get_user_model()
    try:
        return User.objects.get(pk=actor_id)
    except User.DoesNotExist:
        raise InvalidUser(userId=actor_id)


def _load_concern(concern_id) -> Concern:
    try:
        return (
            Concern.objects.select_for_update(of=('self',))
            .select_related('booking', 'property')
            .get(pk=concern_id)
        )
    except (Concern.DoesNotExist, ValueError, TypeError):
        raise NotFound('Concern not found.', concernId=concern_id)


def ensure_property_owner(property_obj, actor, action: str):
    """Only the client owning the property (or a platform admin) may act"""
    if actor.is_platform_admin():
        return
    if not actor.is_client() or property_obj.client_id != actor.acting_client_id:
        raise Forbidden(f'You can only {action} concerns for your own properties.')


# ===== Command Handlers =====

class SubmitConcernHandler:
    """
    Handler for SubmitConcern command

    Bed and room changes must name a bed of the property's catalog that is
    not part of the booking and is free for the whole booked stay. The
    request is only recorded; the booking keeps its beds.
    """

    def handle(self, command: SubmitConcernCommand) -> Concern:
        missing = command.missing_fields()
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}.",
                missingFields=missing,
            )
        if command.type not in Concern.Type.values:
            raise ValidationError(f'Unknown concern type: {command.type}.', type=command.type)

        logger.info(f"Submitting {command.type} concern for booking {command.booking_id} by user {command.user_id}")

        with DjangoUnitOfWork() as uow:
            booking = self._load_own_booking(command.booking_id, command.user_id)
            current = booking.room_details.first()

            concern = Concern(
                booking=booking,
                user_id=booking.user_id,
                property_id=booking.property_id,
                type=command.type,
                priority=command.priority or Concern.Priority.MEDIUM,
                current_bed_identifier=current.bed_identifier,
                current_room=current.room_number,
                current_bed=current.bed_label,
                current_sharing_type=current.sharing_type,
                comment=(command.comment or '').strip(),
            )

            if command.type != Concern.Type.OTHER_SERVICES:
                sharing_type = (
                    command.requested_sharing_type
                    if command.type == Concern.Type.ROOM_CHANGE
                    else current.sharing_type
                )
                bed = self._check_requested_bed(booking, sharing_type, command)
                concern.requested_bed_identifier = bed.identifier
                concern.requested_room = bed.room_number
                concern.requested_bed = bed.bed_label
                concern.requested_sharing_type = bed.sharing_type
                concern.requested_floor = bed.floor

            concern.save()
            concern.submitted()
            uow.collect_events(concern)

        logger.info(f"Concern {concern.concern_code()} submitted for booking {booking.booking_code}")
        return concern

    @staticmethod
    def _load_own_booking(booking_id, user_id) -> Booking:
        try:
            booking = Booking.objects.select_related('property').get(pk=booking_id)
        except (Booking.DoesNotExist, ValueError, TypeError):
            raise NotFound('Booking not found.', bookingId=booking_id)
        if booking.user_id != user_id:
            raise Forbidden('You can only raise concerns about your own bookings.')
        if booking.booking_status in CLOSED_BOOKING_STATUSES:
            raise InvalidTransition(
                f"Cannot raise a concern for a {booking.booking_status} booking.",
                bookingStatus=booking.booking_status,
            )
        return booking

    @staticmethod
    def _check_requested_bed(booking: Booking, sharing_type: str, command: SubmitConcernCommand) -> ResolvedBed:
        """
        Raises:
            BedNotFound: If the bed is not in the catalog
            SharingTypeMismatch: If the room cannot be booked as ``sharing_type``
            ValidationError: If the bed is on another floor or already held by this booking
            Conflict: If another reservation holds the bed during the stay
        """
        catalog = get_catalog(booking.property_id)
        token = canonical_identifier(sharing_type, str(command.requested_room), str(command.requested_bed))
        bed = resolve_token(catalog, token)

        if command.requested_floor is not None and bed.floor != int(command.requested_floor):
            raise ValidationError(
                f'Room {bed.room_number} is not on floor {command.requested_floor}.',
                requestedFloor=command.requested_floor,
            )
        if bed.identifier in booking.bed_identifiers():
            raise ValidationError('Requested bed is already part of this booking.', requestedBed=bed.identifier)

        taken = overlapping_reservations(
            booking.property_id,
            DateRange(booking.move_in_date, booking.move_out_date),
            released_statuses=COMMIT_RELEASED_STATUSES,
            bed_identifier=bed.identifier,
        ).exclude(pk=booking.pk).exists()
        if taken:
            raise Conflict(
                'Requested bed is not available for your stay.',
                unavailableRooms=[bed.identifier],
                suggestion=CONFLICT_SUGGESTION,
            )
        return bed


class UpdateConcernStatusHandler:
    """Handler for moving a concern to another status"""

    def handle(self, command: UpdateConcernStatusCommand) -> Concern:
        if command.status not in Concern.Status.values:
            raise ValidationError(f'Unknown concern status: {command.status}.', status=command.status)

        logger.info(f"Updating concern {command.concern_id} to {command.status} by user {command.actor_id}")

        with DjangoUnitOfWork() as uow:
            actor = _load_actor(command.actor_id)
            concern = _load_concern(command.concern_id)
            ensure_property_owner(concern.property, actor, 'handle')

            concern.handle(command.status, actor, (command.admin_response or '').strip())
            concern.save()
            uow.collect_events(concern)

        logger.info(f"Concern {concern.concern_code()} is now {concern.status}")
        return concern


class AddConcernNoteHandler:
    """Handler for appending an internal note to a concern"""

    def handle(self, command: AddConcernNoteCommand) -> Concern:
        note = (command.note or '').strip()
        if not note:
            raise ValidationError('Note content is required.', missingFields=['note'])

        with DjangoUnitOfWork():
            actor = _load_actor(command.actor_id)
            concern = _load_concern(command.concern_id)
            ensure_property_owner(concern.property, actor, 'annotate')

            concern.add_note(note, actor)
            concern.save(update_fields=['internal_notes', 'updated_at'])

        logger.info(f"Internal note added to concern {concern.concern_code()} by user {actor.pk}")
        return concern
