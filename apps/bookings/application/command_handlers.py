"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateReservationCommand: Reserve beds for a stay
- ApproveBookingCommand: Owner approves a pending booking
- RejectBookingCommand: Owner rejects a booking with a reason
- CancelBookingCommand: Cancel a booking
- RecordPaymentCommand: Add a payment to the ledger
- CheckInBookingCommand: Tenant moves in
- CheckOutBookingCommand: Tenant moves out
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Sum
from django.utils import timezone

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    Conflict,
    DomainError,
    Forbidden,
    InvalidTransition,
    InvalidUser,
    NotAvailable,
    NotFound,
    RoomTypeNotFound,
    ValidationError,
)
from shared.domain.value_objects import DateRange
from apps.bookings.domain.events import BookingCreated, PaymentRecorded
from apps.bookings.domain.identifiers import ResolvedBed, resolve_token
from apps.bookings.domain.lifecycle import (
    COMMIT_RELEASED_STATUSES,
    BookingStatus,
    PaymentStatus,
)
from apps.bookings.domain.pricing import DurationSpec, DurationType, compute_move_out, quote
from apps.bookings.models import Booking, BookingRoom, Payment
from apps.bookings.services import overlapping_reservations, to_date
from apps.properties.domain.catalog import RoomCatalog
from apps.properties.models import Property
from apps.properties.selectors import get_catalog

logger = logging.getLogger(__name__)

CONFLICT_SUGGESTION = 'Please select different rooms or choose a different date.'


# ===== Commands =====

@dataclass
class CreateReservationCommand:
    """
    Command to reserve one or more beds of a property

    Raw request values are accepted; the handler reports every missing
    required field at once.
    """
    user_id: int
    property_id: int | None = None
    room_type: str = ''
    selected_rooms: list[str] = field(default_factory=list)
    move_in_date: object = None
    end_date: object = None
    duration_type: str = DurationType.MONTHLY
    duration_days: int | None = None
    duration_months: int | None = None
    person_count: int | None = None
    customer_details: dict = field(default_factory=dict)
    payment_info: dict | None = None
    pricing: dict | None = None
    special_requests: str = ''

    def missing_fields(self) -> list[str]:
        required = {
            'propertyId': self.property_id,
            'roomType': self.room_type,
            'selectedRooms': self.selected_rooms,
            'moveInDate': self.move_in_date,
            'personCount': self.person_count,
        }
        return [name for name, value in required.items() if not value]


@dataclass
class ApproveBookingCommand:
    booking_id: int
    actor_id: int


@dataclass
class RejectBookingCommand:
    booking_id: int
    actor_id: int
    reason: str = ''


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking (tenant, owning client or admin)"""
    booking_id: int
    actor_id: int


@dataclass
class RecordPaymentCommand:
    """Command to append a payment to a booking's ledger"""
    booking_id: int
    actor_id: int
    amount: Decimal
    method: str
    status: str = Payment.Status.COMPLETED
    transaction_id: str = ''
    description: str = ''
    paid_at: datetime | None = None


@dataclass
class CheckInBookingCommand:
    booking_id: int
    actor_id: int


@dataclass
class CheckOutBookingCommand:
    booking_id: int
    actor_id: int


# ===== Helpers =====

def _load_actor(actor_id):
    User = get_user_model()
    try:
        return User.objects.get(pk=actor_id)
    except User.DoesNotExist:
        raise InvalidUser(userId=actor_id)


def _load_booking(booking_id) -> Booking:
    """Load a booking and lock its row for the rest of the transaction"""
    try:
        return (
            Booking.objects.select_for_update(of=('self',))
            .select_related('property')
            .get(pk=booking_id)
        )
    except (Booking.DoesNotExist, ValueError, TypeError):
        raise NotFound('Booking not found.', bookingId=booking_id)


def _ensure_owner(booking: Booking, actor, action: str):
    """Only the client owning the property (or a platform admin) may act"""
    if actor.is_platform_admin():
        return
    if not actor.is_client() or booking.property.client_id != actor.acting_client_id:
        raise Forbidden(f'You can only {action} bookings for your own properties.')


def _ensure_stakeholder(booking: Booking, actor, action: str):
    """Tenant of the booking, owning client or platform admin"""
    if booking.user_id == actor.pk:
        return
    _ensure_owner(booking, actor, action)


def _total_paid(booking: Booking) -> Decimal:
    total = booking.payments.filter(status=Payment.Status.COMPLETED).aggregate(total=Sum('amount'))['total']
    return total or Decimal('0.00')


# ===== Command Handlers =====

class CreateReservationHandler:
    """
    Handler for CreateReservation command

    Reserves every requested bed or none of them.

    Strategy:
    1. Validate the request and compute the stay period (no transaction yet)
    2. Start database transaction (atomic)
    3. Lock the property's room configuration row (SELECT FOR UPDATE); all
       bookings of one property serialize on it
    4. Resolve each bed token against the catalog
    5. Re-check each bed for overlapping reservations inside the transaction
    6. Abort with the full list of unavailable beds, or price and persist;
       money paid with the reservation becomes its first ledger row
    7. Commit; BookingCreated is published after commit
    """

    def __init__(self, days_per_month: int | None = None):
        self.days_per_month = days_per_month

    def handle(self, command: CreateReservationCommand) -> Booking:
        missing = command.missing_fields()
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}.",
                missingFields=missing,
            )

        move_in = to_date(command.move_in_date, 'moveInDate')
        duration = DurationSpec(
            duration_type=command.duration_type or DurationType.MONTHLY,
            days=command.duration_days,
            months=command.duration_months,
            end_date=to_date(command.end_date, 'endDate') if command.end_date else None,
        )
        move_out = compute_move_out(move_in, duration)
        period = DateRange(move_in, move_out)

        logger.info(
            f"Creating booking for property {command.property_id}, user {command.user_id}, "
            f"beds {command.selected_rooms}, dates {period}"
        )

        with DjangoUnitOfWork() as uow:
            property_obj = self._load_bookable_property(command.property_id)
            user = self._load_tenant(command.user_id)

            catalog = get_catalog(property_obj.pk, lock=True)
            room_type = catalog.find_room_type(command.room_type)
            if room_type is None:
                raise RoomTypeNotFound(roomType=command.room_type)

            resolved, unavailable = self._check_beds(catalog, command.selected_rooms, period)
            if unavailable:
                logger.info(
                    f"Booking rejected for property {property_obj.pk}: "
                    f"unavailable beds {unavailable}"
                )
                raise Conflict(unavailableRooms=unavailable, suggestion=CONFLICT_SUGGESTION)

            price = quote(
                room_type,
                bed_count=len(resolved),
                move_in=move_in,
                move_out=move_out,
                duration=duration,
                overrides=command.pricing,
                days_per_month=self.days_per_month or settings.BOOKING_DAYS_PER_MONTH,
            )

            payment_info = command.payment_info or {}
            declared_status = payment_info.get('paymentStatus') or PaymentStatus.PENDING.value
            amount_paid = Decimal(str(payment_info.get('amountPaid') or '0.00'))
            payment_method = payment_info.get('paymentMethod') or settings.BOOKING_DEFAULT_PAYMENT_METHOD
            customer = command.customer_details or {}

            booking = Booking(
                user=user,
                client_id=user.client_id,
                property=property_obj,
                room_type=room_type.type,
                room_type_name=room_type.display_name,
                room_capacity=room_type.capacity,
                move_in_date=move_in,
                move_out_date=move_out,
                duration_type=duration.duration_type,
                duration_days=duration.days if duration.duration_type == DurationType.DAILY else None,
                duration_months=duration.months if duration.duration_type == DurationType.MONTHLY else None,
                person_count=command.person_count,
                customer_name=customer.get('name') or '',
                customer_age=customer.get('age'),
                customer_gender=customer.get('gender') or '',
                customer_mobile=customer.get('mobile') or '',
                customer_email=customer.get('email') or '',
                id_proof_type=customer.get('idProofType') or '',
                id_proof_number=customer.get('idProofNumber') or '',
                purpose=customer.get('purpose') or '',
                special_requests=command.special_requests or '',
                monthly_rent=price.monthly_rent,
                total_rent=price.total_rent,
                security_deposit=price.security_deposit,
                advance_amount=price.advance_amount,
                maintenance_fee=price.maintenance_fee,
                amount_paid=Decimal('0.00'),
                payment_method=payment_method,
                payment_status=PaymentStatus.PENDING.value,
                transaction_id=payment_info.get('transactionId') or '',
                outstanding_amount=price.total_due,
                booking_status=BookingStatus.PENDING.value,
            )
            booking.save()

            BookingRoom.objects.bulk_create([
                BookingRoom(
                    booking=booking,
                    bed_identifier=bed.identifier,
                    sharing_type=bed.sharing_type,
                    floor=bed.floor,
                    room_number=bed.room_number,
                    bed_label=bed.bed_label,
                    position=position,
                )
                for position, bed in enumerate(resolved)
            ])

            # amount_paid always equals the sum of completed ledger rows
            if amount_paid > 0:
                self._record_initial_payment(booking, amount_paid, declared_status, payment_method)
            booking.apply_payments(_total_paid(booking))
            if booking.payment_status == PaymentStatus.COMPLETED:
                booking.booking_status = BookingStatus.CONFIRMED.value
                booking.payment_date = timezone.now()
            booking.save(update_fields=[
                'amount_paid', 'payment_status', 'outstanding_amount',
                'booking_status', 'payment_date', 'updated_at',
            ])

            booking.add_event(BookingCreated(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                property_id=property_obj.pk,
                user_id=user.pk,
                client_id=booking.client_id,
                bed_identifiers=[bed.identifier for bed in resolved],
                status=booking.booking_status,
            ))
            uow.collect_events(booking)

        logger.info(
            f"Booking created successfully: {booking.booking_code} "
            f"(ID: {booking.pk}, status: {booking.booking_status})"
        )
        return booking

    @staticmethod
    def _record_initial_payment(booking: Booking, amount: Decimal, declared_status: str, method: str) -> Payment:
        """Ledger row for money taken together with the reservation"""
        paid = declared_status in (PaymentStatus.COMPLETED, PaymentStatus.PARTIAL)
        return Payment.objects.create(
            booking=booking,
            amount=amount,
            method=method if method in Payment.Method.values else Payment.Method.ONLINE,
            status=Payment.Status.COMPLETED if paid else Payment.Status.PENDING,
            transaction_id=booking.transaction_id,
            description='Paid at reservation',
        )

    @staticmethod
    def _load_bookable_property(property_id) -> Property:
        try:
            property_obj = Property.objects.get(pk=property_id)
        except (Property.DoesNotExist, ValueError, TypeError):
            raise NotAvailable(propertyId=property_id)
        if not property_obj.is_bookable:
            raise NotAvailable(propertyId=property_id)
        return property_obj

    @staticmethod
    def _load_tenant(user_id):
        User = get_user_model()
        user = User.objects.filter(pk=user_id).first()
        if user is None or not user.client_id:
            raise InvalidUser()
        return user

    @staticmethod
    def _check_beds(
        catalog: RoomCatalog,
        tokens: list[str],
        period: DateRange,
    ) -> tuple[list[ResolvedBed], list[str]]:
        """
        Resolve every token and look for overlapping reservations

        Returns:
            (resolved beds, tokens that cannot be booked); a token naming a
            bed already requested earlier in the same list is unavailable
        """
        resolved: list[ResolvedBed] = []
        unavailable: list[str] = []
        seen: set[str] = set()

        for token in tokens:
            try:
                bed = resolve_token(catalog, token)
            except DomainError as exc:
                logger.info(f"Bed token {token!r} cannot be resolved: {exc.message}")
                unavailable.append(token)
                continue

            if bed.identifier in seen:
                unavailable.append(token)
                continue
            seen.add(bed.identifier)

            taken = overlapping_reservations(
                catalog.property_id,
                period,
                released_statuses=COMMIT_RELEASED_STATUSES,
                bed_identifier=bed.identifier,
            ).exists()
            if taken:
                unavailable.append(token)
            else:
                resolved.append(bed)

        return resolved, unavailable


class ApproveBookingHandler:
    """Handler for approving a pending booking (PENDING -> APPROVED)"""

    def handle(self, command: ApproveBookingCommand) -> Booking:
        logger.info(f"Approving booking {command.booking_id} by user {command.actor_id}")

        with DjangoUnitOfWork() as uow:
            actor = _load_actor(command.actor_id)
            booking = _load_booking(command.booking_id)
            _ensure_owner(booking, actor, 'approve')

            booking.approve(actor)
            booking.save(update_fields=['booking_status', 'approved_by', 'approved_at', 'updated_at'])
            uow.collect_events(booking)

        logger.info(f"Booking {booking.booking_code} approved")
        return booking


class RejectBookingHandler:
    """Handler for rejecting a booking (PENDING | APPROVED -> REJECTED)"""

    def handle(self, command: RejectBookingCommand) -> Booking:
        reason = (command.reason or '').strip()
        if not reason:
            raise ValidationError('Rejection reason is required.', missingFields=['reason'])

        logger.info(f"Rejecting booking {command.booking_id} by user {command.actor_id}")

        with DjangoUnitOfWork() as uow:
            actor = _load_actor(command.actor_id)
            booking = _load_booking(command.booking_id)
            _ensure_owner(booking, actor, 'reject')

            booking.reject(actor, reason)
            booking.save(update_fields=[
                'booking_status', 'rejected_by', 'rejected_at', 'rejection_reason', 'updated_at',
            ])
            uow.collect_events(booking)

        logger.info(f"Booking {booking.booking_code} rejected, reason: {reason}")
        return booking


class CancelBookingHandler:
    """Handler for cancelling a booking"""

    def handle(self, command: CancelBookingCommand) -> Booking:
        logger.info(f"Cancelling booking {command.booking_id} by user {command.actor_id}")

        with DjangoUnitOfWork() as uow:
            actor = _load_actor(command.actor_id)
            booking = _load_booking(command.booking_id)
            _ensure_stakeholder(booking, actor, 'cancel')

            booking.cancel()
            booking.save(update_fields=['booking_status', 'payment_status', 'cancelled_at', 'updated_at'])
            uow.collect_events(booking)

        logger.info(f"Booking {booking.booking_code} cancelled")
        return booking


class RecordPaymentHandler:
    """
    Handler for recording a payment

    Appends to the ledger and recomputes the payment sub-record from all
    completed payments. A fully paid approved booking becomes confirmed.
    """

    def handle(self, command: RecordPaymentCommand) -> Booking:
        logger.info(
            f"Recording payment of {command.amount} ({command.status}) "
            f"for booking {command.booking_id}"
        )

        with DjangoUnitOfWork() as uow:
            actor = _load_actor(command.actor_id)
            booking = _load_booking(command.booking_id)
            _ensure_stakeholder(booking, actor, 'record payments for')

            if booking.booking_status in (BookingStatus.CANCELLED, BookingStatus.REJECTED):
                raise InvalidTransition(
                    f"Cannot record a payment for a {booking.booking_status} booking.",
                    bookingStatus=booking.booking_status,
                )

            payment = Payment.objects.create(
                booking=booking,
                amount=command.amount,
                method=command.method,
                status=command.status,
                transaction_id=command.transaction_id or '',
                description=command.description or '',
                paid_at=command.paid_at or timezone.now(),
            )

            booking.apply_payments(_total_paid(booking))
            if payment.status == Payment.Status.COMPLETED:
                booking.payment_method = payment.method
                booking.transaction_id = payment.transaction_id
                booking.payment_date = payment.paid_at

            booking.add_event(PaymentRecorded(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                property_id=booking.property_id,
                user_id=booking.user_id,
                client_id=booking.client_id,
                amount=payment.amount,
                payment_status=booking.payment_status,
                outstanding_amount=booking.outstanding_amount,
            ))
            booking.save()
            uow.collect_events(booking)

        logger.info(
            f"Booking {booking.booking_code} payment status {booking.payment_status}, "
            f"outstanding {booking.outstanding_amount}"
        )
        return booking


class CheckInBookingHandler:
    """Handler for checking in a tenant (CONFIRMED -> CHECKED_IN)"""

    def handle(self, command: CheckInBookingCommand) -> Booking:
        logger.info(f"Checking in booking {command.booking_id}")

        with DjangoUnitOfWork() as uow:
            actor = _load_actor(command.actor_id)
            booking = _load_booking(command.booking_id)
            _ensure_owner(booking, actor, 'check in')

            booking.check_in()
            booking.save(update_fields=['booking_status', 'checked_in_at', 'updated_at'])
            uow.collect_events(booking)

        logger.info(f"Booking {booking.booking_code} checked in")
        return booking


class CheckOutBookingHandler:
    """Handler for checking out a tenant (CHECKED_IN -> CHECKED_OUT)"""

    def handle(self, command: CheckOutBookingCommand) -> Booking:
        logger.info(f"Checking out booking {command.booking_id}")

        with DjangoUnitOfWork() as uow:
            actor = _load_actor(command.actor_id)
            booking = _load_booking(command.booking_id)
            _ensure_owner(booking, actor, 'check out')

            booking.check_out()
            booking.save(update_fields=['booking_status', 'checked_out_at', 'updated_at'])
            uow.collect_events(booking)

        logger.info(f"Booking {booking.booking_code} checked out")
        return booking
