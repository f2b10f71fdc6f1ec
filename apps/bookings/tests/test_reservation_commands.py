"""Tests for creating reservations through the command handler."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

import pytest

from apps.bookings.application.command_handlers import (
    CONFLICT_SUGGESTION,
    RecordPaymentCommand,
    RecordPaymentHandler,
)
from apps.bookings.models import Booking, BookingRoom
from apps.bookings.services import compute_availability, find_unavailable_beds
from apps.properties.models import Property
from apps.users.models import User
from shared.domain.exceptions import (
    Conflict,
    InvalidDateRange,
    InvalidUser,
    NotAvailable,
    RoomTypeNotFound,
    ValidationError,
)

pytestmark = pytest.mark.django_db


def test_reservation_snapshots_beds_and_prices(reserve, tenant):
    booking = reserve(["double-101-BedA"])

    assert booking.bed_identifiers() == ["double-101-Bed A"]
    room = booking.room_details.get()
    assert (room.floor, room.room_number, room.bed_label) == (1, "101", "Bed A")
    assert booking.user == tenant
    assert booking.client_id == "client-1"
    assert booking.booking_status == "pending"
    assert booking.payment_status == "pending"
    assert booking.room_type_name == "Double sharing"
    assert booking.move_out_date == date(2030, 2, 10)
    assert booking.monthly_rent == Decimal("9000.00")
    assert booking.total_rent == Decimal("9000.00")
    assert booking.security_deposit == Decimal("5000.00")
    assert booking.advance_amount == Decimal("9000.00")
    assert booking.outstanding_amount == Decimal("14000.00")
    assert len(booking.booking_code) == 8


def test_daily_reservation_is_prorated(reserve):
    booking = reserve(["double-101-Bed A"], duration_type="daily", duration_days=10)

    assert booking.move_out_date == date(2030, 1, 20)
    assert booking.total_rent == Decimal("3000.00")
    assert booking.duration_days == 10
    assert booking.duration_months is None


def test_overlapping_reservation_is_refused(reserve):
    reserve(["double-101-Bed A"])

    with pytest.raises(Conflict) as excinfo:
        reserve(["double-101-Bed A"], move_in=date(2030, 1, 20))

    assert excinfo.value.status_code == 409
    assert excinfo.value.context == {
        "unavailableRooms": ["double-101-Bed A"],
        "suggestion": CONFLICT_SUGGESTION,
    }
    assert Booking.objects.count() == 1


def test_touching_stays_conflict(reserve):
    reserve(["double-101-Bed A"])

    with pytest.raises(Conflict):
        reserve(["double-101-Bed A"], move_in=date(2030, 2, 10))

    later = reserve(["double-101-Bed A"], move_in=date(2030, 2, 11))
    assert later.move_in_date == date(2030, 2, 11)


def test_whitespace_variants_name_the_same_bed(reserve):
    reserve(["double-101-Bed A"])

    with pytest.raises(Conflict) as excinfo:
        reserve(["double-101-BedA"])
    assert excinfo.value.context["unavailableRooms"] == ["double-101-BedA"]


def test_reservation_is_all_or_nothing(reserve):
    reserve(["double-101-Bed B"])

    with pytest.raises(Conflict) as excinfo:
        reserve(["double-101-Bed A", "double-101-Bed B"])

    assert excinfo.value.context["unavailableRooms"] == ["double-101-Bed B"]
    assert Booking.objects.count() == 1
    assert not BookingRoom.objects.filter(bed_identifier="double-101-Bed A").exists()


def test_unknown_and_malformed_tokens_are_unavailable(reserve):
    with pytest.raises(Conflict) as excinfo:
        reserve(["double-101-Bed A", "double-999-Bed A", "double-101", "double-101-Bed Q"])

    assert excinfo.value.context["unavailableRooms"] == ["double-999-Bed A", "double-101", "double-101-Bed Q"]
    assert not Booking.objects.exists()


def test_one_bed_cannot_be_booked_under_two_sharing_types(reserve):
    first = reserve(["triple-102-BedA"], room_type="triple")
    assert first.bed_identifiers() == ["triple-102-Bed A"]

    with pytest.raises(Conflict) as excinfo:
        reserve(["double-102-BedA"], room_type="double")

    assert excinfo.value.context["unavailableRooms"] == ["double-102-BedA"]
    assert Booking.objects.count() == 1


def test_duplicate_tokens_in_one_request(reserve):
    with pytest.raises(Conflict) as excinfo:
        reserve(["double-101-Bed A", "double-101-BedA"])
    assert excinfo.value.context["unavailableRooms"] == ["double-101-BedA"]


def test_released_reservations_free_their_beds(reserve):
    first = reserve(["double-101-Bed A"])
    Booking.objects.filter(pk=first.pk).update(booking_status="cancelled")

    second = reserve(["double-101-Bed A"])
    assert second.pk != first.pk


def test_checked_out_reservation_frees_beds_at_commit_only(reserve, hostel):
    first = reserve(["double-101-Bed A"])
    Booking.objects.filter(pk=first.pk).update(booking_status="checked_out")

    unavailable, _, _ = find_unavailable_beds(hostel.pk, "2030-01-15", "2030-01-20")
    assert unavailable == []

    listing = compute_availability(hostel.pk, "2030-01-15", "2030-01-20")
    beds = {bed.room_identifier: bed for bed in listing.beds_by_floor[1]}
    assert beds["double-101-Bed A"].status == "booked"

    reserve(["double-101-Bed A"])


def test_missing_fields_are_reported_together(reserve):
    with pytest.raises(ValidationError) as excinfo:
        reserve([], room_type="", person_count=None)

    assert excinfo.value.context["missingFields"] == ["roomType", "selectedRooms", "personCount"]


def test_unknown_room_type(reserve):
    with pytest.raises(RoomTypeNotFound):
        reserve(["double-101-Bed A"], room_type="penthouse")


def test_property_must_be_approved(reserve, hostel):
    Property.objects.filter(pk=hostel.pk).update(status=Property.Status.PENDING)

    with pytest.raises(NotAvailable):
        reserve(["double-101-Bed A"])


def test_unknown_property(reserve):
    with pytest.raises(NotAvailable):
        reserve(["double-101-Bed A"], property_id=999999)


def test_tenant_needs_client_account(reserve, tenant):
    User.objects.filter(pk=tenant.pk).update(client_id="")

    with pytest.raises(InvalidUser):
        reserve(["double-101-Bed A"])


@pytest.mark.parametrize("value", ["2030-13-01", "next week"])
def test_unparseable_move_in_date(reserve, value):
    with pytest.raises(InvalidDateRange) as excinfo:
        reserve(["double-101-Bed A"], move_in_date=value)
    assert excinfo.value.message == "Invalid moveInDate format. Use YYYY-MM-DD."


def test_end_date_before_move_in(reserve):
    with pytest.raises(InvalidDateRange):
        reserve(["double-101-Bed A"], end_date="2030-01-05")


def test_completed_payment_confirms_immediately(reserve):
    booking = reserve(
        ["double-101-Bed A"],
        payment_info={
            "amountPaid": Decimal("14000"),
            "paymentStatus": "completed",
            "paymentMethod": "online",
            "transactionId": "PAY-1",
        },
    )

    assert booking.booking_status == "confirmed"
    assert booking.payment_status == "completed"
    assert booking.payment_date is not None
    assert booking.amount_paid == Decimal("14000.00")
    assert booking.outstanding_amount == Decimal("0.00")
    payment = booking.payments.get()
    assert (payment.amount, payment.status, payment.transaction_id) == (Decimal("14000.00"), "completed", "PAY-1")


def test_partial_payment_at_reservation_stays_pending(reserve):
    booking = reserve(
        ["double-101-Bed A"],
        payment_info={"amountPaid": Decimal("5000"), "paymentStatus": "completed", "paymentMethod": "razorpay"},
    )

    assert booking.booking_status == "pending"
    assert booking.payment_status == "partial"
    assert booking.outstanding_amount == Decimal("9000.00")
    assert booking.payments.get().method == "online"


def test_completed_status_without_money_is_not_trusted(reserve):
    booking = reserve(["double-101-Bed A"], payment_info={"amountPaid": 0, "paymentStatus": "completed"})

    assert booking.booking_status == "pending"
    assert booking.payment_status == "pending"
    assert booking.outstanding_amount == Decimal("14000.00")
    assert not booking.payments.exists()


def test_later_payment_adds_to_reservation_payment(reserve, tenant):
    booking = reserve(
        ["double-101-Bed A"],
        payment_info={"amountPaid": Decimal("14000"), "paymentStatus": "completed"},
    )

    booking = RecordPaymentHandler().handle(
        RecordPaymentCommand(booking_id=booking.pk, actor_id=tenant.pk, amount=Decimal("100"), method="cash")
    )

    assert booking.payment_status == "completed"
    assert booking.amount_paid == Decimal("14100.00")
    assert booking.outstanding_amount == Decimal("0.00")
    assert booking.booking_status == "confirmed"
    assert booking.payments.count() == 2


def test_pricing_overrides(reserve):
    booking = reserve(["double-101-Bed A"], pricing={"advanceAmount": Decimal("1000"), "securityDeposit": None})

    assert booking.advance_amount == Decimal("1000.00")
    assert booking.security_deposit == Decimal("5000.00")


def test_id_proof_is_encrypted_at_rest(reserve):
    booking = reserve(["double-101-Bed A"], customer_details={"name": "Asha", "idProofNumber": "1234-5678-9012"})

    from django.db import connection

    with connection.cursor() as cursor:
        cursor.execute("SELECT id_proof_number FROM bookings_booking WHERE id = %s", [booking.pk])
        stored = cursor.fetchone()[0]

    assert stored and "1234-5678-9012" not in stored
    assert Booking.objects.get(pk=booking.pk).id_proof_number == "1234-5678-9012"


def test_created_event_is_published_after_commit(reserve, django_capture_on_commit_callbacks):
    with mock.patch("apps.bookings.tasks.notify_booking_event.delay") as delay:
        with django_capture_on_commit_callbacks(execute=True):
            booking = reserve(["double-101-Bed A"])

    delay.assert_called_once()
    payload = delay.call_args.args[0]
    assert payload["event_type"] == "BookingCreated"
    assert payload["booking_id"] == booking.pk
    assert payload["bed_identifiers"] == ["double-101-Bed A"]


def test_refused_reservation_publishes_nothing(reserve, django_capture_on_commit_callbacks):
    reserve(["double-101-Bed A"])

    with mock.patch("apps.bookings.tasks.notify_booking_event.delay") as delay:
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(Conflict):
                reserve(["double-101-Bed A"])

    assert callbacks == []
    delay.assert_not_called()


def test_listing_counts_stay_starting_on_period_end(reserve, hostel):
    booking = reserve(["double-101-Bed A"], move_in=date(2030, 1, 15))

    listing = compute_availability(hostel.pk, "2030-01-10", "2030-01-15")

    beds = {bed.room_identifier: bed for bed in listing.beds_by_floor[1]}
    assert beds["double-101-Bed A"].status == "booked"
    assert beds["double-101-Bed A"].booking_id == booking.pk
    assert beds["double-101-Bed B"].available
