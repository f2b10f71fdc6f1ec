"""Tests for approve, reject, cancel and check-in/out handlers."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from apps.bookings.application.command_handlers import (
    ApproveBookingCommand,
    ApproveBookingHandler,
    CancelBookingCommand,
    CancelBookingHandler,
    CheckInBookingCommand,
    CheckInBookingHandler,
    CheckOutBookingCommand,
    CheckOutBookingHandler,
    RecordPaymentCommand,
    RecordPaymentHandler,
    RejectBookingCommand,
    RejectBookingHandler,
)
from apps.bookings.models import Booking
from apps.users.models import User
from shared.domain.exceptions import Forbidden, InvalidTransition, NotFound, ValidationError

pytestmark = pytest.mark.django_db


def approve(booking, actor):
    return ApproveBookingHandler().handle(ApproveBookingCommand(booking_id=booking.pk, actor_id=actor.pk))


def cancel(booking, actor):
    return CancelBookingHandler().handle(CancelBookingCommand(booking_id=booking.pk, actor_id=actor.pk))


def test_owner_approves_pending_booking(reserve, owner):
    booking = approve(reserve(["double-101-Bed A"]), owner)

    assert booking.booking_status == "approved"
    assert booking.approved_by == owner
    assert booking.approved_at is not None
    assert Booking.objects.get(pk=booking.pk).booking_status == "approved"


def test_admin_can_approve(reserve):
    admin = User.objects.create_user(email="admin@example.com", password="x", role=User.RoleChoices.ADMIN)

    assert approve(reserve(["double-101-Bed A"]), admin).booking_status == "approved"


def test_other_client_cannot_approve(reserve, other_client):
    booking = reserve(["double-101-Bed A"])

    with pytest.raises(Forbidden):
        approve(booking, other_client)
    assert Booking.objects.get(pk=booking.pk).booking_status == "pending"


def test_tenant_cannot_approve(reserve, tenant):
    with pytest.raises(Forbidden):
        approve(reserve(["double-101-Bed A"]), tenant)


def test_approve_twice(reserve, owner):
    booking = approve(reserve(["double-101-Bed A"]), owner)

    with pytest.raises(InvalidTransition) as excinfo:
        approve(booking, owner)
    assert excinfo.value.message == "Booking is already approved."


def test_unknown_booking(owner):
    with pytest.raises(NotFound) as excinfo:
        ApproveBookingHandler().handle(ApproveBookingCommand(booking_id=424242, actor_id=owner.pk))
    assert excinfo.value.message == "Booking not found."


def test_reject_requires_reason(reserve, owner):
    booking = reserve(["double-101-Bed A"])

    with pytest.raises(ValidationError) as excinfo:
        RejectBookingHandler().handle(RejectBookingCommand(booking_id=booking.pk, actor_id=owner.pk, reason="  "))
    assert excinfo.value.context["missingFields"] == ["reason"]


def test_rejection_frees_the_bed(reserve, owner):
    booking = reserve(["double-101-Bed A"])

    rejected = RejectBookingHandler().handle(
        RejectBookingCommand(booking_id=booking.pk, actor_id=owner.pk, reason="Documents missing")
    )

    assert rejected.booking_status == "rejected"
    assert rejected.rejection_reason == "Documents missing"
    assert rejected.rejected_by == owner
    assert reserve(["double-101-Bed A"]).booking_status == "pending"


def test_tenant_cancels_own_booking(reserve, tenant):
    booking = cancel(reserve(["double-101-Bed A"]), tenant)

    assert booking.booking_status == "cancelled"
    assert booking.payment_status == "refund_pending"
    assert booking.cancelled_at is not None


def test_stranger_cannot_cancel(reserve, other_client):
    with pytest.raises(Forbidden):
        cancel(reserve(["double-101-Bed A"]), other_client)


def test_cancel_twice(reserve, tenant):
    booking = cancel(reserve(["double-101-Bed A"]), tenant)

    with pytest.raises(InvalidTransition) as excinfo:
        cancel(booking, tenant)
    assert excinfo.value.message == "Booking is already cancelled."


def test_check_in_requires_confirmation(reserve, owner):
    booking = reserve(["double-101-Bed A"])

    with pytest.raises(InvalidTransition):
        CheckInBookingHandler().handle(CheckInBookingCommand(booking_id=booking.pk, actor_id=owner.pk))


def test_full_stay(reserve, owner, tenant):
    booking = approve(reserve(["double-101-Bed A"]), owner)

    booking = RecordPaymentHandler().handle(RecordPaymentCommand(
        booking_id=booking.pk, actor_id=tenant.pk, amount=Decimal("14000.00"), method="online",
    ))
    assert booking.booking_status == "confirmed"

    booking = CheckInBookingHandler().handle(CheckInBookingCommand(booking_id=booking.pk, actor_id=owner.pk))
    assert booking.booking_status == "checked_in"
    assert booking.checked_in_at is not None

    with pytest.raises(InvalidTransition) as excinfo:
        cancel(booking, tenant)
    assert excinfo.value.message == "Cannot cancel booking after check-in."
    assert Booking.objects.get(pk=booking.pk).booking_status == "checked_in"

    booking = CheckOutBookingHandler().handle(CheckOutBookingCommand(booking_id=booking.pk, actor_id=owner.pk))
    assert booking.booking_status == "checked_out"
    assert booking.checked_out_at is not None

    # Checked-out stays no longer hold their beds for new reservations
    assert reserve(["double-101-Bed A"], move_in=date(2030, 1, 20)).booking_status == "pending"
