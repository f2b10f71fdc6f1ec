"""Tests for the payment ledger."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from apps.bookings.application.command_handlers import (
    ApproveBookingCommand,
    ApproveBookingHandler,
    CancelBookingCommand,
    CancelBookingHandler,
    RecordPaymentCommand,
    RecordPaymentHandler,
)
from apps.bookings.tasks import notify_booking_event
from shared.domain.exceptions import Forbidden, InvalidTransition

pytestmark = pytest.mark.django_db


def pay(booking, actor, amount, **kwargs):
    kwargs.setdefault("method", "online")
    return RecordPaymentHandler().handle(
        RecordPaymentCommand(booking_id=booking.pk, actor_id=actor.pk, amount=Decimal(amount), **kwargs)
    )


def test_partial_payment(reserve, tenant):
    booking = pay(reserve(["double-101-Bed A"]), tenant, "4000.00")

    assert booking.payment_status == "partial"
    assert booking.amount_paid == Decimal("4000.00")
    assert booking.outstanding_amount == Decimal("10000.00")
    assert booking.payments.count() == 1


def test_full_payment_completes_and_clears_outstanding(reserve, tenant):
    booking = reserve(["double-101-Bed A"])
    pay(booking, tenant, "4000.00")

    paid_at = datetime(2030, 1, 5, 12, 0, tzinfo=timezone.utc)
    booking = pay(booking, tenant, "10000.00", method="bank_transfer", transaction_id="TX-99", paid_at=paid_at)

    assert booking.payment_status == "completed"
    assert booking.outstanding_amount == Decimal("0.00")
    assert booking.amount_paid == Decimal("14000.00")
    assert booking.payment_method == "bank_transfer"
    assert booking.transaction_id == "TX-99"
    assert booking.payment_date == paid_at
    # Only approved bookings are confirmed by payment
    assert booking.booking_status == "pending"


def test_full_payment_confirms_approved_booking(reserve, owner, tenant):
    booking = reserve(["double-101-Bed A"])
    ApproveBookingHandler().handle(ApproveBookingCommand(booking_id=booking.pk, actor_id=owner.pk))

    booking = pay(booking, owner, "14000.00", method="cash")

    assert booking.payment_status == "completed"
    assert booking.booking_status == "confirmed"


def test_overpayment_keeps_outstanding_at_zero(reserve, tenant):
    booking = pay(reserve(["double-101-Bed A"]), tenant, "20000.00")

    assert booking.outstanding_amount == Decimal("0.00")
    assert booking.payment_status == "completed"


def test_failed_payment_is_not_counted(reserve, tenant):
    booking = pay(reserve(["double-101-Bed A"]), tenant, "14000.00", status="failed")

    assert booking.payment_status == "pending"
    assert booking.amount_paid == Decimal("0.00")
    assert booking.outstanding_amount == Decimal("14000.00")
    assert booking.payments.get().status == "failed"


def test_payment_on_cancelled_booking_is_refused(reserve, tenant):
    booking = reserve(["double-101-Bed A"])
    CancelBookingHandler().handle(CancelBookingCommand(booking_id=booking.pk, actor_id=tenant.pk))

    with pytest.raises(InvalidTransition):
        pay(booking, tenant, "100.00")
    assert booking.payments.count() == 0


def test_stranger_cannot_record_payment(reserve, other_client):
    with pytest.raises(Forbidden):
        pay(reserve(["double-101-Bed A"]), other_client, "100.00")


def test_notification_task_reports_missing_booking():
    assert notify_booking_event({"event_type": "BookingCreated", "booking_id": 987654}) is False


def test_notification_task_for_existing_booking(reserve):
    booking = reserve(["double-101-Bed A"])

    assert notify_booking_event({"event_type": "PaymentRecorded", "booking_id": booking.pk}) is True
