"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .models import Booking

logger = logging.getLogger(__name__)

# Who hears about each event; the delivery channel lives outside this service
AUDIENCE = {
    "BookingCreated": ("client",),
    "BookingApproved": ("user",),
    "BookingRejected": ("user",),
    "BookingCancelled": ("user", "client"),
    "BookingCheckedIn": ("user", "client"),
    "BookingCheckedOut": ("user", "client"),
    "PaymentRecorded": ("user", "client"),
    "ConcernSubmitted": ("client",),
    "ConcernStatusChanged": ("user",),
}


@shared_task(name="bookings.notify_booking_event")
def notify_booking_event(payload: dict) -> bool:
    """
    Record a notification for the parties of a booking event.

    ``payload`` is ``DomainEvent.to_dict()``. Returns False when the
    booking no longer exists.
    """
    event_type = payload.get("event_type", "")
    booking_id = payload.get("booking_id")

    try:
        booking = Booking.objects.select_related("user", "property").get(pk=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for {event_type} notification")
        return False

    recipients = {
        "user": booking.user.email,
        "client": booking.client_id,
    }
    for audience in AUDIENCE.get(event_type, ("client",)):
        logger.info(
            f"[NOTIFICATION] {event_type}: booking {booking.booking_code} "
            f"({booking.property.name}, status {booking.booking_status}) "
            f"for {audience} {recipients[audience]}"
        )
    return True
