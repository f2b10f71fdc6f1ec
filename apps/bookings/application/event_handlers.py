"""
Booking Event Handlers

Subscribers for booking domain events, called by the message bus after
the transaction that produced the event has committed.
"""

import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


def enqueue_notification(event: DomainEvent):
    """Hand the event to the notification worker"""
    from apps.bookings.tasks import notify_booking_event

    notify_booking_event.delay(event.to_dict())
    logger.debug(f"Queued notification for {event.__class__.__name__} (ID: {event.event_id})")
