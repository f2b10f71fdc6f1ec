"""Read queries behind the concern forms."""

from __future__ import annotations

import logging

from apps.bookings.domain.availability import BedAvailability, build_listing
from apps.bookings.domain.lifecycle import COMMIT_RELEASED_STATUSES
from apps.bookings.models import Booking
from apps.bookings.services import occupied_beds
from apps.properties.domain.catalog import RoomTypeSpec
from apps.properties.selectors import get_catalog
from shared.domain.value_objects import DateRange

logger = logging.getLogger(__name__)


def beds_free_for_booking(booking: Booking, sharing_type: str | None = None) -> dict[int, list[BedAvailability]]:
    """
    Beds a tenant could move to for the rest of their booked stay.

    Uses the commit-time status set, so a bed whose tenant has checked out
    is offered. Beds of the booking itself are never offered.

    Raises:
        NotFound: If the property has no room configuration
    """
    period = DateRange(booking.move_in_date, booking.move_out_date)
    catalog = get_catalog(booking.property_id)
    occupied = occupied_beds(booking.property_id, period, released_statuses=COMMIT_RELEASED_STATUSES)
    listing = build_listing(catalog, occupied, period, room_type=sharing_type)

    free = {
        floor: [bed for bed in beds if bed.available]
        for floor, beds in listing.beds_by_floor.items()
    }
    free = {floor: beds for floor, beds in free.items() if beds}
    logger.debug(
        f"Booking {booking.pk}: {sum(len(beds) for beds in free.values())} beds free "
        f"for a {sharing_type or 'any'} move during {period}"
    )
    return free


def property_room_types(property_id) -> tuple[RoomTypeSpec, ...]:
    """
    Raises:
        NotFound: If the property has no room configuration
    """
    return get_catalog(property_id).room_types
