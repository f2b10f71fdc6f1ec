"""Availability queries for booking workflows.

Listing, quick availability checks and the commit-time re-validation in
the command handlers all go through ``overlapping_reservations`` so that
they agree on what "occupied" means.
"""

from __future__ import annotations

from datetime import date, datetime, timezone as dt_timezone
from typing import Iterable
import logging

from django.db.models import QuerySet  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.dateparse import parse_date, parse_datetime  # type: ignore

from apps.bookings.domain.availability import (
    AvailabilityListing,
    Occupancy,
    build_listing,
    stay_period,
)
from apps.bookings.domain.lifecycle import (
    COMMIT_RELEASED_STATUSES,
    RELEASED_STATUSES,
    BookingStatus,
)
from apps.properties.selectors import get_catalog, get_property
from shared.domain.exceptions import InvalidDateRange
from shared.domain.value_objects import DateRange

logger = logging.getLogger(__name__)


def to_date(value, field_name: str = "date") -> date:
    """
    Calendar date of a request value.

    Accepts ``date``/``datetime`` objects and ISO strings; datetimes are
    converted to UTC before the time part is dropped.

    Raises:
        InvalidDateRange: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = value.astimezone(dt_timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = parse_date(text) or parse_datetime(text)
        except ValueError:
            parsed = None
        if parsed is not None:
            return to_date(parsed, field_name)
    raise InvalidDateRange(
        f"Invalid {field_name} format. Use YYYY-MM-DD.",
        field=field_name,
    )


def overlapping_reservations(
    property_id,
    period: DateRange,
    *,
    released_statuses: Iterable[str] = RELEASED_STATUSES,
    bed_identifier: str | None = None,
) -> QuerySet:
    """
    Reservations of a property whose stay touches or crosses ``period``.

    Intervals are closed: a stay moving out on the day another moves in
    overlaps it. Reservations in ``released_statuses`` are ignored.
    """
    from .models import Booking  # Local import to prevent circular dependency

    queryset = Booking.objects.filter(
        property_id=property_id,
        move_in_date__lte=period.end_date,
        move_out_date__gte=period.start_date,
    ).exclude(booking_status__in=[BookingStatus(s).value for s in released_statuses])

    if bed_identifier is not None:
        queryset = queryset.filter(room_details__bed_identifier=bed_identifier)

    return queryset.distinct()


def occupied_beds(property_id, period: DateRange, *, released_statuses=RELEASED_STATUSES) -> dict[str, Occupancy]:
    """Canonical identifier -> occupying reservation, first reservation wins."""
    from .models import BookingRoom

    rows = (
        BookingRoom.objects.filter(
            booking__in=overlapping_reservations(
                property_id, period, released_statuses=released_statuses
            ).values("pk")
        )
        .order_by("booking__created_at", "booking_id", "position")
        .values_list("bed_identifier", "booking_id", "booking__booking_status")
    )

    occupied: dict[str, Occupancy] = {}
    for identifier, booking_id, status in rows:
        occupied.setdefault(identifier, Occupancy(booking_id=booking_id, status=status))
    return occupied


def compute_availability(
    property_id,
    start_date,
    end_date=None,
    room_type: str | None = None,
) -> AvailabilityListing:
    """
    Per-floor availability of every bed of a property.

    Raises:
        InvalidDateRange: If a date does not parse or the range is empty
        NotFound: If the property has no room configuration
    """
    period = stay_period(
        to_date(start_date, "startDate"),
        to_date(end_date, "endDate") if end_date else None,
    )
    catalog = get_catalog(property_id)
    occupied = occupied_beds(property_id, period)

    listing = build_listing(catalog, occupied, period, room_type=room_type)
    logger.debug(
        f"Availability for property {property_id} {period}: "
        f"{listing.statistics.available_beds}/{listing.statistics.total_beds} beds free"
    )
    return listing


def find_unavailable_beds(property_id, start_date, end_date=None) -> tuple[list[str], DateRange, object]:
    """
    Identifiers of every bed held during the period, with commit-time rules.

    Returns:
        (identifiers, period, property)

    Raises:
        InvalidDateRange: If a date does not parse or the range is empty
        NotFound: If the property or its room configuration does not exist
    """
    period = stay_period(
        to_date(start_date, "startDate"),
        to_date(end_date, "endDate") if end_date else None,
    )
    property_obj = get_property(property_id)
    get_catalog(property_id)

    occupied = occupied_beds(property_id, period, released_statuses=COMMIT_RELEASED_STATUSES)
    return list(occupied), period, property_obj
