"""
Bed Availability

Classifies every bed of a room catalog against the reservations that
occupy it during a requested period. Pure: the caller supplies the
occupancy map, see apps.bookings.services for the queries.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
import logging

from apps.bookings.domain.identifiers import canonical_identifier, normalize
from apps.bookings.domain.lifecycle import occupancy_label
from apps.properties.domain.catalog import RoomCatalog
from shared.domain.exceptions import InvalidDateRange
from shared.domain.value_objects import DateRange

logger = logging.getLogger(__name__)

AVAILABLE = 'available'
BOOKED = 'booked'
APPROVED = 'approved'


@dataclass(frozen=True)
class Occupancy:
    """Reservation holding a bed"""
    booking_id: int
    status: str


@dataclass(frozen=True)
class BedAvailability:
    room_number: str
    bed_name: str
    floor: int
    room_identifier: str
    room_type: str
    status: str
    booking_id: int | None = None

    @property
    def bed_letter(self) -> str:
        return normalize(self.bed_name)

    @property
    def available(self) -> bool:
        return self.status == AVAILABLE


@dataclass
class BedStatistics:
    total_beds: int = 0
    available_beds: int = 0
    booked_beds: int = 0
    approved_beds: int = 0

    def count(self, status: str):
        self.total_beds += 1
        if status == AVAILABLE:
            self.available_beds += 1
        elif status == APPROVED:
            self.approved_beds += 1
        else:
            self.booked_beds += 1


@dataclass
class AvailabilityListing:
    period: DateRange
    beds_by_floor: dict[int, list[BedAvailability]] = field(default_factory=dict)
    floor_statistics: dict[int, BedStatistics] = field(default_factory=dict)
    statistics: BedStatistics = field(default_factory=BedStatistics)


def stay_period(start_date: date, end_date: date | None = None) -> DateRange:
    """
    Requested period; a missing end date means a one-day stay

    Raises:
        InvalidDateRange: If the end date is not after the start date
    """
    end_date = end_date or start_date + timedelta(days=1)
    if end_date <= start_date:
        raise InvalidDateRange(startDate=start_date.isoformat(), endDate=end_date.isoformat())
    return DateRange(start_date, end_date)


def build_listing(
    catalog: RoomCatalog,
    occupied: dict[str, Occupancy],
    period: DateRange,
    room_type: str | None = None,
) -> AvailabilityListing:
    """
    Availability of every bed, grouped by floor

    Each room's sharing type is inferred from its bed count; with
    ``room_type`` only rooms of that sharing type are listed. A bed is
    available unless its canonical identifier is in ``occupied``.
    Floors without listed beds are left out.
    """
    listing = AvailabilityListing(period=period)
    warned: set[int] = set()

    for floor, room_number, beds in catalog.iter_rooms():
        capacity = len(beds)
        sharing_type = catalog.infer_room_type(capacity)
        if catalog.is_capacity_ambiguous(capacity) and capacity not in warned:
            warned.add(capacity)
            logger.warning(
                f"Property {catalog.property_id}: several room types have capacity {capacity}, "
                f"listing such rooms as '{sharing_type}'"
            )
        if room_type and sharing_type != room_type:
            continue

        for bed_name in beds:
            identifier = canonical_identifier(sharing_type, room_number, bed_name)
            holder = occupied.get(identifier)
            status = occupancy_label(holder.status) if holder else AVAILABLE

            listing.beds_by_floor.setdefault(floor.number, []).append(BedAvailability(
                room_number=room_number,
                bed_name=bed_name,
                floor=floor.number,
                room_identifier=identifier,
                room_type=sharing_type,
                status=status,
                booking_id=holder.booking_id if holder else None,
            ))
            listing.floor_statistics.setdefault(floor.number, BedStatistics()).count(status)
            listing.statistics.count(status)

    return listing
