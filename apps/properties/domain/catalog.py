"""
Room Catalog

Read model of a property's floor → room → bed layout and its room-type
price list. The booking core only ever reads it.

Layout is a small nested ordered mapping:

    floors = (Floor(number=1, rooms={"101": ("Bed A", "Bed B"), ...}), ...)

Floor order, room order within a floor and bed order within a room are
preserved from the stored configuration; the first bed of a room is its
primary bed.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterator, Mapping, Sequence

# Legacy sharing-type names keyed by bed count, used when no configured
# room type has a matching capacity.
CAPACITY_FALLBACK = {
    1: 'single',
    3: 'triple',
    4: 'four',
    5: 'five',
    6: 'six',
}
DEFAULT_SHARING_TYPE = 'double'


class CatalogFormatError(ValueError):
    """Stored floor configuration does not have the expected shape"""


@dataclass(frozen=True)
class RoomTypeSpec:
    """Price list entry for one sharing type"""
    type: str
    label: str
    capacity: int
    price: Decimal
    deposit: Decimal

    @property
    def display_name(self) -> str:
        return self.label or self.type


@dataclass(frozen=True)
class Floor:
    number: int
    rooms: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def beds_in(self, room_number: str) -> tuple[str, ...] | None:
        return self.rooms.get(room_number)


@dataclass(frozen=True)
class RoomCatalog:
    """
    Room catalog of one property

    Key invariants:
    - Floors, rooms and beds keep their configured order
    - Bed labels are unique within a room once whitespace is ignored
    """
    property_id: int
    floors: tuple[Floor, ...] = ()
    room_types: tuple[RoomTypeSpec, ...] = ()

    def find_room_type(self, type_tag: str) -> RoomTypeSpec | None:
        """Room type with the given tag, first in catalog order"""
        return next((rt for rt in self.room_types if rt.type == type_tag), None)

    def room_type_for_capacity(self, capacity: int) -> RoomTypeSpec | None:
        return next((rt for rt in self.room_types if rt.capacity == capacity), None)

    def is_capacity_ambiguous(self, capacity: int) -> bool:
        """True when more than one configured room type has this capacity"""
        return sum(1 for rt in self.room_types if rt.capacity == capacity) > 1

    def infer_room_type(self, bed_count: int) -> str:
        """
        Sharing type of a room from its bed count

        Legacy fallback for listings: first configured room type with a
        matching capacity, else the fixed capacity table, else "double".
        Two room types sharing a capacity make this ambiguous and the first
        one wins, see is_capacity_ambiguous.
        """
        configured = self.room_type_for_capacity(bed_count)
        if configured:
            return configured.type
        return CAPACITY_FALLBACK.get(bed_count, DEFAULT_SHARING_TYPE)

    def sharing_types_for(self, bed_count: int) -> set[str]:
        """Every sharing type a room with this many beds may be booked as"""
        types = {rt.type for rt in self.room_types if rt.capacity == bed_count}
        types.add(self.infer_room_type(bed_count))
        return types

    def iter_rooms(self) -> Iterator[tuple[Floor, str, tuple[str, ...]]]:
        """Yield (floor, room_number, beds) in catalog order"""
        for floor in self.floors:
            for room_number, beds in floor.rooms.items():
                yield floor, room_number, beds

    @property
    def total_beds(self) -> int:
        return sum(len(beds) for _, _, beds in self.iter_rooms())


def parse_floors(raw: Sequence | None) -> tuple[Floor, ...]:
    """
    Build floors from the stored JSON layout

    Expected shape:
        [{"floor": 1, "rooms": [{"number": "101", "beds": ["Bed A", "Bed B"]}]}]

    Raises:
        CatalogFormatError: If the layout does not match the expected shape
    """
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)):
        raise CatalogFormatError("Floors must be a list")

    floors = []
    for position, entry in enumerate(raw):
        if not isinstance(entry, Mapping) or 'floor' not in entry:
            raise CatalogFormatError(f"Floor #{position + 1} must be an object with a 'floor' number")
        try:
            number = int(entry['floor'])
        except (TypeError, ValueError):
            raise CatalogFormatError(f"Floor #{position + 1} has an invalid number: {entry['floor']!r}")

        rooms: dict[str, tuple[str, ...]] = {}
        for room in entry.get('rooms') or []:
            if not isinstance(room, Mapping) or not room.get('number'):
                raise CatalogFormatError(f"Floor {number}: every room needs a 'number'")
            room_number = str(room['number'])
            beds = room.get('beds') or []
            if not isinstance(beds, (list, tuple)) or not all(isinstance(b, str) and b.strip() for b in beds):
                raise CatalogFormatError(f"Floor {number}, room {room_number}: beds must be non-empty strings")
            if room_number in rooms:
                raise CatalogFormatError(f"Floor {number}: room {room_number} is listed twice")
            rooms[room_number] = tuple(beds)

        floors.append(Floor(number=number, rooms=rooms))

    return tuple(floors)
