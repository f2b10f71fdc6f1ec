"""
Bed Identifiers

A bed is addressed by the string ``<sharingType>-<roomNumber>-<bedLabel>``.
Room numbers may themselves contain hyphens, so a token is split into the
first segment (sharing type), the last segment (bed label) and everything
in between (room number).

Bed labels are compared without whitespace: "Bed A" and "BedA" name the
same bed. Once a token is resolved against the catalog, the canonical
identifier keeps the catalog's original spelling and is stored and compared
as an exact string.
"""

from dataclasses import dataclass
import re

from apps.properties.domain.catalog import RoomCatalog
from shared.domain.base import ValueObject
from shared.domain.exceptions import BedNotFound, MalformedIdentifier, SharingTypeMismatch

SEPARATOR = '-'

_WHITESPACE = re.compile(r'\s+')


def normalize(label: str) -> str:
    """Strip every whitespace run from a bed label"""
    return _WHITESPACE.sub('', label)


@dataclass(frozen=True, eq=False)
class BedIdentifier(ValueObject):
    """
    Sharing type, room number and bed label of one bed

    Equality ignores whitespace in the bed label only.
    """
    sharing_type: str
    room_number: str
    bed_label: str

    def __eq__(self, other):
        if not isinstance(other, BedIdentifier):
            return NotImplemented
        return (
            self.sharing_type == other.sharing_type
            and self.room_number == other.room_number
            and normalize(self.bed_label) == normalize(other.bed_label)
        )

    def __hash__(self):
        return hash((self.sharing_type, self.room_number, normalize(self.bed_label)))

    def __str__(self):
        return canonical_identifier(self.sharing_type, self.room_number, self.bed_label)


@dataclass(frozen=True)
class ResolvedBed(ValueObject):
    """A requested bed matched against the room catalog"""
    identifier: str
    sharing_type: str
    room_number: str
    bed_label: str
    floor: int


def parse_token(token: str) -> BedIdentifier:
    """
    Split a client-submitted bed token

    Raises:
        MalformedIdentifier: If the token has fewer than three segments
    """
    parts = token.split(SEPARATOR) if isinstance(token, str) else []
    if len(parts) < 3:
        raise MalformedIdentifier(token=token)
    return BedIdentifier(
        sharing_type=parts[0],
        room_number=SEPARATOR.join(parts[1:-1]),
        bed_label=parts[-1],
    )


def _find_bed(catalog: RoomCatalog, room_number: str, bed_label: str) -> tuple[int, str, tuple[str, ...]]:
    wanted = normalize(bed_label)
    for floor in catalog.floors:
        beds = floor.beds_in(room_number)
        if not beds:
            continue
        for label in beds:
            if normalize(label) == wanted:
                return floor.number, label, beds
    raise BedNotFound(roomNumber=room_number, bed=bed_label)


def resolve_bed(catalog: RoomCatalog, room_number: str, bed_label: str) -> tuple[int, str]:
    """
    Find a bed in the catalog

    Floors are scanned in catalog order; within the first floor whose room
    holds a bed with the same normalized label, that bed wins.

    Returns:
        (floor number, bed label as spelled in the catalog)

    Raises:
        BedNotFound: If no floor has such a bed in that room
    """
    floor, label, _ = _find_bed(catalog, room_number, bed_label)
    return floor, label


def canonical_identifier(sharing_type: str, room_number: str, bed_label: str) -> str:
    return SEPARATOR.join((sharing_type, room_number, bed_label))


def resolve_token(catalog: RoomCatalog, token: str) -> ResolvedBed:
    """
    Parse a token and resolve it to the catalog spelling

    The sharing type must be one the room can be booked as, so one physical
    bed has a single canonical identifier.

    Raises:
        MalformedIdentifier: If the token cannot be split
        BedNotFound: If the bed is not in the catalog
        SharingTypeMismatch: If the room's bed count does not fit the sharing type
    """
    parsed = parse_token(token)
    floor, label, beds = _find_bed(catalog, parsed.room_number, parsed.bed_label)
    allowed = catalog.sharing_types_for(len(beds))
    if parsed.sharing_type not in allowed:
        raise SharingTypeMismatch(
            token=token,
            sharingType=parsed.sharing_type,
            roomSharingTypes=sorted(allowed),
        )
    return ResolvedBed(
        identifier=canonical_identifier(parsed.sharing_type, parsed.room_number, label),
        sharing_type=parsed.sharing_type,
        room_number=parsed.room_number,
        bed_label=label,
        floor=floor,
    )
