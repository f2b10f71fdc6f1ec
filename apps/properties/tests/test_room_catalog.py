"""Tests for the room catalog read model."""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from apps.properties.domain.catalog import (
    CatalogFormatError,
    Floor,
    RoomCatalog,
    RoomTypeSpec,
    parse_floors,
)
from apps.properties.models import Property, RoomConfiguration, RoomTypeConfig
from apps.properties.selectors import get_catalog
from shared.domain.exceptions import NotFound


def _spec(type_tag, capacity, price="9000.00"):
    return RoomTypeSpec(type=type_tag, label="", capacity=capacity, price=Decimal(price), deposit=Decimal("0"))


def test_parse_floors_keeps_configured_order():
    floors = parse_floors([
        {"floor": 2, "rooms": [{"number": "202", "beds": ["Bed B", "Bed A"]}, {"number": "201", "beds": ["X"]}]},
        {"floor": 1, "rooms": []},
    ])

    assert [floor.number for floor in floors] == [2, 1]
    assert list(floors[0].rooms) == ["202", "201"]
    assert floors[0].beds_in("202") == ("Bed B", "Bed A")
    assert floors[1].rooms == {}


@pytest.mark.parametrize(
    "raw",
    [
        {"floor": 1},
        [{"rooms": []}],
        [{"floor": "first", "rooms": []}],
        [{"floor": 1, "rooms": [{"beds": ["A"]}]}],
        [{"floor": 1, "rooms": [{"number": "101", "beds": ["A", " "]}]}],
        [{"floor": 1, "rooms": [{"number": "101", "beds": ["A"]}, {"number": "101", "beds": ["B"]}]}],
    ],
)
def test_parse_floors_rejects_malformed_layouts(raw):
    with pytest.raises(CatalogFormatError):
        parse_floors(raw)


def test_parse_floors_accepts_missing_layout():
    assert parse_floors(None) == ()


def test_infer_room_type_prefers_configured_capacity():
    catalog = RoomCatalog(property_id=1, room_types=(_spec("cozy-double", 2), _spec("premium", 4)))

    assert catalog.infer_room_type(2) == "cozy-double"
    assert catalog.infer_room_type(4) == "premium"
    assert catalog.infer_room_type(3) == "triple"
    assert catalog.infer_room_type(1) == "single"
    assert catalog.infer_room_type(8) == "double"


def test_infer_room_type_first_configured_wins_on_shared_capacity():
    catalog = RoomCatalog(property_id=1, room_types=(_spec("double", 2), _spec("deluxe-double", 2)))

    assert catalog.is_capacity_ambiguous(2)
    assert catalog.infer_room_type(2) == "double"
    assert not catalog.is_capacity_ambiguous(3)


def test_iter_rooms_and_total_beds():
    catalog = RoomCatalog(
        property_id=1,
        floors=(
            Floor(number=1, rooms={"101": ("A", "B")}),
            Floor(number=2, rooms={"201": ("A",), "202": ("A", "B", "C")}),
        ),
    )

    assert [(floor.number, number) for floor, number, _ in catalog.iter_rooms()] == [
        (1, "101"), (2, "201"), (2, "202"),
    ]
    assert catalog.total_beds == 6


@pytest.mark.django_db
def test_configuration_builds_catalog_with_room_types():
    property_obj = Property.objects.create(name="Sunrise PG", client_id="c-1", status=Property.Status.APPROVED)
    configuration = RoomConfiguration.objects.create(
        property=property_obj,
        floors=[{"floor": 1, "rooms": [{"number": "101", "beds": ["Bed A", "Bed B"]}]}],
    )
    RoomTypeConfig.objects.create(
        configuration=configuration, type="double", label="Double sharing",
        capacity=2, price=Decimal("9000.00"), deposit=Decimal("5000.00"),
    )

    catalog = get_catalog(property_obj.pk)

    assert catalog.property_id == property_obj.pk
    assert catalog.total_beds == 2
    room_type = catalog.find_room_type("double")
    assert room_type.display_name == "Double sharing"
    assert room_type.price == Decimal("9000.00")
    assert catalog.find_room_type("single") is None


@pytest.mark.django_db
def test_configuration_clean_reports_bad_layout():
    property_obj = Property.objects.create(name="Sunrise PG", client_id="c-1")
    configuration = RoomConfiguration(property=property_obj, floors=[{"rooms": []}])

    with pytest.raises(ValidationError) as excinfo:
        configuration.clean()
    assert "floors" in excinfo.value.message_dict


@pytest.mark.django_db
def test_get_catalog_without_configuration():
    property_obj = Property.objects.create(name="Empty PG", client_id="c-1")

    with pytest.raises(NotFound):
        get_catalog(property_obj.pk)
