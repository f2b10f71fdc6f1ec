"""Fixtures for concern tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from apps.bookings.application.command_handlers import CreateReservationCommand, CreateReservationHandler
from apps.properties.models import Property, RoomConfiguration, RoomTypeConfig
from apps.users.models import User

FLOORS = [
    {"floor": 1, "rooms": [{"number": "101", "beds": ["Bed A", "Bed B"]}]},
    {"floor": 2, "rooms": [{"number": "201", "beds": ["Bed A", "Bed B", "Bed C"]}]},
]


@pytest.fixture
def owner(db):
    return User.objects.create_user(
        email="owner@example.com",
        password="OwnerPass123",
        role=User.RoleChoices.CLIENT,
        client_id="client-1",
    )


@pytest.fixture
def tenant(db):
    return User.objects.create_user(
        email="tenant@example.com",
        password="TenantPass123",
        role=User.RoleChoices.USER,
        client_id="client-1",
    )


@pytest.fixture
def neighbour(db):
    return User.objects.create_user(
        email="neighbour@example.com",
        password="NeighbourPass123",
        role=User.RoleChoices.USER,
        client_id="client-1",
    )


@pytest.fixture
def hostel(db):
    property_obj = Property.objects.create(
        name="Green Nest PG",
        locality="Koramangala",
        city="Bengaluru",
        client_id="client-1",
        status=Property.Status.APPROVED,
    )
    configuration = RoomConfiguration.objects.create(property=property_obj, floors=FLOORS)
    RoomTypeConfig.objects.create(
        configuration=configuration, type="double", label="Double sharing",
        capacity=2, price=Decimal("9000.00"), deposit=Decimal("5000.00"), position=0,
    )
    RoomTypeConfig.objects.create(
        configuration=configuration, type="triple", label="Triple sharing",
        capacity=3, price=Decimal("7000.00"), deposit=Decimal("4000.00"), position=1,
    )
    return property_obj


@pytest.fixture
def book(hostel):
    """Reserve one bed for a user through the command handler."""
    handler = CreateReservationHandler()

    def _book(user, token, room_type="double", move_in=date(2030, 1, 10)):
        return handler.handle(CreateReservationCommand(
            user_id=user.pk,
            property_id=hostel.pk,
            room_type=room_type,
            selected_rooms=[token],
            move_in_date=move_in.isoformat(),
            person_count=1,
        ))

    return _book
