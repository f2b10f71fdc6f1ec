"""Integration tests for booking API endpoints."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.properties.models import Property, RoomConfiguration, RoomTypeConfig
from apps.users.models import User


class BookingAPITests(APITestCase):
    """Covers reservation, availability listing and the lifecycle actions."""

    def setUp(self) -> None:
        self.tenant = User.objects.create_user(
            email="tenant@example.com",
            phone="+919800000001",
            password="TenantPass123",
            role=User.RoleChoices.USER,
            client_id="client-1",
        )
        self.owner = User.objects.create_user(
            email="owner@example.com",
            phone="+919800000002",
            password="OwnerPass123",
            role=User.RoleChoices.CLIENT,
            client_id="client-1",
        )
        self.stranger = User.objects.create_user(
            email="stranger@example.com",
            password="StrangerPass123",
            role=User.RoleChoices.CLIENT,
            client_id="client-2",
        )
        self.property = Property.objects.create(
            name="Green Nest PG",
            locality="Koramangala",
            city="Bengaluru",
            client_id="client-1",
            status=Property.Status.APPROVED,
        )
        configuration = RoomConfiguration.objects.create(
            property=self.property,
            floors=[
                {"floor": 1, "rooms": [{"number": "101", "beds": ["Bed A", "Bed B"]}]},
                {"floor": 2, "rooms": [{"number": "201", "beds": ["Bed A", "Bed B", "Bed C"]}]},
            ],
        )
        RoomTypeConfig.objects.create(
            configuration=configuration,
            type="double",
            label="Double sharing",
            capacity=2,
            price=Decimal("9000.00"),
            deposit=Decimal("5000.00"),
        )
        self.client.force_authenticate(self.tenant)
        self.list_url = reverse("booking-list")
        self.availability_url = reverse("booking-property-availability", args=[self.property.pk])

    def _payload(self, rooms=("double-101-Bed A",), move_in="2030-01-10", **extra) -> dict:
        payload = {
            "propertyId": self.property.pk,
            "roomType": "double",
            "selectedRooms": list(rooms),
            "moveInDate": move_in,
            "durationType": "monthly",
            "durationMonths": 1,
            "personCount": 1,
            "customerDetails": {
                "name": "Asha Rao",
                "mobile": "9800000001",
                "idProofType": "aadhaar",
                "idProofNumber": "123456789012",
            },
        }
        payload.update(extra)
        return payload

    def _create(self, **kwargs) -> Booking:
        response = self.client.post(self.list_url, self._payload(**kwargs), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return Booking.objects.get(pk=response.data["booking"]["id"])

    def test_tenant_can_create_booking(self) -> None:
        response = self.client.post(self.list_url, self._payload(rooms=["double-101-BedA"]), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["message"], "Booking created successfully!")
        booking = response.data["booking"]
        self.assertEqual(booking["rooms"][0]["roomIdentifier"], "double-101-Bed A")
        self.assertEqual(booking["bookingStatus"], "pending")
        self.assertEqual(booking["moveOutDate"], "2030-02-10")
        self.assertEqual(booking["pricing"]["totalDue"], "14000.00")
        self.assertEqual(booking["outstandingAmount"], "14000.00")
        self.assertEqual(booking["customerDetails"]["idProofNumber"], "XXXXXXXX9012")
        self.assertEqual(booking["property"]["name"], "Green Nest PG")

    def test_prevent_double_booking_on_overlap(self) -> None:
        self._create()

        response = self.client.post(self.list_url, self._payload(move_in="2030-01-25"), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["unavailableRooms"], ["double-101-Bed A"])
        self.assertIn("suggestion", response.data)
        self.assertEqual(Booking.objects.count(), 1)

    def test_missing_fields(self) -> None:
        response = self.client.post(self.list_url, {"propertyId": self.property.pk}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(
            response.data["missingFields"],
            ["roomType", "selectedRooms", "moveInDate", "personCount"],
        )

    def test_anonymous_requests_are_refused(self) -> None:
        self.client.force_authenticate(None)

        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data["success"])

    def test_check_availability(self) -> None:
        self._create()

        response = self.client.post(
            reverse("booking-check-availability"),
            {"propertyId": self.property.pk, "startDate": "2030-01-15"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["unavailableRooms"], ["double-101-Bed A"])
        self.assertEqual(response.data["startDate"], "2030-01-15")
        self.assertEqual(response.data["endDate"], "2030-01-16")
        self.assertEqual(response.data["property"], "Green Nest PG")

    def test_check_availability_unknown_property(self) -> None:
        response = self.client.post(
            reverse("booking-check-availability"),
            {"propertyId": 999999, "startDate": "2030-01-15"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)

    def test_property_availability_by_floor(self) -> None:
        booking = self._create()

        response = self.client.get(self.availability_url, {"startDate": "2030-01-20", "endDate": "2030-01-25"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(set(response.data["bedsByFloor"]), {"1", "2"})
        first_bed = response.data["bedsByFloor"]["1"][0]
        self.assertEqual(first_bed["roomIdentifier"], "double-101-Bed A")
        self.assertEqual(first_bed["status"], "booked")
        self.assertEqual(first_bed["bookingId"], booking.pk)
        self.assertFalse(first_bed["available"])
        self.assertEqual(response.data["bedsByFloor"]["2"][0]["roomType"], "triple")
        self.assertEqual(response.data["statistics"]["totalBeds"], 5)
        self.assertEqual(response.data["statistics"]["availableBeds"], 4)
        self.assertEqual(response.data["floorStatistics"]["1"]["bookedBeds"], 1)
        self.assertEqual(response.data["checkEndDate"], "2030-01-25")

    def test_property_availability_room_type_filter(self) -> None:
        response = self.client.get(self.availability_url, {"startDate": "2030-01-20", "roomType": "triple"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(list(response.data["bedsByFloor"]), ["2"])
        self.assertEqual(response.data["statistics"]["totalBeds"], 3)

    def test_property_availability_invalid_date(self) -> None:
        response = self.client.get(self.availability_url, {"startDate": "20-01-2030"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["message"], "Invalid startDate format. Use YYYY-MM-DD.")

    def test_owner_approves_booking(self) -> None:
        booking = self._create()
        self.client.force_authenticate(self.owner)

        response = self.client.patch(reverse("booking-approve", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["booking"]["bookingStatus"], "approved")
        self.assertEqual(response.data["booking"]["approvedBy"], self.owner.pk)

    def test_tenant_cannot_approve(self) -> None:
        booking = self._create()

        response = self.client.patch(reverse("booking-approve", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_other_client_cannot_approve(self) -> None:
        booking = self._create()
        self.client.force_authenticate(self.stranger)

        response = self.client.patch(reverse("booking-approve", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        booking.refresh_from_db()
        self.assertEqual(booking.booking_status, "pending")

    def test_reject_requires_reason(self) -> None:
        booking = self._create()
        self.client.force_authenticate(self.owner)

        response = self.client.patch(reverse("booking-reject", args=[booking.pk]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["message"], "Rejection reason is required.")

    def test_tenant_cancels_booking(self) -> None:
        booking = self._create()

        response = self.client.post(reverse("booking-cancel", args=[booking.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["booking"]["bookingStatus"], "cancelled")
        self.assertEqual(response.data["booking"]["paymentInfo"]["paymentStatus"], "refund_pending")

        rebook = self.client.post(self.list_url, self._payload(), format="json")
        self.assertEqual(rebook.status_code, status.HTTP_201_CREATED, rebook.data)

    def test_payment_then_stay(self) -> None:
        booking = self._create()
        self.client.force_authenticate(self.owner)
        self.client.patch(reverse("booking-approve", args=[booking.pk]))

        response = self.client.post(
            reverse("booking-payments", args=[booking.pk]),
            {"amount": "14000.00", "method": "cash", "transactionId": "CASH-1"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        data = response.data["booking"]
        self.assertEqual(data["paymentInfo"]["paymentStatus"], "completed")
        self.assertEqual(data["outstandingAmount"], "0.00")
        self.assertEqual(data["bookingStatus"], "confirmed")
        self.assertEqual(len(data["payments"]), 1)

        response = self.client.patch(reverse("booking-check-in", args=[booking.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["booking"]["bookingStatus"], "checked_in")

        self.client.force_authenticate(self.tenant)
        response = self.client.post(reverse("booking-cancel", args=[booking.pk]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["message"], "Cannot cancel booking after check-in.")

        self.client.force_authenticate(self.owner)
        response = self.client.patch(reverse("booking-check-out", args=[booking.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["booking"]["bookingStatus"], "checked_out")

    def test_payment_amount_must_be_positive(self) -> None:
        booking = self._create()

        response = self.client.post(
            reverse("booking-payments", args=[booking.pk]),
            {"amount": "0", "method": "cash"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("amount", response.data["errors"])

    def test_list_is_scoped_to_the_caller(self) -> None:
        booking = self._create()

        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["bookings"][0]["id"], booking.pk)

        self.client.force_authenticate(self.owner)
        response = self.client.get(self.list_url, {"status": "pending"})
        self.assertEqual(response.data["count"], 1)

        self.client.force_authenticate(self.stranger)
        response = self.client.get(self.list_url)
        self.assertEqual(response.data["count"], 0)

        response = self.client.get(reverse("booking-detail", args=[booking.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
