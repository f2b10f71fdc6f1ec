"""Serializers for the booking domain.

Wire format is camelCase; model fields are mapped with ``source=``.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from .application.command_handlers import CreateReservationCommand, RecordPaymentCommand
from .domain.lifecycle import PaymentStatus
from .domain.pricing import DurationType
from .models import Booking, BookingRoom, Payment


# ===== Requests =====

class CustomerDetailsSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    age = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=150)
    gender = serializers.CharField(required=False, allow_blank=True, max_length=20)
    mobile = serializers.CharField(required=False, allow_blank=True, max_length=20)
    email = serializers.EmailField(required=False, allow_blank=True)
    idProofType = serializers.CharField(required=False, allow_blank=True, max_length=50)
    idProofNumber = serializers.CharField(required=False, allow_blank=True, max_length=100)
    purpose = serializers.CharField(required=False, allow_blank=True, max_length=255)


class PaymentInfoSerializer(serializers.Serializer):
    amountPaid = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    paymentMethod = serializers.CharField(required=False, allow_blank=True, max_length=30)
    paymentStatus = serializers.ChoiceField(
        choices=[PaymentStatus.PENDING.value, PaymentStatus.PARTIAL.value, PaymentStatus.COMPLETED.value],
        required=False,
    )
    transactionId = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=120)


class PricingOverrideSerializer(serializers.Serializer):
    advanceAmount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    securityDeposit = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )


class BookingCreateSerializer(serializers.Serializer):
    """
    Booking request of a tenant.

    Every field is optional here: missing required fields are reported
    together by the command handler. Dates stay strings so that parsing
    errors surface as invalid date ranges.
    """

    propertyId = serializers.IntegerField(required=False)
    roomType = serializers.CharField(required=False, allow_blank=True, max_length=40)
    selectedRooms = serializers.ListField(child=serializers.CharField(max_length=255), required=False)
    moveInDate = serializers.CharField(required=False, allow_blank=True)
    endDate = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    durationType = serializers.ChoiceField(choices=DurationType.choices, required=False, default=DurationType.MONTHLY)
    durationDays = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    durationMonths = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    personCount = serializers.IntegerField(required=False, min_value=1)
    customerDetails = CustomerDetailsSerializer(required=False)
    paymentInfo = PaymentInfoSerializer(required=False)
    pricing = PricingOverrideSerializer(required=False)
    specialRequests = serializers.CharField(required=False, allow_blank=True)

    def to_command(self, user_id) -> CreateReservationCommand:
        data = self.validated_data
        return CreateReservationCommand(
            user_id=user_id,
            property_id=data.get("propertyId"),
            room_type=data.get("roomType", ""),
            selected_rooms=list(data.get("selectedRooms") or []),
            move_in_date=data.get("moveInDate"),
            end_date=data.get("endDate"),
            duration_type=data.get("durationType") or DurationType.MONTHLY,
            duration_days=data.get("durationDays"),
            duration_months=data.get("durationMonths"),
            person_count=data.get("personCount"),
            customer_details=dict(data.get("customerDetails") or {}),
            payment_info=dict(data["paymentInfo"]) if data.get("paymentInfo") else None,
            pricing=dict(data["pricing"]) if data.get("pricing") else None,
            special_requests=data.get("specialRequests", ""),
        )


class CheckAvailabilitySerializer(serializers.Serializer):
    propertyId = serializers.IntegerField()
    startDate = serializers.CharField()
    endDate = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class RejectBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True)


class PaymentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    method = serializers.ChoiceField(choices=Payment.Method.choices)
    status = serializers.ChoiceField(choices=Payment.Status.choices, default=Payment.Status.COMPLETED)
    transactionId = serializers.CharField(required=False, allow_blank=True, max_length=120)
    description = serializers.CharField(required=False, allow_blank=True, max_length=255)
    date = serializers.DateTimeField(required=False)

    def to_command(self, booking_id, actor_id) -> RecordPaymentCommand:
        data = self.validated_data
        return RecordPaymentCommand(
            booking_id=booking_id,
            actor_id=actor_id,
            amount=data["amount"],
            method=data["method"],
            status=data["status"],
            transaction_id=data.get("transactionId", ""),
            description=data.get("description", ""),
            paid_at=data.get("date"),
        )


# ===== Responses =====

class BookingRoomSerializer(serializers.ModelSerializer):
    roomIdentifier = serializers.CharField(source="bed_identifier")
    sharingType = serializers.CharField(source="sharing_type")
    roomNumber = serializers.CharField(source="room_number")
    bed = serializers.CharField(source="bed_label")

    class Meta:
        model = BookingRoom
        fields = ["roomIdentifier", "sharingType", "floor", "roomNumber", "bed"]


class PaymentSerializer(serializers.ModelSerializer):
    transactionId = serializers.CharField(source="transaction_id")
    date = serializers.DateTimeField(source="paid_at")

    class Meta:
        model = Payment
        fields = ["id", "amount", "method", "status", "transactionId", "description", "date"]


def mask_id_proof(number: str) -> str:
    """Only the last four characters of an ID-proof number leave the API."""
    if not number:
        return ""
    return "X" * max(len(number) - 4, 0) + number[-4:]


class BookingSerializer(serializers.ModelSerializer):
    """Full booking as seen by its tenant and the owning client."""

    bookingCode = serializers.CharField(source="booking_code", read_only=True)
    userId = serializers.IntegerField(source="user_id", read_only=True)
    clientId = serializers.CharField(source="client_id", read_only=True)
    property = serializers.SerializerMethodField()
    roomType = serializers.SerializerMethodField()
    rooms = BookingRoomSerializer(source="room_details", many=True, read_only=True)
    moveInDate = serializers.DateField(source="move_in_date", read_only=True)
    moveOutDate = serializers.DateField(source="move_out_date", read_only=True)
    durationType = serializers.CharField(source="duration_type", read_only=True)
    durationDays = serializers.IntegerField(source="duration_days", read_only=True)
    durationMonths = serializers.IntegerField(source="duration_months", read_only=True)
    personCount = serializers.IntegerField(source="person_count", read_only=True)
    customerDetails = serializers.SerializerMethodField()
    pricing = serializers.SerializerMethodField()
    paymentInfo = serializers.SerializerMethodField()
    payments = PaymentSerializer(many=True, read_only=True)
    outstandingAmount = serializers.DecimalField(
        source="outstanding_amount", max_digits=12, decimal_places=2, read_only=True
    )
    bookingStatus = serializers.CharField(source="booking_status", read_only=True)
    approvedBy = serializers.IntegerField(source="approved_by_id", read_only=True)
    approvedAt = serializers.DateTimeField(source="approved_at", read_only=True)
    rejectedBy = serializers.IntegerField(source="rejected_by_id", read_only=True)
    rejectedAt = serializers.DateTimeField(source="rejected_at", read_only=True)
    rejectionReason = serializers.CharField(source="rejection_reason", read_only=True)
    cancelledAt = serializers.DateTimeField(source="cancelled_at", read_only=True)
    checkedInAt = serializers.DateTimeField(source="checked_in_at", read_only=True)
    checkedOutAt = serializers.DateTimeField(source="checked_out_at", read_only=True)
    specialRequests = serializers.CharField(source="special_requests", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "bookingCode",
            "userId",
            "clientId",
            "property",
            "roomType",
            "rooms",
            "moveInDate",
            "moveOutDate",
            "durationType",
            "durationDays",
            "durationMonths",
            "personCount",
            "customerDetails",
            "pricing",
            "paymentInfo",
            "payments",
            "outstandingAmount",
            "bookingStatus",
            "approvedBy",
            "approvedAt",
            "rejectedBy",
            "rejectedAt",
            "rejectionReason",
            "cancelledAt",
            "checkedInAt",
            "checkedOutAt",
            "specialRequests",
            "createdAt",
            "updatedAt",
        ]

    def get_property(self, obj: Booking) -> dict:
        return {
            "id": obj.property_id,
            "name": obj.property.name,
            "locality": obj.property.locality,
            "city": obj.property.city,
        }

    def get_roomType(self, obj: Booking) -> dict:
        return {"type": obj.room_type, "name": obj.room_type_name, "capacity": obj.room_capacity}

    def get_customerDetails(self, obj: Booking) -> dict:
        return {
            "name": obj.customer_name,
            "age": obj.customer_age,
            "gender": obj.customer_gender,
            "mobile": obj.customer_mobile,
            "email": obj.customer_email,
            "idProofType": obj.id_proof_type,
            "idProofNumber": mask_id_proof(obj.id_proof_number),
            "purpose": obj.purpose,
        }

    def get_pricing(self, obj: Booking) -> dict:
        return {
            "monthlyRent": str(obj.monthly_rent),
            "totalRent": str(obj.total_rent),
            "securityDeposit": str(obj.security_deposit),
            "advanceAmount": str(obj.advance_amount),
            "maintenanceFee": str(obj.maintenance_fee),
            "totalDue": str(obj.total_due()),
        }

    def get_paymentInfo(self, obj: Booking) -> dict:
        return {
            "amountPaid": str(obj.amount_paid),
            "paymentMethod": obj.payment_method,
            "paymentStatus": obj.payment_status,
            "transactionId": obj.transaction_id or None,
            "paymentDate": obj.payment_date.isoformat() if obj.payment_date else None,
        }


class BedAvailabilitySerializer(serializers.Serializer):
    roomNumber = serializers.CharField(source="room_number")
    bedName = serializers.CharField(source="bed_name")
    bedLetter = serializers.CharField(source="bed_letter")
    floor = serializers.IntegerField()
    roomIdentifier = serializers.CharField(source="room_identifier")
    roomType = serializers.CharField(source="room_type")
    status = serializers.CharField()
    available = serializers.BooleanField()
    bookingId = serializers.IntegerField(source="booking_id", allow_null=True)


class BedStatisticsSerializer(serializers.Serializer):
    totalBeds = serializers.IntegerField(source="total_beds")
    availableBeds = serializers.IntegerField(source="available_beds")
    bookedBeds = serializers.IntegerField(source="booked_beds")
    approvedBeds = serializers.IntegerField(source="approved_beds")


def availability_payload(listing) -> dict:
    """Response body of the per-floor availability listing."""
    return {
        "bedsByFloor": {
            str(floor): BedAvailabilitySerializer(beds, many=True).data
            for floor, beds in listing.beds_by_floor.items()
        },
        "floorStatistics": {
            str(floor): BedStatisticsSerializer(stats).data
            for floor, stats in listing.floor_statistics.items()
        },
        "checkStartDate": listing.period.start_date.isoformat(),
        "checkEndDate": listing.period.end_date.isoformat(),
        "statistics": BedStatisticsSerializer(listing.statistics).data,
    }
