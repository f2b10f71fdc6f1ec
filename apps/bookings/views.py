"""API views for the booking domain.

Writes go through the message bus to the command handlers; every
response uses the ``{"success": ..., "message": ...}`` envelope.
"""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore
from drf_spectacular.utils import OpenApiParameter, extend_schema  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.application.message_bus import message_bus

from .application.command_handlers import (
    ApproveBookingCommand,
    CancelBookingCommand,
    CheckInBookingCommand,
    CheckOutBookingCommand,
    RejectBookingCommand,
)
from .filters import BookingFilterSet
from .models import Booking
from .permissions import IsPropertyClient
from .serializers import (
    BookingCreateSerializer,
    BookingSerializer,
    CheckAvailabilitySerializer,
    PaymentCreateSerializer,
    RejectBookingSerializer,
    availability_payload,
)
from .services import compute_availability, find_unavailable_beds


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Bed reservations: booking, availability and lifecycle actions."""

    queryset = (
        Booking.objects.select_related("property", "user")
        .prefetch_related("room_details", "payments")
        .all()
    )
    serializer_class = BookingSerializer
    filterset_class = BookingFilterSet
    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):  # type: ignore
        if self.action in {"approve", "reject", "check_in", "check_out"}:
            return [permissions.IsAuthenticated(), IsPropertyClient()]
        return super().get_permissions()

    def get_serializer_class(self):  # type: ignore
        return {
            "create": BookingCreateSerializer,
            "check_availability": CheckAvailabilitySerializer,
            "reject": RejectBookingSerializer,
            "payments": PaymentCreateSerializer,
        }.get(self.action, BookingSerializer)

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if not user.is_authenticated:
            return qs.none()
        if user.is_platform_admin():
            return qs
        if user.is_client():
            return qs.filter(Q(property__client_id=user.acting_client_id) | Q(user=user))
        return qs.filter(user=user)

    def _booking_response(self, booking: Booking, message: str, code: int = status.HTTP_200_OK) -> Response:
        booking = (
            Booking.objects.select_related("property")
            .prefetch_related("room_details", "payments")
            .get(pk=booking.pk)
        )
        data = BookingSerializer(booking, context=self.get_serializer_context()).data
        return Response({"success": True, "message": message, "booking": data}, status=code)

    def list(self, request, *args, **kwargs):  # type: ignore
        response = super().list(request, *args, **kwargs)
        if isinstance(response.data, list):
            response.data = {"success": True, "count": len(response.data), "bookings": response.data}
        return response

    def retrieve(self, request, *args, **kwargs):  # type: ignore
        booking = self.get_object()
        return Response({"success": True, "booking": BookingSerializer(booking).data})

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = message_bus.handle_command(serializer.to_command(request.user.pk))
        return self._booking_response(booking, "Booking created successfully!", status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="check-availability")
    def check_availability(self, request):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        unavailable, period, property_obj = find_unavailable_beds(
            data["propertyId"], data["startDate"], data.get("endDate") or None
        )
        return Response({
            "success": True,
            "unavailableRooms": unavailable,
            "startDate": period.start_date.isoformat(),
            "endDate": period.end_date.isoformat(),
            "property": property_obj.name,
        })

    @extend_schema(
        parameters=[
            OpenApiParameter("startDate", str, description="YYYY-MM-DD, defaults to today"),
            OpenApiParameter("endDate", str, description="YYYY-MM-DD, defaults to the day after startDate"),
            OpenApiParameter("roomType", str, description="Only list rooms of this sharing type"),
        ],
    )
    @action(
        detail=False,
        methods=["get"],
        url_path=r"availability/property/(?P<property_id>[^/.]+)",
        url_name="property-availability",
    )
    def property_availability(self, request, property_id=None):  # type: ignore
        params = request.query_params
        listing = compute_availability(
            property_id,
            params.get("startDate") or timezone.now().date(),
            params.get("endDate") or None,
            room_type=params.get("roomType") or None,
        )
        return Response({"success": True, **availability_payload(listing)})

    @action(detail=True, methods=["patch"])
    def approve(self, request, pk=None):  # type: ignore
        booking = message_bus.handle_command(ApproveBookingCommand(booking_id=pk, actor_id=request.user.pk))
        return self._booking_response(booking, "Booking approved successfully")

    @action(detail=True, methods=["patch"])
    def reject(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = message_bus.handle_command(RejectBookingCommand(
            booking_id=pk,
            actor_id=request.user.pk,
            reason=serializer.validated_data.get("reason", ""),
        ))
        return self._booking_response(booking, "Booking rejected successfully")

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking = message_bus.handle_command(CancelBookingCommand(booking_id=pk, actor_id=request.user.pk))
        return self._booking_response(booking, "Booking cancelled successfully")

    @action(detail=True, methods=["post"])
    def payments(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = message_bus.handle_command(serializer.to_command(pk, request.user.pk))
        return self._booking_response(booking, "Payment recorded successfully", status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch"], url_path="check-in")
    def check_in(self, request, pk=None):  # type: ignore
        booking = message_bus.handle_command(CheckInBookingCommand(booking_id=pk, actor_id=request.user.pk))
        return self._booking_response(booking, "Booking checked in successfully")

    @action(detail=True, methods=["patch"], url_path="check-out")
    def check_out(self, request, pk=None):  # type: ignore
        booking = message_bus.handle_command(CheckOutBookingCommand(booking_id=pk, actor_id=request.user.pk))
        return self._booking_response(booking, "Booking checked out successfully")
