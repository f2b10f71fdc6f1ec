"""API views for tenant concerns."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from drf_spectacular.utils import OpenApiParameter, extend_schema  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.models import Booking
from apps.bookings.permissions import IsPropertyClient
from apps.properties.selectors import get_property
from shared.application.message_bus import message_bus
from shared.domain.exceptions import NotFound

from .models import Concern
from .serializers import (
    ConcernCreateSerializer,
    ConcernNoteSerializer,
    ConcernSerializer,
    ConcernStatusSerializer,
    FreeBedSerializer,
    RoomTypeSerializer,
)
from .services import beds_free_for_booking, property_room_types


def _visible(queryset, user, tenant_field: str, property_field: str):
    if user.is_platform_admin():
        return queryset
    if user.is_client():
        return queryset.filter(Q(**{property_field: user.acting_client_id}) | Q(**{tenant_field: user}))
    return queryset.filter(**{tenant_field: user})


class ConcernViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Bed changes, room changes and service requests raised by tenants."""

    queryset = Concern.objects.select_related("property", "booking").all()
    serializer_class = ConcernSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):  # type: ignore
        if self.action in {"update_status", "notes"}:
            return [permissions.IsAuthenticated(), IsPropertyClient()]
        return super().get_permissions()

    def get_serializer_class(self):  # type: ignore
        return {
            "create": ConcernCreateSerializer,
            "update_status": ConcernStatusSerializer,
            "notes": ConcernNoteSerializer,
        }.get(self.action, ConcernSerializer)

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if not user.is_authenticated:
            return qs.none()
        return _visible(qs, user, "user", "property__client_id")

    def _concern_response(self, concern: Concern, message: str, code: int = status.HTTP_200_OK) -> Response:
        concern = Concern.objects.select_related("property").get(pk=concern.pk)
        data = ConcernSerializer(concern, context=self.get_serializer_context()).data
        return Response({"success": True, "message": message, "concern": data}, status=code)

    def list(self, request, *args, **kwargs):  # type: ignore
        response = super().list(request, *args, **kwargs)
        if isinstance(response.data, list):
            response.data = {"success": True, "count": len(response.data), "concerns": response.data}
        return response

    def retrieve(self, request, *args, **kwargs):  # type: ignore
        concern = self.get_object()
        data = ConcernSerializer(concern, context=self.get_serializer_context()).data
        return Response({"success": True, "concern": data})

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        concern = message_bus.handle_command(serializer.to_command(request.user.pk))
        return self._concern_response(concern, "Concern submitted successfully", status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch"], url_path="status", url_name="status")
    def update_status(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        concern = message_bus.handle_command(serializer.to_command(pk, request.user.pk))
        return self._concern_response(concern, "Concern status updated successfully")

    @action(detail=True, methods=["post"])
    def notes(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        concern = message_bus.handle_command(serializer.to_command(pk, request.user.pk))
        return self._concern_response(concern, "Internal note added successfully")

    @extend_schema(
        parameters=[OpenApiParameter("sharingType", str, description="Only offer rooms of this sharing type")],
    )
    @action(
        detail=False,
        methods=["get"],
        url_path=r"bookings/(?P<booking_id>[^/.]+)/available-beds",
        url_name="available-beds",
    )
    def available_beds(self, request, booking_id=None):  # type: ignore
        bookings = _visible(Booking.objects.all(), request.user, "user", "property__client_id")
        try:
            booking = bookings.get(pk=booking_id)
        except (Booking.DoesNotExist, ValueError, TypeError):
            raise NotFound("Booking not found.", bookingId=booking_id)

        free = beds_free_for_booking(booking, request.query_params.get("sharingType") or None)
        return Response({
            "success": True,
            "availableBeds": {str(floor): FreeBedSerializer(beds, many=True).data for floor, beds in free.items()},
            "currentBooking": {
                "moveInDate": booking.move_in_date.isoformat(),
                "moveOutDate": booking.move_out_date.isoformat(),
            },
        })

    @action(
        detail=False,
        methods=["get"],
        url_path=r"properties/(?P<property_id>[^/.]+)/room-types",
        url_name="room-types",
    )
    def room_types(self, request, property_id=None):  # type: ignore
        property_obj = get_property(property_id)
        return Response({
            "success": True,
            "roomTypes": RoomTypeSerializer(property_room_types(property_obj.pk), many=True).data,
            "propertyId": property_obj.pk,
        })
