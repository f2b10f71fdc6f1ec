"""Serializers for concerns.

Wire format is camelCase, like the booking API.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .application.command_handlers import (
    AddConcernNoteCommand,
    SubmitConcernCommand,
    UpdateConcernStatusCommand,
)
from .models import Concern


class ConcernCreateSerializer(serializers.Serializer):
    """Fields that depend on the concern type are checked by the command handler."""

    type = serializers.CharField(required=False, allow_blank=True, max_length=20)
    currentBookingId = serializers.IntegerField(required=False)
    requestedRoom = serializers.CharField(required=False, allow_blank=True, max_length=60)
    requestedBed = serializers.CharField(required=False, allow_blank=True, max_length=60)
    requestedSharingType = serializers.CharField(required=False, allow_blank=True, max_length=40)
    requestedFloor = serializers.IntegerField(required=False, allow_null=True)
    comment = serializers.CharField(required=False, allow_blank=True, max_length=1000)
    priority = serializers.ChoiceField(choices=Concern.Priority.choices, required=False)

    def to_command(self, user_id) -> SubmitConcernCommand:
        data = self.validated_data
        return SubmitConcernCommand(
            user_id=user_id,
            booking_id=data.get("currentBookingId"),
            type=data.get("type", ""),
            requested_room=data.get("requestedRoom", ""),
            requested_bed=data.get("requestedBed", ""),
            requested_sharing_type=data.get("requestedSharingType", ""),
            requested_floor=data.get("requestedFloor"),
            comment=data.get("comment", ""),
            priority=data.get("priority") or Concern.Priority.MEDIUM,
        )


class ConcernStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Concern.Status.choices)
    adminResponse = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def to_command(self, concern_id, actor_id) -> UpdateConcernStatusCommand:
        data = self.validated_data
        return UpdateConcernStatusCommand(
            concern_id=concern_id,
            actor_id=actor_id,
            status=data["status"],
            admin_response=data.get("adminResponse", ""),
        )


class ConcernNoteSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def to_command(self, concern_id, actor_id) -> AddConcernNoteCommand:
        return AddConcernNoteCommand(
            concern_id=concern_id,
            actor_id=actor_id,
            note=self.validated_data.get("note", ""),
        )


class ConcernSerializer(serializers.ModelSerializer):
    """
    Concern as seen by its tenant and the owning client.

    Internal notes are left out unless the request comes from a client or
    an admin.
    """

    concernId = serializers.CharField(source="concern_code", read_only=True)
    bookingId = serializers.IntegerField(source="booking_id", read_only=True)
    userId = serializers.IntegerField(source="user_id", read_only=True)
    property = serializers.SerializerMethodField()
    currentRoom = serializers.CharField(source="current_room", read_only=True)
    currentBed = serializers.CharField(source="current_bed", read_only=True)
    currentSharingType = serializers.CharField(source="current_sharing_type", read_only=True)
    currentRoomIdentifier = serializers.CharField(source="current_bed_identifier", read_only=True)
    requestedRoom = serializers.CharField(source="requested_room", read_only=True)
    requestedBed = serializers.CharField(source="requested_bed", read_only=True)
    requestedSharingType = serializers.CharField(source="requested_sharing_type", read_only=True)
    requestedFloor = serializers.IntegerField(source="requested_floor", read_only=True)
    requestedRoomIdentifier = serializers.CharField(source="requested_bed_identifier", read_only=True)
    adminResponse = serializers.CharField(source="admin_response", read_only=True)
    handledBy = serializers.IntegerField(source="handled_by_id", read_only=True)
    handledAt = serializers.DateTimeField(source="handled_at", read_only=True)
    completedAt = serializers.DateTimeField(source="completed_at", read_only=True)
    internalNotes = serializers.JSONField(source="internal_notes", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Concern
        fields = [
            "id",
            "concernId",
            "type",
            "status",
            "priority",
            "bookingId",
            "userId",
            "property",
            "currentRoom",
            "currentBed",
            "currentSharingType",
            "currentRoomIdentifier",
            "requestedRoom",
            "requestedBed",
            "requestedSharingType",
            "requestedFloor",
            "requestedRoomIdentifier",
            "comment",
            "adminResponse",
            "handledBy",
            "handledAt",
            "completedAt",
            "internalNotes",
            "createdAt",
            "updatedAt",
        ]

    def get_property(self, obj: Concern) -> dict:
        return {
            "id": obj.property_id,
            "name": obj.property.name,
            "locality": obj.property.locality,
            "city": obj.property.city,
        }

    def to_representation(self, instance):  # type: ignore
        data = super().to_representation(instance)
        request = self.context.get("request")
        user = getattr(request, "user", None)
        if user is None or not (user.is_platform_admin() or user.is_client()):
            data.pop("internalNotes", None)
        return data


class FreeBedSerializer(serializers.Serializer):
    roomNumber = serializers.CharField(source="room_number")
    bedLetter = serializers.CharField(source="bed_letter")
    actualBedName = serializers.CharField(source="bed_name")
    floor = serializers.IntegerField()
    sharingType = serializers.CharField(source="room_type")
    roomIdentifier = serializers.CharField(source="room_identifier")
    available = serializers.BooleanField()


class RoomTypeSerializer(serializers.Serializer):
    type = serializers.CharField()
    label = serializers.CharField()
    capacity = serializers.IntegerField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    deposit = serializers.DecimalField(max_digits=12, decimal_places=2)
