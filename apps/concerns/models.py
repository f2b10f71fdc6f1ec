"""Concern models.

A concern is raised by the tenant of a booking and handled by the client
owning the property. Bed and room changes record the bed the tenant wants
as a canonical identifier; the booking itself is not moved.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.concerns.domain.events import ConcernStatusChanged, ConcernSubmitted
from shared.domain.base import EventSource
from shared.domain.exceptions import InvalidTransition


class Concern(EventSource, models.Model):
    """Bed change, room change or service request of a tenant."""

    class Type(models.TextChoices):
        BED_CHANGE = "bed-change", _("Bed change")
        ROOM_CHANGE = "room-change", _("Room change")
        OTHER_SERVICES = "other-services", _("Other services")

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")
        IN_PROGRESS = "in-progress", _("In progress")
        COMPLETED = "completed", _("Completed")

    class Priority(models.TextChoices):
        LOW = "low", _("Low")
        MEDIUM = "medium", _("Medium")
        HIGH = "high", _("High")
        URGENT = "urgent", _("Urgent")

    CLOSED_STATUSES = frozenset({Status.REJECTED.value, Status.COMPLETED.value})

    booking = models.ForeignKey("bookings.Booking", on_delete=models.PROTECT, related_name="concerns")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="concerns")
    property = models.ForeignKey("properties.Property", on_delete=models.PROTECT, related_name="concerns")
    type = models.CharField(max_length=20, choices=Type.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)

    # Where the tenant is now, copied from the booking's primary bed
    current_bed_identifier = models.CharField(max_length=255)
    current_room = models.CharField(max_length=60)
    current_bed = models.CharField(max_length=60)
    current_sharing_type = models.CharField(max_length=40)

    # Where the tenant wants to go (bed and room changes only)
    requested_bed_identifier = models.CharField(max_length=255, blank=True)
    requested_room = models.CharField(max_length=60, blank=True)
    requested_bed = models.CharField(max_length=60, blank=True)
    requested_sharing_type = models.CharField(max_length=40, blank=True)
    requested_floor = models.IntegerField(null=True, blank=True)

    comment = models.TextField(max_length=1000, blank=True)
    admin_response = models.TextField(max_length=1000, blank=True)
    handled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    handled_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    internal_notes = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Concern")
        verbose_name_plural = _("Concerns")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="concern_user_created_idx"),
            models.Index(fields=["property", "status"], name="concern_property_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.concern_code()} ({self.type}) for booking {self.booking_id}"

    def concern_code(self) -> str:
        return f"CN{self.pk or 0:08d}"

    def _event_context(self) -> dict:
        return {
            "aggregate_id": self.pk,
            "concern_id": self.pk,
            "concern_type": self.type,
            "booking_id": self.booking_id,
            "property_id": self.property_id,
            "user_id": self.user_id,
            "client_id": self.booking.client_id,
        }

    def submitted(self) -> None:
        self.add_event(ConcernSubmitted(**self._event_context()))

    def handle(self, status: str, handled_by, response: str = "") -> None:
        """
        Move the concern to ``status`` on behalf of ``handled_by``.

        Rejected and completed concerns are closed.
        """
        if self.status in self.CLOSED_STATUSES:
            raise InvalidTransition(
                f"Cannot change a {self.status} concern.",
                currentStatus=self.status,
                requestedStatus=status,
            )
        previous = self.status
        now = timezone.now()
        self.status = status
        self.handled_by = handled_by
        if response:
            self.admin_response = response
        if status != self.Status.PENDING and self.handled_at is None:
            self.handled_at = now
        if status == self.Status.COMPLETED and self.completed_at is None:
            self.completed_at = now
        self.add_event(ConcernStatusChanged(previous_status=previous, status=status, **self._event_context()))

    def add_note(self, note: str, author) -> None:
        self.internal_notes = [
            *self.internal_notes,
            {"note": note, "createdBy": author.pk, "createdAt": timezone.now().isoformat()},
        ]
