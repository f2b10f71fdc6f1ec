"""Admin registration for concerns."""

from __future__ import annotations

from django.contrib import admin

from .models import Concern


@admin.register(Concern)
class ConcernAdmin(admin.ModelAdmin):
    list_display = ("id", "type", "status", "priority", "property", "user", "booking", "created_at")
    list_filter = ("type", "status", "priority")
    search_fields = ("booking__booking_code", "user__email", "property__name", "requested_bed_identifier")
    readonly_fields = ("current_bed_identifier", "requested_bed_identifier", "internal_notes", "created_at", "updated_at")
