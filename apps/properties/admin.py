"""Admin registrations for properties domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Property, RoomConfiguration, RoomTypeConfig


class RoomConfigurationInline(admin.StackedInline):
    model = RoomConfiguration
    extra = 0
    fields = ("floors",)


class RoomTypeConfigInline(admin.TabularInline):
    model = RoomTypeConfig
    extra = 0
    fields = ("type", "label", "capacity", "price", "deposit", "position")


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
    list_display = ("name", "locality", "city", "client_id", "status", "created_at")
    list_filter = ("status", "city")
    search_fields = ("name", "locality", "city", "client_id")
    inlines = (RoomConfigurationInline,)
    readonly_fields = ("created_at", "updated_at")


@admin.register(RoomConfiguration)
class RoomConfigurationAdmin(admin.ModelAdmin):
    list_display = ("property", "updated_at")
    search_fields = ("property__name",)
    inlines = (RoomTypeConfigInline,)
