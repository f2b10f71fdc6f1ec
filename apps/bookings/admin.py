"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingRoom, Payment


class BookingRoomInline(admin.TabularInline):
    model = BookingRoom
    extra = 0
    fields = ("bed_identifier", "sharing_type", "floor", "room_number", "bed_label")
    readonly_fields = fields


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ("amount", "method", "status", "transaction_id", "paid_at")
    readonly_fields = fields


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_code",
        "property",
        "user",
        "room_type",
        "booking_status",
        "payment_status",
        "move_in_date",
        "move_out_date",
        "outstanding_amount",
        "created_at",
    )
    list_filter = ("booking_status", "payment_status", "duration_type", "move_in_date")
    search_fields = ("booking_code", "property__name", "user__email", "customer_name")
    readonly_fields = (
        "booking_code",
        "created_at",
        "updated_at",
        "monthly_rent",
        "total_rent",
        "outstanding_amount",
    )
    inlines = [BookingRoomInline, PaymentInline]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("booking", "amount", "method", "status", "paid_at")
    list_filter = ("method", "status")
    search_fields = ("booking__booking_code", "transaction_id")
