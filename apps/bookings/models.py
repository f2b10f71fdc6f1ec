"""Booking domain models.

A booking reserves one or more beds of a property for a stay. Beds are
stored as ``BookingRoom`` rows keyed by their canonical identifier, which
is what availability checks match on. Bookings are never deleted; their
lifecycle is carried by ``booking_status`` (see domain.lifecycle).
"""

from __future__ import annotations

import secrets
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.events import (
    BookingApproved,
    BookingCancelled,
    BookingCheckedIn,
    BookingCheckedOut,
    BookingRejected,
)
from apps.bookings.domain.lifecycle import BookingStatus, PaymentStatus, ensure_transition
from apps.bookings.domain.pricing import DurationType
from shared.domain.base import EventSource
from shared.infrastructure.fields import EncryptedCharField

ZERO = Decimal("0.00")


def default_payment_method() -> str:
    return settings.BOOKING_DEFAULT_PAYMENT_METHOD


class Booking(EventSource, models.Model):
    """Reservation of beds in a property."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    client_id = models.CharField(
        max_length=64,
        db_index=True,
        help_text=_("Client account the tenant belongs to."),
    )
    property = models.ForeignKey(
        "properties.Property",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    booking_code = models.CharField(max_length=12, unique=True, editable=False)

    # Room type snapshot, independent of later catalog edits
    room_type = models.CharField(max_length=40)
    room_type_name = models.CharField(max_length=120, blank=True)
    room_capacity = models.PositiveSmallIntegerField(default=1)

    move_in_date = models.DateField()
    move_out_date = models.DateField()
    duration_type = models.CharField(
        max_length=10,
        choices=DurationType.choices,
        default=DurationType.MONTHLY,
    )
    duration_days = models.PositiveIntegerField(null=True, blank=True)
    duration_months = models.PositiveIntegerField(null=True, blank=True)
    person_count = models.PositiveSmallIntegerField(default=1)

    # Customer snapshot
    customer_name = models.CharField(max_length=255, blank=True)
    customer_age = models.PositiveSmallIntegerField(null=True, blank=True)
    customer_gender = models.CharField(max_length=20, blank=True)
    customer_mobile = models.CharField(max_length=20, blank=True)
    customer_email = models.EmailField(blank=True)
    id_proof_type = models.CharField(max_length=50, blank=True)
    id_proof_number = EncryptedCharField(blank=True, help_text=_("Stored encrypted."))
    purpose = models.CharField(max_length=255, blank=True)
    special_requests = models.TextField(blank=True)

    # Pricing snapshot
    monthly_rent = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    total_rent = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    security_deposit = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    advance_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    maintenance_fee = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)

    # Payment sub-record
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    payment_method = models.CharField(max_length=30, default=default_payment_method)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices(),
        default=PaymentStatus.PENDING.value,
    )
    transaction_id = models.CharField(max_length=120, blank=True)
    payment_date = models.DateTimeField(null=True, blank=True)
    outstanding_amount = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)

    booking_status = models.CharField(
        max_length=20,
        choices=BookingStatus.choices(),
        default=BookingStatus.PENDING.value,
    )

    # Audit
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    checked_out_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(move_out_date__gt=models.F("move_in_date")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["property", "booking_status"], name="booking_property_status_idx"),
            models.Index(fields=["property", "move_in_date", "move_out_date"], name="booking_property_dates_idx"),
            models.Index(fields=["user", "-created_at"], name="booking_user_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_code} for {self.property_id}"

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.booking_code:
            self.booking_code = self.generate_booking_code()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_booking_code() -> str:
        return secrets.token_hex(4).upper()

    def total_due(self) -> Decimal:
        return self.total_rent + self.security_deposit + self.maintenance_fee

    def bed_identifiers(self) -> list[str]:
        return [room.bed_identifier for room in self.room_details.all()]

    def _event_context(self) -> dict:
        return {
            "aggregate_id": self.pk,
            "booking_id": self.pk,
            "property_id": self.property_id,
            "user_id": self.user_id,
            "client_id": self.client_id,
        }

    def _move_to(self, target: BookingStatus) -> str:
        previous = self.booking_status
        self.booking_status = ensure_transition(previous, target).value
        return previous

    # ===== Lifecycle =====
    # Each transition only mutates the instance and records an event;
    # the command handler saves inside its unit of work.

    def approve(self, approved_by) -> None:
        self._move_to(BookingStatus.APPROVED)
        self.approved_by = approved_by
        self.approved_at = timezone.now()
        self.add_event(BookingApproved(approved_by=approved_by.pk, **self._event_context()))

    def reject(self, rejected_by, reason: str) -> None:
        self._move_to(BookingStatus.REJECTED)
        self.rejected_by = rejected_by
        self.rejected_at = timezone.now()
        self.rejection_reason = reason
        self.add_event(BookingRejected(reason=reason, **self._event_context()))

    def cancel(self) -> None:
        previous = self._move_to(BookingStatus.CANCELLED)
        self.payment_status = PaymentStatus.REFUND_PENDING.value
        self.cancelled_at = timezone.now()
        self.add_event(BookingCancelled(previous_status=previous, **self._event_context()))

    def check_in(self) -> None:
        self._move_to(BookingStatus.CHECKED_IN)
        self.checked_in_at = timezone.now()
        self.add_event(BookingCheckedIn(**self._event_context()))

    def check_out(self) -> None:
        self._move_to(BookingStatus.CHECKED_OUT)
        self.checked_out_at = timezone.now()
        self.add_event(BookingCheckedOut(**self._event_context()))

    def apply_payments(self, total_paid: Decimal) -> None:
        """
        Recompute the payment sub-record from the sum of completed payments.

        A fully paid approved booking becomes confirmed.
        """
        total_due = self.total_due()
        self.outstanding_amount = max(ZERO, total_due - total_paid)

        if total_paid >= total_due:
            self.payment_status = PaymentStatus.COMPLETED.value
            self.amount_paid = total_paid
        elif total_paid > 0:
            self.payment_status = PaymentStatus.PARTIAL.value
            self.amount_paid = total_paid
        else:
            self.payment_status = PaymentStatus.PENDING.value
            self.amount_paid = ZERO

        if (
            self.payment_status == PaymentStatus.COMPLETED
            and self.booking_status == BookingStatus.APPROVED
        ):
            self._move_to(BookingStatus.CONFIRMED)


class BookingRoom(models.Model):
    """One reserved bed of a booking."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="room_details")
    bed_identifier = models.CharField(max_length=255, db_index=True)
    sharing_type = models.CharField(max_length=40)
    floor = models.IntegerField()
    room_number = models.CharField(max_length=40)
    bed_label = models.CharField(max_length=120)
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name = _("Booked bed")
        verbose_name_plural = _("Booked beds")
        ordering = ["position", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["booking", "bed_identifier"],
                name="booking_room_unique_bed",
            ),
        ]

    def __str__(self) -> str:
        return self.bed_identifier


class Payment(models.Model):
    """Payment ledger entry of a booking."""

    class Method(models.TextChoices):
        ONLINE = "online", _("Online")
        OFFLINE = "offline", _("Offline")
        WALLET = "wallet", _("Wallet")
        CASH = "cash", _("Cash")
        BANK_TRANSFER = "bank_transfer", _("Bank transfer")

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        COMPLETED = "completed", _("Completed")
        FAILED = "failed", _("Failed")
        REFUNDED = "refunded", _("Refunded")

    booking = models.ForeignKey(Booking, on_delete=models.PROTECT, related_name="payments")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    method = models.CharField(max_length=20, choices=Method.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    transaction_id = models.CharField(max_length=120, blank=True)
    description = models.CharField(max_length=255, blank=True)
    paid_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["paid_at", "id"]

    def __str__(self) -> str:
        return f"{self.amount} ({self.status}) for booking {self.booking_id}"
