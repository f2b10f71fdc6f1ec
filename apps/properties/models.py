"""Property domain models.

A property belongs to a client (its owner account) and must be approved
before it can take reservations. Its bookable inventory is described by a
single room configuration: the floor → room → bed layout plus the price
list of sharing types offered.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.properties.domain.catalog import (
    CatalogFormatError,
    RoomCatalog,
    RoomTypeSpec,
    parse_floors,
)


class Property(models.Model):
    """Shared-accommodation property (hostel, PG, co-living)."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending review")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")

    name = models.CharField(max_length=255)
    locality = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=120, blank=True)
    client_id = models.CharField(
        max_length=64,
        db_index=True,
        help_text=_("Client account that owns the property."),
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Property")
        verbose_name_plural = _("Properties")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["client_id", "status"], name="property_client_status_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def is_bookable(self) -> bool:
        return self.status == self.Status.APPROVED

    @property
    def display_address(self) -> str:
        return ", ".join(part for part in (self.locality, self.city) if part)


class RoomConfiguration(models.Model):
    """
    Floor → room → bed layout of a property.

    ``floors`` holds an ordered list, see ``parse_floors`` for its shape.
    The row also serves as the per-property lock taken while a reservation
    is committed.
    """

    property = models.OneToOneField(
        Property,
        on_delete=models.CASCADE,
        related_name="room_configuration",
    )
    floors = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Room configuration")
        verbose_name_plural = _("Room configurations")

    def __str__(self) -> str:
        return f"Rooms of {self.property}"

    def clean(self) -> None:
        try:
            parse_floors(self.floors)
        except CatalogFormatError as exc:
            raise ValidationError({"floors": str(exc)})

    def to_catalog(self) -> RoomCatalog:
        """Immutable room catalog built from this configuration and its room types."""
        return RoomCatalog(
            property_id=self.property_id,
            floors=parse_floors(self.floors),
            room_types=tuple(rt.to_spec() for rt in self.room_types.all()),
        )


class RoomTypeConfig(models.Model):
    """Price list entry of one sharing type offered by a property."""

    configuration = models.ForeignKey(
        RoomConfiguration,
        on_delete=models.CASCADE,
        related_name="room_types",
    )
    type = models.SlugField(max_length=40, help_text=_("Sharing type tag, e.g. 'double'."))
    label = models.CharField(max_length=120, blank=True)
    capacity = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Monthly price per bed."),
    )
    deposit = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Security deposit per bed."),
    )
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name = _("Room type")
        verbose_name_plural = _("Room types")
        ordering = ["position", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["configuration", "type"],
                name="room_type_unique_per_configuration",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.label or self.type} ({self.capacity} beds)"

    def to_spec(self) -> RoomTypeSpec:
        return RoomTypeSpec(
            type=self.type,
            label=self.label,
            capacity=self.capacity,
            price=self.price,
            deposit=self.deposit,
        )
