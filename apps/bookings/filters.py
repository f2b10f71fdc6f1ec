"""FilterSet definitions for booking lists."""

from __future__ import annotations

import django_filters  # type: ignore

from .domain.lifecycle import BookingStatus
from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Filters for the tenant's and the owning client's booking lists."""

    status = django_filters.MultipleChoiceFilter(field_name="booking_status", choices=BookingStatus.choices())
    property = django_filters.NumberFilter(field_name="property_id", lookup_expr="exact")
    move_in_from = django_filters.DateFilter(field_name="move_in_date", lookup_expr="gte")
    move_in_to = django_filters.DateFilter(field_name="move_in_date", lookup_expr="lte")

    class Meta:
        model = Booking
        fields = ["status", "property"]
