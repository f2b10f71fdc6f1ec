"""Read helpers for properties and their room catalogs."""

from __future__ import annotations

from apps.properties.domain.catalog import RoomCatalog
from apps.properties.models import Property, RoomConfiguration
from shared.domain.exceptions import NotFound


def get_property(property_id) -> Property:
    try:
        return Property.objects.get(pk=property_id)
    except (Property.DoesNotExist, ValueError, TypeError):
        raise NotFound("Property not found.", propertyId=property_id)


def get_catalog(property_id, *, lock: bool = False) -> RoomCatalog:
    """
    Load the room catalog of a property.

    With ``lock=True`` the configuration row is selected FOR UPDATE so that
    concurrent reservation commits on the same property serialize. Must then
    be called inside a transaction.
    """
    queryset = RoomConfiguration.objects.all()
    if lock:
        queryset = queryset.select_for_update()
    try:
        configuration = queryset.get(property_id=property_id)
    except (RoomConfiguration.DoesNotExist, ValueError, TypeError):
        raise NotFound("Room configuration not found for this property.", propertyId=property_id)
    return configuration.to_catalog()
