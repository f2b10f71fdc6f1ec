"""Permission classes for the booking API."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


class IsPropertyClient(permissions.BasePermission):
    """
    Only property owners (clients) and platform admins.

    Ownership of the specific property is checked by the command handlers.
    """

    message = "Only clients can manage bookings of their properties."

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if user.is_platform_admin():
            return True
        return user.is_client()
