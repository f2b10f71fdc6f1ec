"""URL routing for concerns."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import ConcernViewSet

router = DefaultRouter()
router.register(r"", ConcernViewSet, basename="concern")

urlpatterns = [
    path("", include(router.urls)),
]
