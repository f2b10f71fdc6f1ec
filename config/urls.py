"""URL configuration.

Routes the Django admin (where clients maintain room catalogs), the
booking and concern APIs and the OpenAPI schema.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/concerns/', include('apps.concerns.urls')),
    path('api/v1/schema/', SpectacularAPIView.as_view(), name='schema'),
]
