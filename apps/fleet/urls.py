"""URL routing for the fleet domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import ServiceRecordViewSet, VehicleViewSet

router = DefaultRouter()
router.register(r"vehicles", VehicleViewSet, basename="vehicle")
router.register(r"service-records", ServiceRecordViewSet, basename="service-record")

urlpatterns = [
    path("", include(router.urls)),
]
