"""URL routing for tours."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import TourBookingViewSet, TourPackageViewSet

router = DefaultRouter()
router.register(r"packages", TourPackageViewSet, basename="tour-package")
router.register(r"bookings", TourBookingViewSet, basename="tour-booking")

urlpatterns = [
    path("", include(router.urls)),
]
