"""URL routing for the rental domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import RentalViewSet

router = DefaultRouter()
router.register(r"", RentalViewSet, basename="rental")

urlpatterns = [
    path("", include(router.urls)),
]
