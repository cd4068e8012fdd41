"""URL routing for provider contracts, vehicle requests and provider accounts."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import ProviderAccountViewSet, VehicleProviderContractViewSet, VehicleRequestViewSet

router = DefaultRouter()
router.register(r"contracts", VehicleProviderContractViewSet, basename="provider-contract")
router.register(r"vehicle-requests", VehicleRequestViewSet, basename="vehicle-request")
router.register(r"accounts", ProviderAccountViewSet, basename="provider-account")

urlpatterns = [
    path("", include(router.urls)),
]
