"""URL routing for the finance domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import FinancialEntryViewSet, FinancialSummaryView, MonthlyBreakdownView, PaymentViewSet

router = DefaultRouter()
router.register(r"payments", PaymentViewSet, basename="payment")
router.register(r"entries", FinancialEntryViewSet, basename="financial-entry")

urlpatterns = [
    path("summary/", FinancialSummaryView.as_view(), name="financial-summary"),
    path("monthly/", MonthlyBreakdownView.as_view(), name="financial-monthly"),
    path("", include(router.urls)),
]
