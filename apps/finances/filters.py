"""Filters for ledger listings."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import FinancialEntry


class FinancialEntryFilter(django_filters.FilterSet):
    start_date = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="date", lookup_expr="lte")

    class Meta:
        model = FinancialEntry
        fields = ["type", "category", "start_date", "end_date"]
