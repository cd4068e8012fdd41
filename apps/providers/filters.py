"""Filters for vehicle request listings."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import VehicleRequest


class VehicleRequestFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = VehicleRequest
        fields = ["status", "vehicle_type", "search"]

    def filter_search(self, queryset, name, value):  # type: ignore
        return queryset.filter(
            Q(vehicle_number__icontains=value) | Q(brand__icontains=value) | Q(model__icontains=value)
        )
