"""Serializers for the fleet domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import ServiceRecord, Vehicle


class VehicleSerializer(serializers.ModelSerializer):
    """Vehicle card; occupancy fields are owned by the registry and read-only."""

    class Meta:
        model = Vehicle
        fields = [
            "id",
            "vehicle_number",
            "vehicle_type",
            "brand",
            "model",
            "year",
            "color",
            "capacity",
            "fuel_type",
            "transmission",
            "daily_rate",
            "monthly_rate",
            "ride_pricing",
            "ride_types",
            "features",
            "description",
            "is_available",
            "is_active",
            "occupied_by",
            "occupied_from",
            "occupied_until",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "is_available",
            "is_active",
            "occupied_by",
            "occupied_from",
            "occupied_until",
            "created_at",
            "updated_at",
        ]

    def validate_ride_types(self, value):  # type: ignore
        unknown = set(value) - set(Vehicle.RideType.values)
        if unknown:
            raise serializers.ValidationError(f"Unknown ride types: {', '.join(sorted(unknown))}")
        return value


class ServiceRecordSerializer(serializers.ModelSerializer):
    vehicle_number = serializers.ReadOnlyField(source="vehicle.vehicle_number")
    next_service_due = serializers.DateField(required=False, allow_null=True)

    class Meta:
        model = ServiceRecord
        fields = [
            "id",
            "vehicle",
            "vehicle_number",
            "service_date",
            "service_type",
            "description",
            "mileage",
            "cost",
            "service_provider",
            "parts_replaced",
            "next_service_due",
            "next_service_mileage",
            "technician",
            "notes",
            "is_warranty",
            "warranty_expiry",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_by", "created_at", "updated_at"]
