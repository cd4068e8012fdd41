"""Admin registrations for the fleet domain."""

from __future__ import annotations

from django.contrib import admin

from .models import ServiceRecord, Vehicle


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ("vehicle_number", "vehicle_type", "brand", "model", "is_available", "is_active")
    list_filter = ("vehicle_type", "is_available", "is_active", "fuel_type")
    search_fields = ("vehicle_number", "brand", "model")
    readonly_fields = ("is_available", "occupied_by", "occupied_from", "occupied_until", "created_at", "updated_at")


@admin.register(ServiceRecord)
class ServiceRecordAdmin(admin.ModelAdmin):
    list_display = ("vehicle", "service_type", "service_date", "cost", "next_service_due")
    list_filter = ("service_type", "is_warranty")
    search_fields = ("vehicle__vehicle_number", "service_provider", "technician")
    readonly_fields = ("created_by", "created_at", "updated_at")
