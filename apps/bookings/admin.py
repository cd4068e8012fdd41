"""Admin registrations for the booking domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "customer", "service_type", "pickup_date", "status", "payment_status", "total_price")
    list_filter = ("status", "service_type", "payment_status")
    search_fields = ("customer__email", "pickup_location", "dropoff_location")
    date_hierarchy = "pickup_date"
    readonly_fields = ("status", "is_price_confirmed", "total_price", "cancelled_at", "created_at", "updated_at")
