"""Admin registrations for the rental domain."""

from __future__ import annotations

from django.contrib import admin

from .models import Rental


@admin.register(Rental)
class RentalAdmin(admin.ModelAdmin):
    list_display = ("id", "customer", "vehicle", "rental_type", "start_date", "end_date", "status", "total_amount")
    list_filter = ("status", "rental_type")
    search_fields = ("contract_id", "customer__email", "vehicle__vehicle_number")
    readonly_fields = (
        "status",
        "contract_id",
        "estimated_amount",
        "is_price_confirmed",
        "total_amount",
        "approved_by",
        "approved_at",
        "contract_created_at",
        "contract_activated_at",
        "contract_completed_at",
        "created_at",
        "updated_at",
    )
