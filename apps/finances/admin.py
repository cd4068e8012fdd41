"""Admin registrations for the finance domain."""

from __future__ import annotations

from django.contrib import admin

from .models import FinancialEntry, Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("transaction_id", "booking", "payer", "amount", "payment_method", "status", "processed_at")
    list_filter = ("status", "payment_method")
    search_fields = ("transaction_id", "gateway_reference", "payer__email")
    readonly_fields = ("transaction_id", "processed_at", "created_at", "updated_at")


@admin.register(FinancialEntry)
class FinancialEntryAdmin(admin.ModelAdmin):
    list_display = ("date", "type", "category", "description", "amount", "created_by")
    list_filter = ("type", "category")
    search_fields = ("description", "reference")
    date_hierarchy = "date"
