"""Admin registrations for provider contracts and vehicle requests."""

from __future__ import annotations

from django.contrib import admin

from .models import ContractAdminAction, ContractPayment, VehicleProviderContract, VehicleRequest


class ContractAdminActionInline(admin.TabularInline):
    model = ContractAdminAction
    extra = 0
    can_delete = False
    readonly_fields = ("action", "actor", "notes", "timestamp")

    def has_add_permission(self, request, obj=None):  # type: ignore
        return False


class ContractPaymentInline(admin.TabularInline):
    model = ContractPayment
    extra = 0
    readonly_fields = ("payment_id", "processed_by")


@admin.register(VehicleProviderContract)
class VehicleProviderContractAdmin(admin.ModelAdmin):
    list_display = ("contract_id", "provider", "status", "start_date", "end_date", "monthly_fee", "next_payment_date")
    list_filter = ("status", "payment_terms")
    search_fields = ("contract_id", "provider__email", "provider__business_name")
    readonly_fields = ("contract_id", "status", "last_payment_date", "next_payment_date")
    inlines = [ContractAdminActionInline, ContractPaymentInline]


@admin.register(VehicleRequest)
class VehicleRequestAdmin(admin.ModelAdmin):
    list_display = ("vehicle_number", "provider", "vehicle_type", "daily_rate", "monthly_rate", "status", "created_at")
    list_filter = ("status", "vehicle_type")
    search_fields = ("vehicle_number", "brand", "model", "provider__email")
    readonly_fields = ("approved_by", "approved_at", "rejected_at")
