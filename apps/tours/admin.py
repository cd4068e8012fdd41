"""Admin registrations for tours."""

from __future__ import annotations

from django.contrib import admin

from .models import TourAdminAction, TourBooking, TourPackage


@admin.register(TourPackage)
class TourPackageAdmin(admin.ModelAdmin):
    list_display = ("name", "destination", "tour_days", "price_per_person", "category", "status", "is_available")
    list_filter = ("status", "category", "tour_type", "is_available")
    search_fields = ("name", "destination")


class TourAdminActionInline(admin.TabularInline):
    model = TourAdminAction
    extra = 0
    can_delete = False
    readonly_fields = ("action", "note", "admin", "timestamp")

    def has_add_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(TourBooking)
class TourBookingAdmin(admin.ModelAdmin):
    list_display = ("id", "customer", "package", "booking_date", "number_of_passengers", "status", "final_price")
    list_filter = ("status", "payment_status", "payment_method")
    search_fields = ("customer__email", "package__name")
    inlines = [TourAdminActionInline]
    readonly_fields = ("status", "final_price", "is_price_confirmed", "amount_paid", "remaining_amount")
