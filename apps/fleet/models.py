"""Fleet models: vehicles and their service records."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange


class Vehicle(models.Model):
    """A bookable vehicle of the operator's fleet.

    ``is_available`` and the ``occupied_*`` fields are written only by
    ``apps.fleet.services.ResourceRegistry``.
    """

    class VehicleType(models.TextChoices):
        VAN = "van", _("Van")
        BUS = "bus", _("Bus")
        WEDDING_CAR = "wedding_car", _("Wedding car")
        CAR = "car", _("Car")
        GOODS_VEHICLE = "goods_vehicle", _("Goods vehicle")
        BIKE = "bike", _("Bike")
        LORRY = "lorry", _("Lorry")

    class FuelType(models.TextChoices):
        PETROL = "petrol", _("Petrol")
        DIESEL = "diesel", _("Diesel")
        ELECTRIC = "electric", _("Electric")
        HYBRID = "hybrid", _("Hybrid")

    class Transmission(models.TextChoices):
        MANUAL = "manual", _("Manual")
        AUTOMATIC = "automatic", _("Automatic")

    class RideType(models.TextChoices):
        WEDDING = "wedding", _("Wedding")
        DAILY = "daily", _("Daily")
        AIRPORT = "airport", _("Airport")
        CARGO = "cargo", _("Cargo")

    vehicle_number = models.CharField(max_length=20, unique=True)
    vehicle_type = models.CharField(max_length=20, choices=VehicleType.choices)
    brand = models.CharField(max_length=100)
    model = models.CharField(max_length=100)
    year = models.PositiveSmallIntegerField(validators=[MinValueValidator(1990)])
    color = models.CharField(max_length=50)
    capacity = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    fuel_type = models.CharField(max_length=20, choices=FuelType.choices)
    transmission = models.CharField(max_length=20, choices=Transmission.choices)
    daily_rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    monthly_rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    ride_pricing = models.JSONField(
        default=dict,
        blank=True,
        help_text=_("Price per ride type, e.g. {\"wedding\": 25000}."),
    )
    ride_types = models.JSONField(default=list, blank=True)
    features = models.JSONField(default=list, blank=True)
    description = models.TextField(blank=True)
    is_available = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    occupied_by = models.ForeignKey(
        "rentals.Rental",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="occupied_vehicles",
    )
    occupied_from = models.DateField(null=True, blank=True)
    occupied_until = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Vehicle")
        verbose_name_plural = _("Vehicles")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["vehicle_type", "is_available"]),
            models.Index(fields=["is_active"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(daily_rate__gte=0) & models.Q(monthly_rate__gte=0),
                name="vehicle_rates_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.vehicle_number} ({self.brand} {self.model})"

    def save(self, *args, **kwargs):  # type: ignore
        self.vehicle_number = self.vehicle_number.strip().upper()
        super().save(*args, **kwargs)

    @property
    def occupied_window(self) -> DateRange | None:
        if self.occupied_from and self.occupied_until and self.occupied_from < self.occupied_until:
            return DateRange(self.occupied_from, self.occupied_until)
        return None


def _tomorrow():
    return timezone.localdate() + timedelta(days=1)


class ServiceRecord(models.Model):
    """A maintenance visit of a vehicle; its cost is an operator expense."""

    class ServiceType(models.TextChoices):
        ROUTINE = "routine", _("Routine")
        REPAIR = "repair", _("Repair")
        MAINTENANCE = "maintenance", _("Maintenance")
        INSPECTION = "inspection", _("Inspection")
        EMERGENCY = "emergency", _("Emergency")

    vehicle = models.ForeignKey(Vehicle, on_delete=models.CASCADE, related_name="service_records")
    service_date = models.DateField(default=timezone.localdate)
    service_type = models.CharField(max_length=20, choices=ServiceType.choices)
    description = models.TextField()
    mileage = models.PositiveIntegerField()
    cost = models.DecimalField(max_digits=12, decimal_places=2)
    service_provider = models.CharField(max_length=255)
    parts_replaced = models.JSONField(default=list, blank=True)
    next_service_due = models.DateField(default=_tomorrow)
    next_service_mileage = models.PositiveIntegerField(null=True, blank=True)
    technician = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)
    is_warranty = models.BooleanField(default=False)
    warranty_expiry = models.DateField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="service_records",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Service record")
        verbose_name_plural = _("Service records")
        ordering = ["-service_date", "-created_at"]
        indexes = [
            models.Index(fields=["vehicle", "service_date"]),
            models.Index(fields=["next_service_due"]),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(mileage__gt=0), name="service_mileage_positive"),
            models.CheckConstraint(condition=models.Q(cost__gt=0), name="service_cost_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.get_service_type_display()} of {self.vehicle_id} on {self.service_date}"
