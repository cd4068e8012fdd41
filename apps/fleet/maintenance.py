"""Service records: validation, upcoming services and reminders."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.guards import require_admin
from shared.domain.exceptions import NotFound, ValidationFailed

from .models import ServiceRecord, Vehicle

logger = logging.getLogger(__name__)

UPCOMING_WINDOW_DAYS = 30

EDITABLE_FIELDS = frozenset({
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
})


def validate_service_figures(mileage, cost, next_service_mileage=None) -> None:
    if mileage is None or int(mileage) <= 0:
        raise ValidationFailed("Mileage must be greater than 0", field="mileage")
    if cost is None or Decimal(str(cost)) <= 0:
        raise ValidationFailed("Cost must be greater than 0", field="cost")
    if next_service_mileage is not None:
        if int(next_service_mileage) <= 0:
            raise ValidationFailed("Next service mileage must be greater than 0", field="next_service_mileage")
        if int(next_service_mileage) <= int(mileage):
            raise ValidationFailed(
                "Next service mileage must be greater than current mileage",
                field="next_service_mileage",
            )


@transaction.atomic
def record_service(actor, vehicle_id: int, **fields) -> ServiceRecord:
    require_admin(actor)
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ValidationFailed(f"Unknown fields: {', '.join(sorted(unknown))}", field=sorted(unknown)[0])

    vehicle = Vehicle.objects.filter(pk=vehicle_id).first()
    if vehicle is None:
        raise NotFound(f"Vehicle {vehicle_id} not found", field="vehicle")

    validate_service_figures(fields.get("mileage"), fields.get("cost"), fields.get("next_service_mileage"))
    if fields.get("next_service_due") is None:
        fields.pop("next_service_due", None)

    record = ServiceRecord.objects.create(vehicle=vehicle, created_by=actor, **fields)
    logger.info(f"Service record {record.pk} created for vehicle {vehicle.pk}, cost {record.cost}")
    return record


@transaction.atomic
def update_service_record(actor, record_id: int, **changes) -> ServiceRecord:
    """Apply ``changes``; figures are validated against the merged record."""
    require_admin(actor)
    record = ServiceRecord.objects.select_for_update().filter(pk=record_id).first()
    if record is None:
        raise NotFound(f"Service record {record_id} not found")

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationFailed(f"Unknown fields: {', '.join(sorted(unknown))}", field=sorted(unknown)[0])

    if "next_service_due" in changes and changes["next_service_due"] is None:
        changes.pop("next_service_due")

    mileage = changes.get("mileage", record.mileage)
    validate_service_figures(
        mileage,
        changes.get("cost", record.cost),
        changes.get("next_service_mileage", record.next_service_mileage),
    )

    for name, value in changes.items():
        setattr(record, name, value)
    record.save()
    logger.info(f"Service record {record.pk} updated: {sorted(changes)}")
    return record


def delete_service_record(actor, record_id: int) -> None:
    require_admin(actor)
    deleted, _ = ServiceRecord.objects.filter(pk=record_id).delete()
    if not deleted:
        raise NotFound(f"Service record {record_id} not found")


def upcoming_services(days: int = UPCOMING_WINDOW_DAYS, today: date | None = None):
    """Records whose next service falls within the next ``days`` days."""
    today = today or timezone.localdate()
    return (
        ServiceRecord.objects.select_related("vehicle")
        .filter(next_service_due__gte=today, next_service_due__lte=today + timedelta(days=days))
        .order_by("next_service_due")
    )


def service_reminders(today: date | None = None):
    """Records due today or tomorrow."""
    today = today or timezone.localdate()
    return (
        ServiceRecord.objects.select_related("vehicle")
        .filter(next_service_due__in=[today, today + timedelta(days=1)])
        .order_by("next_service_due", "vehicle__vehicle_number")
    )
