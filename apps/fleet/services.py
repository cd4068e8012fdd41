"""Vehicle occupancy.

``ResourceRegistry`` is the only code path that writes a vehicle's
``is_available`` flag and its ``occupied_*`` fields. Every call locks the
vehicle row and claims it with a conditional UPDATE, so two rentals
racing for one vehicle cannot both win.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import NotFound, ResourceConflict
from shared.domain.value_objects import DateRange

from .models import Vehicle

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from apps.rentals.models import Rental

logger = logging.getLogger(__name__)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


class ResourceRegistry:
    """Reserve and release vehicles on behalf of rentals."""

    def _locked_vehicle(self, vehicle_id: int) -> Vehicle:
        vehicle = _lock_queryset_if_possible(Vehicle.objects.filter(pk=vehicle_id)).first()
        if vehicle is None:
            raise NotFound(f"Vehicle {vehicle_id} not found", field="vehicle")
        return vehicle

    @transaction.atomic
    def reserve(self, vehicle_id: int, holder: "Rental", window: DateRange) -> Vehicle:
        """Mark the vehicle occupied by ``holder`` for ``window``.

        Re-reserving by the current holder refreshes the window. Raises
        ResourceConflict when the vehicle is inactive or held by another
        rental.
        """
        vehicle = self._locked_vehicle(vehicle_id)
        if not vehicle.is_active:
            raise ResourceConflict(f"Vehicle {vehicle.vehicle_number} is not in service", field="vehicle")

        now = timezone.now()
        if vehicle.occupied_by_id is not None and vehicle.occupied_by_id == holder.pk:
            Vehicle.objects.filter(pk=vehicle.pk, occupied_by=holder).update(
                is_available=False,
                occupied_from=window.start_date,
                occupied_until=window.end_date,
                updated_at=now,
            )
            logger.info(f"Vehicle {vehicle.pk} occupancy window refreshed for rental {holder.pk}: {window}")
        else:
            claimed = Vehicle.objects.filter(
                pk=vehicle.pk,
                is_active=True,
                is_available=True,
                occupied_by__isnull=True,
            ).update(
                is_available=False,
                occupied_by=holder,
                occupied_from=window.start_date,
                occupied_until=window.end_date,
                updated_at=now,
            )
            if not claimed:
                logger.warning(
                    f"Vehicle {vehicle.pk} reservation for rental {holder.pk} refused, "
                    f"held by rental {vehicle.occupied_by_id}"
                )
                raise ResourceConflict(
                    f"Vehicle {vehicle.vehicle_number} is already occupied",
                    field="vehicle",
                )
            logger.info(f"Vehicle {vehicle.pk} reserved for rental {holder.pk}: {window}")

        vehicle.refresh_from_db()
        return vehicle

    @transaction.atomic
    def release(self, vehicle_id: int, holder: "Rental | None" = None) -> None:
        """Clear occupancy. Releasing a free vehicle is a no-op.

        With ``holder`` given, a vehicle held by a different rental is left
        untouched.
        """
        _lock_queryset_if_possible(Vehicle.objects.filter(pk=vehicle_id)).first()
        queryset = Vehicle.objects.filter(pk=vehicle_id)
        if holder is not None:
            queryset = queryset.filter(Q(occupied_by=holder) | Q(occupied_by__isnull=True))

        released = queryset.update(
            is_available=True,
            occupied_by=None,
            occupied_from=None,
            occupied_until=None,
            updated_at=timezone.now(),
        )
        if released:
            logger.info(f"Vehicle {vehicle_id} released" + (f" by rental {holder.pk}" if holder else ""))
        elif holder is not None and Vehicle.objects.filter(pk=vehicle_id).exists():
            logger.warning(f"Vehicle {vehicle_id} not released: held by another rental than {holder.pk}")

    def is_free(self, vehicle_id: int, window: DateRange, *, holder: "Rental | None" = None) -> bool:
        """Read-only check: active and not occupied during ``window``."""
        vehicle = Vehicle.objects.filter(pk=vehicle_id).first()
        if vehicle is None or not vehicle.is_active:
            return False
        if vehicle.occupied_by_id is None:
            return vehicle.is_available
        if holder is not None and vehicle.occupied_by_id == holder.pk:
            return True
        occupied = vehicle.occupied_window
        if occupied is None:
            return False
        return not occupied.overlaps_with(window)

    def available_vehicles(self):
        return Vehicle.objects.filter(is_active=True, is_available=True, occupied_by__isnull=True)

    @transaction.atomic
    def deactivate(self, vehicle_id: int) -> Vehicle:
        """Take a vehicle out of service; refused while it is occupied."""
        vehicle = self._locked_vehicle(vehicle_id)
        if vehicle.occupied_by_id is not None:
            raise ResourceConflict(
                f"Vehicle {vehicle.vehicle_number} is occupied by rental {vehicle.occupied_by_id}",
                field="vehicle",
            )
        vehicle.is_active = False
        vehicle.save(update_fields=["is_active", "updated_at"])
        logger.info(f"Vehicle {vehicle.pk} taken out of service")
        return vehicle


resource_registry = ResourceRegistry()
