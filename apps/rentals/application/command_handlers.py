"""
Rental Command Handlers

Use cases of the rental contract workflow:
- CreateRentalCommand: customer requests a vehicle for a period
- SetRentalStatusCommand: admin approves / activates / closes a rental
- UpdateRentalCommand: admin edits terms, dates or the assigned vehicle

Status changes and the vehicle occupancy they imply are written in one
DjangoUnitOfWork, so a refused reservation also undoes the status write.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import uuid4
import logging

from django.db.models import Count, Q, Sum  # type: ignore
from django.utils import timezone  # type: ignore

from apps.fleet.models import Vehicle
from apps.fleet.services import resource_registry
from shared.application.guards import require_admin
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import InvalidTransition, NotFound, ResourceConflict, ValidationFailed
from shared.domain.value_objects import DateRange

from apps.rentals.domain import lifecycle
from apps.rentals.domain.events import RentalStatusChanged
from apps.rentals.models import Rental

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateRentalCommand:
    vehicle_id: int
    rental_type: str
    start_date: date
    end_date: date
    purpose: str = ''
    special_requirements: str = ''


@dataclass
class SetRentalStatusCommand:
    rental_id: int
    status: str
    daily_fee: Optional[Decimal] = None
    monthly_fee: Optional[Decimal] = None
    conditions: Optional[str] = None
    admin_notes: Optional[str] = None


@dataclass
class UpdateRentalCommand:
    """Admin edit; ``None`` means "leave unchanged". There is no status field."""
    rental_id: int
    vehicle_id: Optional[int] = None
    rental_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    purpose: Optional[str] = None
    special_requirements: Optional[str] = None
    daily_fee: Optional[Decimal] = None
    monthly_fee: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    conditions: Optional[str] = None
    admin_notes: Optional[str] = None
    contract_terms: Optional[str] = None
    admin_guidelines: Optional[str] = None

    def changes(self) -> dict:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != 'rental_id' and getattr(self, f.name) is not None
        }


TEXT_FIELDS = ('purpose', 'special_requirements', 'conditions', 'admin_notes', 'contract_terms', 'admin_guidelines')


def generate_contract_id() -> str:
    """CONTRACT-<timestamp>-<random suffix>, minted once per rental"""
    stamp = timezone.now().strftime('%Y%m%d%H%M%S%f')
    return f"CONTRACT-{stamp}-{uuid4().hex[:6].upper()}"


def vehicle_snapshot(vehicle: Vehicle) -> dict:
    return {
        'vehicle_number': vehicle.vehicle_number,
        'vehicle_type': vehicle.vehicle_type,
        'brand': vehicle.brand,
        'model': vehicle.model,
        'year': vehicle.year,
        'daily_rate': str(vehicle.daily_rate),
        'monthly_rate': str(vehicle.monthly_rate),
    }


# ===== Manager =====

class RentalContractManager:
    """Rental workflow: request, approval, activation, closure"""

    def _window(self, start: date, end: date) -> DateRange:
        if start is None or end is None or start >= end:
            raise ValidationFailed("End date must be after start date", field='end_date')
        return DateRange(start, end)

    def _active_vehicle(self, vehicle_id: int) -> Vehicle:
        vehicle = Vehicle.objects.filter(pk=vehicle_id, is_active=True).first()
        if vehicle is None:
            raise NotFound(f"Vehicle {vehicle_id} not found", field='vehicle')
        return vehicle

    def _locked_rental(self, rental_id: int) -> Rental:
        rental = Rental.objects.select_for_update().select_related('vehicle').filter(pk=rental_id).first()
        if rental is None:
            raise NotFound(f"Rental {rental_id} not found")
        return rental

    def _estimate(self, rental_type: str, window: DateRange, vehicle: Vehicle) -> tuple[int, Decimal]:
        if rental_type not in Rental.RentalType.values:
            raise ValidationFailed(f"Unknown rental type '{rental_type}'", field='rental_type')
        duration = lifecycle.rental_duration_days(window.start_date, window.end_date)
        amount = lifecycle.estimate_rental_amount(rental_type, duration, vehicle.daily_rate, vehicle.monthly_rate)
        return duration, amount

    def create(self, command: CreateRentalCommand, actor) -> Rental:
        logger.info(
            f"Creating rental for vehicle {command.vehicle_id}, customer {actor.pk}, "
            f"{command.start_date} - {command.end_date}"
        )
        vehicle = self._active_vehicle(command.vehicle_id)
        window = self._window(command.start_date, command.end_date)
        duration, estimate = self._estimate(command.rental_type, window, vehicle)

        if not resource_registry.is_free(vehicle.pk, window):
            raise ResourceConflict(
                f"Vehicle {vehicle.vehicle_number} is not available for {window}",
                field='vehicle',
            )

        with DjangoUnitOfWork():
            rental = Rental(
                customer=actor,
                vehicle=vehicle,
                vehicle_snapshot=vehicle_snapshot(vehicle),
                rental_type=command.rental_type,
                start_date=window.start_date,
                end_date=window.end_date,
                duration=duration,
                purpose=command.purpose,
                special_requirements=command.special_requirements,
            )
            rental.estimated_amount = estimate
            rental.total_amount = estimate
            rental.save()

        logger.info(f"Rental {rental.pk} created, estimated amount {rental.total_amount}")
        return rental

    def admin_set_status(self, command: SetRentalStatusCommand, actor) -> Rental:
        require_admin(actor)

        with DjangoUnitOfWork() as uow:
            rental = self._locked_rental(command.rental_id)
            old_status = rental.status
            new_status = command.status
            lifecycle.RENTAL_TRANSITIONS.ensure(old_status, new_status)
            now = timezone.now()

            if new_status in lifecycle.HOLDING_STATUSES:
                resource_registry.reserve(rental.vehicle_id, rental, rental.window)

            if new_status == Rental.Status.APPROVED and not rental.contract_id:
                rental.contract_id = generate_contract_id()
                rental.contract_created_at = now
                rental.approved_at = now
                rental.approved_by = actor
                rental.apply_pricing(rental.pricing.confirm())
            elif new_status == Rental.Status.ACTIVE and rental.contract_activated_at is None:
                rental.contract_activated_at = now
            elif new_status == Rental.Status.COMPLETED:
                rental.contract_completed_at = now

            if new_status in lifecycle.RELEASING_STATUSES:
                resource_registry.release(rental.vehicle_id, holder=rental)

            if command.daily_fee is not None:
                rental.daily_fee = command.daily_fee
            if command.monthly_fee is not None:
                rental.monthly_fee = command.monthly_fee
            if command.conditions is not None:
                rental.conditions = command.conditions
            if command.admin_notes is not None:
                rental.admin_notes = command.admin_notes

            rental.status = new_status
            rental.save()

            if old_status != new_status:
                rental.add_event(RentalStatusChanged(
                    aggregate_id=rental.pk,
                    rental_id=rental.pk,
                    customer_id=rental.customer_id,
                    vehicle_id=rental.vehicle_id,
                    old_status=old_status,
                    new_status=new_status,
                    contract_id=rental.contract_id,
                ))
                uow.collect_events(rental)

        logger.info(f"Rental {rental.pk} moved {old_status} -> {new_status} by admin {actor.pk}")
        return rental

    def admin_update(self, command: UpdateRentalCommand, actor) -> Rental:
        require_admin(actor)
        changes = command.changes()

        with DjangoUnitOfWork():
            rental = self._locked_rental(command.rental_id)

            vehicle = rental.vehicle
            original_vehicle_id = rental.vehicle_id
            if command.vehicle_id is not None and command.vehicle_id != rental.vehicle_id:
                if rental.holds_vehicle:
                    raise InvalidTransition(
                        f"Cannot reassign the vehicle of a rental in status '{rental.status}'",
                        field='vehicle',
                    )
                vehicle = self._active_vehicle(command.vehicle_id)
                rental.vehicle = vehicle
                rental.vehicle_snapshot = vehicle_snapshot(vehicle)

            window = self._window(
                command.start_date or rental.start_date,
                command.end_date or rental.end_date,
            )
            rental_type = command.rental_type or rental.rental_type
            duration, estimate = self._estimate(rental_type, window, vehicle)
            window_changed = window != rental.window
            vehicle_changed = vehicle.pk != original_vehicle_id

            if (window_changed or vehicle_changed) and not rental.holds_vehicle:
                if not resource_registry.is_free(vehicle.pk, window):
                    raise ResourceConflict(
                        f"Vehicle {vehicle.vehicle_number} is not available for {window}",
                        field='vehicle',
                    )
            if command.total_amount is not None and command.total_amount <= 0:
                raise ValidationFailed("Total amount must be greater than 0", field='total_amount')

            rental.rental_type = rental_type
            rental.start_date = window.start_date
            rental.end_date = window.end_date
            rental.duration = duration

            pricing = rental.pricing
            if not pricing.is_confirmed:
                pricing = pricing.revise_estimate(estimate)
            if command.total_amount is not None:
                pricing = pricing.override(command.total_amount)
            rental.apply_pricing(pricing)

            for name in TEXT_FIELDS:
                value = getattr(command, name)
                if value is not None:
                    setattr(rental, name, value)
            if command.daily_fee is not None:
                rental.daily_fee = command.daily_fee
            if command.monthly_fee is not None:
                rental.monthly_fee = command.monthly_fee

            if window_changed and rental.holds_vehicle:
                resource_registry.reserve(rental.vehicle_id, rental, window)

            rental.save()

        logger.info(f"Rental {rental.pk} updated by admin {actor.pk}: {sorted(changes)}")
        return rental

    def delete(self, rental_id: int, actor) -> None:
        require_admin(actor)
        with DjangoUnitOfWork():
            rental = self._locked_rental(rental_id)
            if rental.holds_vehicle:
                raise InvalidTransition(
                    f"Rental {rental.pk} is {rental.status}; complete, cancel or reject it before deleting",
                    field='status',
                )
            rental.delete()
        logger.info(f"Rental {rental_id} deleted by admin {actor.pk}")

    def statistics(self) -> dict:
        counts = Rental.objects.aggregate(
            total=Count('id'),
            **{status: Count('id', filter=Q(status=status)) for status in Rental.Status.values},
        )
        revenue = Rental.objects.filter(status=Rental.Status.ACTIVE).aggregate(total=Sum('total_amount'))['total']
        counts['active_revenue'] = revenue or Decimal('0.00')
        return counts


rental_contracts = RentalContractManager()
