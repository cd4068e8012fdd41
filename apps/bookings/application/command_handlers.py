"""
Booking Command Handlers

These are the use cases for the short-ride booking domain.

Commands:
- CreateBookingCommand: customer books a ride
- UpdateBookingCommand: customer edits a pending booking
- SetBookingStatusCommand: admin moves the booking through its lifecycle
- SetBookingPricingCommand: admin measures distance, sets rate or price
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Optional
import logging

from django.db.models import Count, Sum  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.guards import require_admin, require_owner
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import InvalidTransition, NotFound, ValidationFailed

from apps.bookings.domain import lifecycle
from apps.bookings.domain.events import BookingConfirmed, BookingPriceConfirmed
from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    service_type: str
    pickup_location: str
    dropoff_location: str
    pickup_date: date
    pickup_time: time
    passengers: int
    distance: Decimal = Decimal('0')
    return_date: Optional[date] = None
    return_time: Optional[time] = None
    payment_method: str = 'cash'
    additional_notes: str = ''
    service_details: Optional[dict] = None


@dataclass
class UpdateBookingCommand:
    """Customer edit; only the fields below exist, ``None`` leaves a field as is"""
    booking_id: int
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None
    pickup_date: Optional[date] = None
    pickup_time: Optional[time] = None
    return_date: Optional[date] = None
    return_time: Optional[time] = None
    passengers: Optional[int] = None
    additional_notes: Optional[str] = None
    payment_method: Optional[str] = None

    def changes(self) -> dict:
        return {
            name: getattr(self, name)
            for name in lifecycle.CUSTOMER_EDITABLE_FIELDS
            if getattr(self, name) is not None
        }


@dataclass
class SetBookingStatusCommand:
    booking_id: int
    status: str
    reason: str = ''


@dataclass
class SetBookingPricingCommand:
    booking_id: int
    distance: Optional[Decimal] = None
    price_per_km: Optional[Decimal] = None
    override_price: Optional[Decimal] = None
    confirmed: bool = False


def validate_passengers(passengers) -> int:
    if isinstance(passengers, bool) or not isinstance(passengers, int) or passengers < 1:
        raise ValidationFailed("At least one passenger is required", field='passengers')
    return passengers


def validate_payment_method(method: str) -> str:
    if method not in Booking.PaymentMethod.values:
        raise ValidationFailed(f"Unknown payment method '{method}'", field='payment_method')
    return method


# ===== Manager =====

class BookingLifecycle:
    """Short-ride bookings: customer request, admin confirmation and pricing"""

    def _locked_booking(self, booking_id: int) -> Booking:
        booking = Booking.objects.select_for_update().filter(pk=booking_id).first()
        if booking is None:
            raise NotFound(f"Booking {booking_id} not found")
        return booking

    def create(self, command: CreateBookingCommand, actor) -> Booking:
        validate_passengers(command.passengers)
        if command.service_type not in Booking.ServiceType.values:
            raise ValidationFailed(f"Unknown service type '{command.service_type}'", field='service_type')
        validate_payment_method(command.payment_method)
        if command.distance is None or command.distance < 0:
            raise ValidationFailed("Distance cannot be negative", field='distance')
        if command.return_date and command.return_date < command.pickup_date:
            raise ValidationFailed("Return date cannot be before pickup date", field='return_date')

        with DjangoUnitOfWork():
            booking = Booking(
                customer=actor,
                service_type=command.service_type,
                pickup_location=command.pickup_location,
                dropoff_location=command.dropoff_location,
                pickup_date=command.pickup_date,
                pickup_time=command.pickup_time,
                return_date=command.return_date,
                return_time=command.return_time,
                passengers=command.passengers,
                distance=command.distance,
                price_per_km=lifecycle.rate_per_km(command.service_type),
                payment_method=command.payment_method,
                payment_status=Booking.PaymentStatus.PENDING,
                additional_notes=command.additional_notes,
                service_details=command.service_details or {},
            )
            booking.apply_pricing(booking.pricing)
            booking.save()

        logger.info(
            f"Booking {booking.pk} created by customer {actor.pk}: "
            f"{booking.service_type} on {booking.pickup_date}, estimate {booking.total_price}"
        )
        return booking

    def customer_update(self, command: UpdateBookingCommand, actor) -> Booking:
        changes = command.changes()
        if 'passengers' in changes:
            validate_passengers(changes['passengers'])
        if 'payment_method' in changes:
            validate_payment_method(changes['payment_method'])

        with DjangoUnitOfWork():
            booking = self._locked_booking(command.booking_id)
            require_owner(actor, booking.customer_id)
            if booking.status != Booking.Status.PENDING:
                raise InvalidTransition(
                    f"Booking {booking.pk} is {booking.status} and can no longer be edited",
                    field='status',
                )
            return_date = changes.get('return_date', booking.return_date)
            pickup_date = changes.get('pickup_date', booking.pickup_date)
            if return_date and return_date < pickup_date:
                raise ValidationFailed("Return date cannot be before pickup date", field='return_date')

            for name, value in changes.items():
                setattr(booking, name, value)
            booking.save()

        logger.info(f"Booking {booking.pk} updated by customer {actor.pk}: {sorted(changes)}")
        return booking

    def customer_delete(self, booking_id: int, actor) -> None:
        with DjangoUnitOfWork():
            booking = self._locked_booking(booking_id)
            require_owner(actor, booking.customer_id)
            if booking.status != Booking.Status.PENDING:
                raise InvalidTransition(
                    f"Booking {booking.pk} is {booking.status} and can no longer be deleted",
                    field='status',
                )
            booking.delete()
        logger.info(f"Booking {booking_id} deleted by customer {actor.pk}")

    def admin_set_status(self, command: SetBookingStatusCommand, actor) -> Booking:
        require_admin(actor)

        with DjangoUnitOfWork() as uow:
            booking = self._locked_booking(command.booking_id)
            old_status = booking.status
            lifecycle.BOOKING_TRANSITIONS.ensure(old_status, command.status)

            booking.status = command.status
            if command.status == Booking.Status.CANCELLED and old_status != command.status:
                booking.cancellation_reason = command.reason
                booking.cancelled_at = timezone.now()
            booking.save()

            if command.status == Booking.Status.CONFIRMED and old_status != command.status:
                booking.add_event(BookingConfirmed(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    customer_id=booking.customer_id,
                    service_type=booking.service_type,
                    pickup_date=booking.pickup_date,
                    pickup_time=booking.pickup_time,
                    pickup_location=booking.pickup_location,
                ))
            uow.collect_events(booking)

        logger.info(f"Booking {booking.pk} moved {old_status} -> {booking.status} by admin {actor.pk}")
        return booking

    def admin_set_pricing(self, command: SetBookingPricingCommand, actor) -> Booking:
        """Write pricing inputs; a positive override becomes the price at once"""
        require_admin(actor)
        if command.distance is not None and command.distance < 0:
            raise ValidationFailed("Distance cannot be negative", field='distance')
        if command.price_per_km is not None and command.price_per_km < 0:
            raise ValidationFailed("Rate per km cannot be negative", field='price_per_km')
        if command.override_price is not None and command.override_price < 0:
            raise ValidationFailed("Price cannot be negative", field='override_price')

        with DjangoUnitOfWork() as uow:
            booking = self._locked_booking(command.booking_id)
            was_confirmed = booking.is_price_confirmed

            if command.distance is not None:
                booking.admin_calculated_distance = command.distance
            if command.price_per_km is not None:
                booking.price_per_km = command.price_per_km

            pricing = booking.pricing
            if command.override_price is not None and command.override_price > 0:
                pricing = pricing.override(command.override_price)
            if command.confirmed:
                pricing = pricing.confirm()
            booking.apply_pricing(pricing)
            booking.save()

            if booking.is_price_confirmed and not was_confirmed:
                booking.add_event(BookingPriceConfirmed(
                    aggregate_id=booking.pk,
                    booking_id=booking.pk,
                    customer_id=booking.customer_id,
                    total_price=booking.total_price,
                ))
            uow.collect_events(booking)

        logger.info(
            f"Booking {booking.pk} priced by admin {actor.pk}: total {booking.total_price}, "
            f"confirmed={booking.is_price_confirmed}"
        )
        return booking

    def admin_delete(self, booking_id: int, actor) -> None:
        require_admin(actor)
        deleted, _ = Booking.objects.filter(pk=booking_id).delete()
        if not deleted:
            raise NotFound(f"Booking {booking_id} not found")
        logger.info(f"Booking {booking_id} deleted by admin {actor.pk}")

    def statistics(self) -> dict:
        by_status = dict(Booking.objects.values_list('status').annotate(count=Count('id')).order_by())
        by_service = dict(Booking.objects.values_list('service_type').annotate(count=Count('id')).order_by())
        revenue = Booking.objects.aggregate(total=Sum('total_price'))['total'] or Decimal('0.00')
        return {
            'total': sum(by_status.values()),
            'by_status': {status: by_status.get(status, 0) for status in Booking.Status.values},
            'by_service_type': {kind: by_service.get(kind, 0) for kind in Booking.ServiceType.values},
            'total_revenue': revenue,
        }


booking_lifecycle = BookingLifecycle()
