"""
Tour Booking Command Handlers

Commands:
- CreateTourBookingCommand: customer books a package for a group
- SetTourBookingStatusCommand: admin decision, optionally with the final price
- SetTourPriceCommand: admin adjusts the price without confirming it
- RecordTourPaymentCommand: admin records a (partial) payment
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional
import logging

from django.db.models import Count, Sum  # type: ignore

from shared.application.guards import require_admin
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import InvalidTransition, NotFound, ValidationFailed

from apps.tours.domain import lifecycle
from apps.tours.domain.events import TourBookingConfirmed
from apps.tours.models import PaymentType, TourAdminAction, TourBooking, TourPackage

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateTourBookingCommand:
    package_id: int
    booking_date: date
    number_of_passengers: int
    payment_method: str
    passengers: List[dict] = field(default_factory=list)
    contact_person: dict = field(default_factory=dict)
    special_requests: str = ''


@dataclass
class SetTourBookingStatusCommand:
    booking_id: int
    status: str
    admin_notes: str = ''
    final_price: Optional[Decimal] = None


@dataclass
class SetTourPriceCommand:
    booking_id: int
    price: Decimal
    note: str = ''


@dataclass
class RecordTourPaymentCommand:
    booking_id: int
    amount: Decimal


# ===== Manager =====

class TourBookingLifecycle:
    """Group tour bookings: request, admin decision, installment accounting"""

    def _locked_booking(self, booking_id: int) -> TourBooking:
        booking = TourBooking.objects.select_for_update().select_related('package').filter(pk=booking_id).first()
        if booking is None:
            raise NotFound(f"Tour booking {booking_id} not found")
        return booking

    def create(self, command: CreateTourBookingCommand, actor) -> TourBooking:
        n = command.number_of_passengers
        if isinstance(n, bool) or not isinstance(n, int) or n < 1:
            raise ValidationFailed("At least one passenger is required", field='number_of_passengers')
        if command.payment_method not in PaymentType.values:
            raise ValidationFailed(f"Unknown payment method '{command.payment_method}'", field='payment_method')

        package = TourPackage.objects.filter(pk=command.package_id).first()
        if package is None:
            raise NotFound(f"Tour package {command.package_id} not found")
        if not package.is_bookable:
            raise ValidationFailed(f"Tour package '{package.name}' is not available", field='package')

        base_price = lifecycle.tour_base_price(n, package.price_per_person, package.tour_days)
        with DjangoUnitOfWork():
            booking = TourBooking.objects.create(
                customer=actor,
                package=package,
                booking_date=command.booking_date,
                number_of_passengers=n,
                passengers=list(command.passengers)[:n],
                contact_person=command.contact_person,
                base_price=base_price,
                total_price=base_price,
                final_price=base_price,
                is_price_confirmed=False,
                payment_method=command.payment_method,
                payment_status=TourBooking.PaymentStatus.PENDING,
                special_requests=command.special_requests,
            )

        logger.info(f"Tour booking {booking.pk} created by {actor.pk} for package {package.pk}: {n} pax, {base_price}")
        return booking

    def admin_set_status(self, command: SetTourBookingStatusCommand, actor) -> TourBooking:
        require_admin(actor)
        if command.final_price is not None and command.final_price < 0:
            raise ValidationFailed("Final price cannot be negative", field='final_price')

        with DjangoUnitOfWork() as uow:
            booking = self._locked_booking(command.booking_id)
            old_status = booking.status
            lifecycle.TOUR_BOOKING_TRANSITIONS.ensure(old_status, command.status)

            booking.status = command.status
            if command.admin_notes:
                booking.admin_notes = command.admin_notes
            if command.final_price is not None:
                booking.apply_pricing(booking.pricing.confirm(command.final_price))
            booking.save()

            TourAdminAction.objects.create(
                booking=booking,
                action=lifecycle.action_for_status(command.status),
                note=command.admin_notes or f"Status updated to {command.status}",
                admin=actor,
            )

            if command.status == TourBooking.Status.CONFIRMED and old_status != command.status:
                booking.add_event(TourBookingConfirmed(
                    aggregate_id=booking.pk,
                    tour_booking_id=booking.pk,
                    customer_id=booking.customer_id,
                    package_name=booking.package.name,
                    booking_date=booking.booking_date,
                    final_price=booking.final_price,
                ))
            uow.collect_events(booking)

        logger.info(f"Tour booking {booking.pk} moved {old_status} -> {booking.status} by admin {actor.pk}")
        return booking

    def admin_set_price(self, command: SetTourPriceCommand, actor) -> TourBooking:
        require_admin(actor)
        with DjangoUnitOfWork():
            booking = self._locked_booking(command.booking_id)
            try:
                pricing = booking.pricing.override(command.price)
            except ValueError as exc:
                raise ValidationFailed(str(exc), field='price') from exc
            booking.apply_pricing(pricing)
            booking.save()
            TourAdminAction.objects.create(
                booking=booking,
                action=TourAdminAction.Action.PRICE_SET,
                note=command.note or f"Price set to {booking.final_price}",
                admin=actor,
            )

        logger.info(f"Tour booking {booking.pk} priced at {booking.final_price} by admin {actor.pk}")
        return booking

    def record_payment(self, command: RecordTourPaymentCommand, actor) -> TourBooking:
        require_admin(actor)
        if command.amount is None or command.amount <= 0:
            raise ValidationFailed("Payment amount must be positive", field='amount')

        with DjangoUnitOfWork():
            booking = self._locked_booking(command.booking_id)
            if booking.status in (TourBooking.Status.REJECTED, TourBooking.Status.CANCELLED):
                raise InvalidTransition(
                    f"Tour booking {booking.pk} is {booking.status} and takes no payments",
                    field='status',
                )
            booking.amount_paid = Decimal(booking.amount_paid) + Decimal(command.amount)
            if booking.amount_paid >= booking.final_price:
                booking.payment_status = TourBooking.PaymentStatus.COMPLETED
            else:
                booking.payment_status = TourBooking.PaymentStatus.PARTIAL
            booking.save()

        logger.info(
            f"Tour booking {booking.pk}: payment {command.amount} recorded, "
            f"paid {booking.amount_paid} of {booking.final_price}"
        )
        return booking

    def statistics(self) -> dict:
        counts = dict(TourBooking.objects.values_list('status').annotate(count=Count('id')).order_by())
        confirmed_value = TourBooking.objects.filter(
            status__in=[TourBooking.Status.CONFIRMED, TourBooking.Status.COMPLETED],
        ).aggregate(total=Sum('final_price'))['total'] or Decimal('0.00')
        stats = {status: counts.get(status, 0) for status in TourBooking.Status.values}
        stats['total'] = sum(counts.values())
        stats['confirmed_value'] = confirmed_value
        return stats


def available_packages(destination: Optional[str] = None, category: Optional[str] = None, max_price=None):
    """Packages customers can book right now"""
    qs = TourPackage.objects.filter(status=TourPackage.Status.ACTIVE, is_available=True)
    if destination:
        qs = qs.filter(destination__icontains=destination)
    if category:
        qs = qs.filter(category=category)
    if max_price is not None:
        qs = qs.filter(price_per_person__lte=max_price)
    return qs


def quote_package_price(package_id: int, passengers: int, days: Optional[int] = None) -> Decimal:
    """Passengers x per-person price x days; days default to the package length"""
    package = TourPackage.objects.filter(pk=package_id).first()
    if package is None:
        raise NotFound(f"Tour package {package_id} not found")
    if isinstance(passengers, bool) or not isinstance(passengers, int) or passengers < 1:
        raise ValidationFailed("At least one passenger is required", field='passengers')
    days = package.tour_days if days is None else days
    if isinstance(days, bool) or not isinstance(days, int) or days < 1:
        raise ValidationFailed("A tour lasts at least one day", field='days')
    return lifecycle.tour_base_price(passengers, package.price_per_person, days)


tour_bookings = TourBookingLifecycle()
