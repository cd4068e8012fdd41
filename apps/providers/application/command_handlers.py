"""
Provider Contract Command Handlers

Commands:
- CreateContractCommand: provider requests a contract for one vehicle
- UpdateContractCommand: provider revises the request before a decision
- SetContractStatusCommand: admin review, approval and later life of the contract
- RecordContractPaymentCommand: admin records a payment to the provider
- CreateVehicleRequestCommand: provider proposes a vehicle for the fleet
- SetVehicleRequestStatusCommand / EditVehicleRequestCommand: admin review of a proposal
- SetProviderStatusCommand: admin approval of provider accounts
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import List, Optional
import logging

from django.contrib.auth import get_user_model  # type: ignore
from django.db.models import Count, Q, Sum  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.guards import require_admin, require_approved_provider, require_owner, require_role
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import InvalidTransition, NotFound, ValidationFailed

from apps.fleet.models import Vehicle
from apps.providers.domain import lifecycle
from apps.providers.domain.events import ProviderContractStatusChanged
from apps.providers.models import (
    ContractAdminAction,
    ContractPayment,
    ContractPaymentMethod,
    PaymentTerms,
    VehicleProviderContract,
    VehicleRequest,
)

logger = logging.getLogger(__name__)

User = get_user_model()

TERMS_FIELDS = (
    'start_date',
    'end_date',
    'duration_months',
    'monthly_fee',
    'payment_terms',
    'payment_method',
    'late_payment_penalty',
    'security_deposit',
)


# ===== Commands =====

@dataclass
class CreateContractCommand:
    vehicle: dict
    terms: dict
    special_conditions: List[str] = field(default_factory=list)
    notes: str = ''


@dataclass
class UpdateContractCommand:
    contract_pk: int
    vehicle: Optional[dict] = None
    terms: Optional[dict] = None
    special_conditions: Optional[List[str]] = None
    notes: Optional[str] = None


@dataclass
class SetContractStatusCommand:
    contract_pk: int
    status: str
    notes: str = ''


@dataclass
class RecordContractPaymentCommand:
    contract_pk: int
    amount: Decimal
    payment_date: date
    payment_method: Optional[str] = None
    status: str = 'completed'
    notes: str = ''


@dataclass
class CreateVehicleRequestCommand:
    vehicle_number: str
    vehicle_type: str
    brand: str
    model: str
    year: int
    color: str
    capacity: int
    fuel_type: str
    transmission: str
    daily_rate: Decimal
    monthly_rate: Decimal
    description: str = ''
    features: List[str] = field(default_factory=list)


@dataclass
class SetVehicleRequestStatusCommand:
    request_pk: int
    status: str
    admin_notes: str = ''


@dataclass
class EditVehicleRequestCommand:
    request_pk: int
    daily_rate: Optional[Decimal] = None
    monthly_rate: Optional[Decimal] = None
    description: Optional[str] = None


@dataclass
class SetProviderStatusCommand:
    provider_pk: int
    status: str
    rejection_reason: str = ''


# ===== Validation =====

def _decimal(value, name: str) -> Decimal:
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationFailed(f"'{name}' must be a number", field=name) from exc


def validate_vehicle_spec(vehicle: dict) -> dict:
    if not vehicle:
        raise ValidationFailed("Vehicle details are required", field='vehicle')
    missing = [name for name in lifecycle.REQUIRED_VEHICLE_FIELDS if vehicle.get(name) in (None, '')]
    if missing:
        raise ValidationFailed(f"Vehicle details missing: {', '.join(missing)}", field='vehicle')
    details = dict(vehicle)
    details['vehicle_number'] = str(details['vehicle_number']).strip().upper()
    return details


def validate_terms(terms: dict) -> dict:
    """Normalise contract terms; raises ValidationFailed naming the first bad field"""
    if not terms:
        raise ValidationFailed("Contract terms are required", field='terms')
    missing = [name for name in lifecycle.REQUIRED_TERMS_FIELDS if terms.get(name) in (None, '')]
    if missing:
        raise ValidationFailed(f"Contract terms missing: {', '.join(missing)}", field=missing[0])

    clean = {name: terms[name] for name in TERMS_FIELDS if terms.get(name) is not None}
    if clean['end_date'] <= clean['start_date']:
        raise ValidationFailed("End date must be after start date", field='end_date')

    duration = clean['duration_months']
    if isinstance(duration, bool) or not isinstance(duration, int) or not (
        lifecycle.MIN_DURATION_MONTHS <= duration <= lifecycle.MAX_DURATION_MONTHS
    ):
        raise ValidationFailed(
            f"Duration must be between {lifecycle.MIN_DURATION_MONTHS} and "
            f"{lifecycle.MAX_DURATION_MONTHS} months",
            field='duration_months',
        )

    for name in ('monthly_fee', 'late_payment_penalty', 'security_deposit'):
        if name in clean:
            clean[name] = _decimal(clean[name], name)
            if clean[name] < 0:
                raise ValidationFailed(f"'{name}' cannot be negative", field=name)

    if clean['payment_terms'] not in PaymentTerms.values:
        raise ValidationFailed(f"Unknown payment terms '{clean['payment_terms']}'", field='payment_terms')
    if clean['payment_method'] not in ContractPaymentMethod.values:
        raise ValidationFailed(f"Unknown payment method '{clean['payment_method']}'", field='payment_method')
    return clean


def _rate(value, name: str) -> Decimal:
    rate = _decimal(value, name)
    if rate < 0:
        raise ValidationFailed(f"'{name}' cannot be negative", field=name)
    return rate


def _bounded_int(value, name: str, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ValidationFailed(f"'{name}' must be a whole number of at least {minimum}", field=name)
    return value


def _short_text(value: str, name: str) -> str:
    if len(value) > lifecycle.MAX_REQUEST_TEXT:
        raise ValidationFailed(f"'{name}' is limited to {lifecycle.MAX_REQUEST_TEXT} characters", field=name)
    return value


# ===== Managers =====

class ProviderContractManager:
    """Provider supply contracts: request, review, activation and payouts"""

    def _locked_contract(self, contract_pk: int) -> VehicleProviderContract:
        contract = VehicleProviderContract.objects.select_for_update().filter(pk=contract_pk).first()
        if contract is None:
            raise NotFound(f"Contract {contract_pk} not found")
        return contract

    def _log_action(self, contract, action: str, actor, notes: str) -> ContractAdminAction:
        return ContractAdminAction.objects.create(contract=contract, action=action, actor=actor, notes=notes)

    def create(self, command: CreateContractCommand, actor) -> VehicleProviderContract:
        require_approved_provider(actor)
        vehicle = validate_vehicle_spec(command.vehicle)
        terms = validate_terms(command.terms)

        with DjangoUnitOfWork():
            contract = VehicleProviderContract(
                provider=actor,
                vehicle=vehicle,
                special_conditions=list(command.special_conditions or []),
                notes=command.notes or '',
                status=VehicleProviderContract.Status.PENDING,
                **terms,
            )
            contract.next_payment_date = lifecycle.next_payment_after(contract.start_date, contract.payment_terms)
            contract.save()
            self._log_action(
                contract,
                ContractAdminAction.Action.CREATED,
                actor,
                "Contract request created by vehicle provider",
            )

        logger.info(
            f"Provider contract {contract.contract_id} requested by {actor.pk} "
            f"for {vehicle['vehicle_number']}: {contract.monthly_fee}/month, {contract.payment_terms}"
        )
        return contract

    def update(self, command: UpdateContractCommand, actor) -> VehicleProviderContract:
        with DjangoUnitOfWork():
            contract = self._locked_contract(command.contract_pk)
            require_owner(actor, contract.provider_id)
            if contract.status not in lifecycle.EDITABLE_STATUSES:
                raise InvalidTransition(
                    f"Contract {contract.contract_id} cannot be updated while {contract.status}",
                    field='status',
                )

            if command.vehicle:
                merged = dict(contract.vehicle)
                merged.update({key: value for key, value in command.vehicle.items() if value is not None})
                contract.vehicle = validate_vehicle_spec(merged)

            if command.terms:
                current = {name: getattr(contract, name) for name in TERMS_FIELDS}
                current.update({key: value for key, value in command.terms.items() if key in TERMS_FIELDS and value is not None})
                terms = validate_terms(current)
                reschedule = (
                    terms['start_date'] != contract.start_date
                    or terms['payment_terms'] != contract.payment_terms
                )
                for name, value in terms.items():
                    setattr(contract, name, value)
                if reschedule:
                    contract.next_payment_date = lifecycle.next_payment_after(
                        contract.start_date, contract.payment_terms
                    )

            if command.special_conditions is not None:
                contract.special_conditions = list(command.special_conditions)
            if command.notes is not None:
                contract.notes = command.notes
            contract.save()
            self._log_action(
                contract,
                ContractAdminAction.Action.MODIFIED,
                actor,
                "Contract updated by vehicle provider",
            )

        logger.info(f"Provider contract {contract.contract_id} updated by {actor.pk}")
        return contract

    def delete(self, contract_pk: int, actor) -> None:
        with DjangoUnitOfWork():
            contract = self._locked_contract(contract_pk)
            require_owner(actor, contract.provider_id)
            if contract.status != VehicleProviderContract.Status.PENDING:
                raise InvalidTransition(
                    f"Only pending contracts can be deleted; {contract.contract_id} is {contract.status}",
                    field='status',
                )
            contract_id = contract.contract_id
            contract.delete()
        logger.info(f"Provider contract {contract_id} withdrawn by {actor.pk}")

    def admin_set_status(self, command: SetContractStatusCommand, actor) -> VehicleProviderContract:
        require_admin(actor)

        with DjangoUnitOfWork() as uow:
            contract = self._locked_contract(command.contract_pk)
            old_status = contract.status
            lifecycle.CONTRACT_TRANSITIONS.ensure(old_status, command.status)

            contract.status = command.status
            contract.reviewed_by = actor
            contract.save()
            self._log_action(
                contract,
                lifecycle.action_for_status(old_status, command.status),
                actor,
                command.notes or f"Status updated to {command.status}",
            )

            contract.add_event(ProviderContractStatusChanged(
                aggregate_id=contract.pk,
                contract_pk=contract.pk,
                contract_id=contract.contract_id,
                provider_id=contract.provider_id,
                old_status=old_status,
                new_status=command.status,
            ))
            uow.collect_events(contract)

        logger.info(
            f"Provider contract {contract.contract_id} moved {old_status} -> {contract.status} by admin {actor.pk}"
        )
        return contract

    def record_payment(self, command: RecordContractPaymentCommand, actor) -> ContractPayment:
        require_admin(actor)
        amount = _decimal(command.amount, 'amount')
        if amount < 0:
            raise ValidationFailed("Payment amount cannot be negative", field='amount')
        if command.status not in ContractPayment.Status.values:
            raise ValidationFailed(f"Unknown payment status '{command.status}'", field='status')
        if command.payment_method and command.payment_method not in ContractPaymentMethod.values:
            raise ValidationFailed(f"Unknown payment method '{command.payment_method}'", field='payment_method')

        with DjangoUnitOfWork():
            contract = self._locked_contract(command.contract_pk)
            if contract.status != VehicleProviderContract.Status.ACTIVE:
                raise InvalidTransition(
                    f"Payments can only be recorded on active contracts; {contract.contract_id} is {contract.status}",
                    field='status',
                )
            payment = ContractPayment.objects.create(
                contract=contract,
                amount=amount,
                payment_date=command.payment_date,
                payment_method=command.payment_method or contract.payment_method,
                status=command.status,
                notes=command.notes,
                processed_by=actor,
            )
            if payment.status == ContractPayment.Status.COMPLETED:
                contract.last_payment_date = payment.payment_date
                base = contract.next_payment_date or contract.start_date
                contract.next_payment_date = lifecycle.next_payment_after(base, contract.payment_terms)
                contract.save(update_fields=['last_payment_date', 'next_payment_date', 'updated_at'])

        logger.info(
            f"Payment {payment.payment_id} of {payment.amount} ({payment.status}) "
            f"recorded on {contract.contract_id} by admin {actor.pk}"
        )
        return payment

    def provider_statistics(self, actor) -> dict:
        """Contract counts and payout totals for one provider"""
        require_role(actor, 'provider')
        contracts = VehicleProviderContract.objects.filter(provider=actor)
        counts = contracts.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(status=VehicleProviderContract.Status.ACTIVE)),
            pending=Count('id', filter=Q(status=VehicleProviderContract.Status.PENDING)),
            approved=Count('id', filter=Q(status=VehicleProviderContract.Status.APPROVED)),
        )
        payments = ContractPayment.objects.filter(contract__provider=actor).aggregate(
            total_payments=Count('id'),
            completed_payments=Count('id', filter=Q(status=ContractPayment.Status.COMPLETED)),
            total_earnings=Sum('amount', filter=Q(status=ContractPayment.Status.COMPLETED)),
        )
        payments['total_earnings'] = payments['total_earnings'] or Decimal('0.00')
        return {**counts, **payments}


class VehicleRequestManager:
    """Provider proposals for new fleet vehicles and their review by admins"""

    def _locked_request(self, request_pk: int) -> VehicleRequest:
        request = VehicleRequest.objects.select_for_update().filter(pk=request_pk).first()
        if request is None:
            raise NotFound(f"Vehicle request {request_pk} not found")
        return request

    def create(self, command: CreateVehicleRequestCommand, actor) -> VehicleRequest:
        require_approved_provider(actor)
        number = str(command.vehicle_number or '').strip().upper()
        if not number:
            raise ValidationFailed("Vehicle number is required", field='vehicle_number')
        choices = (
            ('vehicle_type', command.vehicle_type, Vehicle.VehicleType.values),
            ('fuel_type', command.fuel_type, Vehicle.FuelType.values),
            ('transmission', command.transmission, Vehicle.Transmission.values),
        )
        for name, value, allowed in choices:
            if value not in allowed:
                raise ValidationFailed(f"Unknown {name.replace('_', ' ')} '{value}'", field=name)
        year = _bounded_int(command.year, 'year', 1990)
        capacity = _bounded_int(command.capacity, 'capacity', 1)
        daily_rate = _rate(command.daily_rate, 'daily_rate')
        monthly_rate = _rate(command.monthly_rate, 'monthly_rate')
        description = _short_text(command.description or '', 'description')

        if (
            VehicleRequest.objects.filter(vehicle_number=number).exists()
            or Vehicle.objects.filter(vehicle_number=number).exists()
        ):
            raise ValidationFailed(f"Vehicle {number} already exists", field='vehicle_number')

        with DjangoUnitOfWork():
            request = VehicleRequest.objects.create(
                provider=actor,
                vehicle_number=number,
                vehicle_type=command.vehicle_type,
                brand=command.brand,
                model=command.model,
                year=year,
                color=command.color,
                capacity=capacity,
                fuel_type=command.fuel_type,
                transmission=command.transmission,
                daily_rate=daily_rate,
                monthly_rate=monthly_rate,
                description=description,
                features=list(command.features or []),
                status=VehicleRequest.Status.PENDING,
            )

        logger.info(f"Vehicle request {request.pk} for {number} submitted by provider {actor.pk}")
        return request

    def admin_set_status(self, command: SetVehicleRequestStatusCommand, actor) -> VehicleRequest:
        require_admin(actor)
        if command.status not in VehicleRequest.Status.values:
            raise ValidationFailed(f"Unknown vehicle request status '{command.status}'", field='status')
        notes = _short_text(command.admin_notes or '', 'admin_notes')

        with DjangoUnitOfWork():
            request = self._locked_request(command.request_pk)
            old_status = request.status
            request.status = command.status
            if notes:
                request.admin_notes = notes
            if command.status != old_status:
                if command.status == VehicleRequest.Status.APPROVED:
                    request.approved_by = actor
                    request.approved_at = timezone.now()
                elif command.status == VehicleRequest.Status.REJECTED:
                    request.rejected_at = timezone.now()
            request.save()

        logger.info(
            f"Vehicle request {request.pk} ({request.vehicle_number}) moved {old_status} -> {request.status} "
            f"by admin {actor.pk}"
        )
        return request

    def admin_edit(self, command: EditVehicleRequestCommand, actor) -> VehicleRequest:
        """Admins may adjust the proposed rates and description"""
        require_admin(actor)
        with DjangoUnitOfWork():
            request = self._locked_request(command.request_pk)
            if command.daily_rate is not None:
                request.daily_rate = _rate(command.daily_rate, 'daily_rate')
            if command.monthly_rate is not None:
                request.monthly_rate = _rate(command.monthly_rate, 'monthly_rate')
            if command.description is not None:
                request.description = _short_text(command.description, 'description')
            request.save()

        logger.info(f"Vehicle request {request.pk} edited by admin {actor.pk}")
        return request

    def delete(self, request_pk: int, actor) -> None:
        with DjangoUnitOfWork():
            request = self._locked_request(request_pk)
            require_owner(actor, request.provider_id, allow_admin=True)
            number = request.vehicle_number
            request.delete()
        logger.info(f"Vehicle request for {number} deleted by {actor.pk}")

    def statistics(self, actor) -> dict:
        require_admin(actor)
        counts = VehicleRequest.objects.aggregate(
            total=Count('id'),
            pending=Count('id', filter=Q(status=VehicleRequest.Status.PENDING)),
            approved=Count('id', filter=Q(status=VehicleRequest.Status.APPROVED)),
            rejected=Count('id', filter=Q(status=VehicleRequest.Status.REJECTED)),
        )
        since = timezone.now() - timedelta(days=lifecycle.RECENT_REQUEST_DAYS)
        return {
            'status_counts': counts,
            'recent_requests': VehicleRequest.objects.filter(created_at__gte=since).count(),
            'period_days': lifecycle.RECENT_REQUEST_DAYS,
        }


class ProviderAccountManager:
    """Approval of vehicle provider accounts by operator admins"""

    def _apply(self, provider, status: str, rejection_reason: str) -> None:
        provider.provider_status = status
        if status == User.ProviderStatus.REJECTED and rejection_reason:
            provider.rejection_reason = rejection_reason
        if status == User.ProviderStatus.APPROVED:
            provider.is_verified = True
        provider.save(update_fields=['provider_status', 'rejection_reason', 'is_verified', 'updated_at'])

    def _validate(self, status: str, rejection_reason: str) -> str:
        if status not in User.ProviderStatus.values:
            raise ValidationFailed(f"Unknown provider status '{status}'", field='status')
        return _short_text(rejection_reason or '', 'rejection_reason')

    def set_status(self, command: SetProviderStatusCommand, actor):
        require_admin(actor)
        reason = self._validate(command.status, command.rejection_reason)

        with DjangoUnitOfWork():
            provider = (
                User.objects.select_for_update()
                .filter(pk=command.provider_pk, role=User.RoleChoices.PROVIDER)
                .first()
            )
            if provider is None:
                raise NotFound(f"Vehicle provider {command.provider_pk} not found")
            old_status = provider.provider_status
            self._apply(provider, command.status, reason)

        logger.info(f"Provider {provider.pk} moved {old_status} -> {provider.provider_status} by admin {actor.pk}")
        return provider

    def bulk_set_status(self, provider_pks: List[int], status: str, actor, rejection_reason: str = '') -> int:
        require_admin(actor)
        if not provider_pks:
            raise ValidationFailed("Select at least one provider", field='ids')
        reason = self._validate(status, rejection_reason)

        with DjangoUnitOfWork():
            providers = list(
                User.objects.select_for_update().filter(pk__in=provider_pks, role=User.RoleChoices.PROVIDER)
            )
            for provider in providers:
                self._apply(provider, status, reason)

        logger.info(f"{len(providers)} providers moved to {status} by admin {actor.pk}")
        return len(providers)

    def statistics(self, actor) -> dict:
        require_admin(actor)
        providers = User.objects.filter(role=User.RoleChoices.PROVIDER)
        counts = providers.aggregate(
            total=Count('id'),
            **{
                status: Count('id', filter=Q(provider_status=status))
                for status in User.ProviderStatus.values
            },
        )
        since = timezone.now() - timedelta(days=lifecycle.RECENT_REQUEST_DAYS)
        return {
            'status_counts': counts,
            'recent_registrations': providers.filter(created_at__gte=since).count(),
            'period_days': lifecycle.RECENT_REQUEST_DAYS,
        }


provider_contracts = ProviderContractManager()
vehicle_requests = VehicleRequestManager()
provider_accounts = ProviderAccountManager()
