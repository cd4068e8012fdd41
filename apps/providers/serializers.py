"""Serializers for provider contracts, vehicle requests and provider accounts."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from apps.fleet.models import Vehicle
from apps.users.serializers import UserShortSerializer

from .domain import lifecycle
from .models import (
    ContractAdminAction,
    ContractPayment,
    ContractPaymentMethod,
    PaymentTerms,
    VehicleProviderContract,
    VehicleRequest,
)

User = get_user_model()


class InsuranceDetailsSerializer(serializers.Serializer):
    insurance_company = serializers.CharField(max_length=120)
    policy_number = serializers.CharField(max_length=60)
    expiry_date = serializers.DateField()


class RegistrationDetailsSerializer(serializers.Serializer):
    registration_number = serializers.CharField(max_length=60)
    registration_date = serializers.DateField()
    expiry_date = serializers.DateField()


class VehicleSpecSerializer(serializers.Serializer):
    VEHICLE_TYPES = ["Car", "Van", "Bus", "Truck", "Motorcycle", "Other"]
    FUEL_TYPES = ["Petrol", "Diesel", "Electric", "Hybrid", "CNG", "LPG"]
    TRANSMISSIONS = ["Manual", "Automatic", "Semi-Automatic"]
    CONDITIONS = ["Excellent", "Good", "Fair", "Poor"]

    vehicle_number = serializers.CharField(max_length=20)
    brand = serializers.CharField(max_length=60)
    model = serializers.CharField(max_length=60)
    year = serializers.IntegerField(min_value=1990)
    color = serializers.CharField(max_length=30)
    vehicle_type = serializers.ChoiceField(choices=VEHICLE_TYPES)
    fuel_type = serializers.ChoiceField(choices=FUEL_TYPES)
    transmission = serializers.ChoiceField(choices=TRANSMISSIONS)
    seating_capacity = serializers.IntegerField(min_value=1, max_value=50)
    engine_capacity = serializers.CharField(max_length=20, required=False, allow_blank=True)
    mileage = serializers.IntegerField(min_value=0, required=False)
    features = serializers.ListField(child=serializers.CharField(), required=False)
    condition = serializers.ChoiceField(choices=CONDITIONS, required=False)
    insurance_details = InsuranceDetailsSerializer(required=False)
    registration_details = RegistrationDetailsSerializer(required=False)


class ContractTermsSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    duration_months = serializers.IntegerField(
        min_value=lifecycle.MIN_DURATION_MONTHS,
        max_value=lifecycle.MAX_DURATION_MONTHS,
    )
    monthly_fee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    payment_terms = serializers.ChoiceField(choices=PaymentTerms.choices)
    payment_method = serializers.ChoiceField(choices=ContractPaymentMethod.choices)
    late_payment_penalty = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    security_deposit = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)


class ContractRequestSerializer(serializers.Serializer):
    """Create payload; with ``partial=True`` it doubles as the update payload."""

    vehicle = VehicleSpecSerializer()
    terms = ContractTermsSerializer()
    special_conditions = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")


class ContractAdminActionSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContractAdminAction
        fields = ["id", "action", "actor", "notes", "timestamp"]
        read_only_fields = fields


class ContractPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContractPayment
        fields = ["id", "payment_id", "amount", "payment_date", "payment_method", "status", "notes", "processed_by"]
        read_only_fields = fields


class VehicleProviderContractSerializer(serializers.ModelSerializer):
    provider = UserShortSerializer(read_only=True)
    admin_actions = ContractAdminActionSerializer(many=True, read_only=True)
    total_earnings = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    duration_in_days = serializers.IntegerField(read_only=True)
    remaining_payments = serializers.IntegerField(read_only=True)

    class Meta:
        model = VehicleProviderContract
        fields = [
            "id",
            "contract_id",
            "provider",
            "reviewed_by",
            "vehicle",
            "start_date",
            "end_date",
            "duration_months",
            "monthly_fee",
            "payment_terms",
            "payment_method",
            "late_payment_penalty",
            "security_deposit",
            "status",
            "special_conditions",
            "notes",
            "last_payment_date",
            "next_payment_date",
            "total_earnings",
            "duration_in_days",
            "remaining_payments",
            "admin_actions",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ContractStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=VehicleProviderContract.Status.choices)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ContractPaymentCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    payment_date = serializers.DateField()
    payment_method = serializers.ChoiceField(choices=ContractPaymentMethod.choices, required=False)
    status = serializers.ChoiceField(choices=ContractPayment.Status.choices, default=ContractPayment.Status.COMPLETED)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class VehicleRequestSerializer(serializers.ModelSerializer):
    provider = UserShortSerializer(read_only=True)

    class Meta:
        model = VehicleRequest
        fields = [
            "id",
            "provider",
            "vehicle_number",
            "vehicle_type",
            "brand",
            "model",
            "year",
            "color",
            "capacity",
            "fuel_type",
            "transmission",
            "daily_rate",
            "monthly_rate",
            "description",
            "features",
            "status",
            "admin_notes",
            "approved_by",
            "approved_at",
            "rejected_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class VehicleRequestCreateSerializer(serializers.Serializer):
    vehicle_number = serializers.CharField(max_length=20)
    vehicle_type = serializers.ChoiceField(choices=Vehicle.VehicleType.choices)
    brand = serializers.CharField(max_length=100)
    model = serializers.CharField(max_length=100)
    year = serializers.IntegerField(min_value=1990)
    color = serializers.CharField(max_length=50)
    capacity = serializers.IntegerField(min_value=1)
    fuel_type = serializers.ChoiceField(choices=Vehicle.FuelType.choices)
    transmission = serializers.ChoiceField(choices=Vehicle.Transmission.choices)
    daily_rate = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    monthly_rate = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    description = serializers.CharField(
        max_length=lifecycle.MAX_REQUEST_TEXT, required=False, allow_blank=True, default=""
    )
    features = serializers.ListField(child=serializers.CharField(), required=False, default=list)


class VehicleRequestStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=VehicleRequest.Status.choices)
    admin_notes = serializers.CharField(
        max_length=lifecycle.MAX_REQUEST_TEXT, required=False, allow_blank=True, default=""
    )


class VehicleRequestEditSerializer(serializers.Serializer):
    daily_rate = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    monthly_rate = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    description = serializers.CharField(max_length=lifecycle.MAX_REQUEST_TEXT, required=False, allow_blank=True)


class ProviderAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "phone",
            "business_name",
            "provider_status",
            "is_verified",
            "rejection_reason",
            "created_at",
        ]
        read_only_fields = fields


class ProviderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=User.ProviderStatus.choices)
    rejection_reason = serializers.CharField(
        max_length=lifecycle.MAX_REQUEST_TEXT, required=False, allow_blank=True, default=""
    )


class BulkProviderStatusSerializer(ProviderStatusSerializer):
    ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
