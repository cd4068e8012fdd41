"""Serializers for the rental domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Rental


class RentalSerializer(serializers.ModelSerializer):
    """Full rental record; every field is written through the manager."""

    customer = UserShortSerializer(read_only=True)
    vehicle_number = serializers.ReadOnlyField(source="vehicle.vehicle_number")
    authoritative_amount = serializers.SerializerMethodField()

    class Meta:
        model = Rental
        fields = [
            "id",
            "customer",
            "vehicle",
            "vehicle_number",
            "vehicle_snapshot",
            "rental_type",
            "start_date",
            "end_date",
            "duration",
            "status",
            "estimated_amount",
            "admin_set_amount",
            "is_price_confirmed",
            "total_amount",
            "authoritative_amount",
            "daily_fee",
            "monthly_fee",
            "purpose",
            "special_requirements",
            "conditions",
            "admin_notes",
            "contract_id",
            "contract_terms",
            "admin_guidelines",
            "approved_by",
            "approved_at",
            "contract_created_at",
            "contract_activated_at",
            "contract_completed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_authoritative_amount(self, obj: Rental) -> str:
        return str(obj.pricing.authoritative_price)


class RentalCreateSerializer(serializers.Serializer):
    vehicle = serializers.IntegerField()
    rental_type = serializers.ChoiceField(choices=Rental.RentalType.choices)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    purpose = serializers.CharField(required=False, allow_blank=True, default="")
    special_requirements = serializers.CharField(required=False, allow_blank=True, default="")


class RentalStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Rental.Status.choices)
    daily_fee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    monthly_fee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    conditions = serializers.CharField(required=False, allow_blank=True)
    admin_notes = serializers.CharField(required=False, allow_blank=True)


class RentalUpdateSerializer(serializers.Serializer):
    vehicle = serializers.IntegerField(required=False)
    rental_type = serializers.ChoiceField(choices=Rental.RentalType.choices, required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    purpose = serializers.CharField(required=False, allow_blank=True)
    special_requirements = serializers.CharField(required=False, allow_blank=True)
    daily_fee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    monthly_fee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    conditions = serializers.CharField(required=False, allow_blank=True)
    admin_notes = serializers.CharField(required=False, allow_blank=True)
    contract_terms = serializers.CharField(required=False, allow_blank=True)
    admin_guidelines = serializers.CharField(required=False, allow_blank=True)
