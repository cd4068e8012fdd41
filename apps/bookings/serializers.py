"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Booking


class BookingSerializer(serializers.ModelSerializer):
    """Read model; writes go through the booking lifecycle."""

    customer = UserShortSerializer(read_only=True)
    effective_distance = serializers.DecimalField(max_digits=8, decimal_places=2, read_only=True)
    pricing_state = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "customer",
            "service_type",
            "pickup_location",
            "dropoff_location",
            "pickup_date",
            "pickup_time",
            "return_date",
            "return_time",
            "passengers",
            "distance",
            "admin_calculated_distance",
            "effective_distance",
            "price_per_km",
            "admin_set_price",
            "is_price_confirmed",
            "pricing_state",
            "total_price",
            "status",
            "payment_status",
            "payment_method",
            "additional_notes",
            "service_details",
            "cancellation_reason",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_pricing_state(self, obj: Booking) -> str:
        return obj.pricing.state.value


class BookingCreateSerializer(serializers.Serializer):
    service_type = serializers.ChoiceField(choices=Booking.ServiceType.choices)
    pickup_location = serializers.CharField(max_length=255)
    dropoff_location = serializers.CharField(max_length=255)
    pickup_date = serializers.DateField()
    pickup_time = serializers.TimeField()
    return_date = serializers.DateField(required=False, allow_null=True, default=None)
    return_time = serializers.TimeField(required=False, allow_null=True, default=None)
    passengers = serializers.IntegerField(min_value=1)
    distance = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0)
    payment_method = serializers.ChoiceField(choices=Booking.PaymentMethod.choices, default=Booking.PaymentMethod.CASH)
    additional_notes = serializers.CharField(required=False, allow_blank=True, default="")
    service_details = serializers.JSONField(required=False, default=dict)


class BookingUpdateSerializer(serializers.Serializer):
    """Customer edit; unknown keys such as ``payment_status`` are dropped."""

    pickup_location = serializers.CharField(max_length=255, required=False)
    dropoff_location = serializers.CharField(max_length=255, required=False)
    pickup_date = serializers.DateField(required=False)
    pickup_time = serializers.TimeField(required=False)
    return_date = serializers.DateField(required=False)
    return_time = serializers.TimeField(required=False)
    passengers = serializers.IntegerField(min_value=1, required=False)
    additional_notes = serializers.CharField(required=False, allow_blank=True)
    payment_method = serializers.ChoiceField(choices=Booking.PaymentMethod.choices, required=False)


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.Status.choices)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class BookingPricingSerializer(serializers.Serializer):
    distance = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0, required=False)
    price_per_km = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    override_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    confirmed = serializers.BooleanField(required=False, default=False)
