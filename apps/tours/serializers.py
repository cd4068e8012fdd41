"""Serializers for tour packages and tour bookings."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import PaymentType, TourAdminAction, TourBooking, TourPackage


class TourPackageSerializer(serializers.ModelSerializer):
    class Meta:
        model = TourPackage
        fields = [
            "id",
            "name",
            "description",
            "destination",
            "visit_locations",
            "tour_days",
            "full_distance",
            "min_passengers",
            "max_passengers",
            "price_per_person",
            "category",
            "tour_type",
            "payment_type",
            "vehicle_types",
            "included_services",
            "excluded_services",
            "cancellation_policy",
            "status",
            "is_available",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_by", "created_at", "updated_at"]

    def validate_price_per_person(self, value):
        if value <= 0:
            raise serializers.ValidationError("Price per person must be greater than 0.")
        return value

    def validate_full_distance(self, value):
        if value <= 0:
            raise serializers.ValidationError("Total distance must be greater than 0.")
        return value

    def validate(self, attrs):
        minimum = attrs.get("min_passengers", getattr(self.instance, "min_passengers", 10))
        maximum = attrs.get("max_passengers", getattr(self.instance, "max_passengers", 20))
        if minimum > maximum:
            raise serializers.ValidationError({"max_passengers": "Must not be below the minimum group size."})
        return attrs


class TourAdminActionSerializer(serializers.ModelSerializer):
    class Meta:
        model = TourAdminAction
        fields = ["id", "action", "note", "admin", "timestamp"]
        read_only_fields = fields


class TourBookingSerializer(serializers.ModelSerializer):
    customer = UserShortSerializer(read_only=True)
    package_name = serializers.ReadOnlyField(source="package.name")
    admin_actions = TourAdminActionSerializer(many=True, read_only=True)

    class Meta:
        model = TourBooking
        fields = [
            "id",
            "customer",
            "package",
            "package_name",
            "booking_date",
            "number_of_passengers",
            "passengers",
            "contact_person",
            "base_price",
            "total_price",
            "discount_applied",
            "admin_set_price",
            "final_price",
            "is_price_confirmed",
            "payment_method",
            "payment_status",
            "amount_paid",
            "remaining_amount",
            "status",
            "admin_notes",
            "special_requests",
            "admin_actions",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PassengerSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    age = serializers.IntegerField(min_value=0)
    passport_number = serializers.CharField(required=False, allow_blank=True)
    emergency_contact = serializers.CharField(required=False, allow_blank=True)
    special_requirements = serializers.CharField(required=False, allow_blank=True)


class ContactPersonSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32)
    address = serializers.CharField(required=False, allow_blank=True)


class TourBookingCreateSerializer(serializers.Serializer):
    package = serializers.IntegerField()
    booking_date = serializers.DateField()
    number_of_passengers = serializers.IntegerField(min_value=1)
    passengers = PassengerSerializer(many=True, required=False, default=list)
    contact_person = ContactPersonSerializer()
    payment_method = serializers.ChoiceField(choices=PaymentType.choices)
    special_requests = serializers.CharField(required=False, allow_blank=True, default="")


class TourBookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TourBooking.Status.choices)
    admin_notes = serializers.CharField(required=False, allow_blank=True, default="")
    final_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)


class TourPriceSerializer(serializers.Serializer):
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    note = serializers.CharField(required=False, allow_blank=True, default="")


class TourPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class TourPriceQuoteSerializer(serializers.Serializer):
    passengers = serializers.IntegerField(min_value=1)
    days = serializers.IntegerField(min_value=1, required=False)
