"""Serializers for payments, ledger entries and report periods."""

from __future__ import annotations

from datetime import date, timedelta

from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import DateRange

from .models import FinancialEntry, Payment


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "booking",
            "payer",
            "amount",
            "currency",
            "payment_method",
            "status",
            "transaction_id",
            "gateway_reference",
            "processed_at",
            "failure_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PaymentCreateSerializer(serializers.Serializer):
    booking = serializers.IntegerField()
    payment_method = serializers.ChoiceField(choices=Payment.Method.choices)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    status = serializers.ChoiceField(choices=Payment.Status.choices, default=Payment.Status.PENDING)
    gateway_reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")


class PaymentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Payment.Status.choices)
    failure_reason = serializers.CharField(max_length=255, required=False, allow_blank=True)


class FinancialEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = FinancialEntry
        fields = [
            "id",
            "type",
            "category",
            "description",
            "amount",
            "date",
            "reference",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_by", "created_at", "updated_at"]


class PeriodSerializer(serializers.Serializer):
    """Inclusive ``start_date``/``end_date`` query parameters, both optional."""

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "Must not be before start_date."})
        return attrs

    def to_period(self) -> DateRange | None:
        start = self.validated_data.get("start_date")
        end = self.validated_data.get("end_date")
        if start is None and end is None:
            return None
        return DateRange(start or date.min, end + timedelta(days=1) if end else date.max)
