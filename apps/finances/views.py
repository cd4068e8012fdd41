"""API views for payments, the manual ledger and financial reports.

Customers pay for their own bookings; status changes, the ledger and the
reports are admin only.
"""

from __future__ import annotations

from rest_framework import mixins, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.api.permissions import IsOperatorAdmin

from . import services
from .filters import FinancialEntryFilter
from .models import FinancialEntry
from .serializers import (
    FinancialEntrySerializer,
    PaymentCreateSerializer,
    PaymentSerializer,
    PaymentStatusSerializer,
    PeriodSerializer,
)
from .services import CreatePaymentCommand, financial_aggregator, payment_service


class PaymentViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = PaymentSerializer
    filterset_fields = ["status", "payment_method", "booking"]

    def get_permissions(self):  # type: ignore
        if self.action in {"destroy", "set_status", "statistics"}:
            return [IsOperatorAdmin()]
        return super().get_permissions()

    def get_queryset(self):  # type: ignore
        return payment_service.visible_to(self.request.user)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        payment = payment_service.create_payment(
            CreatePaymentCommand(booking_id=data.pop("booking"), **data),
            request.user,
        )
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    def perform_destroy(self, instance) -> None:  # type: ignore
        payment_service.delete_payment(instance.pk, self.request.user)

    @action(detail=True, methods=["post"], url_path="set-status")
    def set_status(self, request, pk=None):  # type: ignore
        payment = self.get_object()
        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = payment_service.set_status(
            payment.pk,
            serializer.validated_data["status"],
            request.user,
            failure_reason=serializer.validated_data.get("failure_reason"),
        )
        return Response(PaymentSerializer(payment).data)

    @action(detail=False, methods=["get"])
    def statistics(self, request):  # type: ignore
        return Response(payment_service.statistics())


class FinancialEntryViewSet(viewsets.ModelViewSet):
    """Manual income and expense lines."""

    queryset = FinancialEntry.objects.select_related("created_by").all()
    serializer_class = FinancialEntrySerializer
    permission_classes = [IsOperatorAdmin]
    filterset_class = FinancialEntryFilter
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = services.create_entry(request.user, **serializer.validated_data)
        return Response(self.get_serializer(entry).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        entry = services.update_entry(request.user, instance.pk, **serializer.validated_data)
        return Response(self.get_serializer(entry).data)

    def perform_destroy(self, instance) -> None:  # type: ignore
        services.delete_entry(self.request.user, instance.pk)


class FinancialSummaryView(APIView):
    permission_classes = [IsOperatorAdmin]

    def get(self, request):  # type: ignore
        period = PeriodSerializer(data=request.query_params)
        period.is_valid(raise_exception=True)
        return Response(financial_aggregator.summary(period.to_period()))


class MonthlyBreakdownView(APIView):
    permission_classes = [IsOperatorAdmin]

    def get(self, request):  # type: ignore
        period = PeriodSerializer(data=request.query_params)
        period.is_valid(raise_exception=True)
        return Response(financial_aggregator.monthly_breakdown(period.to_period()))
