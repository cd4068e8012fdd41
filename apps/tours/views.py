"""API views for tour packages and tour bookings."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.api.ownership import OwnerScopedMixin
from shared.api.permissions import IsOperatorAdmin, IsOperatorAdminOrReadOnly

from .application.command_handlers import (
    CreateTourBookingCommand,
    RecordTourPaymentCommand,
    SetTourBookingStatusCommand,
    SetTourPriceCommand,
    available_packages,
    quote_package_price,
    tour_bookings,
)
from .models import TourBooking, TourPackage
from .serializers import (
    TourBookingCreateSerializer,
    TourBookingSerializer,
    TourBookingStatusSerializer,
    TourPackageSerializer,
    TourPaymentSerializer,
    TourPriceQuoteSerializer,
    TourPriceSerializer,
)


class TourPackageViewSet(viewsets.ModelViewSet):
    """Tour catalogue. Admins curate it; customers browse it."""

    queryset = TourPackage.objects.all()
    serializer_class = TourPackageSerializer
    permission_classes = [IsOperatorAdminOrReadOnly]
    filterset_fields = ["destination", "category", "tour_type", "status", "is_available", "payment_type"]

    def get_permissions(self):  # type: ignore
        if self.action == "calculate_price":
            return [permissions.IsAuthenticated()]
        return super().get_permissions()

    def perform_create(self, serializer):  # type: ignore
        serializer.save(created_by=self.request.user)

    @action(detail=False, methods=["get"])
    def available(self, request):
        queryset = available_packages(
            destination=request.query_params.get("destination"),
            category=request.query_params.get("category"),
            max_price=request.query_params.get("max_price"),
        )
        return Response(TourPackageSerializer(queryset, many=True).data)

    @action(detail=True, methods=["post"], url_path="calculate-price")
    def calculate_price(self, request, pk=None):  # type: ignore
        serializer = TourPriceQuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        total = quote_package_price(
            self.get_object().pk,
            serializer.validated_data["passengers"],
            serializer.validated_data.get("days"),
        )
        return Response({"total_price": total})


class TourBookingViewSet(
    OwnerScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """Customers book tours; admins decide, price and collect payments."""

    queryset = TourBooking.objects.select_related("customer", "package").prefetch_related("admin_actions")
    serializer_class = TourBookingSerializer
    filterset_fields = ["status", "payment_status", "package"]

    def get_permissions(self):  # type: ignore
        if self.action in {"set_status", "set_price", "record_payment", "statistics"}:
            return [IsOperatorAdmin()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = TourBookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = tour_bookings.create(
            CreateTourBookingCommand(
                package_id=data["package"],
                booking_date=data["booking_date"],
                number_of_passengers=data["number_of_passengers"],
                payment_method=data["payment_method"],
                passengers=[dict(p) for p in data["passengers"]],
                contact_person=dict(data["contact_person"]),
                special_requests=data["special_requests"],
            ),
            request.user,
        )
        return Response(TourBookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    def _respond(self, booking: TourBooking) -> Response:
        booking = self.get_queryset().get(pk=booking.pk)
        return Response(TourBookingSerializer(booking).data)

    @action(detail=True, methods=["post"], url_path="set-status")
    def set_status(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = TourBookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = tour_bookings.admin_set_status(
            SetTourBookingStatusCommand(booking_id=booking.pk, **serializer.validated_data),
            request.user,
        )
        return self._respond(booking)

    @action(detail=True, methods=["post"], url_path="set-price")
    def set_price(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = TourPriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = tour_bookings.admin_set_price(
            SetTourPriceCommand(booking_id=booking.pk, **serializer.validated_data),
            request.user,
        )
        return self._respond(booking)

    @action(detail=True, methods=["post"], url_path="record-payment")
    def record_payment(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = TourPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = tour_bookings.record_payment(
            RecordTourPaymentCommand(booking_id=booking.pk, amount=serializer.validated_data["amount"]),
            request.user,
        )
        return self._respond(booking)

    @action(detail=False, methods=["get"])
    def statistics(self, request):  # type: ignore
        return Response(tour_bookings.statistics())
