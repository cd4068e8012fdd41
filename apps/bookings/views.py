"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import mixins, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.api.ownership import OwnerScopedMixin
from shared.api.permissions import IsOperatorAdmin
from shared.application.guards import is_admin

from .application.command_handlers import (
    CreateBookingCommand,
    SetBookingPricingCommand,
    SetBookingStatusCommand,
    UpdateBookingCommand,
    booking_lifecycle,
)
from .models import Booking
from .serializers import (
    BookingCreateSerializer,
    BookingPricingSerializer,
    BookingSerializer,
    BookingStatusSerializer,
    BookingUpdateSerializer,
)


class BookingViewSet(
    OwnerScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Customers book and edit rides; admins confirm, price and progress them."""

    queryset = Booking.objects.select_related("customer").all()
    serializer_class = BookingSerializer
    filterset_fields = ["status", "service_type", "payment_status", "pickup_date"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_permissions(self):  # type: ignore
        if self.action in {"set_status", "set_pricing", "statistics"}:
            return [IsOperatorAdmin()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = booking_lifecycle.create(CreateBookingCommand(**serializer.validated_data), request.user)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        booking = self.get_object()
        serializer = BookingUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = booking_lifecycle.customer_update(
            UpdateBookingCommand(booking_id=booking.pk, **serializer.validated_data),
            request.user,
        )
        return Response(BookingSerializer(booking).data)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        booking = self.get_object()
        if is_admin(request.user):
            booking_lifecycle.admin_delete(booking.pk, request.user)
        else:
            booking_lifecycle.customer_delete(booking.pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="set-status")
    def set_status(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = booking_lifecycle.admin_set_status(
            SetBookingStatusCommand(booking_id=booking.pk, **serializer.validated_data),
            request.user,
        )
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"], url_path="set-pricing")
    def set_pricing(self, request, pk=None):  # type: ignore
        booking = self.get_object()
        serializer = BookingPricingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = booking_lifecycle.admin_set_pricing(
            SetBookingPricingCommand(booking_id=booking.pk, **serializer.validated_data),
            request.user,
        )
        return Response(BookingSerializer(booking).data)

    @action(detail=False, methods=["get"])
    def statistics(self, request):  # type: ignore
        return Response(booking_lifecycle.statistics())
