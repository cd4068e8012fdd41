"""API views for the rental domain."""

from __future__ import annotations

from rest_framework import mixins, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.api.ownership import OwnerScopedMixin
from shared.api.permissions import IsOperatorAdmin

from .application.command_handlers import (
    CreateRentalCommand,
    SetRentalStatusCommand,
    UpdateRentalCommand,
    rental_contracts,
)
from .models import Rental
from .serializers import (
    RentalCreateSerializer,
    RentalSerializer,
    RentalStatusSerializer,
    RentalUpdateSerializer,
)


class RentalViewSet(
    OwnerScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Customers request and follow their rentals; admins run the contract workflow."""

    queryset = Rental.objects.select_related("customer", "vehicle").all()
    serializer_class = RentalSerializer
    filterset_fields = ["status", "rental_type", "vehicle"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_permissions(self):  # type: ignore
        if self.action in {"partial_update", "destroy", "set_status", "statistics"}:
            return [IsOperatorAdmin()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = RentalCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        rental = rental_contracts.create(
            CreateRentalCommand(
                vehicle_id=data["vehicle"],
                rental_type=data["rental_type"],
                start_date=data["start_date"],
                end_date=data["end_date"],
                purpose=data["purpose"],
                special_requirements=data["special_requirements"],
            ),
            request.user,
        )
        return Response(RentalSerializer(rental).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        rental = self.get_object()
        serializer = RentalUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        vehicle_id = data.pop("vehicle", None)
        rental = rental_contracts.admin_update(
            UpdateRentalCommand(rental_id=rental.pk, vehicle_id=vehicle_id, **data),
            request.user,
        )
        return Response(RentalSerializer(rental).data)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        rental = self.get_object()
        rental_contracts.delete(rental.pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="set-status")
    def set_status(self, request, pk=None):  # type: ignore
        rental = self.get_object()
        serializer = RentalStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        rental = rental_contracts.admin_set_status(
            SetRentalStatusCommand(rental_id=rental.pk, **serializer.validated_data),
            request.user,
        )
        return Response(RentalSerializer(rental).data)

    @action(detail=False, methods=["get"])
    def statistics(self, request):  # type: ignore
        return Response(rental_contracts.statistics())
