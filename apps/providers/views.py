"""API views for provider contracts, vehicle requests and provider accounts."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import mixins, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.api.ownership import OwnerScopedMixin
from shared.api.permissions import IsOperatorAdmin, IsVehicleProvider

from .application.command_handlers import (
    CreateContractCommand,
    CreateVehicleRequestCommand,
    EditVehicleRequestCommand,
    RecordContractPaymentCommand,
    SetContractStatusCommand,
    SetProviderStatusCommand,
    SetVehicleRequestStatusCommand,
    UpdateContractCommand,
    provider_accounts,
    provider_contracts,
    vehicle_requests,
)
from .filters import VehicleRequestFilter
from .models import VehicleProviderContract, VehicleRequest
from .serializers import (
    BulkProviderStatusSerializer,
    ContractPaymentCreateSerializer,
    ContractPaymentSerializer,
    ContractRequestSerializer,
    ContractStatusSerializer,
    ProviderAccountSerializer,
    ProviderStatusSerializer,
    VehicleProviderContractSerializer,
    VehicleRequestCreateSerializer,
    VehicleRequestEditSerializer,
    VehicleRequestSerializer,
    VehicleRequestStatusSerializer,
)

User = get_user_model()


class VehicleProviderContractViewSet(
    OwnerScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Providers request and revise contracts; admins review and pay them."""

    queryset = VehicleProviderContract.objects.select_related("provider").prefetch_related("admin_actions")
    serializer_class = VehicleProviderContractSerializer
    owner_field = "provider"
    permission_classes = [IsVehicleProvider]
    filterset_fields = ["status", "payment_terms"]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_permissions(self):  # type: ignore
        if self.action in {"set_status", "record_payment"}:
            return [IsOperatorAdmin()]
        return super().get_permissions()

    def _respond(self, contract, status_code=status.HTTP_200_OK) -> Response:
        contract = VehicleProviderContract.objects.prefetch_related("admin_actions").get(pk=contract.pk)
        return Response(VehicleProviderContractSerializer(contract).data, status=status_code)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = ContractRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        contract = provider_contracts.create(CreateContractCommand(**serializer.validated_data), request.user)
        return self._respond(contract, status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        contract = self.get_object()
        serializer = ContractRequestSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        contract = provider_contracts.update(
            UpdateContractCommand(contract_pk=contract.pk, **serializer.validated_data),
            request.user,
        )
        return self._respond(contract)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        contract = self.get_object()
        provider_contracts.delete(contract.pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="set-status")
    def set_status(self, request, pk=None):  # type: ignore
        contract = self.get_object()
        serializer = ContractStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        contract = provider_contracts.admin_set_status(
            SetContractStatusCommand(contract_pk=contract.pk, **serializer.validated_data),
            request.user,
        )
        return self._respond(contract)

    @action(detail=True, methods=["get"])
    def payments(self, request, pk=None):  # type: ignore
        contract = self.get_object()
        return Response(ContractPaymentSerializer(contract.payments.all(), many=True).data)

    @action(detail=True, methods=["post"], url_path="record-payment")
    def record_payment(self, request, pk=None):  # type: ignore
        contract = self.get_object()
        serializer = ContractPaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment = provider_contracts.record_payment(
            RecordContractPaymentCommand(contract_pk=contract.pk, **serializer.validated_data),
            request.user,
        )
        return Response(ContractPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def statistics(self, request):  # type: ignore
        return Response(provider_contracts.provider_statistics(request.user))


class VehicleRequestViewSet(
    OwnerScopedMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Providers propose vehicles for the fleet; admins review and adjust the proposals.

    - providers see only their own requests
    - `set-status` and the rate/description edit are admin-only
    """

    queryset = VehicleRequest.objects.select_related("provider")
    serializer_class = VehicleRequestSerializer
    owner_field = "provider"
    permission_classes = [IsVehicleProvider]
    filterset_class = VehicleRequestFilter
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_permissions(self):  # type: ignore
        if self.action in {"partial_update", "set_status", "statistics"}:
            return [IsOperatorAdmin()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = VehicleRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        vehicle_request = vehicle_requests.create(
            CreateVehicleRequestCommand(**serializer.validated_data), request.user
        )
        return Response(VehicleRequestSerializer(vehicle_request).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):  # type: ignore
        vehicle_request = self.get_object()
        serializer = VehicleRequestEditSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        vehicle_request = vehicle_requests.admin_edit(
            EditVehicleRequestCommand(request_pk=vehicle_request.pk, **serializer.validated_data),
            request.user,
        )
        return Response(VehicleRequestSerializer(vehicle_request).data)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        vehicle_request = self.get_object()
        vehicle_requests.delete(vehicle_request.pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="set-status")
    def set_status(self, request, pk=None):  # type: ignore
        vehicle_request = self.get_object()
        serializer = VehicleRequestStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        vehicle_request = vehicle_requests.admin_set_status(
            SetVehicleRequestStatusCommand(request_pk=vehicle_request.pk, **serializer.validated_data),
            request.user,
        )
        return Response(VehicleRequestSerializer(vehicle_request).data)

    @action(detail=False, methods=["get"])
    def statistics(self, request):  # type: ignore
        return Response(vehicle_requests.statistics(request.user))


class ProviderAccountViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Admin view of vehicle provider accounts and their approval."""

    queryset = User.objects.filter(role=User.RoleChoices.PROVIDER)
    serializer_class = ProviderAccountSerializer
    permission_classes = [IsOperatorAdmin]
    filterset_fields = ["provider_status", "is_verified"]

    @action(detail=True, methods=["post"], url_path="set-status")
    def set_status(self, request, pk=None):  # type: ignore
        provider = self.get_object()
        serializer = ProviderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        provider = provider_accounts.set_status(
            SetProviderStatusCommand(provider_pk=provider.pk, **serializer.validated_data),
            request.user,
        )
        return Response(ProviderAccountSerializer(provider).data)

    @action(detail=False, methods=["post"], url_path="bulk-set-status")
    def bulk_set_status(self, request):  # type: ignore
        serializer = BulkProviderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        updated = provider_accounts.bulk_set_status(
            data["ids"], data["status"], request.user, rejection_reason=data["rejection_reason"]
        )
        return Response({"updated": updated})

    @action(detail=False, methods=["get"])
    def statistics(self, request):  # type: ignore
        return Response(provider_accounts.statistics(request.user))
