"""API views for the fleet domain."""

from __future__ import annotations

from rest_framework import status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.api.permissions import IsOperatorAdmin, IsOperatorAdminOrReadOnly

from . import maintenance
from .models import ServiceRecord, Vehicle
from .serializers import ServiceRecordSerializer, VehicleSerializer
from .services import resource_registry


class VehicleViewSet(viewsets.ModelViewSet):
    """Fleet catalogue. Everyone signed in may browse; admins manage it."""

    queryset = Vehicle.objects.all()
    serializer_class = VehicleSerializer
    permission_classes = [IsOperatorAdminOrReadOnly]
    filterset_fields = ["vehicle_type", "is_available", "is_active", "fuel_type", "transmission"]

    def perform_destroy(self, instance: Vehicle) -> None:  # type: ignore
        resource_registry.deactivate(instance.pk)

    @action(detail=False, methods=["get"])
    def available(self, request):
        queryset = self.filter_queryset(resource_registry.available_vehicles())
        return Response(VehicleSerializer(queryset, many=True).data)


class ServiceRecordViewSet(viewsets.ModelViewSet):
    """Maintenance history; admin only."""

    queryset = ServiceRecord.objects.select_related("vehicle").all()
    serializer_class = ServiceRecordSerializer
    permission_classes = [IsOperatorAdmin]
    filterset_fields = ["vehicle", "service_type", "is_warranty"]

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        fields = dict(serializer.validated_data)
        vehicle = fields.pop("vehicle")
        record = maintenance.record_service(request.user, vehicle.pk, **fields)
        return Response(self.get_serializer(record).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        changes = dict(serializer.validated_data)
        changes.pop("vehicle", None)
        record = maintenance.update_service_record(request.user, instance.pk, **changes)
        return Response(self.get_serializer(record).data)

    def perform_destroy(self, instance: ServiceRecord) -> None:  # type: ignore
        maintenance.delete_service_record(self.request.user, instance.pk)

    @action(detail=False, methods=["get"])
    def upcoming(self, request):
        records = maintenance.upcoming_services()
        return Response(self.get_serializer(records, many=True).data)

    @action(detail=False, methods=["get"])
    def reminders(self, request):
        records = maintenance.service_reminders()
        return Response({"count": len(records), "results": self.get_serializer(records, many=True).data})
