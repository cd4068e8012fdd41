"""Model signal handlers for rentals."""

from django.db.models.signals import pre_delete
from django.dispatch import receiver

from apps.fleet.models import Vehicle
from apps.fleet.services import resource_registry

from .models import Rental


@receiver(pre_delete, sender=Rental)
def release_vehicle_of_deleted_rental(sender, instance, **kwargs):
    """A rental removed by a cascade (e.g. its customer is deleted) frees the vehicle it holds."""
    if Vehicle.objects.filter(pk=instance.vehicle_id, occupied_by=instance).exists():
        resource_registry.release(instance.vehicle_id, holder=instance)
