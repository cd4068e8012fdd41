from django.apps import AppConfig


class RentalsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.rentals"
    verbose_name = "Rentals"

    def ready(self) -> None:
        # Keeps vehicle occupancy consistent when rentals are deleted.
        from . import signals  # noqa: F401
