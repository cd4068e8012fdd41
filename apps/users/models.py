"""User model for the Fleet Coordinator.

Login credentials and tokens are issued by the external credential
service; the core only reads the role and the identity of the caller.
Vehicle providers additionally carry an account status that operator
admins move between pending, approved, suspended and rejected.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.core.validators import RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


PHONE_VALIDATOR = RegexValidator(
    regex=r"^\+?\d{7,15}$",
    message=_("Invalid phone number. Use the international format without spaces."),
)


class CustomUserManager(BaseUserManager):
    """Creates users keyed by email; phones are stored without separators."""

    use_in_migrations = True

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        if not email:
            raise ValueError("An email address is required.")
        extra_fields.setdefault("role", CustomUser.RoleChoices.CUSTOMER)
        if extra_fields.get("phone"):
            extra_fields["phone"] = extra_fields["phone"].replace(" ", "").replace("-", "")

        user = self.model(email=self.normalize_email(email), **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        # operator accounts created from the command line
        extra_fields.update(is_staff=True, is_superuser=True, role=CustomUser.RoleChoices.ADMIN)
        return self.create_user(email, password, **extra_fields)


class CustomUser(AbstractUser):
    """Platform user: a customer, an operator admin or a vehicle provider."""

    class RoleChoices(models.TextChoices):
        CUSTOMER = "customer", _("Customer")
        ADMIN = "admin", _("Administrator")
        PROVIDER = "provider", _("Vehicle provider")

    class ProviderStatus(models.TextChoices):
        PENDING = "pending", _("Pending approval")
        APPROVED = "approved", _("Approved")
        SUSPENDED = "suspended", _("Suspended")
        REJECTED = "rejected", _("Rejected")

    username = models.CharField(
        _("Display name"),
        max_length=150,
        blank=True,
    )
    email = models.EmailField(_("Email"), unique=True)
    phone = models.CharField(
        _("Phone"),
        max_length=20,
        null=True,
        blank=True,
        validators=[PHONE_VALIDATOR],
    )
    role = models.CharField(
        _("Role"),
        max_length=20,
        choices=RoleChoices.choices,
        default=RoleChoices.CUSTOMER,
    )
    business_name = models.CharField(
        _("Business name"),
        max_length=255,
        blank=True,
        help_text=_("Trading name of a vehicle provider."),
    )
    provider_status = models.CharField(
        _("Provider status"),
        max_length=20,
        choices=ProviderStatus.choices,
        default=ProviderStatus.PENDING,
        help_text=_("Only approved providers may submit vehicles and contracts."),
    )
    is_verified = models.BooleanField(_("Verified provider"), default=False)
    rejection_reason = models.CharField(_("Rejection reason"), max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: list[str] = []

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["role"]), models.Index(fields=["role", "provider_status"])]

    def __str__(self) -> str:
        return f"{self.email} ({self.get_role_display()})"


User = CustomUser
