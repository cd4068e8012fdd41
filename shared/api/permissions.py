"""Permission classes shared by the app viewsets."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore

from shared.application.guards import is_admin


class IsOperatorAdmin(permissions.BasePermission):
    """Only operator administrators (role='admin') and superusers."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_admin(request.user)


class IsOperatorAdminOrReadOnly(permissions.BasePermission):
    """Any authenticated user may read; only administrators may write."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_admin(user)


class IsVehicleProvider(permissions.BasePermission):
    """Users registered as vehicle providers (administrators pass too)."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        return is_admin(user) or getattr(user, "role", None) == "provider"
