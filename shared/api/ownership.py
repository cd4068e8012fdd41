"""Owner scoping for the customer- and provider-facing viewsets."""

from __future__ import annotations

from shared.application.guards import is_admin, require_owner


class OwnerScopedMixin:
    """Lists show the caller's own rows only.

    Detail routes resolve any row so that a record belonging to someone
    else answers 403 from ``require_owner`` instead of a 404.
    """

    owner_field = "customer"

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()  # type: ignore
        if self.detail or is_admin(self.request.user):  # type: ignore
            return qs
        return qs.filter(**{self.owner_field: self.request.user})  # type: ignore

    def get_object(self):  # type: ignore
        obj = super().get_object()  # type: ignore
        require_owner(self.request.user, getattr(obj, f"{self.owner_field}_id"), allow_admin=True)  # type: ignore
        return obj
