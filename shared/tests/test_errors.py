"""Guards and the mapping of domain errors to HTTP responses."""

from types import SimpleNamespace

import pytest
from rest_framework.exceptions import NotAuthenticated

from shared.api.exception_handler import domain_exception_handler
from shared.application.guards import is_admin, require_admin, require_approved_provider, require_owner, require_role
from shared.domain.exceptions import (
    AccessDenied,
    DependencyUnavailable,
    InvalidTransition,
    NotFound,
    ResourceConflict,
    ValidationFailed,
)


def _user(pk=1, role="customer", **extra):
    return SimpleNamespace(pk=pk, role=role, is_authenticated=True, is_superuser=False, **extra)


@pytest.mark.parametrize(
    "error, status_code",
    [
        (NotFound("missing"), 404),
        (AccessDenied("nope"), 403),
        (InvalidTransition("bad move", field="status"), 400),
        (ValidationFailed("bad input", field="amount"), 400),
        (ResourceConflict("taken"), 409),
        (DependencyUnavailable("broker down"), 503),
    ],
)
def test_domain_errors_map_to_status(error, status_code):
    response = domain_exception_handler(error, {})

    assert response.status_code == status_code
    assert response.data["detail"] == error.message
    assert response.data["code"] == error.code
    assert response.data.get("field") == error.field


def test_drf_errors_keep_default_handling():
    response = domain_exception_handler(NotAuthenticated(), {})

    assert response.status_code == 401


def test_guards():
    admin = _user(pk=9, role="admin")
    owner = _user(pk=1)

    assert is_admin(admin)
    assert not is_admin(owner)
    assert not is_admin(SimpleNamespace(is_authenticated=False, role="admin"))

    require_admin(admin)
    require_owner(owner, 1)
    require_owner(admin, 1, allow_admin=True)
    require_role(_user(role="provider"), "provider")

    with pytest.raises(AccessDenied):
        require_admin(owner)
    with pytest.raises(AccessDenied):
        require_owner(admin, 1)
    with pytest.raises(AccessDenied):
        require_owner(_user(pk=2), 1)
    with pytest.raises(AccessDenied):
        require_role(owner, "provider")


@pytest.mark.parametrize("provider_status", ["pending", "suspended", "rejected"])
def test_unapproved_providers_are_refused(provider_status):
    with pytest.raises(AccessDenied):
        require_approved_provider(_user(role="provider", provider_status=provider_status))


def test_approved_provider_passes():
    require_approved_provider(_user(role="provider", provider_status="approved"))
    with pytest.raises(AccessDenied):
        require_approved_provider(_user(role="customer", provider_status="approved"))
