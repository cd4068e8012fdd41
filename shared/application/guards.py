"""Role and ownership checks used by every lifecycle manager."""

from shared.domain.exceptions import AccessDenied


def is_admin(actor) -> bool:
    if actor is None or not getattr(actor, 'is_authenticated', False):
        return False
    if getattr(actor, 'is_superuser', False):
        return True
    return getattr(actor, 'role', None) == 'admin'


def require_admin(actor) -> None:
    if not is_admin(actor):
        raise AccessDenied("Only administrators can perform this action")


def require_role(actor, role: str) -> None:
    if actor is None or getattr(actor, 'role', None) != role:
        raise AccessDenied(f"Only users with role '{role}' can perform this action")


def require_owner(actor, owner_id, *, allow_admin: bool = False) -> None:
    """Caller must own the entity (admins pass too when ``allow_admin``)"""
    if allow_admin and is_admin(actor):
        return
    if actor is None or getattr(actor, 'pk', None) != owner_id:
        raise AccessDenied("You can only manage your own records")


def require_approved_provider(actor) -> None:
    require_role(actor, 'provider')
    if getattr(actor, 'provider_status', None) != 'approved':
        raise AccessDenied("Your provider account has not been approved")
