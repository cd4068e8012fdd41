"""
Domain Errors

Every lifecycle manager raises one of these instead of returning error
codes. The API layer maps them to HTTP responses in
``shared.api.exception_handler``.
"""

from typing import Optional


class DomainError(Exception):
    """Base class for all domain-level failures"""

    code = 'domain_error'

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        payload = {'detail': self.message, 'code': self.code}
        if self.field:
            payload['field'] = self.field
        return payload


class NotFound(DomainError):
    """Entity does not exist (or is not visible to the caller)"""
    code = 'not_found'


class AccessDenied(DomainError):
    """Caller lacks the role or ownership the operation requires"""
    code = 'access_denied'


class InvalidTransition(DomainError):
    """Requested status change (or edit) is not allowed from the current state"""
    code = 'invalid_transition'


class ValidationFailed(DomainError):
    """Input rejected before any write happened"""
    code = 'validation_failed'


class ResourceConflict(DomainError):
    """Vehicle is held by somebody else or is otherwise not reservable"""
    code = 'resource_conflict'


class DependencyUnavailable(DomainError):
    """An external collaborator (notification broker, gateway) failed"""
    code = 'dependency_unavailable'
