"""
Error taxonomy for WorkHub actions.

Every failure an action can produce is one of these exceptions. Action
orchestrators catch them and convert them into a uniform ActionResult; the
API layer maps the error code to an HTTP status.
"""
from typing import Iterable, Optional, Sequence


class WorkHubError(Exception):
    """Base class for all expected action failures."""

    code = "ERROR"
    http_status = 400
    public_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    @property
    def errors(self) -> Sequence[str]:
        return ()


class Unauthenticated(WorkHubError):
    """No session or an invalid/expired one."""

    code = "UNAUTHENTICATED"
    http_status = 401
    public_message = "Not authenticated"


class MissingTenant(WorkHubError):
    """The identity is not attached to a company."""

    code = "MISSING_TENANT"
    http_status = 403
    public_message = "User has no company assigned"


class Forbidden(WorkHubError):
    """Authenticated, but the permission gate denied the request."""

    code = "FORBIDDEN"
    http_status = 403
    public_message = "Insufficient permissions"


class NotFound(WorkHubError):
    """A referenced entity does not exist inside the caller's tenant."""

    code = "NOT_FOUND"
    http_status = 404
    public_message = "Resource not found"

    def __init__(self, entity: str, entity_id=None):
        detail = f"{entity} not found" if entity_id is None else f"{entity} {entity_id} not found"
        super().__init__(detail)
        self.entity = entity
        self.entity_id = entity_id


class ValidationFailed(WorkHubError):
    """Business rules rejected the request; carries the ordered error codes."""

    code = "VALIDATION_FAILED"
    http_status = 422
    public_message = "Validation failed"

    def __init__(self, errors: Iterable[str], message: Optional[str] = None,
                 warnings: Iterable[str] = ()):
        self._errors = tuple(errors)
        self.warnings = tuple(warnings)
        super().__init__(message or "; ".join(self._errors) or self.public_message)

    @property
    def errors(self) -> Sequence[str]:
        return self._errors


class Conflict(WorkHubError):
    """The write collides with existing data or an invalid state transition."""

    code = "CONFLICT"
    http_status = 409
    public_message = "Conflicting record"

    def __init__(self, message: Optional[str] = None, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code

    @property
    def errors(self) -> Sequence[str]:
        return (self.error_code,) if self.error_code else ()


class PersistenceError(WorkHubError):
    """The database rejected or failed the operation."""

    code = "PERSISTENCE_ERROR"
    http_status = 500
    public_message = "The operation could not be completed"


class InternalError(WorkHubError):
    """Unexpected failure; details stay in the server log."""

    code = "INTERNAL_ERROR"
    http_status = 500
    public_message = "Internal server error"


ERROR_STATUS = {
    error.code: error.http_status
    for error in (Unauthenticated, MissingTenant, Forbidden, NotFound, ValidationFailed,
                  Conflict, PersistenceError, InternalError)
}
