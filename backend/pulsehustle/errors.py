"""
Service Error Taxonomy

Every domain service raises one of these instead of returning ad hoc
messages, so callers (and the operation envelope) can branch on ``kind``:

    ValidationError        missing or invalid required field
    NotFoundError          referenced entity absent
    PermissionDeniedError  actor is not the resource owner
    InvalidStateError      operation disallowed in the current status
    UpstreamError          the backing store call failed
"""


class ServiceError(Exception):
    """Base class for domain service failures."""

    kind = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    kind = "validation"


class NotFoundError(ServiceError):
    kind = "not_found"


class PermissionDeniedError(ServiceError):
    kind = "permission"


class InvalidStateError(ServiceError):
    kind = "invalid_state"


class UpstreamError(ServiceError):
    kind = "upstream"


class AuthenticationError(ServiceError):
    kind = "authentication"


ERROR_STATUS_CODES = {
    ValidationError.kind: 400,
    AuthenticationError.kind: 401,
    PermissionDeniedError.kind: 403,
    NotFoundError.kind: 404,
    InvalidStateError.kind: 409,
    UpstreamError.kind: 502,
    ServiceError.kind: 500,
}
