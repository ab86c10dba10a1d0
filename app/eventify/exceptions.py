"""Domain errors raised by the controllers.

Every error carries the HTTP status the routes answer with, so a route only
has to catch ``EventifyError`` and hand it to ``ErrorResponseModel``.
"""


class EventifyError(Exception):
    status_code = 400
    error = "Bad request"

    def __init__(self, message: str = None):
        super().__init__(message or self.error)
        self.message = message or self.error


class ValidationFailedError(EventifyError):
    status_code = 400
    error = "Validation failed"


class AuthenticationError(EventifyError):
    status_code = 401
    error = "Authentication failed"


class PermissionDeniedError(EventifyError):
    status_code = 403
    error = "Permission denied"


class NotFoundError(EventifyError):
    status_code = 404
    error = "Not found"


class DuplicateAccountError(EventifyError):
    status_code = 409
    error = "Account already exists"


class AlreadyRegisteredError(EventifyError):
    status_code = 409
    error = "Already registered"


class NotRegisteredError(EventifyError):
    status_code = 404
    error = "Not registered"


class CapacityExceededError(EventifyError):
    status_code = 409
    error = "Event is full"


class RegistrationClosedError(EventifyError):
    status_code = 409
    error = "Registration closed"


class SchedulingConflictError(EventifyError):
    status_code = 409
    error = "Scheduling conflict"
