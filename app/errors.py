"""Error kinds raised by the stores and rendered by the API as ``{"error": message}``."""


class ServiceError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, headers: dict[str, str] | None = None):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = 400
    default_message = "Missing fields"


class InvalidDayIndex(ValidationError):
    default_message = "Invalid day index"


class DuplicateIdentity(ServiceError):
    status_code = 400
    default_message = "Email already exists"


class InvalidCredentials(ServiceError):
    status_code = 401
    default_message = "Invalid email or password"


class Unauthenticated(ServiceError):
    status_code = 401
    default_message = "Not authenticated"

    def __init__(self, message: str | None = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class Unauthorized(ServiceError):
    status_code = 403
    default_message = "Invalid or expired token"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Not found"


class ProofNotFound(NotFound):
    default_message = "Proof not found for this day"


class InternalError(ServiceError):
    pass
