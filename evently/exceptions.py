class EventlyError(Exception):
    """Base class for errors surfaced to API clients"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(EventlyError):
    status_code = 400


class CapacityExceededError(EventlyError):
    status_code = 400


class AuthenticationError(EventlyError):
    status_code = 401


class PermissionDeniedError(EventlyError):
    status_code = 403


class NotFoundError(EventlyError):
    status_code = 404


class ConflictError(EventlyError):
    status_code = 409
