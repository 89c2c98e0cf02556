import math


class AppError(Exception):
    """Base class for errors that map onto a JSON error response."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class AuthorizationError(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class LockoutError(AppError):
    """Raised while a username is locked after too many failed logins."""

    status_code = 429

    def __init__(self, retry_after_seconds: float):
        self.retry_after_seconds = max(retry_after_seconds, 0.0)
        self.remaining_minutes = max(1, math.ceil(self.retry_after_seconds / 60))
        super().__init__(f"Account is locked. Try again in {self.remaining_minutes} minutes.")

    @property
    def headers(self) -> dict[str, str]:
        return {"Retry-After": str(math.ceil(self.retry_after_seconds))}


class StorageFault(AppError):
    """Persistence I/O failed. The message is only shown in development."""

    status_code = 500
    default_message = "Storage operation failed"
