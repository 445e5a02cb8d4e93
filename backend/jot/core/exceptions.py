class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ValidationError(AppError):
    """Raised when a request carries malformed or unacceptable input."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class OtpStateError(AppError):
    """Raised when a verification code is missing, expired, exhausted or unverified."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class AuthenticationError(AppError):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, status_code=401)

class PermissionDeniedError(AppError):
    def __init__(self, message: str):
        super().__init__(message, status_code=403)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str):
        super().__init__(f"{resource_type} not found", status_code=404)

class ConflictError(AppError):
    def __init__(self, message: str):
        super().__init__(message, status_code=409)

class EmailTransportError(AppError):
    """Raised when the email transport is unconfigured or fails to deliver."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=500, details=details)

class RateLimitError(AppError):
    def __init__(self, retry_after: int):
        super().__init__(
            f"Too many requests. Try again in {retry_after} second(s).",
            status_code=429,
            details={"retryAfter": retry_after},
        )
        self.headers = {"Retry-After": str(retry_after)}
