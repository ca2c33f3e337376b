"""
Service error taxonomy.

Every failure a service reports to a caller is one of these. Each carries the
HTTP status and the stable machine-readable code the API layer renders.
"""


class TaskFlowError(Exception):
    """Base exception for service errors."""

    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(TaskFlowError):
    """Raised when input is missing or breaks a field rule."""

    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class DuplicateEmailError(TaskFlowError):
    """Raised when registering an email that already has an account."""

    status_code = 400
    code = "DUPLICATE_EMAIL"
    default_message = "User with this email already exists"


class InvalidCredentialsError(TaskFlowError):
    """Raised for an unknown email or a wrong password, indistinguishably."""

    status_code = 401
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class UnauthenticatedError(TaskFlowError):
    """Raised when no usable credential was presented."""

    status_code = 401
    code = "UNAUTHENTICATED"
    default_message = "Access denied. No token provided."


class InvalidTokenError(TaskFlowError):
    """Raised when a token is malformed, badly signed or no longer current."""

    status_code = 401
    code = "INVALID_TOKEN"
    default_message = "Invalid token. Please login again."


class TokenExpiredError(TaskFlowError):
    """Raised when an access token has expired; the client should refresh."""

    status_code = 401
    code = "TOKEN_EXPIRED"
    default_message = "Token expired. Please refresh your token or login again."


class NotFoundError(TaskFlowError):
    """Raised when a record does not exist or is not owned by the caller."""

    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"
