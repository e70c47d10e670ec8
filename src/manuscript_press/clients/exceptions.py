"""Exceptions raised by network clients.

Client errors are collaborator errors, so a failing cover service fails the
cover phase like any other collaborator. Connection failures, rate limits
and 5xx responses are transient and retried by the publishing pipeline.
"""

from manuscript_press.errors import CollaboratorError, TransientCollaboratorError


class ClientError(CollaboratorError):
    """Base exception for all client errors.

    Attributes:
        exhausted: Set when the client already spent its own retry attempts
            on the request; callers should not retry it again
    """

    exhausted = False

    @property
    def transient(self) -> bool:
        return False


class ConnectionError(ClientError, TransientCollaboratorError):
    """Raised when the service cannot be reached after all attempts."""

    @property
    def transient(self) -> bool:
        return True


class APIError(ClientError):
    """Raised when the service returns a non-2xx response."""

    def __init__(self, message: str, status_code: int):
        self.status_code = status_code
        super().__init__(message)

    @property
    def transient(self) -> bool:
        return self.status_code == 429 or self.status_code >= 500


class RateLimitError(APIError):
    """Raised when the service returns a 429 rate limit response."""

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message, status_code=429)


class NotFoundError(APIError):
    """Raised when the service returns a 404 not found response."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class ValidationError(ClientError):
    """Raised when a response is neither an image nor a usable image URL."""

    def __init__(self, message: str, errors: list | None = None):
        self.errors = errors or []
        super().__init__(message)
