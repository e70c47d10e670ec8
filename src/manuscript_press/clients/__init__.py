"""Network clients for external services."""

from .client import Client
from .cover_client import CoverClient
from .exceptions import (
    APIError,
    ClientError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

__all__ = [
    "Client",
    "CoverClient",
    "ClientError",
    "ConnectionError",
    "APIError",
    "RateLimitError",
    "NotFoundError",
    "ValidationError",
]
