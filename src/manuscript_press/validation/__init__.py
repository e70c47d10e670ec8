"""Requirements validation of packaged artifacts per destination."""

from .requirements import (
    DEFAULT_REQUIREMENTS,
    DESTINATION_REQUIREMENTS,
    DestinationRequirements,
    requirements_for,
)
from .validator import RequirementsValidator

__all__ = [
    "RequirementsValidator",
    "DestinationRequirements",
    "DESTINATION_REQUIREMENTS",
    "DEFAULT_REQUIREMENTS",
    "requirements_for",
]
