"""Press configuration.

Configuration is a pydantic model with defaults for every field, so an
empty JSON object (or no file at all) is a valid configuration:

    {
        "costs": {"isbn_single": 125, "copyright_registration": 65},
        "retry": {"attempts": 3, "backoff_base": 0.5},
        "phase_timeout": 300,
        "cover_service": {"base_url": "https://covers.example.org", "timeout": 60}
    }
"""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class CostSchedule(BaseModel):
    """Fixed costs in US dollars."""

    isbn_single: float = 125.0
    isbn_10pack: float = 295.0
    isbn_100pack: float = 1500.0
    copyright_registration: float = 65.0
    catalog_number: float = 0.0
    cover_generation: float = 0.40


class RetryPolicy(BaseModel):
    """Bounded retry with exponential backoff and jitter.

    The delay before retry attempt n (1-based) is
    ``min(backoff_base * 2 ** (n - 1), backoff_cap) * uniform(jitter_min, jitter_max)``.
    """

    attempts: int = Field(default=3, ge=1)
    backoff_base: float = Field(default=0.5, ge=0)
    backoff_cap: float = Field(default=8.0, ge=0)
    jitter_min: float = 0.8
    jitter_max: float = 1.2


class CoverSettings(BaseModel):
    """Default cover geometry for the HTTP cover service.

    Keys given in cover_service take precedence.
    """

    width: int = 1600
    height: int = 2560
    dpi: int = 300


class PressConfig(BaseModel):
    """Top-level configuration of the publishing pipeline.

    Attributes:
        costs: Cost schedule used for the project's cost breakdown
        retry: Retry policy for collaborator calls
        phase_timeout: Deadline for each phase in seconds
        cover: Cover geometry settings
        cover_service: Client config dict for an HTTP cover service, or
            None to use a local cover file
    """

    costs: CostSchedule = Field(default_factory=CostSchedule)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    phase_timeout: float = Field(default=300.0, gt=0)
    cover: CoverSettings = Field(default_factory=CoverSettings)
    cover_service: dict | None = None

    @classmethod
    def from_file(cls, path: Path | None) -> "PressConfig":
        """Load configuration from a JSON file, or defaults if path is None."""
        if path is None:
            return cls()
        logger.debug(f"Loading configuration from {path}")
        return cls.model_validate(json.loads(Path(path).read_text()))
