"""Pipeline event schemas.

A publish call reports progress through three event shapes. Consumers
receive them in emission order on the channel passed to the call.
"""

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from .project import PublishingProject, utc_now


class ProgressEvent(BaseModel):
    """A phase started or completed; progress is a percentage (0-100)."""

    type: Literal["progress"] = "progress"
    project_id: str
    phase: str
    progress: int = Field(ge=0, le=100)
    message: str
    timestamp: datetime = Field(default_factory=utc_now)


class ErrorEvent(BaseModel):
    """A phase failed and the pipeline stopped."""

    type: Literal["error"] = "error"
    project_id: str
    phase: str
    error: str
    timestamp: datetime = Field(default_factory=utc_now)


class CompleteEvent(BaseModel):
    """The pipeline finished; result is the terminal project."""

    type: Literal["complete"] = "complete"
    project_id: str
    result: PublishingProject
    timestamp: datetime = Field(default_factory=utc_now)


PublishingEvent = Annotated[
    Union[ProgressEvent, ErrorEvent, CompleteEvent],
    Field(discriminator="type"),
]
