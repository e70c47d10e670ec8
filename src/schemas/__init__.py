"""Schema definitions for manuscript-press."""

from .artifact import (
    ArtifactDescriptor,
    CoverImage,
    PackagedArtifact,
    PrintDocument,
    ReflowableDocument,
)
from .chapter import Chapter
from .destination import Destination
from .events import CompleteEvent, ErrorEvent, ProgressEvent, PublishingEvent
from .manuscript import Manuscript
from .metadata import Price, PublicationMetadata
from .project import (
    AssignedIdentifier,
    CostBreakdown,
    PhaseRecord,
    PublishingProject,
    PublishRequest,
    RegistrationHandle,
    SubmissionResult,
)
from .verdict import Diagnostic, ValidationVerdict

__all__ = [
    "ArtifactDescriptor",
    "AssignedIdentifier",
    "Chapter",
    "CompleteEvent",
    "CostBreakdown",
    "CoverImage",
    "Destination",
    "Diagnostic",
    "ErrorEvent",
    "Manuscript",
    "PackagedArtifact",
    "PhaseRecord",
    "Price",
    "PrintDocument",
    "ProgressEvent",
    "PublicationMetadata",
    "PublishingEvent",
    "PublishingProject",
    "PublishRequest",
    "ReflowableDocument",
    "RegistrationHandle",
    "SubmissionResult",
    "ValidationVerdict",
]
