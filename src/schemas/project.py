"""Publishing project schemas.

A PublishingProject is the aggregate root of one publish call. It is created
when the request is accepted, owned by the orchestrator while the pipeline
runs, and frozen in a terminal state ("published" or "error") afterwards.
A failed project is never resumed; retrying means publishing again, which
creates a fresh project.
"""

import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from .artifact import CoverImage, PrintDocument, ReflowableDocument
from .chapter import Chapter
from .destination import Destination
from .metadata import PublicationMetadata
from .verdict import ValidationVerdict

PublishingFormat = Literal["ebook", "print"]
PhaseStatus = Literal["pending", "in_progress", "completed", "failed"]
ProjectStatus = Literal["in_progress", "published", "error"]
TERMINAL_STATUSES = ("published", "error")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PublishRequest(BaseModel):
    """Everything a caller supplies to start a publish call.

    Attributes:
        project_id: Caller's identifier for the manuscript
        chapters: Chapters in any order; positions must be 1..n
        metadata: Publication metadata
        formats: Output formats to produce
        destinations: Destinations to submit to
        trim_size: Trim size of the print edition
        include_bleed: Whether the print edition is set up with bleed
        color_profile: Colour profile of the print edition
        generate_cover: Whether to run the cover source
        require_cover: Fail packaging if the cover cannot be embedded
        style_preferences: Free-text style hints for the cover source
    """

    project_id: str
    chapters: list[Chapter]
    metadata: PublicationMetadata
    formats: list[PublishingFormat] = ["ebook"]
    destinations: list[Destination] = []
    trim_size: str = "6x9"
    include_bleed: bool = True
    color_profile: Literal["RGB", "CMYK"] = "RGB"
    generate_cover: bool = True
    require_cover: bool = False
    style_preferences: str | None = None


class PhaseRecord(BaseModel):
    """Progress record of one pipeline phase.

    Attributes:
        name: Phase name (e.g. "packaging")
        weight: Cumulative progress percentage reached when the phase completes
        status: pending, in_progress, completed or failed
        started_at: When the phase started
        completed_at: When the phase completed or failed
        message: Failure message, if the phase failed
    """

    name: str
    weight: int
    status: PhaseStatus = "pending"
    started_at: datetime | None = None
    completed_at: datetime | None = None
    message: str | None = None


class AssignedIdentifier(BaseModel):
    """An ISBN claimed from the identifier source for one format."""

    isbn13: str
    isbn10: str = ""
    format: PublishingFormat


class RegistrationHandle(BaseModel):
    """Receipt for a prepared (not yet approved) registration or filing.

    Attributes:
        service: "copyright" or "catalog"
        reference: Filing reference, or the preassigned catalog number
        status: Filing status; local services only ever prepare filings
        form: The prepared form data
        instructions: Steps to complete the filing by hand
        cost: Filing fee in US dollars
    """

    service: str
    reference: str
    status: str = "prepared"
    form: dict = {}
    instructions: list[str] = []
    cost: float = 0.0


class SubmissionResult(BaseModel):
    """Outcome of submitting one artifact to one destination.

    Attributes:
        destination: Destination submitted to
        artifact_kind: Kind of artifact submitted
        status: "ready_for_upload", "submitted" or "error"
        submission_id: Identifier of the prepared submission
        instructions: Manual upload instructions, if any
        upload_url: Where to upload, for manual destinations
        error: Error message when status is "error"
    """

    destination: Destination
    artifact_kind: str
    status: Literal["ready_for_upload", "submitted", "error"]
    submission_id: str = ""
    instructions: str | None = None
    upload_url: str | None = None
    error: str | None = None


class CostBreakdown(BaseModel):
    """Fixed-schedule costs of a publish call, in US dollars."""

    identifier_costs: float = 0.0
    registration_costs: float = 0.0
    catalog_costs: float = 0.0
    cover_costs: float = 0.0
    packaging_costs: float = 0.0
    submission_costs: float = 0.0

    @property
    def total(self) -> float:
        return round(
            self.identifier_costs
            + self.registration_costs
            + self.catalog_costs
            + self.cover_costs
            + self.packaging_costs
            + self.submission_costs,
            2,
        )


class PublishingProject(BaseModel):
    """Aggregate root of one publish call.

    Attributes:
        id: Unique identifier of this publish attempt
        request: The request that started it
        phases: Phase records in execution order
        progress: Weight of the most recently completed phase
        identifiers: Claimed ISBNs keyed by format
        registration: Copyright filing handle
        catalog_number: Catalog number application handle
        artifacts: Current packaged artifacts keyed by kind
        cover: The generated cover image, if any
        optimized_metadata: Metadata after the optimization phase
        verdicts: Validation verdicts, one per (artifact, destination)
        submissions: Per-destination submission results
        costs: Cost breakdown, set when the pipeline completes
        status: in_progress, published or error
        error: Failure message when status is "error"

    Once finish() has set a terminal status, assigning any field raises
    ValueError.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    request: PublishRequest
    phases: list[PhaseRecord] = []
    progress: int = 0
    identifiers: dict[str, AssignedIdentifier] = {}
    registration: RegistrationHandle | None = None
    catalog_number: RegistrationHandle | None = None
    artifacts: dict[str, ReflowableDocument | PrintDocument] = {}
    cover: CoverImage | None = None
    optimized_metadata: PublicationMetadata | None = None
    verdicts: list[ValidationVerdict] = []
    submissions: list[SubmissionResult] = []
    costs: CostBreakdown | None = None
    status: ProjectStatus = "in_progress"
    error: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    published_at: datetime | None = None

    def __setattr__(self, name, value):
        if self.status in TERMINAL_STATUSES:
            raise ValueError(
                f"Project {self.id} is {self.status}; its fields can no longer be assigned"
            )
        super().__setattr__(name, value)

    def finish(self, status: ProjectStatus, error: str | None = None) -> None:
        """Move the project into a terminal status.

        Every field is written before the status, so the assignment guard
        only takes effect once the project is complete.
        """
        if status not in TERMINAL_STATUSES:
            raise ValueError(f"'{status}' is not a terminal status")
        now = utc_now()
        self.error = error
        self.updated_at = now
        if status == "published":
            self.published_at = now
        self.status = status

    def phase(self, name: str) -> PhaseRecord | None:
        """Return the record of phase *name*, if it has started."""
        for record in self.phases:
            if record.name == name:
                return record
        return None

    @property
    def metadata(self) -> PublicationMetadata:
        """The most refined metadata available so far."""
        return self.optimized_metadata or self.request.metadata
