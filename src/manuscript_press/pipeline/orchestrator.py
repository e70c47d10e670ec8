"""Publishing orchestrator for end-to-end manuscript → distribution runs.

Runs the eight publishing phases in order for one PublishRequest:

    identifier-acquisition → registration → catalog-number → packaging →
    cover → metadata-optimization → validation → destination-submission

Phases run one after another; work inside a phase runs concurrently and
the phase waits for all of it to settle. Any phase failure stops the run:
the phase is marked failed, an error event is emitted, and PublishError is
raised with the project in its terminal "error" state.
"""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable

from manuscript_press.collaborators import (
    CatalogService,
    CoverSource,
    DestinationAdapter,
    FileCoverSource,
    IdentifierSource,
    InMemoryIdentifierPool,
    LocalCatalogService,
    LocalRegistrationService,
    ManualUploadAdapter,
    MetadataOptimizer,
    PassthroughMetadataOptimizer,
    RegistrationService,
)
from manuscript_press.config import PressConfig
from manuscript_press.errors import (
    CoverEmbeddingError,
    PublishCancelledError,
    PublishError,
    ValidationFailedError,
)
from manuscript_press.packaging import EPUBPackager, PrintPackager, inspect_cover
from manuscript_press.validation import RequirementsValidator, requirements_for
from schemas.artifact import CoverImage, PrintDocument, ReflowableDocument
from schemas.destination import Destination
from schemas.events import CompleteEvent, ErrorEvent, ProgressEvent
from schemas.project import (
    PhaseRecord,
    PublishingProject,
    PublishRequest,
    SubmissionResult,
    utc_now,
)
from schemas.verdict import ValidationVerdict

from .costs import compute_costs
from .events import EventChannel, NullEventChannel
from .phases import (
    CATALOG_NUMBER,
    COVER,
    DESTINATION_SUBMISSION,
    IDENTIFIER_ACQUISITION,
    METADATA_OPTIMIZATION,
    PACKAGING,
    PUBLISHING_PHASES,
    REGISTRATION,
    VALIDATION,
    PhaseDescriptor,
)
from .resilience import CancellationToken, call_with_retry, gather_settled, run_with_deadline

logger = logging.getLogger(__name__)

Artifact = ReflowableDocument | PrintDocument | CoverImage
PhaseHandler = Callable[[PublishingProject, CancellationToken], Awaitable[None]]


class Orchestrator:
    """End-to-end publishing pipeline.

    The orchestrator holds no per-call state: each publish call creates its
    own PublishingProject and reports on its own event channel, so one
    instance can serve concurrent calls.

    Attributes:
        identifiers: Source of ISBNs
        registration: Copyright registration service
        catalog: Catalog number service
        covers: Cover source, or None to publish without generating a cover
        optimizer: Metadata optimizer
        adapter: Destination submission adapter
        epub_packager: Builds EPUB artifacts
        print_packager: Builds print PDF artifacts
        validator: Checks artifacts against destination requirements
        config: Retry policy, phase deadline and cost schedule
    """

    def __init__(
        self,
        identifiers: IdentifierSource,
        registration: RegistrationService,
        catalog: CatalogService,
        covers: CoverSource | None,
        optimizer: MetadataOptimizer,
        adapter: DestinationAdapter,
        epub_packager: EPUBPackager | None = None,
        print_packager: PrintPackager | None = None,
        validator: RequirementsValidator | None = None,
        config: PressConfig | None = None,
    ):
        self.identifiers = identifiers
        self.registration = registration
        self.catalog = catalog
        self.covers = covers
        self.optimizer = optimizer
        self.adapter = adapter
        self.epub_packager = epub_packager or EPUBPackager()
        self.print_packager = print_packager or PrintPackager()
        self.validator = validator or RequirementsValidator()
        self.config = config or PressConfig()

        self._handlers: dict[str, PhaseHandler] = {
            IDENTIFIER_ACQUISITION: self._acquire_identifiers,
            REGISTRATION: self._register_copyright,
            CATALOG_NUMBER: self._register_catalog_number,
            PACKAGING: self._package,
            COVER: self._generate_cover,
            METADATA_OPTIMIZATION: self._optimize_metadata,
            VALIDATION: self._validate,
            DESTINATION_SUBMISSION: self._submit,
        }

    @classmethod
    def with_local_collaborators(
        cls,
        identifiers: IdentifierSource,
        config: PressConfig | None = None,
        cover_path: Path | None = None,
        covers: CoverSource | None = None,
        output_dir: Path | None = None,
    ) -> "Orchestrator":
        """Build an orchestrator wired to the local collaborators.

        A cover file takes precedence over a cover source.
        """
        config = config or PressConfig()
        if cover_path is not None:
            covers = FileCoverSource(cover_path)
        return cls(
            identifiers=identifiers,
            registration=LocalRegistrationService(fee=config.costs.copyright_registration),
            catalog=LocalCatalogService(fee=config.costs.catalog_number),
            covers=covers,
            optimizer=PassthroughMetadataOptimizer(),
            adapter=ManualUploadAdapter(output_dir),
            config=config,
        )

    async def publish(
        self,
        request: PublishRequest,
        events: EventChannel | None = None,
        cancel: CancellationToken | None = None,
    ) -> PublishingProject:
        """Run every publishing phase for a request.

        Args:
            request: What to publish and where
            events: Channel receiving this call's events
            cancel: Token checked before each phase and collaborator attempt

        Returns:
            The project in its "published" state

        Raises:
            PublishError: If any phase fails; carries the failing phase name
                and the project in its "error" state
        """
        events = events or NullEventChannel()
        cancel = cancel or CancellationToken()
        project = PublishingProject(request=request)

        logger.info(
            f"Starting publishing pipeline for {request.project_id} "
            f"(project {project.id}; formats {request.formats}; "
            f"destinations {[str(d) for d in request.destinations]})"
        )

        for descriptor in PUBLISHING_PHASES:
            await self._run_phase(project, descriptor, events, cancel)

        project.costs = compute_costs(project, self.config.costs)
        project.finish("published")

        logger.info(
            f"Publishing pipeline completed for {request.project_id} "
            f"(total cost ${project.costs.total:.2f})"
        )
        await events.emit(CompleteEvent(project_id=project.id, result=project))
        return project

    async def _run_phase(
        self,
        project: PublishingProject,
        descriptor: PhaseDescriptor,
        events: EventChannel,
        cancel: CancellationToken,
    ) -> None:
        """Run one phase with progress tracking and failure conversion."""
        name, weight = descriptor
        record = PhaseRecord(
            name=name,
            weight=weight,
            status="in_progress",
            started_at=utc_now(),
        )
        project.phases.append(record)
        await events.emit(ProgressEvent(
            project_id=project.id,
            phase=name,
            progress=weight,
            message=f"Starting {name}...",
        ))

        try:
            cancel.raise_if_cancelled()
            await run_with_deadline(
                self._handlers[name](project, cancel),
                self.config.phase_timeout,
                name,
            )
        except Exception as e:
            record.status = "failed"
            record.completed_at = utc_now()
            record.message = str(e)
            project.finish("error", f"{name}: {e}")

            logger.error(f"Phase {name} failed for project {project.id}: {e}")
            await events.emit(ErrorEvent(project_id=project.id, phase=name, error=str(e)))
            raise PublishError(
                f"Publishing failed at {name}: {e}", phase=name, project=project
            ) from e

        record.status = "completed"
        record.completed_at = project.updated_at = utc_now()
        project.progress = weight

        logger.debug(f"Phase {name} completed for project {project.id}")
        await events.emit(ProgressEvent(
            project_id=project.id,
            phase=name,
            progress=weight,
            message=f"Completed {name}",
        ))

    async def _call(self, cancel: CancellationToken, func, *args, **kwargs):
        """Call a collaborator with the configured retry policy."""
        return await call_with_retry(
            func, *args, policy=self.config.retry, cancel=cancel, **kwargs
        )

    async def _acquire_identifiers(
        self, project: PublishingProject, cancel: CancellationToken
    ) -> None:
        formats = list(dict.fromkeys(project.request.formats))
        assigned = await gather_settled(*(
            self._call(cancel, self.identifiers.acquire, fmt) for fmt in formats
        ))
        project.identifiers = {identifier.format: identifier for identifier in assigned}

    async def _register_copyright(
        self, project: PublishingProject, cancel: CancellationToken
    ) -> None:
        project.registration = await self._call(
            cancel, self.registration.register, project.request.metadata
        )

    async def _register_catalog_number(
        self, project: PublishingProject, cancel: CancellationToken
    ) -> None:
        project.catalog_number = await self._call(
            cancel, self.catalog.register, project.request.metadata
        )

    async def _package(self, project: PublishingProject, cancel: CancellationToken) -> None:
        request = project.request
        builds = []

        if "ebook" in request.formats:
            builds.append(asyncio.to_thread(
                self.epub_packager.package,
                request.chapters,
                request.metadata,
            ))

        if "print" in request.formats:
            print_id = project.identifiers.get("print")
            builds.append(asyncio.to_thread(
                self.print_packager.package,
                request.chapters,
                request.metadata,
                trim_size=request.trim_size,
                include_bleed=request.include_bleed,
                color_profile=request.color_profile,
                isbn=print_id.isbn13 if print_id else None,
            ))

        for artifact in await gather_settled(*builds):
            project.artifacts[artifact.kind] = artifact
            logger.info(f"Packaged {artifact.kind} ({artifact.size} bytes)")

    async def _generate_cover(
        self, project: PublishingProject, cancel: CancellationToken
    ) -> None:
        request = project.request
        if not request.generate_cover or self.covers is None:
            logger.info("Cover generation skipped")
            return

        metadata = request.metadata
        data = await self._call(
            cancel,
            self.covers.generate,
            metadata.title,
            metadata.author,
            metadata.genre,
            request.style_preferences,
        )

        try:
            cover = await asyncio.to_thread(inspect_cover, data)
        except CoverEmbeddingError as e:
            if request.require_cover:
                raise
            logger.warning(f"Generated cover is unusable, continuing without it: {e.message}")
            return

        project.cover = cover

        if "ebook" in project.artifacts:
            # The coverless EPUB from the packaging phase is superseded
            project.artifacts["ebook"] = await asyncio.to_thread(
                self.epub_packager.package,
                request.chapters,
                metadata,
                cover=cover,
                require_cover=request.require_cover,
            )
            logger.info("Re-packaged EPUB with cover")

    async def _optimize_metadata(
        self, project: PublishingProject, cancel: CancellationToken
    ) -> None:
        project.optimized_metadata = await self._call(
            cancel, self.optimizer.optimize, project.request.metadata
        )

    async def _validate(self, project: PublishingProject, cancel: CancellationToken) -> None:
        checks = []
        unserved: list[str] = []

        for destination in project.request.destinations:
            accepted = self._accepted_artifacts(project, destination)
            if not accepted:
                unserved.append(str(destination))
                continue

            # Metadata is checked once per destination, on its primary artifact
            for index, artifact in enumerate(accepted):
                checks.append(asyncio.to_thread(
                    self.validator.validate,
                    artifact,
                    destination,
                    project.metadata if index == 0 else None,
                ))

        verdicts: list[ValidationVerdict] = await gather_settled(*checks)
        project.verdicts = verdicts

        if unserved:
            raise ValidationFailedError(
                f"No produced artifact is accepted by: {', '.join(unserved)}",
                verdicts,
            )

        failing = [v for v in verdicts if not v.valid]
        if failing:
            raise ValidationFailedError(
                "Validation failed: " + "; ".join(v.summary() for v in failing),
                failing,
            )

    async def _submit(self, project: PublishingProject, cancel: CancellationToken) -> None:
        submissions = []
        for destination in project.request.destinations:
            for artifact in self._accepted_artifacts(project, destination):
                submissions.append(
                    self._submit_one(project, artifact, destination, cancel)
                )
        project.submissions = await gather_settled(*submissions)

        failed = [s for s in project.submissions if s.status == "error"]
        if failed:
            logger.warning(f"{len(failed)} of {len(project.submissions)} submissions failed")

    async def _submit_one(
        self,
        project: PublishingProject,
        artifact: Artifact,
        destination: Destination,
        cancel: CancellationToken,
    ) -> SubmissionResult:
        """Submit one artifact, turning failures into an error result."""
        try:
            return await self._call(
                cancel, self.adapter.submit, artifact, project.metadata, destination
            )
        except PublishCancelledError:
            raise
        except Exception as e:
            logger.error(f"Submission of {artifact.kind} to {destination} failed: {e}")
            return SubmissionResult(
                destination=destination,
                artifact_kind=artifact.kind,
                status="error",
                error=str(e),
            )

    def _accepted_artifacts(
        self, project: PublishingProject, destination: Destination
    ) -> list[Artifact]:
        """Artifacts a destination takes, primary format first."""
        req = requirements_for(destination, self.validator.requirements)
        artifacts: list[Artifact] = [
            project.artifacts[kind] for kind in ("ebook", "print") if kind in project.artifacts
        ]
        if project.cover is not None:
            artifacts.append(project.cover)
        return [a for a in artifacts if a.kind in req.accepted_kinds]
