"""Requirements Validator for checking artifacts against destinations.

The validator is a pure function of (artifact, destination, metadata): it
reads the destination's DestinationRequirements record and returns a
ValidationVerdict. It never raises for a failing artifact; whether a
failing verdict stops anything is the caller's decision.
"""

import logging

from schemas.artifact import CoverImage, PrintDocument, ReflowableDocument
from schemas.destination import Destination
from schemas.metadata import MAX_CATEGORIES, MAX_KEYWORDS, PublicationMetadata
from schemas.verdict import Diagnostic, ValidationVerdict

from .requirements import DestinationRequirements, requirements_for

logger = logging.getLogger(__name__)

MIN_DESCRIPTION_LENGTH = 150
MAX_DESCRIPTION_LENGTH = 4000
MIN_ASPECT_RATIO = 0.6
MAX_ASPECT_RATIO = 0.7


def _mb(size: int) -> str:
    return f"{size / (1024 * 1024):.0f} MB"


class RequirementsValidator:
    """Validate packaged artifacts against per-destination requirements.

    Attributes:
        requirements: Requirements table keyed by Destination; defaults to
            DESTINATION_REQUIREMENTS
    """

    def __init__(self, requirements: dict[Destination, DestinationRequirements] | None = None):
        self.requirements = requirements

    def validate(
        self,
        artifact: ReflowableDocument | PrintDocument | CoverImage,
        destination: Destination | str,
        metadata: PublicationMetadata | None = None,
    ) -> ValidationVerdict:
        """Validate one artifact for one destination.

        Args:
            artifact: The packaged artifact
            destination: Destination to check against; unknown values use
                the default requirements
            metadata: Optional metadata to check for completeness

        Returns:
            ValidationVerdict with diagnostics in rule order
        """
        req = requirements_for(destination, self.requirements)
        destination = str(destination)

        if artifact.kind not in req.accepted_kinds:
            diagnostics = [Diagnostic(
                code="UNSUPPORTED_FORMAT",
                message=f"{destination} does not accept {artifact.kind} artifacts",
                severity="critical",
                suggestion=f"Submit one of: {', '.join(sorted(req.accepted_kinds))}",
            )]
        elif isinstance(artifact, ReflowableDocument):
            diagnostics = self._check_epub(artifact, req)
        elif isinstance(artifact, PrintDocument):
            diagnostics = self._check_pdf(artifact, req, destination)
        else:
            diagnostics = self._check_cover(artifact, req, destination)

        if metadata is not None:
            diagnostics.extend(self.validate_metadata(metadata, destination))

        verdict = ValidationVerdict(
            destination=destination,
            artifact_kind=artifact.kind,
            diagnostics=diagnostics,
        )
        log = logger.info if verdict.valid else logger.warning
        log(f"Validated {verdict.summary()}")
        return verdict

    def validate_metadata(
        self,
        metadata: PublicationMetadata,
        destination: Destination | str | None = None,
    ) -> list[Diagnostic]:
        """Check metadata completeness.

        Counts over the soft limits are warnings. When a destination is given
        and its hard limits are stricter, exceeding them is an error. Nothing
        is truncated.
        """
        diagnostics: list[Diagnostic] = []

        if not metadata.title or not metadata.title.strip():
            diagnostics.append(Diagnostic(
                code="MISSING_TITLE",
                message="Book title is required",
                severity="critical",
                suggestion="Add book title to metadata",
            ))

        if not metadata.author or not metadata.author.strip():
            diagnostics.append(Diagnostic(
                code="MISSING_AUTHOR",
                message="Author name is required",
                severity="critical",
                suggestion="Add author name to metadata",
            ))

        description = metadata.description or ""
        if len(description) < MIN_DESCRIPTION_LENGTH:
            diagnostics.append(Diagnostic(
                code="SHORT_DESCRIPTION",
                message=f"Book description should be at least {MIN_DESCRIPTION_LENGTH} characters",
                severity="warning",
                impact="high",
                suggestion="Expand description for better discoverability",
            ))
        elif len(description) > MAX_DESCRIPTION_LENGTH:
            diagnostics.append(Diagnostic(
                code="LONG_DESCRIPTION",
                message=f"Description exceeds {MAX_DESCRIPTION_LENGTH} characters",
                severity="warning",
                impact="medium",
                suggestion=f"Shorten description to {MAX_DESCRIPTION_LENGTH} characters or less",
            ))

        categories = len(metadata.categories)
        if categories == 0:
            diagnostics.append(Diagnostic(
                code="NO_CATEGORIES",
                message="No subject categories assigned",
                severity="warning",
                impact="high",
                suggestion=f"Add up to {MAX_CATEGORIES} categories for better categorization",
            ))
        elif categories > MAX_CATEGORIES:
            diagnostics.append(Diagnostic(
                code="TOO_MANY_CATEGORIES",
                message=f"{categories} categories assigned; most destinations use {MAX_CATEGORIES}",
                severity="warning",
                impact="medium",
                suggestion="Keep the most specific categories",
            ))

        keywords = len(metadata.keywords)
        if keywords < MAX_KEYWORDS:
            diagnostics.append(Diagnostic(
                code="FEW_KEYWORDS",
                message=f"Fewer than {MAX_KEYWORDS} keywords",
                severity="warning",
                impact="medium",
                suggestion=f"Add more relevant keywords (up to {MAX_KEYWORDS})",
            ))
        elif keywords > MAX_KEYWORDS:
            diagnostics.append(Diagnostic(
                code="TOO_MANY_KEYWORDS",
                message=f"{keywords} keywords assigned; most destinations use {MAX_KEYWORDS}",
                severity="warning",
                impact="medium",
                suggestion="Keep the most relevant keywords",
            ))

        if destination is not None:
            req = requirements_for(destination, self.requirements)
            if req.max_categories < MAX_CATEGORIES and categories > req.max_categories:
                diagnostics.append(Diagnostic(
                    code="CATEGORY_LIMIT_EXCEEDED",
                    message=f"{destination} accepts at most {req.max_categories} categories, got {categories}",
                    severity="error",
                    suggestion=f"Choose {req.max_categories} categories for {destination}",
                ))
            if req.max_keywords < MAX_KEYWORDS and keywords > req.max_keywords:
                diagnostics.append(Diagnostic(
                    code="KEYWORD_LIMIT_EXCEEDED",
                    message=f"{destination} accepts at most {req.max_keywords} keywords, got {keywords}",
                    severity="error",
                    suggestion=f"Choose {req.max_keywords} keywords for {destination}",
                ))

        return diagnostics

    def _check_epub(
        self, epub: ReflowableDocument, req: DestinationRequirements
    ) -> list[Diagnostic]:
        diagnostics = []

        if epub.size > req.max_ebook_bytes:
            diagnostics.append(Diagnostic(
                code="EPUB_TOO_LARGE",
                message=f"EPUB file exceeds {_mb(req.max_ebook_bytes)} limit",
                severity="critical",
                suggestion="Reduce image sizes or split into multiple volumes",
            ))

        if epub.format_version == "epub2":
            diagnostics.append(Diagnostic(
                code="EPUB_OLD_VERSION",
                message="EPUB2 is deprecated, EPUB3 recommended",
                severity="warning",
                impact="medium",
                suggestion="Convert to EPUB3 for better compatibility",
            ))

        if req.cover_required and not epub.has_cover:
            diagnostics.append(Diagnostic(
                code="MISSING_COVER",
                message="EPUB does not contain a cover image",
                severity="critical",
                suggestion="Add cover image to EPUB package",
            ))

        if epub.toc_depth == 0:
            diagnostics.append(Diagnostic(
                code="NO_TOC",
                message="EPUB does not have a table of contents",
                severity="warning",
                impact="high",
                suggestion="Add navigation document for better user experience",
            ))

        return diagnostics

    def _check_pdf(
        self, pdf: PrintDocument, req: DestinationRequirements, destination: str
    ) -> list[Diagnostic]:
        diagnostics = []

        if pdf.size > req.max_print_bytes:
            diagnostics.append(Diagnostic(
                code="PDF_TOO_LARGE",
                message=f"PDF exceeds {_mb(req.max_print_bytes)} limit for {destination}",
                severity="critical",
                suggestion="Reduce image quality or resolution",
            ))

        if pdf.page_count < req.min_pages:
            diagnostics.append(Diagnostic(
                code="TOO_FEW_PAGES",
                message=f"PDF has {pdf.page_count} pages, minimum {req.min_pages} required",
                severity="error",
                suggestion="Add more content or adjust layout",
            ))

        if req.color_profile and pdf.color_profile != req.color_profile:
            diagnostics.append(self._color_diagnostic(
                "WRONG_COLOR_PROFILE",
                f"{destination} expects a {req.color_profile} PDF, got {pdf.color_profile}",
                f"Convert PDF to the {req.color_profile} color space",
                req,
            ))

        if req.bleed_required and not pdf.bleed:
            diagnostics.append(Diagnostic(
                code="NO_BLEED",
                message='PDF does not include bleed (0.125" recommended)',
                severity="warning",
                impact="high",
                suggestion="Add bleed to prevent white edges in print",
            ))

        return diagnostics

    def _check_cover(
        self, cover: CoverImage, req: DestinationRequirements, destination: str
    ) -> list[Diagnostic]:
        diagnostics = []

        if cover.width < req.min_cover_width or cover.height < req.min_cover_height:
            diagnostics.append(Diagnostic(
                code="COVER_TOO_SMALL",
                message=(
                    f"Cover dimensions {cover.width}x{cover.height} below minimum "
                    f"{req.min_cover_width}x{req.min_cover_height}"
                ),
                severity="critical",
                suggestion=(
                    f"Resize cover to at least {req.min_cover_width}x{req.min_cover_height} pixels"
                ),
            ))

        aspect_ratio = cover.width / cover.height if cover.height else 0.0
        if not MIN_ASPECT_RATIO <= aspect_ratio <= MAX_ASPECT_RATIO:
            diagnostics.append(Diagnostic(
                code="UNUSUAL_ASPECT_RATIO",
                message=f"Cover aspect ratio {aspect_ratio:.2f} is unusual for books",
                severity="warning",
                impact="low",
                suggestion="Standard book covers are ~0.625 aspect ratio (e.g. 1600x2560)",
            ))

        if cover.dpi < req.min_dpi:
            if req.min_dpi_blocking:
                severity, impact = "error", "medium"
            else:
                severity, impact = "warning", "high"
            diagnostics.append(Diagnostic(
                code="LOW_DPI",
                message=f"Cover DPI {cover.dpi} is below {req.min_dpi} DPI",
                severity=severity,
                impact=impact,
                suggestion=f"Regenerate cover at {req.min_dpi} DPI or higher",
            ))

        if cover.encoding not in req.allowed_encodings:
            diagnostics.append(Diagnostic(
                code="INVALID_FORMAT",
                message=f"Cover format {cover.encoding} not accepted by {destination}",
                severity="critical",
                suggestion=f"Convert to one of: {', '.join(sorted(req.allowed_encodings))}",
            ))

        if req.color_profile and cover.color_mode != req.color_profile:
            diagnostics.append(self._color_diagnostic(
                "WRONG_COLOR_MODE",
                f"{destination} expects a {req.color_profile} cover, got {cover.color_mode}",
                f"Convert cover to the {req.color_profile} color space",
                req,
            ))

        return diagnostics

    def _color_diagnostic(
        self, code: str, message: str, suggestion: str, req: DestinationRequirements
    ) -> Diagnostic:
        if req.color_profile_blocking:
            return Diagnostic(code=code, message=message, severity="error", suggestion=suggestion)
        return Diagnostic(
            code=code,
            message=message,
            severity="warning",
            impact="medium",
            suggestion=suggestion,
        )
