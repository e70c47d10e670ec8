"""Base class and shared checks for packagers.

Packagers turn an ordered list of chapters plus metadata into a single
immutable artifact. There are two:

- EPUBPackager: builds a reflowable EPUB container
- PrintPackager: builds a paginated, print-ready PDF

Packagers are stateless apart from their configuration and never call out
to external services, so one instance can serve concurrent publish calls.
"""

import re
from abc import ABC, abstractmethod
from pathlib import Path

from manuscript_press.errors import StructuralError
from schemas.chapter import Chapter
from schemas.metadata import PublicationMetadata

RESOURCES_DIR = Path(__file__).parent.parent / "resources"
TEMPLATES_DIR = RESOURCES_DIR / "templates"
STYLESHEETS_DIR = RESOURCES_DIR / "stylesheets"

# Characters XML 1.0 does not allow, even escaped
XML_ILLEGAL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def _check_text(value: str, where: str) -> None:
    match = XML_ILLEGAL_CHARS.search(value)
    if match:
        raise StructuralError(
            f"{where} contains a character not allowed in XML: "
            f"U+{ord(match.group()):04X} at offset {match.start()}"
        )


def check_chapters(
    chapters: list[Chapter], metadata: PublicationMetadata | None = None
) -> list[Chapter]:
    """Check chapters (and metadata) and return the chapters in order.

    Positions must be exactly 1..n. Titles, bodies and metadata text must
    not contain control characters XML cannot represent; nothing is
    silently stripped.

    Args:
        chapters: Chapters in any order
        metadata: Publication metadata whose text fields are also checked

    Returns:
        The chapters sorted by position

    Raises:
        StructuralError: If the list is empty, positions repeat or skip, or
            any text contains an XML-illegal character
    """
    if not chapters:
        raise StructuralError("Cannot package an empty chapter list")

    ordered = sorted(chapters, key=lambda c: c.position)
    positions = [c.position for c in ordered]

    duplicates = sorted({p for p in positions if positions.count(p) > 1})
    if duplicates:
        raise StructuralError(f"Duplicate chapter positions: {duplicates}")

    expected = list(range(1, len(ordered) + 1))
    if positions != expected:
        missing = sorted(set(expected) - set(positions))
        raise StructuralError(
            f"Chapter positions must run 1..{len(ordered)} without gaps; "
            f"got {positions} (missing {missing})"
        )

    for chapter in ordered:
        _check_text(chapter.title, f"Title of chapter {chapter.position}")
        _check_text(chapter.body, f"Body of chapter {chapter.position}")

    if metadata is not None:
        for name, value in metadata.model_dump().items():
            values = value if isinstance(value, list) else [value]
            for item in values:
                if isinstance(item, str):
                    _check_text(item, f"Metadata field {name}")

    return ordered


class Packager(ABC):
    """Abstract base class for packagers."""

    @abstractmethod
    def package(self, chapters: list[Chapter], metadata: PublicationMetadata, **options):
        """Build an artifact from chapters and metadata.

        Args:
            chapters: Chapters to package; positions must be 1..n
            metadata: Publication metadata
            **options: Packager-specific options

        Returns:
            The packaged artifact
        """
        pass
