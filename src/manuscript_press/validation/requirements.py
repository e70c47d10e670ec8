"""Per-destination acceptance requirements.

Each Destination maps to one frozen DestinationRequirements record. The
validator never branches on the destination itself, only on the fields of
its record, so adding a destination means adding a row here.
"""

import logging

from pydantic import BaseModel

from schemas.destination import Destination
from schemas.metadata import MAX_CATEGORIES, MAX_KEYWORDS

logger = logging.getLogger(__name__)

MB = 1024 * 1024


class DestinationRequirements(BaseModel):
    """Acceptance rules for one destination.

    Attributes:
        accepted_kinds: Artifact kinds the destination takes
        max_ebook_bytes: Largest accepted EPUB
        max_print_bytes: Largest accepted print PDF
        min_pages: Fewest pages accepted in a print PDF
        color_profile: Expected colour profile for print PDFs and covers,
            or None when any profile is accepted
        color_profile_blocking: Whether a wrong profile is an error rather
            than a warning
        bleed_required: Whether print PDFs should include bleed
        cover_required: Whether an EPUB must embed a cover
        min_cover_width: Minimum cover width in pixels
        min_cover_height: Minimum cover height in pixels
        min_dpi: Minimum cover resolution
        min_dpi_blocking: Whether a low resolution is an error rather than a
            warning
        allowed_encodings: Accepted cover image encodings
        max_categories: Hard category limit
        max_keywords: Hard keyword limit
    """

    accepted_kinds: frozenset[str]
    max_ebook_bytes: int = 650 * MB
    max_print_bytes: int = 650 * MB
    min_pages: int = 24
    color_profile: str | None = None
    color_profile_blocking: bool = False
    bleed_required: bool = False
    cover_required: bool = False
    min_cover_width: int = 1600
    min_cover_height: int = 2400
    min_dpi: int = 72
    min_dpi_blocking: bool = False
    allowed_encodings: frozenset[str] = frozenset({"jpg", "png", "tiff"})
    max_categories: int = MAX_CATEGORIES
    max_keywords: int = MAX_KEYWORDS

    model_config = {"frozen": True}


DEFAULT_REQUIREMENTS = DestinationRequirements(
    accepted_kinds=frozenset({"ebook", "print", "cover"}),
)

DESTINATION_REQUIREMENTS: dict[Destination, DestinationRequirements] = {
    Destination.AMAZON_KDP: DestinationRequirements(
        accepted_kinds=frozenset({"ebook", "print", "cover"}),
        max_ebook_bytes=650 * MB,
        max_print_bytes=650 * MB,
        min_pages=24,
        color_profile="RGB",
        cover_required=True,
        min_cover_width=1600,
        min_cover_height=2560,
        allowed_encodings=frozenset({"jpg", "tiff"}),
    ),
    Destination.INGRAM_SPARK: DestinationRequirements(
        accepted_kinds=frozenset({"ebook", "print", "cover"}),
        max_ebook_bytes=650 * MB,
        max_print_bytes=500 * MB,
        min_pages=24,
        color_profile="CMYK",
        color_profile_blocking=True,
        bleed_required=True,
        cover_required=True,
        min_cover_width=2550,
        min_cover_height=3300,
        min_dpi=300,
        min_dpi_blocking=True,
        allowed_encodings=frozenset({"jpg", "png", "tiff"}),
    ),
    Destination.DRAFT2DIGITAL: DestinationRequirements(
        accepted_kinds=frozenset({"ebook", "cover"}),
        max_ebook_bytes=400 * MB,
        cover_required=True,
        min_cover_width=1600,
        min_cover_height=2400,
        allowed_encodings=frozenset({"jpg", "png"}),
        max_categories=2,
    ),
    Destination.KOBO: DestinationRequirements(
        accepted_kinds=frozenset({"ebook", "cover"}),
        max_ebook_bytes=200 * MB,
        min_cover_width=1400,
        min_cover_height=2100,
        allowed_encodings=frozenset({"jpg", "png"}),
    ),
    Destination.APPLE_BOOKS: DestinationRequirements(
        accepted_kinds=frozenset({"ebook", "cover"}),
        max_ebook_bytes=2048 * MB,
        cover_required=True,
        min_cover_width=1400,
        min_cover_height=1873,
        allowed_encodings=frozenset({"jpg", "png"}),
        max_keywords=5,
    ),
    Destination.GOOGLE_PLAY_BOOKS: DestinationRequirements(
        accepted_kinds=frozenset({"ebook", "cover"}),
        max_ebook_bytes=100 * MB,
        min_cover_width=640,
        min_cover_height=1000,
        allowed_encodings=frozenset({"jpg", "png", "tiff"}),
    ),
    Destination.BARNES_NOBLE: DestinationRequirements(
        accepted_kinds=frozenset({"ebook", "print", "cover"}),
        max_ebook_bytes=20 * MB,
        max_print_bytes=650 * MB,
        min_pages=18,
        color_profile="RGB",
        cover_required=True,
        min_cover_width=1400,
        min_cover_height=2240,
        allowed_encodings=frozenset({"jpg", "png"}),
    ),
}


def requirements_for(
    destination: Destination | str,
    table: dict[Destination, DestinationRequirements] | None = None,
) -> DestinationRequirements:
    """Look up the requirements for a destination.

    Unknown destinations fall back to DEFAULT_REQUIREMENTS.

    Args:
        destination: A Destination or its string value
        table: Requirements table to consult (default: DESTINATION_REQUIREMENTS)

    Returns:
        The destination's requirements record
    """
    table = DESTINATION_REQUIREMENTS if table is None else table
    try:
        return table[Destination(destination)]
    except (ValueError, KeyError):
        logger.warning(
            f"No requirements for destination '{destination}', using defaults"
        )
        return DEFAULT_REQUIREMENTS
