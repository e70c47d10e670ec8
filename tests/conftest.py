"""Pytest fixtures for manuscript-press tests."""

import json
from datetime import date

import fitz  # PyMuPDF
import pytest

from manuscript_press.validation import DestinationRequirements
from schemas.chapter import Chapter
from schemas.destination import Destination
from schemas.metadata import Price, PublicationMetadata

LONG_DESCRIPTION = (
    "A lighthouse keeper on a remote island finds a logbook that describes "
    "storms before they arrive. As the entries grow darker she must decide "
    "whether to warn the mainland or keep the secret that has kept her safe."
)


def make_chapters(count: int) -> list[Chapter]:
    return [
        Chapter(
            position=i,
            title=f"Chapter {i}",
            body=f"First paragraph of chapter {i}.\n\nSecond paragraph of chapter {i}.",
        )
        for i in range(1, count + 1)
    ]


def make_png(width: int, height: int, colorspace=None, dpi: int | None = None) -> bytes:
    """Render a blank PNG of the given size."""
    pix = fitz.Pixmap(colorspace or fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.clear_with(180)
    if dpi:
        pix.set_dpi(dpi, dpi)
    return pix.tobytes("png")


@pytest.fixture
def chapters():
    """Three chapters in order."""
    return make_chapters(3)


@pytest.fixture
def metadata():
    """Complete metadata that passes every metadata rule."""
    return PublicationMetadata(
        title="The Keeper's Log",
        subtitle="A Novel",
        author="Ada Marlowe",
        language="en",
        description=LONG_DESCRIPTION,
        categories=["FIC019000", "FIC031010", "FIC027000"],
        keywords=["lighthouse", "island", "storm", "secret", "logbook", "sea", "mystery"],
        publication_date=date(2026, 3, 1),
        price=Price(usd=14.99, ebook_usd=4.99),
        publisher="Harbour Light Press",
    )


@pytest.fixture
def cover_png():
    """A portrait PNG cover, 400x640."""
    return make_png(400, 640)


@pytest.fixture
def lenient_requirements():
    """Requirements that packaged test artifacts and covers pass."""
    lenient = DestinationRequirements(
        accepted_kinds=frozenset({"ebook", "print", "cover"}),
        min_pages=1,
        min_cover_width=100,
        min_cover_height=100,
        min_dpi=1,
        allowed_encodings=frozenset({"png", "jpg"}),
    )
    ebook_only = lenient.model_copy(update={"accepted_kinds": frozenset({"ebook", "cover"})})
    return {
        Destination.AMAZON_KDP: lenient,
        Destination.KOBO: ebook_only,
        Destination.INGRAM_SPARK: lenient.model_copy(update={"cover_required": True}),
    }


@pytest.fixture
def manuscript_file(tmp_path, metadata, chapters):
    """A manuscript JSON file on disk."""
    path = tmp_path / "manuscript.json"
    path.write_text(json.dumps({
        "project_id": "keepers-log",
        "metadata": json.loads(metadata.model_dump_json()),
        "chapters": [c.model_dump() for c in chapters],
    }))
    return path


@pytest.fixture
def chapter_factory():
    """Build n chapters in order."""
    return make_chapters


@pytest.fixture
def png_factory():
    """Render blank PNGs of a given size."""
    return make_png
