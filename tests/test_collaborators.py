"""Tests for the local collaborator implementations."""

import asyncio
import json

import pytest

from manuscript_press.collaborators import (
    FileCoverSource,
    InMemoryIdentifierPool,
    LocalCatalogService,
    LocalRegistrationService,
    ManualUploadAdapter,
    PassthroughMetadataOptimizer,
    PoolEntry,
    is_valid_isbn13,
    isbn13_check_digit,
    isbn13_to_isbn10,
    placeholder_isbns,
)
from manuscript_press.errors import OutOfInventoryError
from manuscript_press.packaging import EPUBPackager, inspect_cover
from schemas.destination import Destination


class TestISBNHelpers:
    """Tests for ISBN arithmetic."""

    def test_check_digit(self):
        """The ISBN-13 check digit is computed from the first twelve digits."""
        assert isbn13_check_digit("978030640615") == "7"

    def test_check_digit_rejects_bad_input(self):
        """Anything but twelve digits is rejected."""
        with pytest.raises(ValueError):
            isbn13_check_digit("97803064061")

    def test_is_valid(self):
        """Valid ISBNs pass with or without hyphens."""
        assert is_valid_isbn13("9780306406157")
        assert is_valid_isbn13("978-0-306-40615-7")
        assert not is_valid_isbn13("9780306406158")
        assert not is_valid_isbn13("not-an-isbn")

    def test_isbn10_conversion(self):
        """978 ISBNs convert to ISBN-10 and 979 ISBNs do not."""
        assert isbn13_to_isbn10("9780306406157") == "0306406152"
        assert isbn13_to_isbn10("9791234567896") == ""

    def test_placeholder_isbns_are_valid(self):
        """Placeholder ISBNs pass the checksum and are reproducible with a seed."""
        isbns = placeholder_isbns(5, seed=42)

        assert all(is_valid_isbn13(isbn) for isbn in isbns)
        assert placeholder_isbns(5, seed=42) == isbns


class TestInMemoryIdentifierPool:
    """Tests for the ISBN pool."""

    @pytest.mark.asyncio
    async def test_acquire_removes_from_pool(self):
        """A claimed ISBN is no longer available."""
        pool = InMemoryIdentifierPool(["9780306406157"])

        identifier = await pool.acquire("ebook")

        assert identifier.isbn13 == "9780306406157"
        assert identifier.isbn10 == "0306406152"
        assert identifier.format == "ebook"
        assert pool.available == 0

    @pytest.mark.asyncio
    async def test_empty_pool_raises(self):
        """Claiming from an empty pool raises OutOfInventoryError."""
        pool = InMemoryIdentifierPool([])

        with pytest.raises(OutOfInventoryError, match="purchase more ISBNs"):
            await pool.acquire("print")

    @pytest.mark.asyncio
    async def test_prefers_earmarked_entry(self):
        """An ISBN earmarked for the format is claimed before a free one."""
        free, earmarked = placeholder_isbns(2, seed=1)
        pool = InMemoryIdentifierPool([
            PoolEntry(isbn13=free),
            PoolEntry(isbn13=earmarked, format="print"),
        ])

        identifier = await pool.acquire("print")

        assert identifier.isbn13 == earmarked

    @pytest.mark.asyncio
    async def test_skips_entries_for_other_formats(self):
        """An ISBN earmarked for another format is not claimed."""
        pool = InMemoryIdentifierPool([
            PoolEntry(isbn13=placeholder_isbns(1, seed=2)[0], format="print"),
        ])

        with pytest.raises(OutOfInventoryError):
            await pool.acquire("ebook")

    @pytest.mark.asyncio
    async def test_concurrent_claims_are_distinct(self):
        """Concurrent claims never return the same ISBN."""
        pool = InMemoryIdentifierPool(placeholder_isbns(10, seed=3))

        claimed = await asyncio.gather(*(pool.acquire("ebook") for _ in range(10)))

        assert len({c.isbn13 for c in claimed}) == 10
        assert pool.available == 0

    def test_invalid_isbn_rejected(self):
        """The pool refuses ISBNs with a bad check digit."""
        with pytest.raises(ValueError, match="Invalid ISBN-13"):
            InMemoryIdentifierPool(["9780306406158"])

    def test_from_file(self, tmp_path):
        """Pools load from strings and entry objects."""
        free, earmarked = placeholder_isbns(2, seed=4)
        path = tmp_path / "isbns.json"
        path.write_text(json.dumps([free, {"isbn13": earmarked, "format": "print"}]))

        pool = InMemoryIdentifierPool.from_file(path)

        assert pool.available == 2


class TestRegistrationServices:
    """Tests for the local filing services."""

    @pytest.mark.asyncio
    async def test_copyright_registration(self, metadata):
        """A Form TX filing is prepared with the fee."""
        handle = await LocalRegistrationService(fee=65).register(metadata)

        assert handle.service == "copyright"
        assert handle.status == "prepared"
        assert handle.cost == 65
        assert handle.form["form_type"] == "TX"
        assert handle.form["title_of_work"] == "The Keeper's Log: A Novel"
        assert any("eco.copyright.gov" in step for step in handle.instructions)

    @pytest.mark.asyncio
    async def test_catalog_number(self, metadata):
        """Catalog numbers look like YYYY-NNNNNN."""
        handle = await LocalCatalogService(seed=5).register(metadata)

        year, number = handle.reference.split("-")
        assert handle.service == "catalog"
        assert len(year) == 4 and len(number) == 6
        assert handle.form["publisher"] == "Harbour Light Press"


class TestPassthroughMetadataOptimizer:
    """Tests for the metadata optimizer."""

    @pytest.mark.asyncio
    async def test_tidies_without_truncating(self, metadata):
        """Whitespace is collapsed and duplicates removed, nothing else."""
        messy = metadata.model_copy(update={
            "title": "  The   Keeper's Log ",
            "keywords": metadata.keywords + ["LIGHTHOUSE", "  ", "harbour"],
            "categories": metadata.categories + ["FIC019000"],
        })

        optimized = await PassthroughMetadataOptimizer().optimize(messy)

        assert optimized.title == "The Keeper's Log"
        assert optimized.keywords == metadata.keywords + ["harbour"]
        assert optimized.categories == metadata.categories

    @pytest.mark.asyncio
    async def test_input_unchanged(self, metadata):
        """The optimizer returns a new record."""
        original = metadata.model_copy(deep=True)

        await PassthroughMetadataOptimizer().optimize(metadata)

        assert metadata == original


class TestFileCoverSource:
    """Tests for the file cover source."""

    @pytest.mark.asyncio
    async def test_reads_file(self, tmp_path, cover_png):
        """The same file is returned whatever the book."""
        path = tmp_path / "cover.png"
        path.write_bytes(cover_png)

        data = await FileCoverSource(path).generate("T", "A", "fiction")

        assert data == cover_png


class TestManualUploadAdapter:
    """Tests for manual upload preparation."""

    @pytest.mark.asyncio
    async def test_writes_artifact_and_instructions(self, tmp_path, chapters, metadata):
        """The artifact is written and instructions name the dashboard."""
        epub = EPUBPackager().package(chapters, metadata)
        adapter = ManualUploadAdapter(tmp_path)

        result = await adapter.submit(epub, metadata, Destination.KOBO)

        assert result.status == "ready_for_upload"
        assert result.upload_url == "https://www.kobo.com/writinglife"
        assert result.submission_id
        assert (tmp_path / "kobo" / "manuscript.epub").read_bytes() == epub.data
        assert "Kobo Writing Life Upload Instructions" in result.instructions
        assert "List Price: USD $4.99" in result.instructions

    @pytest.mark.asyncio
    async def test_cover_filename_follows_encoding(self, tmp_path, metadata, cover_png):
        """Covers are written under their encoding's extension."""
        adapter = ManualUploadAdapter(tmp_path)

        await adapter.submit(inspect_cover(cover_png), metadata, Destination.AMAZON_KDP)

        assert (tmp_path / "amazon_kdp" / "cover.png").exists()

    @pytest.mark.asyncio
    async def test_without_output_dir(self, tmp_path, chapters, metadata):
        """Without an output directory only instructions are produced."""
        epub = EPUBPackager().package(chapters, metadata)

        result = await ManualUploadAdapter().submit(epub, metadata, Destination.APPLE_BOOKS)

        assert result.destination == Destination.APPLE_BOOKS
        assert "https://authors.apple.com" in result.instructions
