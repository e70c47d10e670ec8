"""Tests for the EPUB Packager."""

import io
import zipfile

import pytest
from lxml import etree

from manuscript_press.errors import CoverEmbeddingError, StructuralError
from manuscript_press.packaging import EPUBPackager, inspect_cover
from manuscript_press.packaging.epub_packager import DC_NS, NCX_NS, OPF_NS
from schemas.chapter import Chapter


NS = {"opf": OPF_NS, "dc": DC_NS, "ncx": NCX_NS, "xhtml": "http://www.w3.org/1999/xhtml"}


def open_epub(document):
    return zipfile.ZipFile(io.BytesIO(document.data))


def read_opf(document):
    with open_epub(document) as archive:
        return etree.fromstring(archive.read("OEBPS/content.opf"))


@pytest.fixture
def packager():
    return EPUBPackager()


class TestEPUBPackagerContainer:
    """Tests for the zip container layout."""

    def test_mimetype_is_first_and_stored(self, packager, chapters, metadata):
        """The mimetype entry comes first and is not compressed."""
        document = packager.package(chapters, metadata)

        with open_epub(document) as archive:
            first = archive.infolist()[0]
            assert first.filename == "mimetype"
            assert first.compress_type == zipfile.ZIP_STORED
            assert archive.read("mimetype") == b"application/epub+zip"

    def test_container_points_at_package_document(self, packager, chapters, metadata):
        """container.xml names OEBPS/content.opf as the only rootfile."""
        document = packager.package(chapters, metadata)

        with open_epub(document) as archive:
            container = etree.fromstring(archive.read("META-INF/container.xml"))

        paths = container.xpath(
            "//c:rootfile/@full-path",
            namespaces={"c": "urn:oasis:names:tc:opendocument:xmlns:container"},
        )
        assert paths == ["OEBPS/content.opf"]

    def test_every_manifest_item_exists_in_archive(self, packager, chapters, metadata, cover_png):
        """No manifest entry refers to a missing file."""
        document = packager.package(chapters, metadata, cover=cover_png)

        opf = read_opf(document)
        hrefs = opf.xpath("//opf:manifest/opf:item/@href", namespaces=NS)
        with open_epub(document) as archive:
            names = set(archive.namelist())

        for href in hrefs:
            assert f"OEBPS/{href}" in names

    def test_every_spine_entry_is_in_manifest(self, packager, chapters, metadata, cover_png):
        """Each spine itemref refers to a manifest item."""
        document = packager.package(chapters, metadata, cover=cover_png)

        opf = read_opf(document)
        ids = set(opf.xpath("//opf:manifest/opf:item/@id", namespaces=NS))
        idrefs = opf.xpath("//opf:spine/opf:itemref/@idref", namespaces=NS)

        assert idrefs
        assert set(idrefs) <= ids

    def test_chapter_documents_are_well_formed(self, packager, chapters, metadata):
        """Every chapter document parses as XML."""
        document = packager.package(chapters, metadata)

        with open_epub(document) as archive:
            for chapter in chapters:
                root = etree.fromstring(
                    archive.read(f"OEBPS/chapter-{chapter.position:03d}.xhtml")
                )
                assert root.tag == "{http://www.w3.org/1999/xhtml}html"


class TestEPUBPackagerOrdering:
    """Tests for reading order."""

    def test_spine_follows_positions(self, packager, metadata, chapter_factory):
        """The spine lists chapters in position order, not input order."""
        chapters = list(reversed(chapter_factory(4)))

        document = packager.package(chapters, metadata)

        opf = read_opf(document)
        idrefs = opf.xpath("//opf:spine/opf:itemref/@idref", namespaces=NS)
        assert idrefs == ["chapter-001", "chapter-002", "chapter-003", "chapter-004"]

    def test_manifest_has_one_item_per_chapter_plus_fixed_items(self, packager, chapters, metadata):
        """Manifest holds nav, ncx and stylesheet plus each chapter."""
        document = packager.package(chapters, metadata)

        opf = read_opf(document)
        items = opf.xpath("//opf:manifest/opf:item", namespaces=NS)
        assert len(items) == len(chapters) + 3

    def test_ncx_nav_points_follow_positions(self, packager, metadata):
        """NCX play order matches chapter positions."""
        chapters = [
            Chapter(position=2, title="Second"),
            Chapter(position=1, title="First"),
        ]

        document = packager.package(chapters, metadata)

        with open_epub(document) as archive:
            ncx = etree.fromstring(archive.read("OEBPS/toc.ncx"))
        labels = ncx.xpath("//ncx:navPoint/ncx:navLabel/ncx:text/text()", namespaces=NS)
        orders = ncx.xpath("//ncx:navPoint/@playOrder", namespaces=NS)

        assert labels == ["First", "Second"]
        assert orders == ["1", "2"]

    def test_nav_document_lists_chapters(self, packager, chapters, metadata):
        """nav.xhtml links every chapter in order."""
        document = packager.package(chapters, metadata)

        with open_epub(document) as archive:
            nav = etree.fromstring(archive.read("OEBPS/nav.xhtml"))
        hrefs = nav.xpath("//xhtml:nav//xhtml:a/@href", namespaces=NS)

        assert hrefs == ["chapter-001.xhtml", "chapter-002.xhtml", "chapter-003.xhtml"]

    def test_malformed_positions_raise(self, packager, metadata):
        """A gap in positions is a structural error."""
        chapters = [Chapter(position=1, title="One"), Chapter(position=3, title="Three")]

        with pytest.raises(StructuralError):
            packager.package(chapters, metadata)

    def test_control_character_in_title_raises(self, packager, metadata):
        """A form feed pasted into a title is a structural error."""
        chapters = [Chapter(position=1, title="Page\x0cBreak", body="Text.")]

        with pytest.raises(StructuralError, match="Title of chapter 1.*U\\+000C"):
            packager.package(chapters, metadata)

    def test_control_character_in_body_raises(self, packager, metadata):
        """A body with an XML-illegal character never yields an archive."""
        chapters = [Chapter(position=1, title="One", body="before\x01after")]

        with pytest.raises(StructuralError, match="Body of chapter 1"):
            packager.package(chapters, metadata)

    def test_control_character_in_metadata_raises(self, packager, chapters, metadata):
        """Metadata text is held to the same rule as chapter text."""
        metadata = metadata.model_copy(update={"keywords": ["sea", "light\x1fhouse"]})

        with pytest.raises(StructuralError, match="keywords"):
            packager.package(chapters, metadata)

    def test_tabs_and_newlines_allowed(self, packager, metadata):
        """Whitespace control characters produce well-formed chapters."""
        chapters = [Chapter(position=1, title="One", body="a\tb\r\n\r\nc")]

        document = packager.package(chapters, metadata)

        with open_epub(document) as archive:
            etree.fromstring(archive.read("OEBPS/chapter-001.xhtml"))


class TestEPUBPackagerMetadata:
    """Tests for package metadata and escaping."""

    def test_identifier_is_urn_uuid_and_unique(self, packager, chapters, metadata):
        """Each build gets a fresh urn:uuid identifier."""
        first = packager.package(chapters, metadata)
        second = packager.package(chapters, metadata)

        assert first.identifier.startswith("urn:uuid:")
        assert first.identifier != second.identifier

    def test_identifier_appears_once_in_package_document(self, packager, chapters, metadata):
        """The identifier is the unique-identifier and occurs exactly once."""
        document = packager.package(chapters, metadata)

        with open_epub(document) as archive:
            opf_bytes = archive.read("OEBPS/content.opf")
        opf = etree.fromstring(opf_bytes)

        assert opf.get("unique-identifier") == "BookID"
        assert opf.xpath("//dc:identifier[@id='BookID']/text()", namespaces=NS) == [
            document.identifier
        ]
        assert opf_bytes.count(document.identifier.encode()) == 1

    def test_ncx_uid_matches_identifier(self, packager, chapters, metadata):
        """The NCX dtb:uid repeats the package identifier."""
        document = packager.package(chapters, metadata)

        with open_epub(document) as archive:
            ncx = etree.fromstring(archive.read("OEBPS/toc.ncx"))
        uid = ncx.xpath("//ncx:meta[@name='dtb:uid']/@content", namespaces=NS)

        assert uid == [document.identifier]

    def test_metadata_fields_written(self, packager, chapters, metadata):
        """Title, creator, language and subjects reach the package document."""
        document = packager.package(chapters, metadata)

        opf = read_opf(document)
        assert opf.xpath("//dc:title[@id='title']/text()", namespaces=NS) == [metadata.title]
        assert opf.xpath("//dc:creator/text()", namespaces=NS) == [metadata.author]
        assert opf.xpath("//dc:language/text()", namespaces=NS) == ["en"]
        assert opf.xpath("//dc:subject/text()", namespaces=NS) == metadata.categories
        assert opf.xpath("//opf:meta[@property='dcterms:modified']", namespaces=NS)

    def test_markup_characters_are_escaped(self, packager, metadata):
        """Titles and bodies with markup characters come out as text."""
        chapters = [Chapter(position=1, title="Love & <War>", body="x < y & \"quoted\"")]
        metadata = metadata.model_copy(update={"title": "Salt & <Pepper>"})

        document = packager.package(chapters, metadata)

        with open_epub(document) as archive:
            chapter = etree.fromstring(archive.read("OEBPS/chapter-001.xhtml"))
            opf = etree.fromstring(archive.read("OEBPS/content.opf"))

        assert chapter.xpath("//xhtml:h1/text()", namespaces=NS) == ["Love & <War>"]
        assert chapter.xpath("//xhtml:p/text()", namespaces=NS) == ['x < y & "quoted"']
        assert opf.xpath("//dc:title[@id='title']/text()", namespaces=NS) == ["Salt & <Pepper>"]

    def test_result_describes_archive(self, packager, chapters, metadata):
        """Size and checksum describe the returned bytes."""
        document = packager.package(chapters, metadata)

        assert document.size == len(document.data)
        assert len(document.checksum) == 64
        assert document.format_version == "epub3"
        assert document.toc_depth == 1
        assert document.has_cover is False


class TestEPUBPackagerCover:
    """Tests for cover embedding."""

    def test_cover_adds_two_manifest_items(self, packager, chapters, metadata, cover_png):
        """A cover adds the image and its page to the manifest."""
        without = packager.package(chapters, metadata)
        with_cover = packager.package(chapters, metadata, cover=cover_png)

        count = lambda doc: len(read_opf(doc).xpath("//opf:manifest/opf:item", namespaces=NS))
        assert count(with_cover) == count(without) + 2
        assert with_cover.has_cover is True

    def test_cover_item_properties(self, packager, chapters, metadata, cover_png):
        """The cover image carries cover-image properties and a legacy meta."""
        document = packager.package(chapters, metadata, cover=cover_png)

        opf = read_opf(document)
        item = opf.xpath("//opf:item[@id='cover-image']", namespaces=NS)[0]
        assert item.get("properties") == "cover-image"
        assert item.get("href") == "cover.png"
        assert item.get("media-type") == "image/png"
        assert opf.xpath("//opf:meta[@name='cover']/@content", namespaces=NS) == ["cover-image"]

    def test_cover_page_is_first_and_non_linear(self, packager, chapters, metadata, cover_png):
        """The cover page leads the spine outside the linear reading order."""
        document = packager.package(chapters, metadata, cover=cover_png)

        opf = read_opf(document)
        first = opf.xpath("//opf:spine/opf:itemref", namespaces=NS)[0]
        assert first.get("idref") == "cover"
        assert first.get("linear") == "no"

    def test_cover_image_accepted_as_model(self, packager, chapters, metadata, cover_png):
        """An inspected CoverImage embeds the same as raw bytes."""
        cover = inspect_cover(cover_png)

        document = packager.package(chapters, metadata, cover=cover)

        with open_epub(document) as archive:
            assert archive.read("OEBPS/cover.png") == cover_png

    def test_unreadable_cover_dropped_with_warning(self, packager, chapters, metadata, caplog):
        """Unreadable cover bytes are skipped when a cover is optional."""
        document = packager.package(chapters, metadata, cover=b"not an image")

        assert document.has_cover is False
        assert "without cover" in caplog.text

    def test_unreadable_cover_raises_when_required(self, packager, chapters, metadata):
        """Unreadable cover bytes raise when a cover is required."""
        with pytest.raises(CoverEmbeddingError):
            packager.package(chapters, metadata, cover=b"not an image", require_cover=True)

    def test_missing_cover_raises_when_required(self, packager, chapters, metadata):
        """No cover at all raises when a cover is required."""
        with pytest.raises(CoverEmbeddingError, match="required"):
            packager.package(chapters, metadata, require_cover=True)
