"""EPUB Packager for building reflowable e-book containers.

Builds an EPUB 3 package (with an EPUB 2 NCX for older readers) from
ordered chapters and publication metadata. Package documents are built with
lxml; content documents are rendered through Jinja2 templates with
autoescaping.

Container layout:

    mimetype                  (first entry, stored uncompressed)
    META-INF/container.xml
    OEBPS/content.opf
    OEBPS/toc.ncx
    OEBPS/nav.xhtml
    OEBPS/styles.css
    OEBPS/cover.{jpg,png,...}  (only with a cover)
    OEBPS/cover.xhtml          (only with a cover)
    OEBPS/chapter-001.xhtml
    ...
"""

import io
import logging
import uuid
import zipfile
from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader
from lxml import etree

from manuscript_press.errors import CoverEmbeddingError
from schemas.artifact import IMAGE_MEDIA_TYPES, CoverImage, ReflowableDocument, sha256_hex
from schemas.chapter import Chapter
from schemas.metadata import PublicationMetadata

from .cover import inspect_cover
from .filters import FILTERS
from .packager import STYLESHEETS_DIR, TEMPLATES_DIR, Packager, check_chapters

logger = logging.getLogger(__name__)

MIMETYPE = b"application/epub+zip"
CONTENT_DIR = "OEBPS"
PACKAGE_PATH = f"{CONTENT_DIR}/content.opf"

CONTAINER_NS = "urn:oasis:names:tc:opendocument:xmlns:container"
OPF_NS = "http://www.idpf.org/2007/opf"
DC_NS = "http://purl.org/dc/elements/1.1/"
NCX_NS = "http://www.daisy.org/z3986/2005/ncx/"
XML_NS = "http://www.w3.org/XML/1998/namespace"

XHTML_MEDIA_TYPE = "application/xhtml+xml"
STYLESHEET_HREF = "styles.css"

# Zip entries carry a fixed timestamp so identical inputs give identical
# entries apart from the identifier and modification date.
ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)


class EPUBPackager(Packager):
    """Package chapters into an EPUB container.

    The EPUBPackager:
    1. Checks chapter positions (1..n, no gaps or duplicates)
    2. Inspects the optional cover image
    3. Renders one XHTML document per chapter, plus nav and cover pages
    4. Builds the package document (manifest and spine) and the NCX
    5. Zips everything with the mimetype entry first and uncompressed

    Attributes:
        stylesheet_name: Stylesheet copied into the package as styles.css
        templates_dir: Directory containing the XHTML templates
        stylesheets_dir: Directory containing stylesheets
    """

    def __init__(
        self,
        stylesheet_name: str = "epub.css",
        templates_dir: Path | None = None,
        stylesheets_dir: Path | None = None,
    ):
        self.stylesheet_name = stylesheet_name
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self.stylesheets_dir = stylesheets_dir or STYLESHEETS_DIR

        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
            keep_trailing_newline=True,
        )
        for name, func in FILTERS.items():
            self._env.filters[name] = func

    def package(
        self,
        chapters: list[Chapter],
        metadata: PublicationMetadata,
        cover: CoverImage | bytes | None = None,
        require_cover: bool = False,
    ) -> ReflowableDocument:
        """Build an EPUB from chapters and metadata.

        Args:
            chapters: Chapters in any order; positions must be 1..n
            metadata: Publication metadata
            cover: Optional cover, as a CoverImage or raw image bytes
            require_cover: Raise instead of omitting a cover that cannot be
                embedded

        Returns:
            ReflowableDocument wrapping the zipped container

        Raises:
            StructuralError: If the chapter list is empty or malformed
            CoverEmbeddingError: If require_cover is set and no usable cover
                was supplied
        """
        ordered = check_chapters(chapters, metadata)
        cover_image = self._resolve_cover(cover, require_cover)
        identifier = f"urn:uuid:{uuid.uuid4()}"

        logger.info(
            f"Packaging EPUB '{metadata.title}' with {len(ordered)} chapters"
            f"{' and cover' if cover_image else ''}"
        )

        entries = self._build_entries(ordered, metadata, cover_image, identifier)
        data = self._zip(entries)

        logger.debug(f"EPUB {identifier} is {len(data)} bytes")

        return ReflowableDocument(
            data=data,
            size=len(data),
            checksum=sha256_hex(data),
            format_version="epub3",
            toc_depth=1,
            has_cover=cover_image is not None,
            identifier=identifier,
        )

    def _resolve_cover(
        self, cover: CoverImage | bytes | None, require_cover: bool
    ) -> CoverImage | None:
        """Turn the cover argument into a CoverImage, or None.

        Unreadable covers are dropped with a warning unless a cover is
        required.
        """
        if cover is None:
            if require_cover:
                raise CoverEmbeddingError("A cover is required but none was supplied")
            return None

        if isinstance(cover, CoverImage):
            if cover.encoding in IMAGE_MEDIA_TYPES:
                return cover
            error = CoverEmbeddingError(f"Unsupported cover encoding: {cover.encoding}")
        else:
            try:
                return inspect_cover(cover)
            except CoverEmbeddingError as e:
                error = e

        if require_cover:
            raise error
        logger.warning(f"Packaging EPUB without cover: {error.message}")
        return None

    def _build_entries(
        self,
        chapters: list[Chapter],
        metadata: PublicationMetadata,
        cover: CoverImage | None,
        identifier: str,
    ) -> list[tuple[str, bytes]]:
        """Render every archive entry except the mimetype."""
        stylesheet = self._load_stylesheet()
        items = self._manifest_items(chapters, cover)

        entries = [
            ("META-INF/container.xml", self._serialize(self._build_container())),
            (PACKAGE_PATH, self._serialize(
                self._build_package(metadata, items, chapters, cover, identifier)
            )),
            (f"{CONTENT_DIR}/toc.ncx", self._serialize(
                self._build_ncx(metadata, chapters, identifier)
            )),
            (f"{CONTENT_DIR}/nav.xhtml", self._render(
                "nav.xhtml.j2",
                metadata=metadata,
                chapters=[(c, self._chapter_href(c)) for c in chapters],
            )),
            (f"{CONTENT_DIR}/{STYLESHEET_HREF}", stylesheet),
        ]

        if cover is not None:
            entries.append((f"{CONTENT_DIR}/{self._cover_href(cover)}", cover.data))
            entries.append((f"{CONTENT_DIR}/cover.xhtml", self._render(
                "cover.xhtml.j2",
                metadata=metadata,
                cover_href=self._cover_href(cover),
            )))

        template = self._env.get_template("chapter.xhtml.j2")
        for chapter in chapters:
            html = template.render(
                chapter=chapter,
                chapter_id=self._chapter_id(chapter),
                language=metadata.language,
                stylesheet_href=STYLESHEET_HREF,
            )
            entries.append((f"{CONTENT_DIR}/{self._chapter_href(chapter)}", html.encode("utf-8")))

        return entries

    def _manifest_items(
        self, chapters: list[Chapter], cover: CoverImage | None
    ) -> list[dict]:
        """List manifest items in package order."""
        items = [
            {"id": "nav", "href": "nav.xhtml", "media-type": XHTML_MEDIA_TYPE,
             "properties": "nav"},
            {"id": "ncx", "href": "toc.ncx", "media-type": "application/x-dtbncx+xml"},
            {"id": "css", "href": STYLESHEET_HREF, "media-type": "text/css"},
        ]
        if cover is not None:
            items.append({"id": "cover-image", "href": self._cover_href(cover),
                          "media-type": cover.media_type, "properties": "cover-image"})
            items.append({"id": "cover", "href": "cover.xhtml",
                          "media-type": XHTML_MEDIA_TYPE})
        for chapter in chapters:
            items.append({"id": self._chapter_id(chapter),
                          "href": self._chapter_href(chapter),
                          "media-type": XHTML_MEDIA_TYPE})
        return items

    def _build_container(self) -> etree._Element:
        """Build META-INF/container.xml pointing at the package document."""
        root = etree.Element(f"{{{CONTAINER_NS}}}container", nsmap={None: CONTAINER_NS})
        root.set("version", "1.0")
        rootfiles = etree.SubElement(root, f"{{{CONTAINER_NS}}}rootfiles")
        rootfile = etree.SubElement(rootfiles, f"{{{CONTAINER_NS}}}rootfile")
        rootfile.set("full-path", PACKAGE_PATH)
        rootfile.set("media-type", "application/oebps-package+xml")
        return root

    def _build_package(
        self,
        metadata: PublicationMetadata,
        items: list[dict],
        chapters: list[Chapter],
        cover: CoverImage | None,
        identifier: str,
    ) -> etree._Element:
        """Build the OPF package document."""
        root = etree.Element(f"{{{OPF_NS}}}package", nsmap={None: OPF_NS})
        root.set("version", "3.0")
        root.set("unique-identifier", "BookID")
        root.set(f"{{{XML_NS}}}lang", metadata.language)

        root.append(self._build_metadata(metadata, cover, identifier))

        manifest = etree.SubElement(root, f"{{{OPF_NS}}}manifest")
        for item in items:
            item_el = etree.SubElement(manifest, f"{{{OPF_NS}}}item")
            for key, value in item.items():
                item_el.set(key, value)

        spine = etree.SubElement(root, f"{{{OPF_NS}}}spine")
        spine.set("toc", "ncx")
        if cover is not None:
            itemref = etree.SubElement(spine, f"{{{OPF_NS}}}itemref")
            itemref.set("idref", "cover")
            itemref.set("linear", "no")
        for chapter in chapters:
            itemref = etree.SubElement(spine, f"{{{OPF_NS}}}itemref")
            itemref.set("idref", self._chapter_id(chapter))

        return root

    def _build_metadata(
        self,
        metadata: PublicationMetadata,
        cover: CoverImage | None,
        identifier: str,
    ) -> etree._Element:
        """Build the OPF metadata section.

        The build identifier appears only in dc:identifier.
        """
        md = etree.Element(f"{{{OPF_NS}}}metadata", nsmap={"dc": DC_NS})

        def dc(name: str, text: str, **attrs) -> etree._Element:
            el = etree.SubElement(md, f"{{{DC_NS}}}{name}")
            el.text = text
            for key, value in attrs.items():
                el.set(key, value)
            return el

        dc("identifier", identifier, id="BookID")
        dc("title", metadata.title, id="title")
        if metadata.subtitle:
            dc("title", metadata.subtitle, id="subtitle")
            refines = etree.SubElement(md, f"{{{OPF_NS}}}meta")
            refines.set("refines", "#subtitle")
            refines.set("property", "title-type")
            refines.text = "subtitle"
        dc("creator", metadata.author, id="creator")
        dc("language", metadata.language)
        if metadata.publisher:
            dc("publisher", metadata.publisher)
        dc("date", metadata.publication_date.isoformat())
        if metadata.description:
            dc("description", metadata.description)
        for category in metadata.categories:
            dc("subject", category)
        dc("rights", metadata.rights)

        modified = etree.SubElement(md, f"{{{OPF_NS}}}meta")
        modified.set("property", "dcterms:modified")
        modified.text = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

        if cover is not None:
            # EPUB 2 readers find the cover through this meta element
            legacy_cover = etree.SubElement(md, f"{{{OPF_NS}}}meta")
            legacy_cover.set("name", "cover")
            legacy_cover.set("content", "cover-image")

        return md

    def _build_ncx(
        self,
        metadata: PublicationMetadata,
        chapters: list[Chapter],
        identifier: str,
    ) -> etree._Element:
        """Build the EPUB 2 NCX table of contents."""
        root = etree.Element(f"{{{NCX_NS}}}ncx", nsmap={None: NCX_NS})
        root.set("version", "2005-1")
        root.set(f"{{{XML_NS}}}lang", metadata.language)

        head = etree.SubElement(root, f"{{{NCX_NS}}}head")
        for name, content in [
            ("dtb:uid", identifier),
            ("dtb:depth", "1"),
            ("dtb:totalPageCount", "0"),
            ("dtb:maxPageNumber", "0"),
        ]:
            meta = etree.SubElement(head, f"{{{NCX_NS}}}meta")
            meta.set("name", name)
            meta.set("content", content)

        doc_title = etree.SubElement(root, f"{{{NCX_NS}}}docTitle")
        etree.SubElement(doc_title, f"{{{NCX_NS}}}text").text = metadata.title
        doc_author = etree.SubElement(root, f"{{{NCX_NS}}}docAuthor")
        etree.SubElement(doc_author, f"{{{NCX_NS}}}text").text = metadata.author

        nav_map = etree.SubElement(root, f"{{{NCX_NS}}}navMap")
        for order, chapter in enumerate(chapters, start=1):
            nav_point = etree.SubElement(nav_map, f"{{{NCX_NS}}}navPoint")
            nav_point.set("id", f"navpoint-{order}")
            nav_point.set("playOrder", str(order))
            label = etree.SubElement(nav_point, f"{{{NCX_NS}}}navLabel")
            etree.SubElement(label, f"{{{NCX_NS}}}text").text = chapter.title
            content = etree.SubElement(nav_point, f"{{{NCX_NS}}}content")
            content.set("src", self._chapter_href(chapter))

        return root

    def _load_stylesheet(self) -> bytes:
        """Read the stylesheet that is embedded in every package."""
        return (self.stylesheets_dir / self.stylesheet_name).read_bytes()

    def _render(self, template_name: str, **context) -> bytes:
        return self._env.get_template(template_name).render(**context).encode("utf-8")

    def _serialize(self, root: etree._Element) -> bytes:
        return etree.tostring(
            root,
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=True,
        )

    def _zip(self, entries: list[tuple[str, bytes]]) -> bytes:
        """Write the container with mimetype first and uncompressed."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            self._write_entry(archive, "mimetype", MIMETYPE, zipfile.ZIP_STORED)
            for name, data in entries:
                self._write_entry(archive, name, data, zipfile.ZIP_DEFLATED)
        return buffer.getvalue()

    def _write_entry(
        self, archive: zipfile.ZipFile, name: str, data: bytes, compress_type: int
    ) -> None:
        info = zipfile.ZipInfo(name, date_time=ZIP_TIMESTAMP)
        info.compress_type = compress_type
        info.external_attr = 0o644 << 16
        archive.writestr(info, data)

    @staticmethod
    def _chapter_id(chapter: Chapter) -> str:
        return f"chapter-{chapter.position:03d}"

    @staticmethod
    def _chapter_href(chapter: Chapter) -> str:
        return f"chapter-{chapter.position:03d}.xhtml"

    @staticmethod
    def _cover_href(cover: CoverImage) -> str:
        return f"cover.{cover.encoding}"
