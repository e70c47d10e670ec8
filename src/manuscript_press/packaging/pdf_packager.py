"""Print Packager for rendering chapters to a print-ready PDF.

Renders the book through a Jinja2 HTML template and WeasyPrint. Page
geometry comes from the named trim size; the page count is read back from
the rendered PDF with PyMuPDF.
"""

import logging
from pathlib import Path

import fitz  # PyMuPDF
from jinja2 import Environment, FileSystemLoader
from weasyprint import CSS, HTML

from manuscript_press.errors import StructuralError
from schemas.artifact import PrintDocument, sha256_hex
from schemas.chapter import Chapter
from schemas.metadata import PublicationMetadata

from .filters import FILTERS
from .packager import STYLESHEETS_DIR, TEMPLATES_DIR, Packager, check_chapters

logger = logging.getLogger(__name__)

POINTS_PER_INCH = 72
MARGIN_INCHES = 0.75

# Trim size name -> (width, height) in inches
TRIM_SIZES = {
    "5x8": (5.0, 8.0),
    "5.5x8.5": (5.5, 8.5),
    "6x9": (6.0, 9.0),
    "7x10": (7.0, 10.0),
    "8x10": (8.0, 10.0),
    "8.5x11": (8.5, 11.0),
}

COLOR_PROFILES = ("RGB", "CMYK")


def page_geometry(trim_size: str) -> tuple[float, float]:
    """Return the page width and height in points for a trim size.

    Raises:
        StructuralError: If the trim size is not one of TRIM_SIZES
    """
    try:
        width_in, height_in = TRIM_SIZES[trim_size]
    except KeyError:
        raise StructuralError(
            f"Unknown trim size '{trim_size}'; expected one of {', '.join(TRIM_SIZES)}"
        ) from None
    return width_in * POINTS_PER_INCH, height_in * POINTS_PER_INCH


class PrintPackager(Packager):
    """Render chapters and metadata to a paginated PDF.

    The PrintPackager:
    1. Checks chapter positions (1..n, no gaps or duplicates)
    2. Resolves the page size from the trim size
    3. Renders title, copyright, contents and chapter sections to HTML
    4. Converts the HTML to PDF with WeasyPrint
    5. Counts pages using PyMuPDF

    The contents page is only included for books with more than one chapter.

    Attributes:
        template_name: Name of the Jinja2 template file
        stylesheet_name: Name of the CSS stylesheet file
        base_url: Base URL for resolving relative paths in the HTML
    """

    def __init__(
        self,
        template_name: str = "book.html.j2",
        stylesheet_name: str = "print.css",
        templates_dir: Path | None = None,
        stylesheets_dir: Path | None = None,
        base_url: str | None = None,
    ):
        self.template_name = template_name
        self.stylesheet_name = stylesheet_name
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self.stylesheets_dir = stylesheets_dir or STYLESHEETS_DIR
        self.base_url = base_url or self.templates_dir.resolve().as_uri() + "/"

        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
        )
        for name, func in FILTERS.items():
            self._env.filters[name] = func

    def package(
        self,
        chapters: list[Chapter],
        metadata: PublicationMetadata,
        trim_size: str = "6x9",
        include_bleed: bool = False,
        color_profile: str = "RGB",
        isbn: str | None = None,
    ) -> PrintDocument:
        """Render a print PDF.

        Args:
            chapters: Chapters in any order; positions must be 1..n
            metadata: Publication metadata
            trim_size: Named trim size, e.g. "6x9"
            include_bleed: Recorded on the document for the validator
            color_profile: "RGB" or "CMYK", recorded on the document
            isbn: Optional ISBN printed on the copyright page

        Returns:
            PrintDocument wrapping the PDF bytes

        Raises:
            StructuralError: On malformed chapters, an unknown trim size or
                an unknown colour profile
        """
        ordered = check_chapters(chapters, metadata)
        width_pt, height_pt = page_geometry(trim_size)
        if color_profile not in COLOR_PROFILES:
            raise StructuralError(f"Unknown colour profile '{color_profile}'")

        front_matter = ["title", "copyright"]
        if len(ordered) > 1:
            front_matter.append("contents")
        sections = tuple(front_matter) + tuple(f"chapter-{c.position}" for c in ordered)

        logger.info(
            f"Rendering print PDF '{metadata.title}' at {trim_size} "
            f"with {len(ordered)} chapters"
        )

        html = self._env.get_template(self.template_name).render(
            metadata=metadata,
            chapters=ordered,
            front_matter=front_matter,
            isbn=isbn,
        )
        data = self._render_pdf(html, width_pt, height_pt)
        page_count = self._count_pages(data)

        logger.debug(f"Print PDF has {page_count} pages ({len(data)} bytes)")

        return PrintDocument(
            data=data,
            size=len(data),
            checksum=sha256_hex(data),
            page_count=page_count,
            trim_size=trim_size,
            width_pt=width_pt,
            height_pt=height_pt,
            bleed=include_bleed,
            color_profile=color_profile,
            sections=sections,
        )

    def _render_pdf(self, html: str, width_pt: float, height_pt: float) -> bytes:
        """Convert rendered HTML to PDF bytes at the given page size."""
        margin_pt = MARGIN_INCHES * POINTS_PER_INCH
        page_css = CSS(string=(
            f"@page {{ size: {width_pt}pt {height_pt}pt; margin: {margin_pt}pt; }}"
        ))

        stylesheets = [page_css]
        css = self._load_stylesheet()
        if css:
            stylesheets.insert(0, css)

        return HTML(string=html, base_url=self.base_url).write_pdf(stylesheets=stylesheets)

    def _load_stylesheet(self) -> CSS | None:
        """Load the print stylesheet, if present."""
        css_path = self.stylesheets_dir / self.stylesheet_name
        if css_path.exists():
            return CSS(filename=str(css_path))

        logger.warning(f"Stylesheet {self.stylesheet_name} not found")
        return None

    def _count_pages(self, data: bytes) -> int:
        """Count the number of pages in rendered PDF bytes."""
        doc = fitz.open(stream=data, filetype="pdf")
        page_count = len(doc)
        doc.close()
        return page_count
