"""Readers that turn artifact files back into artifact models.

Used to validate files that were packaged earlier, or elsewhere. Only the
properties the requirements validator checks are recovered.
"""

import io
import logging
import zipfile

import fitz  # PyMuPDF
from lxml import etree

from manuscript_press.errors import StructuralError
from schemas.artifact import CoverImage, PrintDocument, ReflowableDocument, sha256_hex

from .cover import detect_encoding, inspect_cover
from .pdf_packager import TRIM_SIZES, page_geometry

logger = logging.getLogger(__name__)

NSMAP = {
    "container": "urn:oasis:names:tc:opendocument:xmlns:container",
    "opf": "http://www.idpf.org/2007/opf",
    "dc": "http://purl.org/dc/elements/1.1/",
    "ncx": "http://www.daisy.org/z3986/2005/ncx/",
}


def read_epub(data: bytes) -> ReflowableDocument:
    """Describe an EPUB container.

    Raises:
        StructuralError: If the data is not an EPUB container
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise StructuralError("Not a zip container") from e

    with archive:
        names = archive.namelist()
        if not names or names[0] != "mimetype":
            raise StructuralError("EPUB must start with a mimetype entry")

        container = etree.fromstring(archive.read("META-INF/container.xml"))
        rootfiles = container.xpath("//container:rootfile/@full-path", namespaces=NSMAP)
        if len(rootfiles) != 1:
            raise StructuralError(f"Expected one rootfile, found {len(rootfiles)}")

        opf = etree.fromstring(archive.read(rootfiles[0]))
        unique_id = opf.get("unique-identifier")
        identifiers = opf.xpath(
            "//dc:identifier[@id=$id]/text()", namespaces=NSMAP, id=unique_id
        )

        has_cover = bool(
            opf.xpath("//opf:item[contains(@properties, 'cover-image')]", namespaces=NSMAP)
            or opf.xpath("//opf:meta[@name='cover']", namespaces=NSMAP)
        )

        toc_depth = 0
        nav_points = []
        ncx_hrefs = opf.xpath(
            "//opf:item[@media-type='application/x-dtbncx+xml']/@href", namespaces=NSMAP
        )
        if ncx_hrefs:
            base = rootfiles[0].rpartition("/")[0]
            ncx_path = f"{base}/{ncx_hrefs[0]}" if base else ncx_hrefs[0]
            ncx = etree.fromstring(archive.read(ncx_path))
            nav_points = ncx.xpath("//ncx:navPoint", namespaces=NSMAP)
            for point in nav_points:
                depth = len(point.xpath("ancestor-or-self::ncx:navPoint", namespaces=NSMAP))
                toc_depth = max(toc_depth, depth)
        if not nav_points and opf.xpath("//opf:item[contains(@properties, 'nav')]", namespaces=NSMAP):
            toc_depth = 1

    return ReflowableDocument(
        data=data,
        size=len(data),
        checksum=sha256_hex(data),
        format_version="epub3" if opf.get("version", "").startswith("3") else "epub2",
        toc_depth=toc_depth,
        has_cover=has_cover,
        identifier=identifiers[0] if identifiers else "",
    )


def read_pdf(data: bytes, bleed: bool = False, color_profile: str = "RGB") -> PrintDocument:
    """Describe a PDF.

    Bleed and colour profile cannot be read back reliably, so they are
    taken from the caller. The trim size is matched against TRIM_SIZES
    within one point, or recorded as "custom".
    """
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise StructuralError(f"Not a PDF: {e}") from e

    page_count = len(doc)
    rect = doc[0].rect if page_count else fitz.Rect(0, 0, 0, 0)
    doc.close()

    trim_size = "custom"
    for name in TRIM_SIZES:
        width_pt, height_pt = page_geometry(name)
        if abs(rect.width - width_pt) <= 1 and abs(rect.height - height_pt) <= 1:
            trim_size = name
            break

    return PrintDocument(
        data=data,
        size=len(data),
        checksum=sha256_hex(data),
        page_count=page_count,
        trim_size=trim_size,
        width_pt=rect.width,
        height_pt=rect.height,
        bleed=bleed,
        color_profile=color_profile,
    )


def read_artifact(
    data: bytes,
    bleed: bool = False,
    color_profile: str = "RGB",
    dpi: int | None = None,
) -> ReflowableDocument | PrintDocument | CoverImage:
    """Describe an EPUB, PDF or cover image, detected from its content.

    Raises:
        StructuralError: If the kind of file cannot be recognised
    """
    if data.startswith(b"PK"):
        return read_epub(data)
    if data.startswith(b"%PDF"):
        return read_pdf(data, bleed=bleed, color_profile=color_profile)
    if detect_encoding(data):
        return inspect_cover(data, dpi=dpi)
    raise StructuralError("Unrecognised artifact: expected EPUB, PDF or image data")
