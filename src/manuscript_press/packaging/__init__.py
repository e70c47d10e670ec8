"""Packaging engine: builds EPUB and print PDF artifacts from chapters."""

from .cover import detect_encoding, inspect_cover
from .epub_packager import EPUBPackager
from .packager import Packager, check_chapters
from .pdf_packager import TRIM_SIZES, PrintPackager, page_geometry
from .readers import read_artifact, read_epub, read_pdf

__all__ = [
    "Packager",
    "EPUBPackager",
    "PrintPackager",
    "check_chapters",
    "inspect_cover",
    "detect_encoding",
    "page_geometry",
    "TRIM_SIZES",
    "read_artifact",
    "read_epub",
    "read_pdf",
]
