"""Cover image inspection.

Turns raw cover bytes from the cover source into a CoverImage with the
properties the requirements validator checks: encoding, pixel dimensions,
resolution and colour mode. Decoding uses PyMuPDF.
"""

import logging

import fitz  # PyMuPDF

from manuscript_press.errors import CoverEmbeddingError
from schemas.artifact import CoverImage, sha256_hex

logger = logging.getLogger(__name__)

MAGIC_NUMBERS = [
    (b"\xff\xd8\xff", "jpg"),
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"II*\x00", "tiff"),
    (b"MM\x00*", "tiff"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
]

COLOR_MODES = {
    "DeviceRGB": "RGB",
    "DeviceCMYK": "CMYK",
    "DeviceGray": "GRAY",
}


def detect_encoding(data: bytes) -> str | None:
    """Identify an image encoding from its leading magic number.

    Examples:
        >>> detect_encoding(b"\\x89PNG\\r\\n\\x1a\\n...")
        'png'
    """
    for magic, encoding in MAGIC_NUMBERS:
        if data.startswith(magic):
            return encoding
    return None


def inspect_cover(data: bytes, dpi: int | None = None) -> CoverImage:
    """Decode cover bytes and describe them.

    Args:
        data: Encoded image bytes
        dpi: Resolution to record instead of the one stored in the image

    Returns:
        CoverImage describing the image

    Raises:
        CoverEmbeddingError: If the bytes are empty, of an unknown encoding,
            or cannot be decoded
    """
    if not data:
        raise CoverEmbeddingError("Cover image is empty")

    encoding = detect_encoding(data)
    if encoding is None:
        raise CoverEmbeddingError("Cover image encoding not recognised")

    try:
        pix = fitz.Pixmap(data)
    except Exception as e:
        raise CoverEmbeddingError(f"Cover image could not be decoded: {e}") from e

    colorspace = pix.colorspace.name if pix.colorspace else "DeviceGray"
    resolution = dpi or pix.xres or 72

    logger.debug(
        f"Inspected {encoding} cover {pix.width}x{pix.height} at {resolution} dpi"
    )

    return CoverImage(
        data=data,
        size=len(data),
        checksum=sha256_hex(data),
        width=pix.width,
        height=pix.height,
        dpi=resolution,
        encoding=encoding,
        color_mode=COLOR_MODES.get(colorspace, colorspace),
    )
