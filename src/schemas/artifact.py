"""Packaged artifact schemas.

Artifacts are the binary outputs of the packaging engine (EPUB and print PDF)
and of the cover phase (cover image). They are immutable: re-packaging a
project produces a new artifact that supersedes the previous one.

Every artifact can be reduced to an ArtifactDescriptor for persistence or
transport outside the pipeline:

    artifact.descriptor().model_dump_json()
"""

import hashlib
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

ArtifactKind = Literal["ebook", "print", "cover"]

IMAGE_MEDIA_TYPES = {
    "jpg": "image/jpeg",
    "png": "image/png",
    "tiff": "image/tiff",
    "gif": "image/gif",
}


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of *data*."""
    return hashlib.sha256(data).hexdigest()


class ArtifactDescriptor(BaseModel):
    """Transport metadata for an artifact blob.

    Attributes:
        kind: Artifact kind ("ebook", "print", "cover")
        format: Format tag (e.g. "epub3", "pdf", "png")
        size: Size in bytes
        checksum: SHA-256 hex digest of the blob
        media_type: MIME type of the blob
    """

    kind: ArtifactKind
    format: str
    size: int
    checksum: str
    media_type: str


class ReflowableDocument(BaseModel):
    """An EPUB package.

    Attributes:
        data: The zipped EPUB container
        size: Size of data in bytes
        checksum: SHA-256 hex digest of data
        format_version: "epub3" or "epub2"
        toc_depth: Depth of the navigation hierarchy
        has_cover: Whether a cover image and cover page are embedded
        identifier: The unique urn:uuid identifier of this build
    """

    kind: Literal["ebook"] = "ebook"
    data: bytes = Field(repr=False)
    size: int
    checksum: str
    format_version: Literal["epub2", "epub3"] = "epub3"
    toc_depth: int = 1
    has_cover: bool = False
    identifier: str

    model_config = {"frozen": True}

    def descriptor(self) -> ArtifactDescriptor:
        return ArtifactDescriptor(
            kind=self.kind,
            format=self.format_version,
            size=self.size,
            checksum=self.checksum,
            media_type="application/epub+zip",
        )


class PrintDocument(BaseModel):
    """A print-ready PDF.

    Attributes:
        data: The PDF bytes
        size: Size of data in bytes
        checksum: SHA-256 hex digest of data
        page_count: Number of pages in the rendered PDF
        trim_size: Named trim size (e.g. "6x9")
        width_pt: Page width in points
        height_pt: Page height in points
        bleed: Whether the document was requested with bleed
        color_profile: "RGB" or "CMYK"
        sections: Rendered section order (title, copyright, contents, chapter-N)
    """

    kind: Literal["print"] = "print"
    data: bytes = Field(repr=False)
    size: int
    checksum: str
    page_count: int
    trim_size: str
    width_pt: float
    height_pt: float
    bleed: bool = False
    color_profile: Literal["RGB", "CMYK"] = "RGB"
    sections: tuple[str, ...] = ()

    model_config = {"frozen": True}

    def descriptor(self) -> ArtifactDescriptor:
        return ArtifactDescriptor(
            kind=self.kind,
            format="pdf",
            size=self.size,
            checksum=self.checksum,
            media_type="application/pdf",
        )


class CoverImage(BaseModel):
    """A front cover image.

    Attributes:
        data: The encoded image bytes
        size: Size of data in bytes
        checksum: SHA-256 hex digest of data
        width: Width in pixels
        height: Height in pixels
        dpi: Resolution in dots per inch
        encoding: Image encoding ("jpg", "png", "tiff")
        color_mode: "RGB", "CMYK" or "GRAY"
    """

    kind: Literal["cover"] = "cover"
    data: bytes = Field(repr=False)
    size: int
    checksum: str
    width: int
    height: int
    dpi: int = 72
    encoding: str
    color_mode: str = "RGB"

    model_config = {"frozen": True}

    @property
    def media_type(self) -> str:
        return IMAGE_MEDIA_TYPES.get(self.encoding, "application/octet-stream")

    def descriptor(self) -> ArtifactDescriptor:
        return ArtifactDescriptor(
            kind=self.kind,
            format=self.encoding,
            size=self.size,
            checksum=self.checksum,
            media_type=self.media_type,
        )


PackagedArtifact = Annotated[
    Union[ReflowableDocument, PrintDocument, CoverImage],
    Field(discriminator="kind"),
]
