"""Manual-upload destination adapter.

None of the supported destinations accepts automated uploads from a local
tool, so submission prepares an upload package: the artifact file (when an
output directory is configured) and step-by-step instructions for the
destination's web dashboard.
"""

import asyncio
import logging
import uuid
from pathlib import Path

from schemas.artifact import CoverImage, PrintDocument, ReflowableDocument
from schemas.destination import Destination
from schemas.metadata import PublicationMetadata
from schemas.project import SubmissionResult

logger = logging.getLogger(__name__)

# Destination -> (display name, dashboard URL)
DESTINATION_DASHBOARDS = {
    Destination.AMAZON_KDP: ("Amazon KDP", "https://kdp.amazon.com/en_US/"),
    Destination.INGRAM_SPARK: ("IngramSpark", "https://www.ingramspark.com"),
    Destination.DRAFT2DIGITAL: ("Draft2Digital", "https://www.draft2digital.com"),
    Destination.KOBO: ("Kobo Writing Life", "https://www.kobo.com/writinglife"),
    Destination.APPLE_BOOKS: ("Apple Books", "https://authors.apple.com"),
    Destination.GOOGLE_PLAY_BOOKS: ("Google Play Books", "https://play.google.com/books/publish"),
    Destination.BARNES_NOBLE: ("Barnes & Noble Press", "https://press.barnesandnoble.com"),
}

ARTIFACT_FILENAMES = {
    "ebook": "manuscript.epub",
    "print": "interior.pdf",
}

ARTIFACT_LABELS = {
    "ebook": "eBook manuscript",
    "print": "print interior",
    "cover": "cover image",
}


def artifact_filename(artifact: ReflowableDocument | PrintDocument | CoverImage) -> str:
    if isinstance(artifact, CoverImage):
        return f"cover.{artifact.encoding}"
    return ARTIFACT_FILENAMES[artifact.kind]


class ManualUploadAdapter:
    """Prepare artifacts for manual upload to a destination dashboard.

    Attributes:
        output_dir: Where upload packages are written, one directory per
            destination; None to only produce instructions
    """

    def __init__(self, output_dir: Path | None = None):
        self.output_dir = output_dir

    async def submit(
        self,
        artifact: ReflowableDocument | PrintDocument | CoverImage,
        metadata: PublicationMetadata,
        destination: Destination,
    ) -> SubmissionResult:
        name, url = DESTINATION_DASHBOARDS[destination]
        filename = artifact_filename(artifact)

        if self.output_dir is not None:
            path = self.output_dir / destination.value / filename
            await asyncio.to_thread(self._write, path, artifact.data)
            logger.debug(f"Wrote {path}")

        submission_id = str(uuid.uuid4())
        logger.info(f"Prepared {artifact.kind} upload {submission_id} for {name}")

        return SubmissionResult(
            destination=destination,
            artifact_kind=artifact.kind,
            status="ready_for_upload",
            submission_id=submission_id,
            instructions=self._instructions(name, url, artifact, filename, metadata),
            upload_url=url,
        )

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def _instructions(
        self,
        name: str,
        url: str,
        artifact: ReflowableDocument | PrintDocument | CoverImage,
        filename: str,
        metadata: PublicationMetadata,
    ) -> str:
        label = ARTIFACT_LABELS[artifact.kind]
        lines = [
            f"=== {name} Upload Instructions ===",
            "",
            f"1. Go to {url} and sign in",
            "2. Create a new title, or open the existing one",
            "3. Enter the following information:",
            f"   - Book Title: {metadata.title}",
            f"   - Author: {metadata.author}",
            f"   - Language: {metadata.language}",
        ]
        if metadata.categories:
            lines.append(f"   - Categories: {', '.join(metadata.categories)}")
        if metadata.keywords:
            lines.append(f"   - Keywords: {', '.join(metadata.keywords)}")
        lines.append(f"   - List Price: USD ${self._price(artifact, metadata):.2f}")
        lines += [
            f"4. Upload the {label}: {filename}",
            "5. Preview, then publish",
        ]
        if isinstance(artifact, PrintDocument):
            lines.append(f"   Trim size {artifact.trim_size}, {artifact.page_count} pages")
        return "\n".join(lines)

    def _price(
        self,
        artifact: ReflowableDocument | PrintDocument | CoverImage,
        metadata: PublicationMetadata,
    ) -> float:
        price = metadata.price
        if artifact.kind == "ebook" and price.ebook_usd is not None:
            return price.ebook_usd
        if artifact.kind == "print" and price.print_usd is not None:
            return price.print_usd
        return price.usd
