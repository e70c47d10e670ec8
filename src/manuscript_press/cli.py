"""Command-line interface for manuscript-press."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from manuscript_press.clients import CoverClient
from manuscript_press.collaborators import InMemoryIdentifierPool, placeholder_isbns
from manuscript_press.config import PressConfig
from manuscript_press.errors import PublishError
from manuscript_press.packaging import TRIM_SIZES, EPUBPackager, PrintPackager, read_artifact
from manuscript_press.pipeline import LoggingEventChannel, Orchestrator
from manuscript_press.validation import RequirementsValidator
from schemas.destination import Destination
from schemas.manuscript import Manuscript
from schemas.project import PublishRequest

DEFAULT_OUTPUT_DIR = Path("./workspace/publish")
DESTINATION_CHOICES = [d.value for d in Destination]


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def _load_manuscript(path: Path, logger: logging.Logger) -> Manuscript | None:
    if not path.exists():
        logger.error(f"Manuscript not found: {path}")
        return None
    return Manuscript.load(path)


def package_epub(args: argparse.Namespace) -> int:
    """Execute the package-epub command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        manuscript = _load_manuscript(args.manuscript, logger)
        if manuscript is None:
            return 1

        cover = args.cover.read_bytes() if args.cover else None
        epub = EPUBPackager().package(
            manuscript.chapters,
            manuscript.metadata,
            cover=cover,
            require_cover=args.require_cover,
        )

        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_bytes(epub.data)

        logger.info(f"Created EPUB: {args.output}")
        logger.info(f"  Chapters: {len(manuscript.chapters)}")
        logger.info(f"  Cover: {'yes' if epub.has_cover else 'no'}")
        logger.info(f"  Identifier: {epub.identifier}")
        logger.info(f"  Size: {epub.size} bytes")

        return 0

    except Exception as e:
        logger.error(f"Failed to package EPUB: {e}")
        return 1


def package_pdf(args: argparse.Namespace) -> int:
    """Execute the package-pdf command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        manuscript = _load_manuscript(args.manuscript, logger)
        if manuscript is None:
            return 1

        pdf = PrintPackager().package(
            manuscript.chapters,
            manuscript.metadata,
            trim_size=args.trim,
            include_bleed=args.bleed,
            color_profile="CMYK" if args.cmyk else "RGB",
        )

        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_bytes(pdf.data)

        logger.info(f"Created PDF: {args.output}")
        logger.info(f"  Trim size: {pdf.trim_size}")
        logger.info(f"  Pages: {pdf.page_count}")
        logger.info(f"  Sections: {', '.join(pdf.sections)}")

        return 0

    except Exception as e:
        logger.error(f"Failed to package PDF: {e}")
        return 1


def validate(args: argparse.Namespace) -> int:
    """Execute the validate command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if every verdict passes, non-zero otherwise)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if not args.artifact.exists():
        logger.error(f"Artifact not found: {args.artifact}")
        return 1

    try:
        artifact = read_artifact(
            args.artifact.read_bytes(),
            bleed=args.bleed,
            color_profile="CMYK" if args.cmyk else "RGB",
            dpi=args.dpi,
        )
        metadata = None
        if args.metadata:
            manuscript = _load_manuscript(args.metadata, logger)
            if manuscript is None:
                return 1
            metadata = manuscript.metadata

        validator = RequirementsValidator()
        passed = True
        for destination in args.destination:
            verdict = validator.validate(artifact, destination, metadata)
            passed = passed and verdict.valid
            for diagnostic in verdict.diagnostics:
                log = logger.error if diagnostic.severity != "warning" else logger.warning
                log(f"  [{diagnostic.severity}] {diagnostic.code}: {diagnostic.message}")

        return 0 if passed else 1

    except Exception as e:
        logger.error(f"Failed to validate {args.artifact}: {e}")
        return 1


async def _publish(args: argparse.Namespace, request: PublishRequest, logger: logging.Logger):
    config = PressConfig.from_file(args.config)

    if args.isbn_pool:
        pool = InMemoryIdentifierPool.from_file(args.isbn_pool)
    else:
        logger.warning("No ISBN pool given; using placeholder ISBNs")
        pool = InMemoryIdentifierPool(placeholder_isbns(len(request.formats)))

    cover_client = None
    if args.cover is None and config.cover_service:
        cover_client = CoverClient({
            **config.cover.model_dump(),
            "retry_attempts": config.retry.attempts,
            "retry_delay": config.retry.backoff_base,
            **config.cover_service,
        })

    orchestrator = Orchestrator.with_local_collaborators(
        pool,
        config=config,
        cover_path=args.cover,
        covers=cover_client,
        output_dir=args.output,
    )
    try:
        return await orchestrator.publish(request, LoggingEventChannel(logger))
    finally:
        if cover_client is not None:
            await cover_client.close()


def publish(args: argparse.Namespace) -> int:
    """Execute the publish command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        manuscript = _load_manuscript(args.manuscript, logger)
        if manuscript is None:
            return 1

        request = PublishRequest(
            project_id=manuscript.project_id,
            chapters=manuscript.chapters,
            metadata=manuscript.metadata,
            formats=args.format or ["ebook"],
            destinations=args.destination or [],
            trim_size=args.trim,
            include_bleed=not args.no_bleed,
            color_profile="CMYK" if args.cmyk else "RGB",
            generate_cover=not args.no_cover,
            require_cover=args.require_cover,
        )
        project = asyncio.run(_publish(args, request, logger))

    except PublishError as e:
        logger.error(f"Publishing failed at {e.phase}: {e.__cause__ or e.message}")
        if e.project is not None:
            for verdict in e.project.verdicts:
                if not verdict.valid:
                    for diagnostic in verdict.critical:
                        logger.error(f"  {verdict.destination}: {diagnostic.code}: {diagnostic.message}")
        return 1
    except Exception as e:
        logger.error(f"Failed to publish: {e}")
        return 1

    logger.info(f"Published {request.project_id} (project {project.id})")
    for kind, identifier in project.identifiers.items():
        logger.info(f"  ISBN ({kind}): {identifier.isbn13}")
    for submission in project.submissions:
        logger.info(
            f"  {submission.destination} {submission.artifact_kind}: {submission.status}"
            + (f" ({submission.upload_url})" if submission.upload_url else "")
        )
    logger.info(f"  Total cost: ${project.costs.total:.2f}")
    logger.info(f"  Output: {args.output}")

    return 0 if all(s.status != "error" for s in project.submissions) else 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="manuscript-press",
        description="Package, validate and publish manuscripts as EPUB and print PDF",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    epub_parser = subparsers.add_parser(
        "package-epub",
        help="Package a manuscript as an EPUB",
        description="Build an EPUB 3 container from a manuscript JSON file.",
    )
    epub_parser.add_argument(
        "manuscript",
        type=Path,
        help="Path to the manuscript JSON file",
    )
    epub_parser.add_argument(
        "-o", "--output",
        type=Path,
        required=True,
        help="Path of the EPUB to write",
    )
    epub_parser.add_argument(
        "--cover",
        type=Path,
        help="Cover image to embed",
    )
    epub_parser.add_argument(
        "--require-cover",
        action="store_true",
        help="Fail instead of omitting an unusable cover",
    )
    epub_parser.set_defaults(func=package_epub)

    pdf_parser = subparsers.add_parser(
        "package-pdf",
        help="Render a manuscript as a print PDF",
        description="Render a print-ready PDF from a manuscript JSON file.",
    )
    pdf_parser.add_argument(
        "manuscript",
        type=Path,
        help="Path to the manuscript JSON file",
    )
    pdf_parser.add_argument(
        "-o", "--output",
        type=Path,
        required=True,
        help="Path of the PDF to write",
    )
    pdf_parser.add_argument(
        "--trim",
        choices=list(TRIM_SIZES),
        default="6x9",
        help="Trim size in inches (default: 6x9)",
    )
    pdf_parser.add_argument(
        "--bleed",
        action="store_true",
        help="Mark the PDF as set up with bleed",
    )
    pdf_parser.add_argument(
        "--cmyk",
        action="store_true",
        help="Mark the PDF as CMYK",
    )
    pdf_parser.set_defaults(func=package_pdf)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Check an artifact against destination requirements",
        description="Validate an EPUB, PDF or cover image for one or more destinations.",
    )
    validate_parser.add_argument(
        "artifact",
        type=Path,
        help="Path to the EPUB, PDF or cover image",
    )
    validate_parser.add_argument(
        "-d", "--destination",
        action="append",
        required=True,
        help=f"Destination to check against (repeatable): {', '.join(DESTINATION_CHOICES)}",
    )
    validate_parser.add_argument(
        "--metadata",
        type=Path,
        help="Manuscript JSON file whose metadata should also be checked",
    )
    validate_parser.add_argument(
        "--bleed",
        action="store_true",
        help="Treat a PDF as set up with bleed",
    )
    validate_parser.add_argument(
        "--cmyk",
        action="store_true",
        help="Treat a PDF as CMYK",
    )
    validate_parser.add_argument(
        "--dpi",
        type=int,
        help="Cover resolution to assume instead of the one stored in the image",
    )
    validate_parser.set_defaults(func=validate)

    publish_parser = subparsers.add_parser(
        "publish",
        help="Run the full publishing pipeline",
        description="Claim ISBNs, prepare filings, package, validate and prepare uploads.",
    )
    publish_parser.add_argument(
        "manuscript",
        type=Path,
        help="Path to the manuscript JSON file",
    )
    publish_parser.add_argument(
        "-f", "--format",
        action="append",
        choices=["ebook", "print"],
        help="Format to produce (repeatable; default: ebook)",
    )
    publish_parser.add_argument(
        "-d", "--destination",
        action="append",
        choices=DESTINATION_CHOICES,
        help="Destination to prepare uploads for (repeatable)",
    )
    publish_parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory for upload packages (default: {DEFAULT_OUTPUT_DIR})",
    )
    publish_parser.add_argument(
        "--config",
        type=Path,
        help="Path to a JSON configuration file",
    )
    publish_parser.add_argument(
        "--isbn-pool",
        type=Path,
        help="JSON file listing available ISBNs",
    )
    publish_parser.add_argument(
        "--cover",
        type=Path,
        help="Cover image to use instead of generating one",
    )
    publish_parser.add_argument(
        "--no-cover",
        action="store_true",
        help="Skip cover generation",
    )
    publish_parser.add_argument(
        "--require-cover",
        action="store_true",
        help="Fail if the cover cannot be embedded",
    )
    publish_parser.add_argument(
        "--trim",
        choices=list(TRIM_SIZES),
        default="6x9",
        help="Trim size of the print edition (default: 6x9)",
    )
    publish_parser.add_argument(
        "--no-bleed",
        action="store_true",
        help="Set up the print edition without bleed",
    )
    publish_parser.add_argument(
        "--cmyk",
        action="store_true",
        help="Produce the print edition as CMYK",
    )
    publish_parser.set_defaults(func=publish)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
