"""Interfaces of the external collaborators the orchestrator drives.

Anything with matching async methods can be plugged into the Orchestrator;
the local implementations in this package are one such set.
"""

from typing import Protocol

from schemas.artifact import CoverImage, PrintDocument, ReflowableDocument
from schemas.destination import Destination
from schemas.metadata import PublicationMetadata
from schemas.project import (
    AssignedIdentifier,
    PublishingFormat,
    RegistrationHandle,
    SubmissionResult,
)


class IdentifierSource(Protocol):
    """Claims an unused ISBN for a format.

    Raises OutOfInventoryError when nothing is left. Two concurrent calls
    never receive the same identifier.
    """

    async def acquire(self, format: PublishingFormat) -> AssignedIdentifier: ...


class RegistrationService(Protocol):
    """Prepares a copyright registration filing."""

    async def register(self, metadata: PublicationMetadata) -> RegistrationHandle: ...


class CatalogService(Protocol):
    """Applies for a library catalog number."""

    async def register(self, metadata: PublicationMetadata) -> RegistrationHandle: ...


class CoverSource(Protocol):
    """Produces encoded front cover image bytes."""

    async def generate(
        self,
        title: str,
        author: str,
        genre: str,
        style_preferences: str | None = None,
    ) -> bytes: ...


class MetadataOptimizer(Protocol):
    """Returns improved metadata for discoverability."""

    async def optimize(self, metadata: PublicationMetadata) -> PublicationMetadata: ...


class DestinationAdapter(Protocol):
    """Submits one artifact to one destination."""

    async def submit(
        self,
        artifact: ReflowableDocument | PrintDocument | CoverImage,
        metadata: PublicationMetadata,
        destination: Destination,
    ) -> SubmissionResult: ...
