"""External collaborator interfaces and their local implementations."""

from .covers import FileCoverSource
from .destinations import ManualUploadAdapter
from .identifiers import (
    InMemoryIdentifierPool,
    PoolEntry,
    is_valid_isbn13,
    isbn13_check_digit,
    isbn13_to_isbn10,
    placeholder_isbns,
)
from .metadata import PassthroughMetadataOptimizer
from .protocols import (
    CatalogService,
    CoverSource,
    DestinationAdapter,
    IdentifierSource,
    MetadataOptimizer,
    RegistrationService,
)
from .registration import LocalCatalogService, LocalRegistrationService

__all__ = [
    "IdentifierSource",
    "RegistrationService",
    "CatalogService",
    "CoverSource",
    "MetadataOptimizer",
    "DestinationAdapter",
    "InMemoryIdentifierPool",
    "PoolEntry",
    "isbn13_check_digit",
    "isbn13_to_isbn10",
    "is_valid_isbn13",
    "placeholder_isbns",
    "LocalRegistrationService",
    "LocalCatalogService",
    "PassthroughMetadataOptimizer",
    "FileCoverSource",
    "ManualUploadAdapter",
]
