"""Local metadata optimizer."""

import logging

from schemas.metadata import PublicationMetadata

logger = logging.getLogger(__name__)


def _normalize(text: str | None) -> str | None:
    if text is None:
        return None
    return " ".join(text.split())


def _dedupe(values: list[str]) -> list[str]:
    """Drop blanks and case-insensitive repeats, keeping first occurrences."""
    seen = set()
    result = []
    for value in values:
        value = " ".join(value.split())
        key = value.casefold()
        if value and key not in seen:
            seen.add(key)
            result.append(value)
    return result


class PassthroughMetadataOptimizer:
    """Tidy metadata without changing its meaning.

    Collapses whitespace and removes duplicate categories and keywords.
    Never drops entries for being over a count limit; the validator reports
    those instead.
    """

    async def optimize(self, metadata: PublicationMetadata) -> PublicationMetadata:
        optimized = metadata.model_copy(update={
            "title": _normalize(metadata.title),
            "subtitle": _normalize(metadata.subtitle) or None,
            "author": _normalize(metadata.author),
            "description": metadata.description.strip(),
            "categories": _dedupe(metadata.categories),
            "keywords": _dedupe(metadata.keywords),
        })
        removed = (
            len(metadata.categories) - len(optimized.categories)
            + len(metadata.keywords) - len(optimized.keywords)
        )
        if removed:
            logger.debug(f"Removed {removed} duplicate categories/keywords")
        return optimized
