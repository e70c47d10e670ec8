"""In-memory ISBN pool.

The pool holds purchased ISBNs, each optionally earmarked for a format.
Claiming prefers an identifier earmarked for the requested format, then
falls back to an unearmarked one, and removes it from the pool in the same
step, under a lock.
"""

import asyncio
import json
import logging
import random
from pathlib import Path

from pydantic import BaseModel

from manuscript_press.errors import OutOfInventoryError
from schemas.project import AssignedIdentifier, PublishingFormat

logger = logging.getLogger(__name__)


def isbn13_check_digit(first12: str) -> str:
    """Compute the ISBN-13 check digit for the first twelve digits.

    Examples:
        >>> isbn13_check_digit("978030640615")
        '7'
    """
    if len(first12) != 12 or not first12.isdigit():
        raise ValueError(f"Expected 12 digits, got '{first12}'")
    total = sum(int(d) * (1 if i % 2 == 0 else 3) for i, d in enumerate(first12))
    return str((10 - total % 10) % 10)


def is_valid_isbn13(isbn: str) -> bool:
    digits = isbn.replace("-", "")
    return (
        len(digits) == 13
        and digits.isdigit()
        and isbn13_check_digit(digits[:12]) == digits[12]
    )


def isbn13_to_isbn10(isbn13: str) -> str:
    """Convert a 978-prefixed ISBN-13 to ISBN-10.

    ISBNs with the 979 prefix have no ISBN-10 form; an empty string is
    returned for them.

    Examples:
        >>> isbn13_to_isbn10("9780306406157")
        '0306406152'
    """
    digits = isbn13.replace("-", "")
    if not digits.startswith("978"):
        return ""
    core = digits[3:12]
    total = sum(int(d) * (10 - i) for i, d in enumerate(core))
    check = (11 - total % 11) % 11
    return core + ("X" if check == 10 else str(check))


def placeholder_isbns(count: int, seed: int | None = None) -> list[str]:
    """Generate valid-looking 978 ISBNs for local runs.

    These are not registered identifiers and must never be printed in a
    published book.
    """
    rng = random.Random(seed)
    isbns = []
    for _ in range(count):
        first12 = "978" + "".join(str(rng.randint(0, 9)) for _ in range(9))
        isbns.append(first12 + isbn13_check_digit(first12))
    return isbns


class PoolEntry(BaseModel):
    """One unclaimed ISBN."""

    isbn13: str
    format: PublishingFormat | None = None


class InMemoryIdentifierPool:
    """ISBN pool backed by a list, with atomic claims.

    Example:
        pool = InMemoryIdentifierPool(["9780306406157"])
        identifier = await pool.acquire("ebook")
    """

    def __init__(self, entries: list[PoolEntry | str] | None = None):
        self._available: list[PoolEntry] = []
        for entry in entries or []:
            if isinstance(entry, str):
                entry = PoolEntry(isbn13=entry)
            if not is_valid_isbn13(entry.isbn13):
                raise ValueError(f"Invalid ISBN-13: {entry.isbn13}")
            self._available.append(entry)
        self._lock = asyncio.Lock()

    @classmethod
    def from_file(cls, path: Path) -> "InMemoryIdentifierPool":
        """Load a pool from a JSON list of ISBN strings or entry objects."""
        data = json.loads(Path(path).read_text())
        entries = [
            PoolEntry(isbn13=item) if isinstance(item, str) else PoolEntry.model_validate(item)
            for item in data
        ]
        logger.info(f"Loaded {len(entries)} ISBNs from {path}")
        return cls(entries)

    @property
    def available(self) -> int:
        return len(self._available)

    async def acquire(self, format: PublishingFormat) -> AssignedIdentifier:
        """Claim an ISBN for *format*.

        Raises:
            OutOfInventoryError: If no suitable ISBN is left
        """
        async with self._lock:
            entry = self._take(format)

        isbn13 = entry.isbn13.replace("-", "")
        logger.info(f"Assigned ISBN {isbn13} to {format}")
        return AssignedIdentifier(
            isbn13=isbn13,
            isbn10=isbn13_to_isbn10(isbn13),
            format=format,
        )

    def _take(self, format: PublishingFormat) -> PoolEntry:
        for preferred in (format, None):
            for index, entry in enumerate(self._available):
                if entry.format == preferred:
                    return self._available.pop(index)
        raise OutOfInventoryError(
            "No available ISBNs. Please purchase more ISBNs before publishing."
        )
