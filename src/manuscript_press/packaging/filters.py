"""Jinja2 filters for chapter and book templates.

These filters are registered on every packaging template environment. They
return plain strings or lists of strings; escaping is left to Jinja2's
autoescaping so that markup-significant characters in titles and bodies
always reach the output escaped.
"""

import re
from datetime import date


def paragraphs(body: str) -> list[str]:
    """Split a plain-text chapter body into paragraphs.

    Paragraphs are separated by one or more blank lines. Single newlines
    inside a paragraph are folded into spaces.

    Examples:
        >>> paragraphs("One.\\n\\nTwo\\nlines.")
        ['One.', 'Two lines.']
    """
    if not body:
        return []
    blocks = re.split(r"\n\s*\n", body.replace("\r\n", "\n"))
    return [" ".join(block.split()) for block in blocks if block.strip()]


def strip_markup(text: str) -> str:
    """Remove anything that looks like an HTML tag.

    Manuscripts exported from rich editors sometimes carry inline tags; the
    print edition renders bodies as text, so tags are dropped rather than
    escaped.

    Examples:
        >>> strip_markup("<p>Hello <em>there</em></p>")
        'Hello there'
    """
    if not text:
        return ""
    return re.sub(r"<[^>]*>", "", text).strip()


def format_date(value: date | None) -> str:
    """Format a date as e.g. "January 29, 2026"."""
    if value is None:
        return ""
    return value.strftime("%B %d, %Y").replace(" 0", " ")


def year(value: date | None) -> str:
    """Return the four-digit year of a date, or the current year."""
    return str((value or date.today()).year)


FILTERS = {
    "paragraphs": paragraphs,
    "strip_markup": strip_markup,
    "format_date": format_date,
    "year": year,
}
