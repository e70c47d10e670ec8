"""Manuscript file schema.

A manuscript file is the JSON input of the command-line interface:

    {
      "project_id": "my-novel",
      "metadata": {"title": "...", "author": "...", ...},
      "chapters": [{"position": 1, "title": "...", "body": "..."}, ...]
    }
"""

from pathlib import Path

from pydantic import BaseModel

from .chapter import Chapter
from .metadata import PublicationMetadata


class Manuscript(BaseModel):
    """Chapters and metadata of a book, as read from disk."""

    project_id: str = "manuscript"
    metadata: PublicationMetadata
    chapters: list[Chapter] = []

    model_config = {"extra": "allow"}

    @classmethod
    def load(cls, path: Path) -> "Manuscript":
        """Load and validate a manuscript JSON file."""
        return cls.model_validate_json(path.read_text())
