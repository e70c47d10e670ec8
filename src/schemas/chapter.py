"""Chapter schema."""

from pydantic import BaseModel, Field, model_validator


class Chapter(BaseModel):
    """A single chapter of a manuscript.

    Chapters are immutable once handed to the packaging engine. Positions
    must be unique and contiguous within a manuscript; that is checked by
    the packagers, not here, because it is a property of the whole list.

    Attributes:
        position: 1-based ordinal position in reading order
        title: Chapter title as displayed in the table of contents
        body: Plain-text chapter body; blank lines separate paragraphs
        word_count: Number of words in the body (computed when omitted)
    """

    position: int = Field(ge=1)
    title: str
    body: str = ""
    word_count: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _count_words(cls, data):
        if isinstance(data, dict) and not data.get("word_count"):
            data = {**data, "word_count": len(str(data.get("body", "")).split())}
        return data
