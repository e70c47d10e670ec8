"""Publication metadata schemas."""

from datetime import date

from pydantic import BaseModel, Field

MAX_CATEGORIES = 3
MAX_KEYWORDS = 7


class Price(BaseModel):
    """List price in US dollars, with optional per-format overrides."""

    usd: float = Field(ge=0)
    ebook_usd: float | None = None
    print_usd: float | None = None


class PublicationMetadata(BaseModel):
    """Bibliographic and discovery metadata for a publication.

    Category and keyword counts are soft limits: a record with more than
    MAX_CATEGORIES categories or MAX_KEYWORDS keywords is still accepted
    here and reported by the requirements validator instead.

    Attributes:
        title: Book title
        subtitle: Optional subtitle
        author: Primary author name
        language: BCP 47 language tag
        description: Marketing description
        categories: Subject category codes (e.g. BISAC)
        keywords: Discovery keywords
        publication_date: Date of publication
        price: List price
        publisher: Imprint name printed on the rights page
        genre: Genre hint passed to the cover source
        rights: Rights statement for the copyright page
    """

    title: str
    subtitle: str | None = None
    author: str
    language: str = "en"
    description: str = ""
    categories: list[str] = []
    keywords: list[str] = []
    publication_date: date = Field(default_factory=date.today)
    price: Price = Field(default_factory=lambda: Price(usd=0))
    publisher: str | None = None
    genre: str = "fiction"
    rights: str = "All rights reserved."

    model_config = {"extra": "allow"}
