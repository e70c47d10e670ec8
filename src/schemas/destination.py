"""Distribution destinations."""

from enum import StrEnum


class Destination(StrEnum):
    """Retail and distribution channels a project can be submitted to."""

    AMAZON_KDP = "amazon_kdp"
    INGRAM_SPARK = "ingram_spark"
    DRAFT2DIGITAL = "draft2digital"
    KOBO = "kobo"
    APPLE_BOOKS = "apple_books"
    GOOGLE_PLAY_BOOKS = "google_play_books"
    BARNES_NOBLE = "barnes_noble"
