"""Cover service client for generating cover art over HTTP."""

import logging
from typing import Any

from .client import Client
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_STYLE = "professional, bestseller quality"


class CoverClient(Client):
    """Client for an image-generation cover service.

    The service takes a JSON cover request and answers either with the image
    bytes directly (an ``image/*`` content type) or with a JSON body naming
    where to download the image:

        POST /covers  {"title": ..., "author": ..., "genre": ..., "style": ...}
        -> 200 image/png
        -> 200 {"image_url": "https://.../cover.png"}

    Implements the CoverSource interface used by the orchestrator.

    Example:
        config = {"base_url": "https://covers.example.org", "timeout": 120}
        async with CoverClient(config) as client:
            data = await client.generate("Title", "Author", "fiction")
    """

    API_PATH = "/covers"

    @property
    def width(self) -> int:
        return int(self._config.get("width", 1600))

    @property
    def height(self) -> int:
        return int(self._config.get("height", 2560))

    @property
    def dpi(self) -> int:
        return int(self._config.get("dpi", 300))

    async def fetch(self, request: dict[str, Any]) -> bytes:
        """Send a cover request and return the image bytes.

        Raises:
            ValidationError: If the service answers with neither an image
                nor an image URL
            APIError: If the service returns a non-2xx response
            ConnectionError: If the network connection fails
        """
        response = await self.post(self.API_PATH, json=request)
        content_type = response.headers.get("content-type", "")

        if content_type.startswith("image/"):
            return response.content

        try:
            body = response.json()
        except ValueError as e:
            raise ValidationError(
                f"Cover service returned unexpected content type '{content_type}'"
            ) from e

        image_url = body.get("image_url") if isinstance(body, dict) else None
        if not image_url:
            raise ValidationError(
                "Cover service response has no image_url",
                errors=[str(body)[:200]],
            )

        logger.debug(f"Downloading generated cover from {image_url}")
        image = await self.get(image_url)
        return image.content

    async def generate(
        self,
        title: str,
        author: str,
        genre: str,
        style_preferences: str | None = None,
    ) -> bytes:
        """Generate a front cover for a book.

        Args:
            title: Book title
            author: Author name
            genre: Genre used to pick the visual style
            style_preferences: Free-text style hints

        Returns:
            Encoded image bytes
        """
        logger.info(f"Requesting cover for '{title}' ({genre})")
        return await self.fetch(self._build_request(title, author, genre, style_preferences))

    def _build_request(
        self,
        title: str,
        author: str,
        genre: str,
        style_preferences: str | None,
    ) -> dict[str, Any]:
        return {
            "title": title,
            "author": author,
            "genre": genre,
            "style": style_preferences or DEFAULT_STYLE,
            "width": self.width,
            "height": self.height,
            "dpi": self.dpi,
        }

