"""Port for turning a landing page URL into stream links."""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

from hubcloud_extractor.domain.entities import StreamLink


@runtime_checkable
class LinkExtractorPort(Protocol):
    """Extracts playable stream links from a hosting landing page.

    Implementations own the site-specific scraping (redirect discovery,
    button selection, provider classification).
    """

    async def extract(
        self, url: str, cancel: asyncio.Event | None = None
    ) -> list[StreamLink]:
        """Return the stream links found for *url*.

        Never raises for upstream problems; an empty list means nothing
        was recognised or the pages could not be fetched.
        """
        ...
