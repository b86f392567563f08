from __future__ import annotations

import asyncio

from hubcloud_extractor.domain.entities import StreamLink
from hubcloud_extractor.domain.ports import LinkExtractorPort


class ExtractStreamLinksUseCase:
    """Runs one extraction under an optional deadline.

    The deadline is enforced by setting the cancellation event, so the
    extractor aborts its in-flight request and reports no links.
    """

    def __init__(
        self,
        *,
        extractor: LinkExtractorPort,
        timeout_seconds: float = 0.0,
    ) -> None:
        self._extractor = extractor
        self._timeout = timeout_seconds

    async def execute(
        self, url: str, cancel: asyncio.Event | None = None
    ) -> list[StreamLink]:
        cancel = cancel if cancel is not None else asyncio.Event()
        deadline: asyncio.TimerHandle | None = None
        if self._timeout > 0:
            deadline = asyncio.get_running_loop().call_later(self._timeout, cancel.set)
        try:
            return await self._extractor.extract(url, cancel)
        finally:
            if deadline is not None:
                deadline.cancel()
