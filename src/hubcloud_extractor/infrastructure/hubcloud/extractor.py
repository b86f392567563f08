"""Two-stage hubcloud extraction pipeline.

Flow:
    1. GET the landing page and locate the redirect target.
    2. GET the download page and collect provider button hrefs.
    3. Classify every candidate (bounded concurrency, order preserved).

The pipeline is best effort: any failure yields an empty list.
"""

from __future__ import annotations

import asyncio

import structlog

from hubcloud_extractor.domain.entities import StreamLink
from hubcloud_extractor.domain.exceptions import FetchCancelledError, FetchError
from hubcloud_extractor.infrastructure.hubcloud.classifier import LinkClassifier
from hubcloud_extractor.infrastructure.hubcloud.fetcher import HubcloudFetcher
from hubcloud_extractor.infrastructure.hubcloud.markup import (
    extract_candidates,
    locate_redirect,
)

log = structlog.get_logger(__name__)


class HubcloudExtractor:
    """Extracts stream links from hubcloud landing pages."""

    def __init__(
        self,
        fetcher: HubcloudFetcher,
        classifier: LinkClassifier | None = None,
        max_concurrent_resolves: int = 5,
    ) -> None:
        self._fetcher = fetcher
        self._classifier = classifier or LinkClassifier(fetcher)
        self._max_concurrent = max_concurrent_resolves

    async def extract(
        self, url: str, cancel: asyncio.Event | None = None
    ) -> list[StreamLink]:
        """Return the stream links for *url*; never raises for upstream errors."""
        try:
            links = await self._extract(url, cancel)
        except FetchCancelledError:
            log.info("hubcloud_extract_cancelled", url=url)
            return []
        except FetchError as exc:
            log.warning("hubcloud_fetch_failed", url=exc.url, error=exc.reason)
            return []
        except Exception:
            log.exception("hubcloud_extract_error", url=url)
            return []

        log.info("hubcloud_extract_complete", url=url, count=len(links))
        return links

    async def _extract(
        self, url: str, cancel: asyncio.Event | None
    ) -> list[StreamLink]:
        landing_html = await self._fetcher.get_page(url, cancel=cancel)
        target = locate_redirect(landing_html, url)
        log.debug("hubcloud_redirect_located", url=url, target=target)

        download_html = await self._fetcher.get_page(target, cancel=cancel)
        candidates = [c for c in extract_candidates(download_html) if c]
        log.debug("hubcloud_candidates_found", target=target, count=len(candidates))

        return await self._classify_all(candidates, cancel)

    async def _classify_all(
        self, candidates: list[str], cancel: asyncio.Event | None
    ) -> list[StreamLink]:
        if not candidates:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def _classify_one(candidate: str) -> list[StreamLink]:
            async with semaphore:
                return await self._classifier.classify(candidate, cancel)

        tasks = [asyncio.create_task(_classify_one(c)) for c in candidates]
        try:
            # gather() keeps input order, so output follows anchor order.
            per_candidate = await asyncio.gather(*tasks)
        finally:
            # A failed sibling must not leave HEAD probes running.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        return [link for links in per_candidate for link in links]
