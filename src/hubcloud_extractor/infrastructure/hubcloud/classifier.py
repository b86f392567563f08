"""Provider classification for download-page candidates.

Each provider is one :class:`LinkRule` (label, predicate, transform).
Rules are evaluated in table order and are **not** mutually exclusive:
every rule whose predicate matches contributes a link.  A transform may
rewrite the link or return ``None`` to drop it.  Rules flagged
``carries_forward`` also replace the link that later rules match and
transform; the others only change their own entry.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Optional

import structlog

from hubcloud_extractor.domain.entities import StreamLink, StreamServer
from hubcloud_extractor.domain.exceptions import FetchCancelledError, FetchError
from hubcloud_extractor.infrastructure.hubcloud.fetcher import HubcloudFetcher

log = structlog.get_logger(__name__)

LinkTransform = Callable[
    [str, HubcloudFetcher, Optional[asyncio.Event]], Awaitable[Optional[str]]
]


@dataclass(frozen=True)
class LinkRule:
    """One provider rule of the classification table."""

    server: StreamServer
    matches: Callable[[str], bool]
    transform: LinkTransform | None = None
    carries_forward: bool = False


# ------------------------------------------------------------------
# Predicates
# ------------------------------------------------------------------


def is_worker_link(link: str) -> bool:
    # /?id= links are re-hosted hubcloud pages, handled by that rule.
    return ".dev" in link and "/?id=" not in link


def is_pixeldrain_link(link: str) -> bool:
    return "pixeld" in link


def is_hubcloud_link(link: str) -> bool:
    return "hubcloud" in link or "/?id=" in link


def is_cf_storage_link(link: str) -> bool:
    return "cloudflarestorage" in link


def is_fastdl_link(link: str) -> bool:
    return "fastdl" in link


def is_hubcdn_link(link: str) -> bool:
    return "hubcdn" in link


# ------------------------------------------------------------------
# Transforms
# ------------------------------------------------------------------


def normalize_pixeldrain_link(link: str) -> str:
    """Rewrite a pixeldrain share page to its direct download API URL.

    ``https://pixeldrain.net/u/abc`` -> ``https://pixeldrain.net/api/file/abc?download``
    Links already pointing at the API are returned unchanged.
    """
    if "api" in link:
        return link
    segments = link.split("/")
    token = segments[-1]
    base = "/".join(segments[:-2])
    return f"{base}/api/file/{token}?download"


def strip_link_param(location: str) -> str:
    """Return the part after ``link=`` when the redirect wraps the target."""
    if "link=" in location:
        return location.split("link=")[1]
    return location


async def _pixeldrain_transform(
    link: str, _fetcher: HubcloudFetcher, _cancel: asyncio.Event | None
) -> str | None:
    return normalize_pixeldrain_link(link)


async def resolve_hubcloud_link(
    link: str, fetcher: HubcloudFetcher, cancel: asyncio.Event | None
) -> str | None:
    """Resolve a re-hosted link via a HEAD request that does not follow redirects.

    Returns the ``Location`` target (unwrapped from ``link=``), the link
    itself when the response has no redirect, or ``None`` when the request
    fails.  Cancellation is not absorbed here.
    """
    try:
        location = await fetcher.probe_redirect(link, cancel=cancel)
    except FetchCancelledError:
        raise
    except FetchError as exc:
        log.warning("hubcloud_resolve_failed", url=link, error=exc.reason)
        return None

    if not location:
        return link
    return strip_link_param(location)


DEFAULT_RULES: tuple[LinkRule, ...] = (
    LinkRule(StreamServer.CF_WORKER, is_worker_link),
    LinkRule(
        StreamServer.PIXELDRAIN,
        is_pixeldrain_link,
        _pixeldrain_transform,
        carries_forward=True,
    ),
    LinkRule(StreamServer.HUBCLOUD, is_hubcloud_link, resolve_hubcloud_link),
    LinkRule(StreamServer.CF_STORAGE, is_cf_storage_link),
    LinkRule(StreamServer.FAST_DL, is_fastdl_link),
    LinkRule(StreamServer.HUB_CDN, is_hubcdn_link),
)


class LinkClassifier:
    """Applies the rule table to single candidates."""

    def __init__(
        self,
        fetcher: HubcloudFetcher,
        rules: Sequence[LinkRule] = DEFAULT_RULES,
    ) -> None:
        self._fetcher = fetcher
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[LinkRule, ...]:
        return self._rules

    async def classify(
        self, candidate: str, cancel: asyncio.Event | None = None
    ) -> list[StreamLink]:
        """Return the links produced by every matching rule, in rule order."""
        links: list[StreamLink] = []
        current = candidate
        for rule in self._rules:
            if not rule.matches(current):
                continue
            link: str | None = current
            if rule.transform is not None:
                link = await rule.transform(current, self._fetcher, cancel)
            if link is None:
                log.debug("hubcloud_candidate_dropped", server=rule.server.value)
                continue
            links.append(StreamLink(server=rule.server, link=link))
            if rule.carries_forward:
                current = link
        return links
