"""Outbound HTTP for the hubcloud pipeline.

Two request modes are used:

* **page** (``follow_redirects=True``): stage-1/stage-2 GETs.  Redirects
  are followed up to the client's ``max_redirects``; anything but a 2xx
  final status is a failure.
* **probe** (``follow_redirects=False``): HEAD requests that only want the
  ``Location`` header.  Any 2xx or 3xx status counts as success and the
  redirect target is never fetched.

Every request can be aborted through an ``asyncio.Event`` supplied by the
caller; cancellation surfaces as :class:`FetchCancelledError`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from contextlib import suppress
from typing import TypeVar

import httpx
import structlog

from hubcloud_extractor.domain.exceptions import FetchCancelledError, FetchError
from hubcloud_extractor.infrastructure.hubcloud.headers import BROWSER_HEADERS

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def await_cancellable(
    awaitable: Awaitable[T], url: str, cancel: asyncio.Event | None
) -> T:
    """Await *awaitable* unless *cancel* fires first.

    When the event wins the race the pending request task is cancelled
    (closing its connection) and :class:`FetchCancelledError` is raised.
    """
    if cancel is None:
        return await awaitable

    request = asyncio.ensure_future(awaitable)
    if cancel.is_set():
        request.cancel()
        with suppress(asyncio.CancelledError):
            await request
        raise FetchCancelledError(url, "cancelled before request")

    waiter = asyncio.ensure_future(cancel.wait())
    try:
        done, _ = await asyncio.wait(
            {request, waiter}, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        request.cancel()
        raise
    finally:
        waiter.cancel()

    if request in done:
        return request.result()

    request.cancel()
    with suppress(asyncio.CancelledError):
        await request
    raise FetchCancelledError(url, "cancelled")


class HubcloudFetcher:
    """Issues browser-impersonating requests through a shared httpx client."""

    def __init__(self, http_client: httpx.AsyncClient, timeout: float = 30.0) -> None:
        self._http = http_client
        self._timeout = timeout

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        follow_redirects: bool = True,
        cancel: asyncio.Event | None = None,
    ) -> httpx.Response:
        """Send one request and validate its status for the chosen mode.

        Raises:
            FetchCancelledError: *cancel* was set before the response arrived.
            FetchError: transport failure, invalid URL, too many redirects
                or a status outside the accepted range.
        """
        try:
            resp = await await_cancellable(
                self._http.request(
                    method,
                    url,
                    headers=dict(BROWSER_HEADERS),
                    follow_redirects=follow_redirects,
                    timeout=self._timeout,
                ),
                url,
                cancel,
            )
        except httpx.TimeoutException as exc:
            raise FetchError(url, "timeout") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc

        if follow_redirects:
            if not resp.is_success:
                raise FetchError(url, f"HTTP {resp.status_code}")
        elif not 200 <= resp.status_code < 400:
            raise FetchError(url, f"HTTP {resp.status_code}")

        log.debug(
            "hubcloud_fetched",
            method=method,
            url=url,
            status=resp.status_code,
            final_url=str(resp.url),
        )
        return resp

    async def get_page(self, url: str, cancel: asyncio.Event | None = None) -> str:
        """GET *url* following redirects and return the body text."""
        resp = await self.fetch(url, cancel=cancel)
        return resp.text

    async def probe_redirect(
        self, url: str, cancel: asyncio.Event | None = None
    ) -> str | None:
        """HEAD *url* without following redirects; return ``Location`` if any."""
        resp = await self.fetch(
            url, method="HEAD", follow_redirects=False, cancel=cancel
        )
        return resp.headers.get("location") or None
