"""Tests for the two-stage HubcloudExtractor pipeline."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock, patch

import httpx
import pytest
import respx
from conftest import (
    DOWNLOAD_URL,
    LANDING_URL,
    download_page,
    encode_redirect,
    landing_page,
)

from hubcloud_extractor.domain.entities import StreamLink, StreamServer
from hubcloud_extractor.domain.exceptions import FetchCancelledError
from hubcloud_extractor.domain.ports import LinkExtractorPort
from hubcloud_extractor.infrastructure.hubcloud import (
    HubcloudExtractor,
    HubcloudFetcher,
    LinkClassifier,
)

_REHOSTED = "https://hubcloud.example/file/xyz"
_REHOSTED_BROKEN = "https://hubcloud.example/file/broken"

_DOWNLOAD_HTML = download_page(
    ("btn btn-success btn-lg h6", "https://files.worker.dev/movie.mkv"),
    ("btn btn-danger", "https://pixeldrain.net/u/abc123"),
    ("btn btn-secondary", _REHOSTED),
    ("btn btn-danger", "https://x.r2.cloudflarestorage.com/movie.mkv"),
    ("btn btn-secondary", "https://fastdl.example/movie.mkv"),
    ("btn btn-danger", "https://hubcdn.example/movie.mkv"),
    ("btn btn-secondary", "https://t.me/unrelated"),
    ("btn btn-danger", None),
)


def _mock_download_flow() -> None:
    respx.get(LANDING_URL).respond(200, text=landing_page(script_url=DOWNLOAD_URL))
    respx.get(DOWNLOAD_URL).respond(200, text=_DOWNLOAD_HTML)
    respx.head(_REHOSTED).respond(
        302,
        headers={
            "Location": "https://cdn.example/x?link=https://real.example/movie.mkv"
        },
    )


class TestHubcloudExtractor:
    def test_implements_port(self) -> None:
        extractor = HubcloudExtractor(HubcloudFetcher(httpx.AsyncClient()))
        assert isinstance(extractor, LinkExtractorPort)

    @respx.mock
    @pytest.mark.asyncio()
    async def test_full_pipeline(self) -> None:
        _mock_download_flow()

        async with httpx.AsyncClient() as client:
            links = await HubcloudExtractor(HubcloudFetcher(client)).extract(
                LANDING_URL
            )

        assert links == [
            StreamLink(StreamServer.CF_WORKER, "https://files.worker.dev/movie.mkv"),
            StreamLink(
                StreamServer.PIXELDRAIN,
                "https://pixeldrain.net/api/file/abc123?download",
            ),
            StreamLink(StreamServer.HUBCLOUD, "https://real.example/movie.mkv"),
            StreamLink(
                StreamServer.CF_STORAGE,
                "https://x.r2.cloudflarestorage.com/movie.mkv",
            ),
            StreamLink(StreamServer.FAST_DL, "https://fastdl.example/movie.mkv"),
            StreamLink(StreamServer.HUB_CDN, "https://hubcdn.example/movie.mkv"),
        ]
        assert all(link.type == "mkv" for link in links)

    @respx.mock
    @pytest.mark.asyncio()
    async def test_repeated_extraction_is_identical(self) -> None:
        _mock_download_flow()

        async with httpx.AsyncClient() as client:
            extractor = HubcloudExtractor(HubcloudFetcher(client))
            first = await extractor.extract(LANDING_URL)
            second = await extractor.extract(LANDING_URL)

        assert first == second
        assert [link.to_dict() for link in first] == [
            link.to_dict() for link in second
        ]

    @respx.mock
    @pytest.mark.asyncio()
    async def test_order_preserved_with_serial_resolution(self) -> None:
        _mock_download_flow()

        async with httpx.AsyncClient() as client:
            extractor = HubcloudExtractor(
                HubcloudFetcher(client), max_concurrent_resolves=1
            )
            links = await extractor.extract(LANDING_URL)

        assert [link.server for link in links] == [
            StreamServer.CF_WORKER,
            StreamServer.PIXELDRAIN,
            StreamServer.HUBCLOUD,
            StreamServer.CF_STORAGE,
            StreamServer.FAST_DL,
            StreamServer.HUB_CDN,
        ]

    @respx.mock
    @pytest.mark.asyncio()
    async def test_failed_resolution_drops_only_that_candidate(self) -> None:
        respx.get(LANDING_URL).respond(200, text=landing_page(script_url=DOWNLOAD_URL))
        respx.get(DOWNLOAD_URL).respond(
            200,
            text=download_page(
                ("btn btn-danger", _REHOSTED_BROKEN),
                ("btn btn-secondary", "https://fastdl.example/movie.mkv"),
            ),
        )
        respx.head(_REHOSTED_BROKEN).mock(side_effect=httpx.ConnectError("refused"))

        async with httpx.AsyncClient() as client:
            links = await HubcloudExtractor(HubcloudFetcher(client)).extract(
                LANDING_URL
            )

        assert links == [
            StreamLink(StreamServer.FAST_DL, "https://fastdl.example/movie.mkv")
        ]

    @respx.mock
    @pytest.mark.asyncio()
    async def test_encoded_redirect_followed(self) -> None:
        go_url = f"https://go.example/?r={encode_redirect(DOWNLOAD_URL)}"
        respx.get(LANDING_URL).respond(200, text=landing_page(script_url=go_url))
        download = respx.get(DOWNLOAD_URL).respond(
            200, text=download_page(("btn btn-danger", "https://hubcdn.example/a"))
        )

        async with httpx.AsyncClient() as client:
            links = await HubcloudExtractor(HubcloudFetcher(client)).extract(
                LANDING_URL
            )

        assert download.called
        assert links == [StreamLink(StreamServer.HUB_CDN, "https://hubcdn.example/a")]

    @respx.mock
    @pytest.mark.asyncio()
    async def test_relative_redirect_resolved_against_input(self) -> None:
        source = "https://host.example/path"
        respx.get(source).respond(200, text=landing_page(icon_href="/share/xyz"))
        stage2 = respx.get("https://host.example/share/xyz").respond(
            200, text=download_page(("btn btn-danger", "https://hubcdn.example/a"))
        )

        async with httpx.AsyncClient() as client:
            links = await HubcloudExtractor(HubcloudFetcher(client)).extract(source)

        assert stage2.called
        assert len(links) == 1

    @respx.mock
    @pytest.mark.asyncio()
    async def test_no_redirect_refetches_input(self) -> None:
        page = download_page(("btn btn-danger", "https://hubcdn.example/a"))
        route = respx.get(LANDING_URL).respond(200, text=page)

        async with httpx.AsyncClient() as client:
            links = await HubcloudExtractor(HubcloudFetcher(client)).extract(
                LANDING_URL
            )

        assert route.call_count == 2
        assert links == [StreamLink(StreamServer.HUB_CDN, "https://hubcdn.example/a")]

    @respx.mock
    @pytest.mark.asyncio()
    async def test_stage1_failure_returns_empty(self) -> None:
        respx.get(LANDING_URL).respond(500)

        async with httpx.AsyncClient() as client:
            links = await HubcloudExtractor(HubcloudFetcher(client)).extract(
                LANDING_URL
            )

        assert links == []

    @respx.mock
    @pytest.mark.asyncio()
    async def test_stage2_failure_returns_empty(self) -> None:
        respx.get(LANDING_URL).respond(200, text=landing_page(script_url=DOWNLOAD_URL))
        respx.get(DOWNLOAD_URL).mock(side_effect=httpx.ConnectTimeout("slow"))

        async with httpx.AsyncClient() as client:
            links = await HubcloudExtractor(HubcloudFetcher(client)).extract(
                LANDING_URL
            )

        assert links == []

    @respx.mock
    @pytest.mark.asyncio()
    async def test_nothing_recognised_returns_empty(self) -> None:
        respx.get(LANDING_URL).respond(200, text=landing_page(script_url=DOWNLOAD_URL))
        respx.get(DOWNLOAD_URL).respond(
            200, text=download_page(("btn btn-danger", "https://t.me/x"))
        )

        async with httpx.AsyncClient() as client:
            links = await HubcloudExtractor(HubcloudFetcher(client)).extract(
                LANDING_URL
            )

        assert links == []

    @pytest.mark.asyncio()
    async def test_malformed_input_url_returns_empty(self) -> None:
        async with httpx.AsyncClient() as client:
            links = await HubcloudExtractor(HubcloudFetcher(client)).extract(
                "definitely not a url"
            )

        assert links == []

    @pytest.mark.asyncio()
    async def test_unexpected_error_returns_empty(self) -> None:
        async with httpx.AsyncClient() as client:
            extractor = HubcloudExtractor(HubcloudFetcher(client))
            with patch.object(
                HubcloudFetcher, "get_page", side_effect=RuntimeError("boom")
            ):
                links = await extractor.extract(LANDING_URL)

        assert links == []

    @pytest.mark.asyncio()
    async def test_cancellation_mid_flight_returns_empty(self) -> None:
        async def _slow(*_args: object, **_kwargs: object) -> httpx.Response:
            await asyncio.sleep(30)
            return httpx.Response(200)

        cancel = asyncio.Event()
        asyncio.get_running_loop().call_later(0.05, cancel.set)
        async with httpx.AsyncClient() as client:
            extractor = HubcloudExtractor(HubcloudFetcher(client))
            with patch.object(client, "request", side_effect=_slow):
                links = await asyncio.wait_for(
                    extractor.extract(LANDING_URL, cancel=cancel), 5
                )

        assert links == []

    @respx.mock
    @pytest.mark.asyncio()
    async def test_cancellation_during_resolution_returns_empty(self) -> None:
        respx.get(LANDING_URL).respond(200, text=landing_page(script_url=DOWNLOAD_URL))
        cancel = asyncio.Event()
        html = download_page(
            ("btn btn-secondary", "https://fastdl.example/movie.mkv"),
            ("btn btn-danger", _REHOSTED),
        )

        def _serve_and_cancel(request: httpx.Request) -> httpx.Response:
            cancel.set()
            return httpx.Response(200, text=html)

        respx.get(DOWNLOAD_URL).mock(side_effect=_serve_and_cancel)
        head = respx.head(_REHOSTED).respond(302, headers={"Location": "https://a.b"})

        async with httpx.AsyncClient() as client:
            links = await HubcloudExtractor(HubcloudFetcher(client)).extract(
                LANDING_URL, cancel=cancel
            )

        assert links == []
        assert not head.called

    @respx.mock
    @pytest.mark.asyncio()
    async def test_failed_candidate_cancels_pending_siblings(self) -> None:
        respx.get(LANDING_URL).respond(200, text=landing_page(script_url=DOWNLOAD_URL))
        respx.get(DOWNLOAD_URL).respond(
            200,
            text=download_page(
                ("btn btn-danger", "https://fail.example/a"),
                ("btn btn-danger", "https://slow.example/b"),
            ),
        )
        sibling_cancelled = asyncio.Event()

        async def _classify(
            candidate: str, _cancel: asyncio.Event | None = None
        ) -> list[StreamLink]:
            if "fail" in candidate:
                await asyncio.sleep(0.01)
                raise FetchCancelledError(candidate, "cancelled")
            try:
                await asyncio.sleep(30)
            except asyncio.CancelledError:
                sibling_cancelled.set()
                raise
            return []

        classifier = MagicMock(spec=LinkClassifier)
        classifier.classify.side_effect = _classify

        async with httpx.AsyncClient() as client:
            extractor = HubcloudExtractor(HubcloudFetcher(client), classifier)
            links = await asyncio.wait_for(extractor.extract(LANDING_URL), 5)

        assert links == []
        assert sibling_cancelled.is_set()
