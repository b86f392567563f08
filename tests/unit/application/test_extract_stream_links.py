"""Tests for ExtractStreamLinksUseCase."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from hubcloud_extractor.application.use_cases import ExtractStreamLinksUseCase
from hubcloud_extractor.domain.entities import StreamLink, StreamServer

_URL = "https://hubcloud.example/drive/abc"


class _HangingExtractor:
    """Extractor that only returns once its cancellation token fires."""

    def __init__(self) -> None:
        self.cancel: asyncio.Event | None = None

    async def extract(
        self, url: str, cancel: asyncio.Event | None = None
    ) -> list[StreamLink]:
        self.cancel = cancel
        assert cancel is not None
        await cancel.wait()
        return []


class TestExtractStreamLinksUseCase:
    @pytest.mark.asyncio()
    async def test_delegates_to_extractor(self) -> None:
        link = StreamLink(StreamServer.FAST_DL, "https://fastdl.example/a")
        extractor = AsyncMock()
        extractor.extract.return_value = [link]

        uc = ExtractStreamLinksUseCase(extractor=extractor)
        result = await uc.execute(_URL)

        assert result == [link]
        extractor.extract.assert_awaited_once()
        assert extractor.extract.await_args.args[0] == _URL

    @pytest.mark.asyncio()
    async def test_creates_token_when_none_given(self) -> None:
        extractor = AsyncMock()
        extractor.extract.return_value = []

        await ExtractStreamLinksUseCase(extractor=extractor).execute(_URL)

        token = extractor.extract.await_args.args[1]
        assert isinstance(token, asyncio.Event)
        assert not token.is_set()

    @pytest.mark.asyncio()
    async def test_passes_caller_token_through(self) -> None:
        extractor = AsyncMock()
        extractor.extract.return_value = []
        cancel = asyncio.Event()

        await ExtractStreamLinksUseCase(extractor=extractor).execute(_URL, cancel)

        assert extractor.extract.await_args.args[1] is cancel

    @pytest.mark.asyncio()
    async def test_deadline_fires_cancellation(self) -> None:
        extractor = _HangingExtractor()
        uc = ExtractStreamLinksUseCase(extractor=extractor, timeout_seconds=0.05)

        result = await asyncio.wait_for(uc.execute(_URL), 5)

        assert result == []
        assert extractor.cancel is not None
        assert extractor.cancel.is_set()

    @pytest.mark.asyncio()
    async def test_deadline_disarmed_after_completion(self) -> None:
        extractor = AsyncMock()
        extractor.extract.return_value = []
        cancel = asyncio.Event()
        uc = ExtractStreamLinksUseCase(extractor=extractor, timeout_seconds=0.05)

        await uc.execute(_URL, cancel)
        await asyncio.sleep(0.1)

        assert not cancel.is_set()
