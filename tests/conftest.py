"""Shared test fixtures for the hubcloud extractor test suite."""

from __future__ import annotations

import base64

import httpx
import pytest
import respx

# ---------------------------------------------------------------------------
# Page builders
# ---------------------------------------------------------------------------

LANDING_URL = "https://hubcloud.example/drive/abc123"
DOWNLOAD_URL = "https://vcloud.example/files/abc123"


def encode_redirect(url: str) -> str:
    """Base64 form of *url* as the landing page embeds it after ``r=``."""
    return base64.b64encode(url.encode("latin-1")).decode("ascii")


def landing_page(script_url: str | None = None, icon_href: str | None = None) -> str:
    """Stage-1 page with an optional inline redirect and download icon."""
    script = f"<script>var url = '{script_url}';</script>" if script_url else ""
    icon = (
        f'<a href="{icon_href}" class="btn"><i class="fas fa-file-download fa-lg">'
        "</i> Download</a>"
        if icon_href
        else ""
    )
    return f"<html><head>{script}</head><body><div>{icon}</div></body></html>"


def download_page(*buttons: tuple[str, str | None]) -> str:
    """Stage-2 page with one anchor per ``(css_classes, href)`` pair."""
    anchors = []
    for classes, href in buttons:
        href_attr = f' href="{href}"' if href is not None else ""
        anchors.append(f'<a class="{classes}"{href_attr}>Download</a>')
    return "<html><body><div class='card'>" + "".join(anchors) + "</div></body></html>"


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
async def http_client() -> httpx.AsyncClient:
    """Real httpx.AsyncClient for use with respx mocking."""
    async with httpx.AsyncClient(max_redirects=5) as client:
        yield client


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router
