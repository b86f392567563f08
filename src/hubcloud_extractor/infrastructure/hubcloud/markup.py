"""Markup navigation for the two hubcloud pages.

Stage 1 (landing page): find where the "download" button sends the user.
The target is located by an ordered chain of locator functions; the first
one returning a non-empty string wins and the input URL is the final
fallback.  Markup changes on the site should only ever need a new or
edited locator here.

Stage 2 (download page): collect the hrefs of the provider buttons.
"""

from __future__ import annotations

import base64
import re
from collections.abc import Callable, Sequence

from bs4 import BeautifulSoup

from hubcloud_extractor.infrastructure.common.html_selectors import (
    extract_attr,
    extract_parent_attr,
    parse_html,
    select_items,
)

# var url = '<target>';
_SCRIPT_URL_RE = re.compile(r"var\s+url\s*=\s*'([^']+)';")
_NON_BASE64_RE = re.compile(r"[^A-Za-z0-9+/_-]")

_DOWNLOAD_ICON_SELECTOR = ".fa-file-download.fa-lg"

# Green "download" buttons plus the red/grey mirror buttons.
CANDIDATE_SELECTOR = ".btn-success.btn-lg.h6, .btn-danger, .btn-secondary"

RedirectLocator = Callable[[str, BeautifulSoup], str]


def decode_base64_binary(value: str) -> str:
    """Decode base64 into a byte-per-char string (latin-1).

    Lenient: input stops at the first ``=`` and characters outside the
    standard and URL-safe alphabets are skipped.  Missing padding is fine
    and a dangling final character is dropped.
    Never raises; nothing decodable yields ``""``.
    """
    data = _NON_BASE64_RE.sub("", value.split("=", 1)[0])
    if len(data) % 4 == 1:
        data = data[:-1]
    if not data:
        return ""
    padded = data + "=" * (-len(data) % 4)
    return base64.b64decode(padded, altchars=b"-_").decode("latin-1")


def _script_url(html: str) -> str:
    match = _SCRIPT_URL_RE.search(html)
    return match.group(1) if match else ""


def locate_encoded_script_redirect(html: str, _soup: BeautifulSoup) -> str:
    """Base64 payload of the ``r=`` parameter in the inline ``var url``."""
    parts = _script_url(html).split("r=")
    if len(parts) < 2:
        return ""
    return decode_base64_binary(parts[1])


def locate_script_redirect(html: str, _soup: BeautifulSoup) -> str:
    """Raw value of the inline ``var url = '...';`` assignment."""
    return _script_url(html)


def locate_download_icon_href(_html: str, soup: BeautifulSoup) -> str:
    """``href`` of the anchor wrapping the download icon."""
    return extract_parent_attr(soup, _DOWNLOAD_ICON_SELECTOR, "href")


REDIRECT_LOCATORS: tuple[RedirectLocator, ...] = (
    locate_encoded_script_redirect,
    locate_script_redirect,
    locate_download_icon_href,
)


def site_origin(url: str) -> str:
    """``scheme://authority`` part of *url* (first three ``/`` segments)."""
    return "/".join(url.split("/")[:3])


def resolve_site_relative(link: str, source_url: str) -> str:
    """Prefix a ``/``-rooted *link* with the origin of *source_url*."""
    if link.startswith("/"):
        return f"{site_origin(source_url)}{link}"
    return link


def locate_redirect(
    html: str,
    source_url: str,
    locators: Sequence[RedirectLocator] = REDIRECT_LOCATORS,
) -> str:
    """Return the absolute stage-2 URL for a stage-1 page.

    Falls back to *source_url* itself when no locator finds anything.
    """
    soup = parse_html(html)
    target = source_url
    for locator in locators:
        value = locator(html, soup)
        if value:
            target = value
            break
    return resolve_site_relative(target, source_url)


def extract_candidates(html: str) -> list[str]:
    """Return the ``href`` of every provider button, in document order.

    Buttons without an ``href`` yield ``""``.
    """
    soup = parse_html(html)
    return [
        extract_attr(tag, "", "href")
        for tag in select_items(soup, CANDIDATE_SELECTOR)
    ]
