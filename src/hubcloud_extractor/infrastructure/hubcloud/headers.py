"""Static browser header bundle sent with every upstream request.

The landing pages serve different (or blocking) markup to clients that
do not look like a desktop Edge/Chromium browser.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

BROWSER_HEADERS: Mapping[str, str] = MappingProxyType(
    {
        "sec-ch-ua": (
            '"Not_A Brand";v="8", "Chromium";v="120", "Microsoft Edge";v="120"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0"
        ),
    }
)
