"""Hubcloud landing page scraping: fetch, navigate markup, classify links."""

from __future__ import annotations

from .classifier import DEFAULT_RULES, LinkClassifier, LinkRule
from .extractor import HubcloudExtractor
from .fetcher import HubcloudFetcher

__all__ = [
    "DEFAULT_RULES",
    "HubcloudExtractor",
    "HubcloudFetcher",
    "LinkClassifier",
    "LinkRule",
]
