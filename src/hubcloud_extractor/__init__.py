"""Resolve hubcloud landing pages into direct stream links."""

__version__ = "0.1.0"
