"""Domain entities for extracted stream links.

Pure value objects: no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Every extracted link is reported as Matroska; no content sniffing happens.
STREAM_TYPE = "mkv"


class StreamServer(str, Enum):
    """Provider labels attached to extracted links."""

    CF_WORKER = "Cf Worker"
    PIXELDRAIN = "Pixeldrain"
    HUBCLOUD = "hubcloud"
    CF_STORAGE = "CfStorage"
    FAST_DL = "FastDl"
    HUB_CDN = "HubCdn"


@dataclass(frozen=True)
class StreamLink:
    """A single playable link found on the download page."""

    server: StreamServer
    link: str
    type: str = STREAM_TYPE

    def to_dict(self) -> dict[str, str]:
        return {"server": self.server.value, "link": self.link, "type": self.type}
