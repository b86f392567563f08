from .stream_link import StreamLink, StreamServer

__all__ = ["StreamLink", "StreamServer"]
