from .extract_stream_links import ExtractStreamLinksUseCase

__all__ = ["ExtractStreamLinksUseCase"]
