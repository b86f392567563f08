from .link_extractor import LinkExtractorPort

__all__ = ["LinkExtractorPort"]
