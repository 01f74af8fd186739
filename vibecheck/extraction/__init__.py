"""Content extraction: fetch a page and pull readable text out of it."""

from .classifier import ContentCategory, classify
from .errors import NoContentExtractedError, VibeCheckError
from .fetcher import FetchResult, PageFetcher
from .models import ExtractionRequest, ExtractionResult, StrategyTag
from .pipeline import ExtractionPipeline

__all__ = [
    "ContentCategory",
    "ExtractionPipeline",
    "ExtractionRequest",
    "ExtractionResult",
    "FetchResult",
    "NoContentExtractedError",
    "PageFetcher",
    "StrategyTag",
    "VibeCheckError",
    "classify",
]
