"""Large language model utilities for VibeCheck summaries."""

from .client import LLMClient, LLMClientError
from .summarization import SummarizationError, VibeSummaryService

__all__ = [
    "LLMClient",
    "LLMClientError",
    "SummarizationError",
    "VibeSummaryService",
]
