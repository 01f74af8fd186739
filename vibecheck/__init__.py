"""VibeCheck: one-sentence summaries of web pages and pasted text."""

__version__ = "0.1.0"
