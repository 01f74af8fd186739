"""Prometheus metrics for extraction and summarisation."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)


@dataclass
class ExtractionEvent:
    strategy: Optional[str]
    status: str
    duration_seconds: float
    text_length: int


@dataclass
class FetchFailureEvent:
    kind: str
    status_code: Optional[int]


@dataclass
class SummaryEvent:
    content_type: str
    status: str
    duration_seconds: float


class MetricsCollector:
    """Registry for pipeline metrics plus the last event of each kind."""

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self._registry = registry or CollectorRegistry()
        self._exporter_started = False

        self._extractions = Counter(
            "vibecheck_extractions_total",
            "Extraction attempts by winning strategy and outcome",
            labelnames=("strategy", "status"),
            registry=self._registry,
        )
        self._extraction_duration = Histogram(
            "vibecheck_extraction_duration_seconds",
            "Duration of a full extraction run in seconds",
            labelnames=("status",),
            buckets=(0.1, 0.25, 0.5, 1, 2, 5, 10, 20, 30),
            registry=self._registry,
        )
        self._fetch_failures = Counter(
            "vibecheck_fetch_failures_total",
            "Failed page downloads by failure kind",
            labelnames=("kind",),
            registry=self._registry,
        )
        self._summaries = Counter(
            "vibecheck_summaries_total",
            "Summaries requested from the LLM",
            labelnames=("content_type", "status"),
            registry=self._registry,
        )
        self._summary_duration = Histogram(
            "vibecheck_summary_duration_seconds",
            "Duration of LLM summary calls in seconds",
            labelnames=("status",),
            buckets=(0.5, 1, 2, 5, 10, 30, 60),
            registry=self._registry,
        )

        self.last_extraction: Optional[ExtractionEvent] = None
        self.last_fetch_failure: Optional[FetchFailureEvent] = None
        self.last_summary: Optional[SummaryEvent] = None

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def enable_exporter(self, port: int) -> bool:
        """Start the Prometheus HTTP exporter once."""

        if self._exporter_started:
            return True
        start_http_server(port, registry=self._registry)
        self._exporter_started = True
        logger.info("Prometheus metrics exporter started", extra={"event": "metrics.started", "port": port})
        return True

    def record_extraction(
        self, *, strategy: Optional[str], status: str, duration_seconds: float, text_length: int = 0
    ) -> None:
        self.last_extraction = ExtractionEvent(strategy, status, duration_seconds, text_length)
        self._extractions.labels(strategy=strategy or "none", status=status).inc()
        self._extraction_duration.labels(status=status).observe(duration_seconds)

    def record_fetch_failure(self, kind: str, status_code: Optional[int] = None) -> None:
        self.last_fetch_failure = FetchFailureEvent(kind, status_code)
        self._fetch_failures.labels(kind=kind).inc()

    def record_summary(self, *, content_type: str, status: str, duration_seconds: float) -> None:
        self.last_summary = SummaryEvent(content_type, status, duration_seconds)
        self._summaries.labels(content_type=content_type, status=status).inc()
        self._summary_duration.labels(status=status).observe(duration_seconds)

    def reset(self) -> None:
        """Reset cached inspection state (primarily for tests)."""

        self.last_extraction = None
        self.last_fetch_failure = None
        self.last_summary = None


metrics = MetricsCollector()


def configure_metrics_from_env() -> None:
    """Start metrics exporter when ``VIBECHECK_METRICS_PORT`` is defined."""

    port_value = os.getenv("VIBECHECK_METRICS_PORT")
    if not port_value:
        return
    try:
        port = int(port_value)
    except ValueError:
        logger.warning(
            "Invalid VIBECHECK_METRICS_PORT value; expected integer",
            extra={"event": "metrics.invalid_port", "value": port_value},
        )
        return
    metrics.enable_exporter(port)


__all__ = ["configure_metrics_from_env", "metrics", "MetricsCollector"]
