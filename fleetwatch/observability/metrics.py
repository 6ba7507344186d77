"""
Prometheus metrics for monitoring alert analysis and the alert store.

Defines and exposes metrics for:
- Sessions analysed and skipped as stale
- Malformed transcript records
- Candidate alerts synthesised and suppressed
- Alert store mutations
- Alert listing latency

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    Counter,
    Histogram,
    start_http_server,
)

from fleetwatch.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class MetricsCollector:
    """
    Prometheus metrics collector for fleetwatch.

    Usage:
        metrics = get_metrics()
        metrics.start_server()

        metrics.record_alert_synthesized("error", "critical")
        metrics.record_store_mutation("update", "resolved")
    """

    def __init__(self):
        """Initialize Prometheus metrics."""

        self.sessions_analyzed = Counter(
            "fleetwatch_sessions_analyzed_total",
            "Sessions run through the alert synthesis pipeline",
            ["outcome"],  # outcome: analyzed, stale, failed
        )

        self.transcript_records_skipped = Counter(
            "fleetwatch_transcript_records_skipped_total",
            "Transcript records skipped because they failed to parse",
        )

        self.alerts_synthesized = Counter(
            "fleetwatch_alerts_synthesized_total",
            "Candidate alerts synthesised from session activity",
            ["kind", "severity"],
        )

        self.alerts_suppressed = Counter(
            "fleetwatch_alerts_suppressed_total",
            "Candidate alerts hidden by a dismissed pattern",
            ["kind"],
        )

        self.store_mutations = Counter(
            "fleetwatch_store_mutations_total",
            "Alert store operations that changed or attempted to change state",
            ["operation", "outcome"],
        )

        self.list_latency = Histogram(
            "fleetwatch_list_alerts_seconds",
            "Time spent computing the ranked alert list",
            buckets=LATENCY_BUCKETS,
        )

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to listen on (defaults to settings.metrics_port)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port)
        logger.info(f"Metrics server started on port {port}")

    def record_session(self, outcome: str) -> None:
        """Record one session passing through (or skipping) synthesis."""
        self.sessions_analyzed.labels(outcome=outcome).inc()

    def record_skipped_records(self, count: int) -> None:
        """Record malformed transcript records."""
        if count > 0:
            self.transcript_records_skipped.inc(count)

    def record_alert_synthesized(self, kind: str, severity: str) -> None:
        """Record a synthesised candidate alert."""
        self.alerts_synthesized.labels(kind=kind, severity=severity).inc()

    def record_alert_suppressed(self, kind: str) -> None:
        """Record a candidate dropped by dismissal."""
        self.alerts_suppressed.labels(kind=kind).inc()

    def record_store_mutation(self, operation: str, outcome: str) -> None:
        """Record an alert store mutation attempt."""
        self.store_mutations.labels(operation=operation, outcome=outcome).inc()

    def record_list_latency(self, latency: float) -> None:
        """Record list_alerts latency in seconds."""
        self.list_latency.observe(latency)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
