"""Observability layer - logging and metrics."""

from fleetwatch.observability.logging import setup_logging
from fleetwatch.observability.metrics import MetricsCollector, get_metrics

__all__ = ["setup_logging", "MetricsCollector", "get_metrics"]
