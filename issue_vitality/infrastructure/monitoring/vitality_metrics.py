"""Vitality engine metrics for Prometheus exposition.

Operational counters and histograms for the recompute path, escalation
transitions, side-effect failures and notification fan-out.

Labels: service, environment on every metric, plus the metric-specific
labels documented per attribute.
"""

from __future__ import annotations

import os
import threading

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Content type for Prometheus metrics endpoint
METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Recompute duration buckets (1ms to 5s)
RECOMPUTE_DURATION_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)

RECOMPUTE_OUTCOMES = (
    "success",
    "not_found",
    "store_error",
    "escalation_error",
    "failed",
)
SIDE_EFFECT_STEPS = ("status_history", "badge", "publish")

_metrics_lock = threading.Lock()


class VitalityMetricsCollector:
    """Collects issue vitality metrics for Prometheus.

    Attributes:
        recomputes_total: Counter by outcome.
        recompute_duration_seconds: Histogram of recompute latency.
        escalations_total: Counter by tier entered.
        side_effect_failures_total: Counter by dispatcher step.
        fanout_dropped_total: Counter of notifications dropped on full queues.
        fanout_connections: Gauge of open observer connections.
        deferred_recomputes_total: Counter of recomputes handed to the
            background scheduler, by reason.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize the collector.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "issue-vitality")

        self.recomputes_total = Counter(
            name="vitality_recomputes_total",
            documentation="Total aggregate recomputes by outcome",
            labelnames=["service", "environment", "outcome"],
            registry=self._registry,
        )

        self.recompute_duration_seconds = Histogram(
            name="vitality_recompute_duration_seconds",
            documentation="Aggregate recompute duration in seconds, lock wait included",
            labelnames=["service", "environment"],
            buckets=RECOMPUTE_DURATION_BUCKETS,
            registry=self._registry,
        )

        self.escalations_total = Counter(
            name="vitality_escalations_total",
            documentation="Total escalation tier transitions by tier entered",
            labelnames=["service", "environment", "tier"],
            registry=self._registry,
        )

        self.side_effect_failures_total = Counter(
            name="vitality_side_effect_failures_total",
            documentation="Total escalation side-effect failures by step",
            labelnames=["service", "environment", "step"],
            registry=self._registry,
        )

        self.fanout_dropped_total = Counter(
            name="vitality_fanout_dropped_total",
            documentation="Total notifications dropped because an observer queue was full",
            labelnames=["service", "environment", "event_type"],
            registry=self._registry,
        )

        self.fanout_connections = Gauge(
            name="vitality_fanout_connections",
            documentation="Open observer notification connections",
            labelnames=["service", "environment"],
            registry=self._registry,
        )

        self.deferred_recomputes_total = Counter(
            name="vitality_deferred_recomputes_total",
            documentation="Total recomputes handed to the background scheduler",
            labelnames=["service", "environment", "reason"],
            registry=self._registry,
        )

    def _labels(self) -> dict[str, str]:
        return {"service": self._service_name, "environment": self._environment}

    def record_recompute(self, outcome: str, duration_seconds: float) -> None:
        """Record one recompute.

        Args:
            outcome: One of RECOMPUTE_OUTCOMES.
            duration_seconds: Elapsed time, lock wait included.

        Raises:
            ValueError: If outcome is not a known outcome.
        """
        if outcome not in RECOMPUTE_OUTCOMES:
            raise ValueError(
                f"Invalid outcome '{outcome}'. Must be one of {RECOMPUTE_OUTCOMES}."
            )
        self.recomputes_total.labels(**self._labels(), outcome=outcome).inc()
        self.recompute_duration_seconds.labels(**self._labels()).observe(
            duration_seconds
        )

    def record_escalation(self, tier: str) -> None:
        """Record a tier transition."""
        self.escalations_total.labels(**self._labels(), tier=tier).inc()

    def record_side_effect_failure(self, step: str) -> None:
        """Record a failed dispatcher step.

        Raises:
            ValueError: If step is not a known step.
        """
        if step not in SIDE_EFFECT_STEPS:
            raise ValueError(f"Invalid step '{step}'. Must be one of {SIDE_EFFECT_STEPS}.")
        self.side_effect_failures_total.labels(**self._labels(), step=step).inc()

    def record_fanout_drop(self, event_type: str) -> None:
        """Record a notification dropped on a full observer queue."""
        self.fanout_dropped_total.labels(**self._labels(), event_type=event_type).inc()

    def set_fanout_connections(self, count: int) -> None:
        """Set the open observer connection gauge."""
        self.fanout_connections.labels(**self._labels()).set(count)

    def record_deferred_recompute(self, reason: str) -> None:
        """Record a recompute handed to the background scheduler."""
        self.deferred_recomputes_total.labels(**self._labels(), reason=reason).inc()

    def get_registry(self) -> CollectorRegistry:
        """Get the collector registry."""
        return self._registry


# Singleton instance
_vitality_metrics_collector: VitalityMetricsCollector | None = None


def get_vitality_metrics_collector() -> VitalityMetricsCollector:
    """Get the singleton VitalityMetricsCollector instance (thread-safe).

    Uses double-checked locking for lazy initialization.
    """
    global _vitality_metrics_collector
    if _vitality_metrics_collector is None:
        with _metrics_lock:
            if _vitality_metrics_collector is None:
                _vitality_metrics_collector = VitalityMetricsCollector()
    return _vitality_metrics_collector


def generate_metrics() -> bytes:
    """Render the singleton registry in Prometheus exposition format."""
    return generate_latest(get_vitality_metrics_collector().get_registry())


def reset_vitality_metrics_collector() -> None:
    """Reset the singleton collector (for testing only)."""
    global _vitality_metrics_collector
    with _metrics_lock:
        _vitality_metrics_collector = None
