"""Prometheus metrics for the Issue Vitality engine."""

from issue_vitality.infrastructure.monitoring.vitality_metrics import (
    METRICS_CONTENT_TYPE,
    VitalityMetricsCollector,
    generate_metrics,
    get_vitality_metrics_collector,
    reset_vitality_metrics_collector,
)

__all__: list[str] = [
    "METRICS_CONTENT_TYPE",
    "VitalityMetricsCollector",
    "generate_metrics",
    "get_vitality_metrics_collector",
    "reset_vitality_metrics_collector",
]
