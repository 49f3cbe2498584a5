"""Observability layer: in-memory metrics. No external SaaS."""

from hrguard.observability.metrics import MetricsCollector

__all__ = [
    "MetricsCollector",
]
