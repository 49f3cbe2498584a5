"""Prometheus-style metrics collector. Thread-safe, in-memory. No real Prometheus dependency."""

import threading
from typing import Any

ACCESS_DECISIONS_TOTAL = "access_decisions_total"
AUDIT_ENTRIES_WRITTEN = "audit_entries_written"
AUDIT_ENTRIES_SKIPPED = "audit_entries_skipped"
AUDIT_WRITE_FAILURES = "audit_write_failures"
AUDIT_WRITE_LATENCY_MS = "audit_write_latency_ms"


def _label_key(name: str, outcome: str | None, resource: str | None) -> str | None:
    labels = []
    if outcome is not None:
        labels.append(f"outcome={outcome}")
    if resource is not None:
        labels.append(f"resource={resource}")
    return f"{name}:{','.join(labels)}" if labels else None


class MetricsCollector:
    """
    In-memory Prometheus-style registry. Tracks counters and histograms.
    Thread-safe. Exposes increment, observe_latency, export_metrics.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # Counters: name -> value or name -> {label key -> value}
        self._counters: dict[str, float] = {}
        self._counters_by_labels: dict[str, dict[str, float]] = {}
        # Histograms: name -> list of observed values (for latency)
        self._histograms: dict[str, list[float]] = {}

    def increment(
        self,
        name: str,
        value: float = 1.0,
        *,
        outcome: str | None = None,
        resource: str | None = None,
    ) -> None:
        """Increment a counter. Optional outcome and/or resource labels for dimensional metrics."""
        key = _label_key(name, outcome, resource)
        with self._lock:
            if key is not None:
                by_label = self._counters_by_labels.setdefault(name, {})
                by_label[key] = by_label.get(key, 0) + value
            else:
                self._counters[name] = self._counters.get(name, 0) + value

    def observe_latency(
        self,
        name: str,
        latency_ms: float,
        *,
        resource: str | None = None,
    ) -> None:
        """Record a latency observation (histogram-style). Optional resource label."""
        with self._lock:
            bucket = name if resource is None else f"{name}:resource={resource}"
            self._histograms.setdefault(bucket, []).append(latency_ms)

    def counter(self, name: str, *, outcome: str | None = None, resource: str | None = None) -> float:
        """Current value of one counter series (0 if never incremented)."""
        key = _label_key(name, outcome, resource)
        with self._lock:
            if key is None:
                return self._counters.get(name, 0)
            return self._counters_by_labels.get(name, {}).get(key, 0)

    def export_metrics(self) -> dict[str, Any]:
        """Export all metrics as a dict (simulated Prometheus-style)."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "counters_by_labels": {
                    k: dict(v) for k, v in self._counters_by_labels.items()
                },
                "histograms": {
                    k: {
                        "count": len(v),
                        "sum": sum(v),
                        "values": list(v),
                    }
                    for k, v in self._histograms.items()
                },
            }

    def reset(self) -> None:
        """Reset all metrics (for tests)."""
        with self._lock:
            self._counters.clear()
            self._counters_by_labels.clear()
            self._histograms.clear()
