"""
Metrics collection and monitoring for FactGraph.
"""

import time
import threading
from typing import Dict, Any, List, Optional, Union
from collections import defaultdict, deque
from dataclasses import dataclass, field
from functools import wraps

from ...config.settings import get_settings


@dataclass
class Metric:
    """Represents a single metric measurement."""

    name: str
    value: Union[int, float]
    timestamp: float
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def age_seconds(self) -> float:
        """Get age of metric in seconds."""
        return time.time() - self.timestamp


class MetricsCollector:
    """
    Collects performance metrics for FactGraph operations.

    Stores counters, gauges and timers with a bounded time-series history
    per metric name.
    """

    def __init__(self):
        """Initialize metrics collector."""
        self.settings = get_settings()
        monitoring_config = self.settings.monitoring_config

        self.enabled = monitoring_config['enabled']
        self.max_history = monitoring_config['max_history']
        self.retention_seconds = monitoring_config['retention_seconds']

        self._lock = threading.RLock()
        self._metrics: Dict[str, deque] = defaultdict(lambda: deque(maxlen=self.max_history))
        self._counters: Dict[str, int] = defaultdict(int)
        self._gauges: Dict[str, float] = defaultdict(float)
        self._timers: Dict[str, List[float]] = defaultdict(list)

    def counter(self, name: str, value: int = 1, tags: Dict[str, str] = None) -> None:
        """
        Increment a counter metric.

        Args:
            name: Counter name
            value: Increment value
            tags: Optional tags
        """
        if not self.enabled:
            return

        with self._lock:
            self._counters[name] += value
            self._record(name, self._counters[name], tags)

    def gauge(self, name: str, value: float, tags: Dict[str, str] = None) -> None:
        """
        Set a gauge metric value.

        Args:
            name: Gauge name
            value: Current value
            tags: Optional tags
        """
        if not self.enabled:
            return

        with self._lock:
            self._gauges[name] = value
            self._record(name, value, tags)

    def timer(self, name: str, duration_seconds: float, tags: Dict[str, str] = None) -> None:
        """
        Record a timing metric.

        Args:
            name: Timer name
            duration_seconds: Duration in seconds
            tags: Optional tags
        """
        if not self.enabled:
            return

        with self._lock:
            self._timers[name].append(duration_seconds)

            if len(self._timers[name]) > self.max_history:
                self._timers[name] = self._timers[name][-self.max_history:]

            self._record(name, duration_seconds, tags)

    def _record(self, name: str, value: Union[int, float], tags: Optional[Dict[str, str]]) -> None:
        self._metrics[name].append(Metric(
            name=name,
            value=value,
            timestamp=time.time(),
            tags=tags or {}
        ))
        self._cleanup_old_metrics(name)

    def _cleanup_old_metrics(self, name: str) -> None:
        """Remove old metrics beyond retention period."""
        current_time = time.time()
        metrics_queue = self._metrics[name]

        while metrics_queue and current_time - metrics_queue[0].timestamp > self.retention_seconds:
            metrics_queue.popleft()

    def get_counter(self, name: str) -> int:
        """Get current counter value."""
        return self._counters.get(name, 0)

    def get_gauge(self, name: str) -> float:
        """Get current gauge value."""
        return self._gauges.get(name, 0.0)

    def get_timer_stats(self, name: str) -> Dict[str, float]:
        """Get timer statistics."""
        timings = self._timers.get(name, [])

        if not timings:
            return {
                'count': 0,
                'mean': 0.0,
                'min': 0.0,
                'max': 0.0,
                'p95': 0.0,
            }

        sorted_timings = sorted(timings)
        count = len(sorted_timings)

        return {
            'count': count,
            'mean': sum(sorted_timings) / count,
            'min': sorted_timings[0],
            'max': sorted_timings[-1],
            'p95': sorted_timings[int(0.95 * (count - 1))],
        }

    def get_recent(self, name: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Most recent samples of a metric within the retention window, newest last."""
        with self._lock:
            self._cleanup_old_metrics(name)
            samples = list(self._metrics.get(name, ()))[-limit:]

        return [
            {
                'value': metric.value,
                'age_seconds': round(metric.age_seconds, 3),
                'tags': dict(metric.tags),
            }
            for metric in samples
        ]

    def get_all_metrics(self, recent: int = 5) -> Dict[str, Any]:
        """Get all current metric values with the latest samples of each."""
        with self._lock:
            return {
                'counters': dict(self._counters),
                'gauges': dict(self._gauges),
                'timers': {name: self.get_timer_stats(name) for name in self._timers},
                'recent': {name: self.get_recent(name, recent) for name in list(self._metrics)},
            }

    def record_api_request(self,
                           endpoint: str,
                           method: str,
                           duration_seconds: float,
                           status_code: int) -> None:
        """Record API request metrics."""
        tags = {
            'endpoint': endpoint,
            'method': method,
            'status_code': str(status_code)
        }

        self.counter('api_requests_total', tags=tags)
        self.timer('api_request_duration', duration_seconds, tags=tags)

    def record_parse(self, mode: str, nodes: int, edges: int, skipped: int) -> None:
        """Record the outcome of one fact parse."""
        tags = {'mode': mode}

        self.counter('facts_parsed_total', tags=tags)
        self.counter('facts_edges_total', edges, tags=tags)
        self.gauge('facts_nodes_last', nodes, tags=tags)
        if skipped:
            self.counter('facts_skipped_total', skipped, tags=tags)


def timed_operation(metric_name: str, tags: Dict[str, str] = None):
    """
    Decorator for timing operations.

    Args:
        metric_name: Name of the timing metric
        tags: Optional tags for the metric
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            metrics = get_metrics()
            start_time = time.time()

            try:
                result = func(*args, **kwargs)
                metrics.timer(metric_name, time.time() - start_time, tags)
                return result

            except Exception as e:
                error_tags = (tags or {}).copy()
                error_tags['error'] = type(e).__name__
                metrics.timer(f"{metric_name}_error", time.time() - start_time, error_tags)
                raise

        return wrapper
    return decorator


# Global instance
_metrics_collector = None
_metrics_lock = threading.Lock()


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector instance.

    Returns:
        MetricsCollector singleton instance
    """
    global _metrics_collector

    if _metrics_collector is None:
        with _metrics_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()

    return _metrics_collector
