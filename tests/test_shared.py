"""Tests for shared models, configuration, cache and metrics."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from factgraph.shared import (
    CanonicalGraph,
    KGNode,
    MemoryCache,
    MetricsCollector,
    Settings,
    get_settings,
    timed_operation,
)


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("FACTGRAPH_LOG_LEVEL", "FACTGRAPH_LAYOUT_ITERATIONS", "FACTGRAPH_FACTS_MARKER"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)

        assert settings.layout_iterations == 150
        assert settings.badge_display_limit == 3
        assert settings.parser_config["facts_marker"] == "Retrieved Facts:"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("FACTGRAPH_LOG_LEVEL", "debug")
        monkeypatch.setenv("FACTGRAPH_LAYOUT_CACHE_SIZE", "4")

        settings = get_settings()
        assert settings.log_level == "DEBUG"
        assert settings.layout_cache_size == 4
        assert get_settings() is settings

    def test_invalid_values(self, monkeypatch):
        monkeypatch.setenv("FACTGRAPH_LOG_LEVEL", "chatty")
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None)

        monkeypatch.setenv("FACTGRAPH_LOG_LEVEL", "INFO")
        monkeypatch.setenv("FACTGRAPH_SOURCES_MARKER", "   ")
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None)


class TestMemoryCache:

    def test_lru_eviction(self):
        cache = MemoryCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert cache.get("b") is None
        assert cache.get("a").value == 1
        assert cache.get("c").value == 3

    def test_get_or_compute(self):
        cache = MemoryCache()
        calls = []

        def compute():
            calls.append(1)
            return object()

        first = cache.get_or_compute(("k", 1), compute)
        second = cache.get_or_compute(("k", 1), compute)

        assert first is second
        assert len(calls) == 1

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            MemoryCache(max_size=0)


class TestMetrics:

    def test_counters_gauges_timers(self):
        metrics = MetricsCollector()
        metrics.counter("parsed")
        metrics.counter("parsed", 2)
        metrics.gauge("nodes", 7)
        for duration in (0.1, 0.2, 0.3):
            metrics.timer("layout", duration)

        assert metrics.get_counter("parsed") == 3
        assert metrics.get_gauge("nodes") == 7
        stats = metrics.get_timer_stats("layout")
        assert stats["count"] == 3
        assert stats["mean"] == pytest.approx(0.2)
        assert stats["max"] == 0.3

    def test_recent_samples(self):
        metrics = MetricsCollector()
        for value in (1, 2, 3):
            metrics.gauge("nodes", value, tags={"mode": "bullets"})

        recent = metrics.get_recent("nodes", limit=2)
        assert [sample["value"] for sample in recent] == [2, 3]
        assert recent[-1]["tags"] == {"mode": "bullets"}
        assert metrics.get_all_metrics()["recent"]["nodes"][-1]["value"] == 3

    def test_recent_samples_expire(self):
        metrics = MetricsCollector()
        metrics.gauge("nodes", 1)
        metrics.gauge("nodes", 2)
        metrics._metrics["nodes"][0].timestamp -= metrics.retention_seconds + 60

        assert [sample["value"] for sample in metrics.get_recent("nodes")] == [2]

    def test_record_parse(self):
        metrics = MetricsCollector()
        metrics.record_parse("bullets", nodes=4, edges=3, skipped=1)

        assert metrics.get_counter("facts_parsed_total") == 1
        assert metrics.get_counter("facts_edges_total") == 3
        assert metrics.get_counter("facts_skipped_total") == 1

    def test_disabled(self, monkeypatch):
        monkeypatch.setenv("FACTGRAPH_ENABLE_METRICS", "false")
        metrics = MetricsCollector()
        metrics.counter("parsed")

        assert metrics.get_counter("parsed") == 0

    def test_timed_operation_records_errors(self, monkeypatch):
        metrics = MetricsCollector()
        monkeypatch.setattr("factgraph.shared.infrastructure.monitoring.metrics.get_metrics", lambda: metrics)

        @timed_operation("work")
        def fail():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            fail()
        assert metrics.get_timer_stats("work_error")["count"] == 1


class TestGraphModels:

    def test_node_id_from_type_and_label(self):
        node = KGNode(type="service", label="risk mgmt")

        assert node.id == "service:risk mgmt"
        assert node.to_wire()["id"] == "service:risk mgmt"

    def test_blank_label_rejected(self):
        with pytest.raises(PydanticValidationError):
            KGNode(type="service", label="   ")

    def test_nodes_are_immutable(self):
        node = KGNode(type="service", label="a")
        with pytest.raises(PydanticValidationError):
            node.label = "b"

    def test_canonical_graph_fills_types(self):
        graph = CanonicalGraph.model_validate({
            "nodes": [{"type": "tool", "label": "x"}, {"type": "risk", "label": "y"}],
            "edges": [{"id": "e_0", "sourceId": "tool:x", "targetId": "risk:y", "relationLabel": "R"}],
            "sourceIndexToUrl": {"1": "https://a.com"},
        })

        assert graph.types == ["risk", "tool"]
        assert graph.source_index_to_url == {1: "https://a.com"}
        assert graph.edges[0].source_id == "tool:x"
