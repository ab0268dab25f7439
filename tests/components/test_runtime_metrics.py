"""
Tests for Runtime Metrics.
"""

import time

import psutil
import pytest

from core.context import ExecutionContext
from components.runtime_metrics import (
    MetricsRegistry,
    RuntimeMetricsComponent,
    capture_gcstats,
    capture_memstats,
)


@pytest.fixture
def registry():
    return MetricsRegistry()


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class TestMetricsRegistry:
    """Tests for the gauge store."""

    def test_set_and_snapshot(self, registry):
        assert registry.snapshot() == {"updated_at": None, "gauges": {}}

        registry.set_gauge("b", 2)
        registry.set_gauge("a", 1)

        snapshot = registry.snapshot()
        assert list(snapshot["gauges"]) == ["a", "b"]
        assert snapshot["updated_at"] is not None
        assert registry.get("a") == 1
        assert registry.get("missing") is None

    def test_instance_is_shared(self):
        assert MetricsRegistry.instance() is MetricsRegistry.instance()


class TestSamplers:
    """Tests for one-shot captures."""

    def test_capture_memstats(self, registry):
        capture_memstats(registry, psutil.Process())

        assert registry.get("runtime.memory.rss") > 0
        assert registry.get("runtime.threads") >= 1

    def test_capture_gcstats(self, registry):
        capture_gcstats(registry)

        assert registry.get("runtime.gc.gen0.count") is not None
        assert registry.get("runtime.gc.objects") > 0


class TestRuntimeMetricsComponent:
    """Tests for the sampling component."""

    def test_samples_until_stopped(self, registry):
        component = RuntimeMetricsComponent(registry, memstats_interval=0.05, gcstats_interval=0.05)

        component.start(ExecutionContext.background())
        try:
            assert wait_for(lambda: registry.get("runtime.memory.rss") is not None)
            assert wait_for(lambda: registry.get("runtime.gc.objects") is not None)
        finally:
            component.stop()

        assert component._threads == []

    def test_kill_does_not_join(self, registry):
        component = RuntimeMetricsComponent(registry, memstats_interval=0.05, gcstats_interval=0.05)
        component.start(ExecutionContext.background())
        threads = list(component._threads)

        component.kill()

        for thread in threads:
            thread.join(2.0)
            assert not thread.is_alive()

    def test_non_positive_intervals_use_defaults(self, registry):
        component = RuntimeMetricsComponent(registry, memstats_interval=0, gcstats_interval=-1)

        component.start(ExecutionContext.background())
        component.stop()

        assert component.memstats_interval == 5.0
        assert component.gcstats_interval == 5.0
