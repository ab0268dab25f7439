"""
Components - Runtime Metrics.

============================================================
RESPONSIBILITY
============================================================
Periodically captures process runtime statistics.

- Memory, CPU and thread counts from psutil
- Garbage collector statistics from gc
- Values land in a thread-safe MetricsRegistry that the
  diagnostic server exposes at /debug/vars

============================================================
METRIC NAMES
============================================================
runtime.memory.rss          Resident set size (bytes)
runtime.memory.vms          Virtual memory size (bytes)
runtime.cpu.percent         CPU usage since last sample
runtime.threads             OS threads in the process
runtime.gc.gen<N>.count     Objects tracked in generation N
runtime.gc.gen<N>.collections  Collections of generation N
runtime.gc.objects          Objects tracked by the collector

============================================================
"""

import gc
import logging
import threading
import time
from typing import Dict, List, Optional

import psutil

from core.constants import (
    DEFAULT_GCSTATS_INTERVAL_SECONDS,
    DEFAULT_MEMSTATS_INTERVAL_SECONDS,
)
from core.context import ExecutionContext


logger = logging.getLogger(__name__)


# ============================================================
# METRICS REGISTRY
# ============================================================

class MetricsRegistry:
    """Thread-safe name -> gauge value store."""

    _instance: Optional["MetricsRegistry"] = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._gauges: Dict[str, float] = {}
        self._updated_at: Optional[float] = None

    @classmethod
    def instance(cls) -> "MetricsRegistry":
        """Process-wide default registry."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    def set_gauge(self, name: str, value: float) -> None:
        with self._lock:
            self._gauges[name] = value
            self._updated_at = time.time()

    def get(self, name: str) -> Optional[float]:
        with self._lock:
            return self._gauges.get(name)

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            return {
                "updated_at": self._updated_at,
                "gauges": dict(sorted(self._gauges.items())),
            }


# ============================================================
# SAMPLERS
# ============================================================

def capture_memstats(registry: MetricsRegistry, process: psutil.Process) -> None:
    """Record memory, CPU and thread gauges for process."""
    with process.oneshot():
        memory = process.memory_info()
        registry.set_gauge("runtime.memory.rss", memory.rss)
        registry.set_gauge("runtime.memory.vms", memory.vms)
        registry.set_gauge("runtime.cpu.percent", process.cpu_percent(interval=None))
        registry.set_gauge("runtime.threads", process.num_threads())


def capture_gcstats(registry: MetricsRegistry) -> None:
    """Record garbage collector gauges."""
    for generation, count in enumerate(gc.get_count()):
        registry.set_gauge(f"runtime.gc.gen{generation}.count", count)
    for generation, stats in enumerate(gc.get_stats()):
        registry.set_gauge(f"runtime.gc.gen{generation}.collections", stats.get("collections", 0))
    registry.set_gauge("runtime.gc.objects", len(gc.get_objects()))


# ============================================================
# COMPONENT
# ============================================================

class RuntimeMetricsComponent:
    """
    Samples runtime statistics on background threads until stopped.
    """

    def __init__(
        self,
        registry: Optional[MetricsRegistry] = None,
        memstats_interval: float = DEFAULT_MEMSTATS_INTERVAL_SECONDS,
        gcstats_interval: float = DEFAULT_GCSTATS_INTERVAL_SECONDS,
    ):
        self.registry = registry or MetricsRegistry.instance()
        self.memstats_interval = memstats_interval
        self.gcstats_interval = gcstats_interval
        self._halt = threading.Event()
        self._threads: List[threading.Thread] = []

    def _loop(self, name: str, interval: float, capture) -> None:
        while not self._halt.is_set():
            try:
                capture()
            except psutil.Error as e:
                logger.warning(f"Runtime metrics capture failed | sampler={name} | error={e}")
            self._halt.wait(interval)

    def start(self, ctx: ExecutionContext) -> None:
        if self.memstats_interval <= 0:
            self.memstats_interval = DEFAULT_MEMSTATS_INTERVAL_SECONDS
        if self.gcstats_interval <= 0:
            self.gcstats_interval = DEFAULT_GCSTATS_INTERVAL_SECONDS

        self._halt.clear()
        process = psutil.Process()
        # Prime cpu_percent so the first sample is meaningful.
        process.cpu_percent(interval=None)

        samplers = (
            ("memstats", self.memstats_interval, lambda: capture_memstats(self.registry, process)),
            ("gcstats", self.gcstats_interval, lambda: capture_gcstats(self.registry)),
        )
        self._threads = []
        for name, interval, capture in samplers:
            thread = threading.Thread(
                target=self._loop,
                args=(name, interval, capture),
                name=f"runtime-metrics-{name}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)

        logger.debug(
            f"Runtime metrics started | memstats_interval={self.memstats_interval}s | "
            f"gcstats_interval={self.gcstats_interval}s"
        )

    def stop(self) -> None:
        self._halt.set()
        for thread in self._threads:
            thread.join()
        self._threads = []

    def kill(self) -> None:
        self._halt.set()


__all__ = [
    "MetricsRegistry",
    "RuntimeMetricsComponent",
    "capture_memstats",
    "capture_gcstats",
]
