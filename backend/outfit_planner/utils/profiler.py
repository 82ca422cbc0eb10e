"""
Per-request timing of store loads, recommender calls and persistence.
"""
import logging
import time
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict

logger = logging.getLogger(__name__)


class Profiler:
    """Accumulates elapsed time per operation name.

    One instance per request; repeated operations (one recommender call per
    unplanned day) add up and are reported with their call count.
    """

    def __init__(self):
        self.timings: Dict[str, float] = defaultdict(float)
        self.counts: Dict[str, int] = defaultdict(int)

    @contextmanager
    def measure(self, operation: str):
        start = time.perf_counter()
        try:
            yield
        finally:
            self.timings[operation] += time.perf_counter() - start
            self.counts[operation] += 1

    def get_timings(self) -> Dict[str, float]:
        return dict(self.timings)

    def get_total(self) -> float:
        return sum(self.timings.values())

    def log_summary(self, prefix: str = "") -> None:
        """Log operations slowest first, with share of the request total"""
        if not self.timings:
            return
        total = self.get_total() or 1e-9
        lines = [f"{prefix}Timings ({self.get_total() * 1000:.1f}ms total):"]
        for operation, elapsed in sorted(self.timings.items(), key=lambda kv: kv[1], reverse=True):
            calls = self.counts[operation]
            suffix = f" x{calls}" if calls > 1 else ""
            lines.append(f"{prefix}  {operation}{suffix}: {elapsed * 1000:.1f}ms ({elapsed / total:.0%})")
        logger.info("\n".join(lines))
