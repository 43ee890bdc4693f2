import logging
from collections.abc import Callable, Sequence
from dataclasses import asdict

from .models import GlobalStats, WorkerResult

logger = logging.getLogger(__name__)


def median(values: Sequence[float]) -> float:
    sl = sorted(values)
    n = len(sl)
    if n == 0:
        raise ValueError("median of empty sequence")
    half = n // 2
    if n % 2:
        return sl[half]
    # two middle elements: n/2 - 1 and n/2
    return (sl[half - 1] + sl[half]) / 2


def compute_stats(
    results: Sequence[WorkerResult],
    metrics_callback: Callable[[dict], None] | None = None,
) -> GlobalStats:
    """Combine finished worker results; call only after every worker has returned."""
    total_queries = sum(r.query_count for r in results)
    total_time = sum(r.total_time for r in results)
    logger.debug(
        f"Computing stats: workers={len(results)}, total_queries={total_queries}"
    )

    if not total_queries:
        stats = GlobalStats(
            total_queries=0,
            total_time=0.0,
            min_time=None,
            max_time=None,
            average_time=None,
            median_time=None,
        )
        if metrics_callback:
            metrics_callback(asdict(stats))
        logger.warning("No query timings recorded. Returning empty stats.")
        return stats

    non_empty = [r for r in results if r.query_count]
    all_times = [t for r in results for t in r.timings]

    min_time = min(r.min_time for r in non_empty)
    max_time = max(r.max_time for r in non_empty)
    # summation rounding can push the mean just outside [min, max]
    average_time = min(max(total_time / total_queries, min_time), max_time)

    stats = GlobalStats(
        total_queries=total_queries,
        total_time=total_time,
        min_time=min_time,
        max_time=max_time,
        average_time=average_time,
        median_time=median(all_times),
    )

    if metrics_callback:
        metrics_callback(asdict(stats))

    logger.info(
        f"Stats computed: queries={total_queries}, total={total_time:.5f}s, "
        f"mean={stats.average_time:.5f}s, median={stats.median_time:.5f}s"
    )
    return stats
