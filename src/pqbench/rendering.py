from collections.abc import Sequence

from .models import GlobalStats, TimelineType, WorkerFailure


def render_report(stats: GlobalStats) -> str:
    return (
        "Benchmark statistics (all times are in seconds):\n"
        f"Total # of queries:           {stats.total_queries:10d}\n"
        f"Total queries execution time: {_fmt(stats.total_time)}\n"
        f"Minimum       execution time: {_fmt(stats.min_time)}\n"
        f"Maximum       execution time: {_fmt(stats.max_time)}\n"
        f"Average       execution time: {_fmt(stats.average_time)}\n"
        f"Median        execution time: {_fmt(stats.median_time)}"
    )


def _fmt(value: float | None) -> str:
    if value is None:
        return f"{'n/a':>10}"
    return f"{value:10.5f}"


def render_failures(failures: Sequence[WorkerFailure]) -> str:
    lines = [f"{len(failures)} worker(s) failed:"]
    for f in failures:
        lines.append(f"  W{f.worker_id:02d}: {f.message}")
    return "\n".join(lines)


def render_latency_histogram(latencies: Sequence[float], bins: int = 20) -> str:
    if not latencies:
        return "No latency data."
    lo, hi = min(latencies), max(latencies)
    if hi <= lo:
        return f"Histogram: single value {lo:.5f}s"

    width = 40
    counts = [0] * bins
    for x in latencies:
        j = int((x - lo) / (hi - lo) * bins)
        if j == bins:
            j -= 1
        counts[j] += 1

    peak = max(counts)
    lines = []
    for i, c in enumerate(counts):
        left = lo + (hi - lo) * (i / bins)
        right = lo + (hi - lo) * ((i + 1) / bins)
        bar = "#" * max(1, int((c / peak) * width)) if c else ""
        lines.append(f"{left:.5f}s - {right:.5f}s | {bar} ({c})")
    return "Latency Histogram\n" + "\n".join(lines)


def render_timeline(timeline: TimelineType, width: int = 80) -> str:
    if not timeline:
        return "No timeline data."

    max_t = 0.0
    for segs in timeline.values():
        for _, end_rel, _ in segs:
            if end_rel > max_t:
                max_t = end_rel
    if max_t <= 0:
        max_t = 1.0

    lines = ["Query Timeline (relative seconds)"]
    for worker_id in sorted(timeline.keys()):
        buf = [" "] * width
        for start_rel, end_rel, _host in timeline[worker_id]:
            a = int(start_rel / max_t * (width - 1))
            b = int(end_rel / max_t * (width - 1))
            a, b = max(0, a), max(a, b)
            for k in range(a, min(b, width - 1) + 1):
                buf[k] = "="
        lines.append(f"W{worker_id:02d} |{''.join(buf)}|")
    lines.append(f"0s{' ' * (width - 6)}~ {max_t:.2f}s")
    return "\n".join(lines)
