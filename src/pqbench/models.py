from dataclasses import dataclass, field
from typing import Any
from collections.abc import Callable


@dataclass(frozen=True)
class QueryDescriptor:
    host: str
    start_time: str
    end_time: str


@dataclass(frozen=True)
class Partition:
    slot: int
    descriptors: tuple[QueryDescriptor, ...]

    @property
    def hosts(self) -> list[str]:
        return list(dict.fromkeys(d.host for d in self.descriptors))

    def __len__(self) -> int:
        return len(self.descriptors)


@dataclass
class WorkerResult:
    worker_id: int
    query_count: int = 0
    total_time: float = 0.0
    min_time: float | None = None
    max_time: float | None = None
    timings: list[float] = field(default_factory=list)
    # (start, end, host) relative to the run start
    spans: list[tuple[float, float, str]] = field(default_factory=list)

    def record(self, elapsed: float, span: tuple[float, float, str] | None = None) -> None:
        self.query_count += 1
        self.total_time += elapsed
        if self.min_time is None or elapsed < self.min_time:
            self.min_time = elapsed
        if self.max_time is None or elapsed > self.max_time:
            self.max_time = elapsed
        self.timings.append(elapsed)
        if span is not None:
            self.spans.append(span)


@dataclass(frozen=True)
class WorkerFailure:
    worker_id: int
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass(frozen=True)
class GlobalStats:
    total_queries: int
    total_time: float
    min_time: float | None
    max_time: float | None
    average_time: float | None
    median_time: float | None


# Timeline: worker_id -> list of (start, end, host)
TimelineType = dict[int, list[tuple[float, float, str]]]

# Metrics callback: callable accepting stats dict
MetricsCallback = Callable[[dict[str, Any]], None]


@dataclass
class BenchmarkResult:
    stats: GlobalStats
    worker_count: int
    failures: list[WorkerFailure] = field(default_factory=list)
    timeline: TimelineType = field(default_factory=dict)
    latencies: list[float] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
