__all__ = [
    "QueryBenchmark",
    "QueryEngine",
    "FailurePolicy",
    "AssignmentStrategy",
    "Partitioner",
    "partition",
    "compute_stats",
    "median",
    "render_report",
]


from .core import QueryBenchmark, FailurePolicy
from .engine import QueryEngine
from .partitioner import AssignmentStrategy, Partitioner, partition
from .metrics import compute_stats, median
from .rendering import render_report
