import asyncio
import logging
import time
from collections.abc import Iterable
from enum import Enum

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .engine import DEFAULT_QUERY_TEMPLATE, QueryEngine, validate_template
from .errors import BenchmarkAborted, EngineError
from .metrics import compute_stats
from .models import (
    BenchmarkResult,
    MetricsCallback,
    Partition,
    QueryDescriptor,
    WorkerFailure,
    WorkerResult,
)
from .partitioner import AssignmentStrategy, partition
from .worker import run_worker

logger = logging.getLogger(__name__)


class FailurePolicy(str, Enum):
    FAIL_FAST = "fail-fast"
    CONTINUE = "continue"


WorkerOutcome = WorkerResult | WorkerFailure


class QueryBenchmark:
    def __init__(
        self,
        descriptors: Iterable[QueryDescriptor],
        worker_count: int,
        engine: QueryEngine,
        query_template: str = DEFAULT_QUERY_TEMPLATE,
        strategy: AssignmentStrategy = AssignmentStrategy.ROUND_ROBIN,
        failure_policy: FailurePolicy = FailurePolicy.FAIL_FAST,
        metrics_callback: MetricsCallback | None = None,
        use_progress_bar: bool = False,
    ) -> None:
        validate_template(query_template)
        self.descriptors = descriptors
        self.worker_count = worker_count
        self.engine = engine
        self.query_template = query_template
        self.strategy = AssignmentStrategy(strategy)
        self.failure_policy = FailurePolicy(failure_policy)
        self.metrics_callback = metrics_callback
        self.use_progress_bar = use_progress_bar

        logger.info(
            f"Initialized benchmark: requested_workers={worker_count}, "
            f"strategy={self.strategy.value}, policy={self.failure_policy.value}"
        )

    # ────────────────────────────────
    # Worker Lifecycle
    # ────────────────────────────────

    async def _run_one(
        self, part: Partition, t0_ns: int, on_query
    ) -> WorkerOutcome:
        try:
            return await run_worker(
                part.slot,
                part,
                self.engine,
                self.query_template,
                t0_ns=t0_ns,
                on_query=on_query,
            )
        except EngineError as e:
            logger.error(f"[W{part.slot}] {e}")
            return WorkerFailure(worker_id=part.slot, error=e)

    async def _join(self, tasks: list[asyncio.Task]) -> list[WorkerOutcome]:
        try:
            if self.failure_policy is FailurePolicy.CONTINUE:
                return list(await asyncio.gather(*tasks))

            for fut in asyncio.as_completed(tasks):
                outcome = await fut
                if isinstance(outcome, WorkerFailure):
                    raise BenchmarkAborted(outcome)
        finally:
            pending = [t for t in tasks if not t.done()]
            for t in pending:
                t.cancel()
            if pending:
                logger.info(f"Cancelling {len(pending)} remaining workers")
                await asyncio.gather(*pending, return_exceptions=True)

        return [t.result() for t in tasks]

    # ────────────────────────────────
    # Main Runner
    # ────────────────────────────────

    async def run(self) -> BenchmarkResult | None:
        partitions = partition(self.descriptors, self.worker_count, self.strategy)
        if not partitions:
            logger.info("No descriptors to run.")
            return None

        total = sum(len(p) for p in partitions)
        logger.info(f"Starting {total} queries with {len(partitions)} workers")

        progress = None
        on_query = None
        if self.use_progress_bar:
            progress = Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                console=Console(stderr=True),
                transient=True,
            )
            progress.start()
            task_id = progress.add_task("[cyan]Querying...", total=total)
            on_query = lambda: progress.advance(task_id)

        t0_ns = time.perf_counter_ns()
        # every worker is started before any is awaited
        tasks = [
            asyncio.create_task(self._run_one(p, t0_ns, on_query)) for p in partitions
        ]
        try:
            outcomes = await self._join(tasks)
        finally:
            if progress:
                progress.stop()

        results = [o for o in outcomes if isinstance(o, WorkerResult)]
        failures = [o for o in outcomes if isinstance(o, WorkerFailure)]

        stats = compute_stats(results, self.metrics_callback)

        if failures:
            logger.warning(
                f"Run completed with {len(failures)} failed workers of {len(partitions)}"
            )
        else:
            logger.info(f"Run completed: {stats.total_queries} queries")

        return BenchmarkResult(
            stats=stats,
            worker_count=len(partitions),
            failures=failures,
            timeline={r.worker_id: r.spans for r in results},
            latencies=[t for r in results for t in r.timings],
        )
