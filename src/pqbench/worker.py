import logging
import time
from collections.abc import Callable

from .engine import QueryEngine, build_query
from .models import Partition, WorkerResult

logger = logging.getLogger(__name__)


async def run_worker(
    worker_id: int,
    partition: Partition,
    engine: QueryEngine,
    template: str,
    t0_ns: int | None = None,
    on_query: Callable[[], None] | None = None,
) -> WorkerResult:
    """
    Execute one partition in arrival order on a dedicated connection and time
    each query from submission until its result is fully consumed.

    Engine errors propagate once the connection has been released.
    """
    result = WorkerResult(worker_id=worker_id)
    logger.debug(f"[W{worker_id}] Starting with {len(partition)} queries")

    async with engine.session() as session:
        for descriptor in partition.descriptors:
            query = build_query(template, descriptor)
            logger.debug(f"from wkr {worker_id}: '{query}'")

            start = time.perf_counter_ns()
            await session.execute(query)
            end = time.perf_counter_ns()

            span = None
            if t0_ns is not None:
                span = ((start - t0_ns) / 1e9, (end - t0_ns) / 1e9, descriptor.host)
            result.record((end - start) / 1e9, span)

            if on_query is not None:
                on_query()

    logger.debug(
        f"[W{worker_id}] Done: {result.query_count} queries in {result.total_time:.5f}s"
    )
    return result
