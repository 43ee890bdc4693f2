"""
Quick sanity run: benchmark a handful of queries against a local TimescaleDB.
Run: uv run examples/run_benchmark.py
Set PQBENCH_DSN (or put it in .env) if your database is not the default.
"""
import asyncio

from pqbench import FailurePolicy, QueryBenchmark, QueryEngine, render_report
from pqbench.config import load_settings
from pqbench.models import QueryDescriptor

DESCRIPTORS = [
    QueryDescriptor("host_000008", "2017-01-01 08:59:22", "2017-01-01 09:59:22"),
    QueryDescriptor("host_000001", "2017-01-02 13:02:02", "2017-01-02 14:02:02"),
    QueryDescriptor("host_000008", "2017-01-02 18:50:28", "2017-01-02 19:50:28"),
] * 5


async def main():
    settings = load_settings()
    bench = QueryBenchmark(
        DESCRIPTORS,
        worker_count=2,
        engine=QueryEngine(settings.dsn),
        query_template=settings.query_template,
        failure_policy=FailurePolicy.CONTINUE,
        use_progress_bar=True,
    )
    result = await bench.run()
    if result is not None:
        print(render_report(result.stats))
        for failure in result.failures:
            print(f"W{failure.worker_id}: {failure.message}")


if __name__ == "__main__":
    asyncio.run(main())
