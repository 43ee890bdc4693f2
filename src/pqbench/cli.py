#!/usr/bin/env python3
# cli.py: command line entry point for pqbench

import argparse
import asyncio
import logging
import os
import sys

from pqbench.config import load_settings
from pqbench.core import FailurePolicy, QueryBenchmark
from pqbench.engine import QueryEngine
from pqbench.errors import BenchArgumentError, BenchError, BenchmarkAborted
from pqbench.loader import load_descriptors, open_input
from pqbench.logging_config import setup_logging
from pqbench.partitioner import MAX_WORKERS, AssignmentStrategy
from pqbench.persistence import save_stats
from pqbench.rendering import (
    render_failures,
    render_latency_histogram,
    render_report,
    render_timeline,
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class BenchArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise BenchArgumentError(message)


def worker_count(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        n = 0
    if not 1 <= n <= MAX_WORKERS:
        raise argparse.ArgumentTypeError(f"invalid value for argument -n: {value}")
    return n


def build_parser(prog: str | None = None) -> BenchArgumentParser:
    parser = BenchArgumentParser(
        prog=prog,
        description="Benchmark SQL queries against hypertable with sample data",
        add_help=False,
    )

    parser.add_argument("-h", "--help", action="store_true", help="print this screen")
    parser.add_argument(
        "-n",
        dest="workers",
        type=worker_count,
        metavar="<num_workers>",
        help=f"the number of workers between 1 and {MAX_WORKERS}",
    )
    parser.add_argument(
        "-f",
        dest="in_file",
        metavar="<in_file>",
        default=None,
        help="the input CSV file containing the queries' parameters; "
        "if omitted, standard input is assumed",
    )
    parser.add_argument(
        "-v", dest="verbose", action="store_true", help="verbose; print debug output"
    )

    # Engine & Scheduling
    parser.add_argument("--dsn", default=None, help="PostgreSQL DSN (default: $PQBENCH_DSN)")
    parser.add_argument(
        "--failure-policy",
        choices=[p.value for p in FailurePolicy],
        default=FailurePolicy.FAIL_FAST.value,
        help="abort every worker on the first engine error, or let the rest finish",
    )
    parser.add_argument(
        "--balance",
        choices=[s.value for s in AssignmentStrategy],
        default=AssignmentStrategy.ROUND_ROBIN.value,
        help="how newly seen hosts are assigned to workers",
    )

    # Output
    parser.add_argument("--histogram", action="store_true", help="print a latency histogram")
    parser.add_argument("--timeline", action="store_true", help="print a per-worker timeline")
    parser.add_argument("--json-out", default=None, help="write statistics as JSON to this file")
    parser.add_argument("--log-file", default=None, help="optional file to write logs to")
    parser.add_argument("--no-progress", action="store_true", help="disable the progress bar")

    parser.add_argument("extra", nargs="*", help=argparse.SUPPRESS)
    return parser


def parse_args(argv: list[str] | None = None, prog: str | None = None) -> argparse.Namespace:
    parser = build_parser(prog)
    args = parser.parse_args(argv)
    if args.help:
        return args
    if args.extra:
        raise BenchArgumentError(f"unexpected argument: {args.extra[0]}")
    if args.workers is None:
        raise BenchArgumentError("missing mandatory argument -n <num_workers>")
    return args


def print_usage(prog: str | None = None) -> None:
    build_parser(prog).print_help(sys.stderr)


async def run(argv: list[str] | None = None) -> int:
    prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "pqbench"
    try:
        args = parse_args(argv, prog)
    except BenchArgumentError as e:
        print_usage(prog)
        print(e, file=sys.stderr)
        return EXIT_USAGE

    if args.help:
        print_usage(prog)
        return EXIT_OK

    settings = load_settings()
    setup_logging(
        level="DEBUG" if args.verbose else "WARNING",
        log_file=args.log_file or settings.log_file,
    )

    engine = QueryEngine(args.dsn or settings.dsn)

    try:
        with open_input(args.in_file) as stream:
            bench = QueryBenchmark(
                load_descriptors(stream),
                args.workers,
                engine,
                query_template=settings.query_template,
                strategy=AssignmentStrategy(args.balance),
                failure_policy=FailurePolicy(args.failure_policy),
                use_progress_bar=not args.no_progress,
            )
            result = await bench.run()
    except BenchmarkAborted as e:
        print(e.failure.message, file=sys.stderr)
        return EXIT_FAILURE
    except BenchError as e:
        print(e, file=sys.stderr)
        return EXIT_FAILURE

    if result is None:
        print("no input CSV content, exiting", file=sys.stderr)
        return EXIT_OK

    print(render_report(result.stats))
    if args.histogram:
        print()
        print(render_latency_histogram(result.latencies))
    if args.timeline:
        print()
        print(render_timeline(result.timeline))
    if args.json_out:
        save_stats(result, args.json_out)

    if result.failures:
        print(render_failures(result.failures), file=sys.stderr)
        return EXIT_FAILURE

    logging.info(
        f"Run completed: {result.stats.total_queries} queries on {result.worker_count} workers"
    )
    return EXIT_OK


def main():
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
