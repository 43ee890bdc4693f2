import logging
import sys
from contextlib import contextmanager
from collections.abc import Iterable, Iterator
from typing import TextIO

from .errors import InputError
from .models import QueryDescriptor

logger = logging.getLogger(__name__)

EXPECTED_FIELDS = 3


@contextmanager
def open_input(path: str | None) -> Iterator[TextIO]:
    if path is None:
        yield sys.stdin
        return
    try:
        f = open(path, encoding="utf-8", newline="")
    except OSError as e:
        raise InputError(f"cannot open input file {path} ({e.strerror or e})") from e
    with f:
        yield f


def parse_row(line: str, line_no: int) -> QueryDescriptor:
    fields = line.rstrip("\r\n").split(",")
    if len(fields) != EXPECTED_FIELDS:
        raise InputError(
            f"wrong number of fields: {len(fields)} in input line {line_no}",
            line_no=line_no,
        )
    host, start_time, end_time = fields
    return QueryDescriptor(host=host, start_time=start_time, end_time=end_time)


def load_descriptors(lines: Iterable[str]) -> Iterator[QueryDescriptor]:
    """
    Lazily yield descriptors from a CSV-like source, skipping the header line.
    Line numbers in errors are 1-based with the header as line 1.
    """
    it = iter(lines)
    header = next(it, None)
    if header is None:
        return
    logger.debug(f"Skipping header: {header.rstrip()!r}")

    for line_no, line in enumerate(it, start=2):
        yield parse_row(line, line_no)
