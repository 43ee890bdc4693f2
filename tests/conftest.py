import asyncio
import logging
from contextlib import asynccontextmanager

import pytest

from pqbench.errors import EngineConnectionError, QueryError
from pqbench.models import QueryDescriptor


class FakeSession:
    def __init__(self, engine):
        self.engine = engine

    async def execute(self, query: str) -> int:
        self.engine.queries.append(query)
        await asyncio.sleep(self.engine.delay)
        if self.engine.crash_on and self.engine.crash_on in query:
            raise RuntimeError("driver bug")
        if self.engine.fail_on and self.engine.fail_on in query:
            raise QueryError(f"query failed.\nError: invalid input syntax\nContent: '{query}'", query)
        return 1


class FakeEngine:
    """Stands in for QueryEngine; counts sessions so tests can check cleanup."""

    def __init__(self, fail_on=None, refuse=False, delay=0.0, crash_on=None):
        self.fail_on = fail_on
        self.crash_on = crash_on
        self.refuse = refuse
        self.delay = delay
        self.queries = []
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def session(self):
        if self.refuse:
            raise EngineConnectionError("connection to database failed: refused")
        self.opened += 1
        try:
            yield FakeSession(self)
        finally:
            self.closed += 1


def _descriptors(*hosts):
    return [
        QueryDescriptor(h, f"2017-01-01 0{i % 10}:00:00", f"2017-01-01 0{i % 10}:59:59")
        for i, h in enumerate(hosts)
    ]


@pytest.fixture(autouse=True)
def _restore_root_logging():
    # cli.run reconfigures the root logger
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def engine_factory():
    return FakeEngine


@pytest.fixture
def make_descriptors():
    return _descriptors
