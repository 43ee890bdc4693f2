import asyncio
import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import asyncpg

from .errors import EngineConnectionError, QueryError, TemplateError
from .models import QueryDescriptor

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TEMPLATE = (
    "SELECT time_bucket('1 minute', ts), MIN(usage), MAX(usage) "
    "FROM cpu_usage "
    "WHERE host='{host}' AND ts BETWEEN '{start_time}' AND '{end_time}' "
    "GROUP BY 1"
)

ConnectFn = Callable[..., Awaitable[Any]]


def build_query(template: str, descriptor: QueryDescriptor) -> str:
    return template.format(
        host=descriptor.host,
        start_time=descriptor.start_time,
        end_time=descriptor.end_time,
    )


def validate_template(template: str) -> None:
    """Fail before any worker starts if the template cannot be filled in."""
    try:
        build_query(template, QueryDescriptor("host", "start", "end"))
    except (KeyError, IndexError, ValueError, AttributeError) as e:
        raise TemplateError(
            f"invalid query template: {e!r} (fields are {{host}}, {{start_time}}, "
            f"{{end_time}}; write literal braces as {{{{ and }}}})"
        ) from e


class EngineSession:
    """One open connection; never shared between workers."""

    def __init__(self, conn: Any) -> None:
        self._conn = conn

    async def execute(self, query: str) -> int:
        try:
            rows = await self._conn.fetch(query)
        except (asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            raise QueryError(f"query failed.\nError: {e}\nContent: '{query}'", query) from e
        logger.debug(f"rows: {len(rows)}")
        return len(rows)


class QueryEngine:
    def __init__(self, dsn: str, connect: ConnectFn = asyncpg.connect) -> None:
        self.dsn = dsn
        self._connect = connect

    @asynccontextmanager
    async def session(self) -> AsyncIterator[EngineSession]:
        try:
            conn = await self._connect(self.dsn)
        except (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            raise EngineConnectionError(f"connection to database failed: {e}") from e
        try:
            yield EngineSession(conn)
        finally:
            await conn.close()
