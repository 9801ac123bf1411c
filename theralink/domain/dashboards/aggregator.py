"""
Parallel fetch-and-join for dashboard statistics.

Each named query gets its own session and runs on a worker thread; the
results are joined into one dict. If any query fails the whole panel fails:
callers get ``DashboardUnavailable`` and no partial statistics.
"""

import asyncio
import logging
from typing import Any, Callable

from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)

StatQuery = Callable[[Session], Any]


class DashboardUnavailable(Exception):
    """Raised when at least one dashboard query failed"""

    def __init__(self, failed: list[str]):
        self.failed = failed
        super().__init__(f"Dashboard queries failed: {', '.join(failed)}")


def _run_query(session_factory: sessionmaker, query: StatQuery) -> Any:
    db = session_factory()
    try:
        return query(db)
    finally:
        db.close()


async def gather_stats(session_factory: sessionmaker, queries: dict[str, StatQuery]) -> dict[str, Any]:
    """Run every query concurrently and return {name: result}"""
    names = list(queries)
    results = await asyncio.gather(
        *(asyncio.to_thread(_run_query, session_factory, queries[name]) for name in names),
        return_exceptions=True,
    )

    failed = []
    for name, result in zip(names, results):
        if isinstance(result, Exception):
            logger.error(f"❌ Dashboard query '{name}' failed: {result}")
            failed.append(name)
    if failed:
        raise DashboardUnavailable(failed)

    return dict(zip(names, results))
