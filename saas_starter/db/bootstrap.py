"""
Apply the bootstrap DDL to a D1 binding once per process.

Concurrent callers share a single in-flight attempt. A failed attempt is
forgotten so the next call starts over; a successful one is never repeated.
"""

import asyncio
from typing import Any, Optional, Sequence

from saas_starter.core.exceptions import DatabaseBindingError
from saas_starter.core.logging import get_db_logger
from saas_starter.db.schema import BOOTSTRAP_STATEMENTS

logger = get_db_logger()


def is_d1_database_like(candidate: Any) -> bool:
    """True if ``candidate`` has a callable ``prepare`` like a D1 binding."""
    return candidate is not None and callable(getattr(candidate, "prepare", None))


class SchemaBootstrapper:
    """Single-flight runner for an ordered list of schema statements."""

    def __init__(self, statements: Sequence[str] = BOOTSTRAP_STATEMENTS):
        self.statements = tuple(statements)
        self._future: Optional[asyncio.Future] = None

    @property
    def completed(self) -> bool:
        return (
            self._future is not None
            and self._future.done()
            and not self._future.cancelled()
            and self._future.exception() is None
        )

    async def _apply(self, db: Any) -> None:
        logger.info("Applying bootstrap statements", count=len(self.statements))
        for statement in self.statements:
            await db.prepare(statement).run()
        logger.info("Database schema ready")

    def _forget_failed_attempt(self, future: asyncio.Future) -> None:
        if future is not self._future:
            return
        if future.cancelled() or future.exception() is not None:
            logger.warning("Schema bootstrap failed; next call will retry")
            self._future = None

    async def ensure(self, db: Any) -> None:
        if not is_d1_database_like(db):
            raise DatabaseBindingError("Cloudflare D1 binding is not available.")

        if self._future is None:
            self._future = asyncio.ensure_future(self._apply(db))
            self._future.add_done_callback(self._forget_failed_attempt)

        await asyncio.shield(self._future)

    def reset(self) -> None:
        """Forget any previous attempt."""
        self._future = None


_bootstrapper = SchemaBootstrapper()


async def ensure_d1_schema(db: Any) -> None:
    """Make sure the bootstrap statements have been applied in this process."""
    await _bootstrapper.ensure(db)


def reset_bootstrap_state() -> None:
    _bootstrapper.reset()
