"""Best-effort work that runs after a transaction has committed.

Failures here are logged and swallowed: once the database work is committed
the caller has succeeded, whatever happens to notifications or audit rows.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class Actor:
    """Who is performing an operation, for movement and audit records."""
    user_id: Optional[int] = None
    name: str = ""
    ip_address: str = ""


@contextmanager
def best_effort(label: str):
    """Run a synchronous post-commit step, logging instead of raising."""
    try:
        yield
    except Exception:
        logger.exception(f"Post-commit step failed: {label}")


class AfterCommit:
    """Queue of async callables to run once the response is on its way.

    Routes hand ``run`` to FastAPI ``BackgroundTasks``; tests await it directly.
    """

    def __init__(self):
        self._tasks: List[Tuple[str, Callable[[], Awaitable]]] = []

    def defer(self, label: str, factory: Callable[[], Awaitable]) -> None:
        self._tasks.append((label, factory))

    @property
    def labels(self) -> List[str]:
        return [label for label, _ in self._tasks]

    async def run(self) -> None:
        tasks, self._tasks = self._tasks, []
        for label, factory in tasks:
            try:
                await factory()
            except Exception:
                logger.exception(f"Post-commit task failed: {label}")
