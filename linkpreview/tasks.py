import asyncio
import logging
from typing import Awaitable, Optional, Set

logger = logging.getLogger(__name__)

# Strong references so pending previews are not garbage collected mid-flight.
_pending: Set[asyncio.Task] = set()


def create_task(coro: Awaitable, *, task_group: Optional[asyncio.TaskGroup] = None,
                logger: logging.Logger = logger) -> asyncio.Task:
    """Create an asyncio task and log exceptions once finished.

    If *task_group* is provided, the task is created via the group, allowing
    collective cancellation and error propagation.
    """
    if task_group is not None:
        task = task_group.create_task(coro)
    else:
        task = asyncio.create_task(coro)
        _pending.add(task)
        task.add_done_callback(_pending.discard)

    def _log_result(task: asyncio.Task) -> None:
        try:
            exc = task.exception()
        except asyncio.CancelledError:
            return
        if exc:
            logger.error("Unhandled task exception", exc_info=exc)

    task.add_done_callback(_log_result)
    return task
