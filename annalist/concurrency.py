"""Bounded worker pool for cooperative I/O-bound tasks.

Usage
-----
Fetch details for many commits with at most four requests in flight:

>>> failures = await run_bounded(commits, render_commit, concurrency=4)

"""

from __future__ import annotations

import asyncio
import collections
import typing as typ

from annalist.logging import get_logger, log_warning

T = typ.TypeVar("T")

logger = get_logger(__name__)

DEFAULT_CONCURRENCY = 4


async def run_bounded(
    items: typ.Iterable[T],
    action: typ.Callable[[T], typ.Awaitable[object]],
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> tuple[tuple[T, Exception], ...]:
    """Run ``action`` over ``items`` with at most ``concurrency`` in flight.

    Workers drain a shared queue; each item is handed to exactly one
    worker. An ``Exception`` raised by ``action`` is logged and recorded,
    and neither stops the worker nor affects other items. Completion order
    is unspecified, so side effects must be keyed by item identity.

    Parameters
    ----------
    items
        Items to process. Consumed once, up front.
    action
        Coroutine function invoked once per item.
    concurrency
        Number of workers. Must be at least 1.

    Returns
    -------
    tuple[tuple[T, Exception], ...]
        ``(item, exception)`` pairs for every action that raised.

    Raises
    ------
    ValueError
        If ``concurrency`` is less than 1.

    """
    if concurrency < 1:
        msg = f"concurrency must be at least 1, got {concurrency}"
        raise ValueError(msg)

    queue: collections.deque[T] = collections.deque(items)
    failures: list[tuple[T, Exception]] = []

    async def _worker() -> None:
        while queue:
            item = queue.popleft()
            try:
                await action(item)
            except Exception as exc:  # noqa: BLE001 - isolate per-item failures
                log_warning(logger, "Action failed for %r: %s", item, exc)
                failures.append((item, exc))

    async with asyncio.TaskGroup() as group:
        for _ in range(min(concurrency, len(queue))):
            group.create_task(_worker())

    return tuple(failures)
