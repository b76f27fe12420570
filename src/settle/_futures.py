"""Future plumbing shared by the combinators.

Every combinator hands back an ``asyncio.Future`` bound to the running loop.
These helpers normalize awaitables and factories into that shape and keep
spawned tasks alive until they finish.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Coroutine

T = TypeVar("T")

# Strong references for in-flight tasks; the loop only keeps weak ones.
_live_tasks: set[asyncio.Future[Any]] = set()


def consume_future_exception(fut: asyncio.Future[Any]) -> None:
    """Avoid 'Future exception was never retrieved' for discarded branches."""
    try:
        _ = fut.exception()
    except asyncio.CancelledError:
        return


def as_future(aw: Awaitable[T]) -> asyncio.Future[T]:
    """Return *aw* as a future scheduled on the running loop."""
    loop = asyncio.get_running_loop()
    if not inspect.isawaitable(aw):
        raise TypeError(f"Expected an awaitable, got {type(aw).__name__}")
    return asyncio.ensure_future(aw, loop=loop)


def settled(
    value: Any = None, *, error: BaseException | None = None
) -> asyncio.Future[Any]:
    """Return a future that is already settled with *value* or *error*."""
    fut = asyncio.get_running_loop().create_future()
    if error is not None:
        fut.set_exception(error)
    else:
        fut.set_result(value)
    return fut


def start(factory: Callable[[], Awaitable[T]]) -> asyncio.Future[T]:
    """Invoke *factory* once and return its outcome as a future.

    A factory that raises instead of returning an awaitable yields a failed
    future, so synchronous and asynchronous failures look the same downstream.
    """
    # Without a running loop, fail before the factory is invoked.
    asyncio.get_running_loop()
    try:
        aw = factory()
    except Exception as exc:
        return settled(error=exc)
    return as_future(aw)


def spawn(coro: Coroutine[Any, Any, T], *, name: str) -> asyncio.Future[T]:
    """Schedule *coro* as a named task that stays referenced until done."""
    task = asyncio.get_running_loop().create_task(coro, name=name)
    _live_tasks.add(task)
    task.add_done_callback(_live_tasks.discard)
    return task
