"""Combinators over ``asyncio.Future``.

Every function here starts work eagerly on the running loop and returns an
``asyncio.Future`` that settles exactly once. Failures propagate as the same
exception object and short-circuit downstream work unless a combinator
documents recovery.
"""

from __future__ import annotations

import asyncio
from functools import partial
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from settle._futures import (
    as_future,
    consume_future_exception,
    settled,
    spawn,
    start,
)
from settle.config import resolve_config
from settle.errors import is_fatal

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from settle.errors import FatalClassifier

log = logging.getLogger(__name__)

A = TypeVar("A")
B = TypeVar("B")


def succeed(value: A) -> asyncio.Future[A]:
    """Return an already successful future holding *value*."""
    return settled(value)


def fail(error: BaseException) -> asyncio.Future[Any]:
    """Return an already failed future holding *error*."""
    if not isinstance(error, BaseException):
        raise TypeError(f"fail() expects an exception, got {type(error).__name__}")
    return settled(error=error)


def transform(src: Awaitable[A], fn: Callable[[A], B]) -> asyncio.Future[B]:
    """Map the success value of *src* through *fn*.

    ``fn`` runs once, after *src* has settled successfully. A failed *src*
    fails the result with the same error and ``fn`` is never called.
    """
    source = as_future(src)

    async def _transform() -> B:
        value = await source
        return fn(value)

    return spawn(_transform(), name="settle.transform")


def recover(
    src: Awaitable[A], fallback: A, *, fatal: FatalClassifier = is_fatal
) -> asyncio.Future[A]:
    """Replace an ordinary failure of *src* with *fallback*.

    Errors for which ``fatal`` returns True propagate unchanged. Successful
    values pass through.
    """
    source = as_future(src)

    async def _recover() -> A:
        try:
            return await source
        except Exception as exc:
            if fatal(exc):
                raise
            log.debug("recover: replacing %r with fallback", exc)
            return fallback

    return spawn(_recover(), name="settle.recover")


def sequence(
    first: Callable[[], Awaitable[A]], second: Callable[[], Awaitable[B]]
) -> asyncio.Future[tuple[A, B]]:
    """Run *first*, then *second* only once *first* has succeeded.

    Returns ``(a, b)``. When *first* fails, *second* is never invoked.
    """
    head = start(first)

    async def _sequence() -> tuple[A, B]:
        a = await head
        b = await start(second)
        return a, b

    return spawn(_sequence(), name="settle.sequence")


def concurrent_pair(
    first: Callable[[], Awaitable[A]],
    second: Callable[[], Awaitable[B]],
    *,
    cancel_pending: bool | None = None,
) -> asyncio.Future[tuple[A, B]]:
    """Start *first* and *second* together and pair their values.

    The result fails with the first failure observed on either branch. The
    other branch keeps running and its outcome is discarded, unless
    ``cancel_pending`` (default: ``Config.cancel_pending``) asks for it to be
    cancelled. Cancelling the returned future cancels both branches.
    """
    if cancel_pending is None:
        cancel_pending = resolve_config().cancel_pending

    left = start(first)
    right = start(second)
    out: asyncio.Future[tuple[A, B]] = asyncio.get_running_loop().create_future()

    def _on_branch_done(branch: asyncio.Future[Any]) -> None:
        if out.done():
            log.debug("concurrent_pair: discarding late branch %r", branch)
            consume_future_exception(branch)
            return

        if branch.cancelled():
            out.cancel()
        elif (error := branch.exception()) is not None:
            out.set_exception(error)
        else:
            other = right if branch is left else left
            if (
                not other.done()
                or other.cancelled()
                or other.exception() is not None
            ):
                # The other branch settles the result (or has yet to).
                return
            out.set_result((left.result(), right.result()))
            return

        if cancel_pending:
            for sibling in (left, right):
                if not sibling.done():
                    log.debug("concurrent_pair: cancelling pending %r", sibling)
                    sibling.cancel()

    def _on_out_done(fut: asyncio.Future[Any]) -> None:
        if fut.cancelled():
            left.cancel()
            right.cancel()

    left.add_done_callback(_on_branch_done)
    right.add_done_callback(_on_branch_done)
    out.add_done_callback(_on_out_done)
    return out


def pipeline(
    initial: Callable[[], Awaitable[Any]],
    *stages: Callable[[Any], Awaitable[Any]],
) -> asyncio.Future[Any]:
    """Chain dependent stages, each consuming the previous stage's value.

    ``initial`` takes no arguments; bind initial inputs and stage-local
    constants with closures or ``functools.partial``. A failing stage
    short-circuits the rest and fails the pipeline with its error.
    """
    head = start(initial)

    async def _pipeline() -> Any:
        value = await head
        for index, stage in enumerate(stages, start=1):
            try:
                value = await start(partial(stage, value))
            except Exception as exc:
                log.debug(
                    "pipeline: stage %d/%d (%s) failed, skipping %d stage(s): %r",
                    index,
                    len(stages),
                    getattr(stage, "__name__", type(stage).__name__),
                    len(stages) - index,
                    exc,
                )
                raise
        return value

    return spawn(_pipeline(), name="settle.pipeline")
