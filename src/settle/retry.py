"""Bounded retry with an explicit attempt budget.

Design goals:
- A fixed number of attempts, no backoff or elapsed-time budget
- Each attempt invokes the factory afresh; failed handles are never replayed
- Fatal errors end the run immediately and are never retried
"""

from __future__ import annotations

import asyncio
from functools import wraps
import logging
from typing import TYPE_CHECKING, ParamSpec, TypeVar

from settle._futures import settled, spawn, start
from settle.config import resolve_config
from settle.errors import AttemptsExhaustedError, is_fatal

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from settle.errors import FatalClassifier

log = logging.getLogger(__name__)

T = TypeVar("T")
P = ParamSpec("P")


def insist(
    factory: Callable[[], Awaitable[T]],
    max_attempts: int,
    *,
    fatal: FatalClassifier = is_fatal,
) -> asyncio.Future[T]:
    """Invoke *factory* until one attempt succeeds, at most *max_attempts* times.

    Contract:
    - ``max_attempts == 0`` fails with ``AttemptsExhaustedError`` without
      invoking the factory.
    - Ordinary failures consume one attempt each; running out fails with
      ``AttemptsExhaustedError`` chained to the last attempt's error.
    - Errors for which ``fatal`` returns True propagate unchanged at once.
    """
    if max_attempts < 0:
        raise ValueError("insist() max_attempts must be >= 0")
    if max_attempts == 0:
        log.debug("insist: no attempts permitted")
        return settled(error=AttemptsExhaustedError(0))

    async def _insist() -> T:
        last_exc: Exception | None = None
        for attempt in range(1, max_attempts + 1):
            try:
                return await start(factory)
            except Exception as exc:
                if fatal(exc):
                    log.debug(
                        "insist: attempt %d/%d hit a fatal error, not retrying: %r",
                        attempt,
                        max_attempts,
                        exc,
                    )
                    raise
                last_exc = exc
                log.debug(
                    "insist: attempt %d/%d failed: %r", attempt, max_attempts, exc
                )

        log.debug("insist: exhausted %d attempt(s)", max_attempts)
        raise AttemptsExhaustedError(max_attempts, last_error=last_exc) from last_exc

    return spawn(_insist(), name="settle.insist")


def insisting(
    max_attempts: int | None = None, *, fatal: FatalClassifier = is_fatal
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, asyncio.Future[T]]]:
    """Decorate an async function so each call runs under ``insist``.

    ``max_attempts`` defaults to ``Config.max_attempts`` at call time.

    Example:
        @insisting(3)
        async def fetch(key: str) -> bytes: ...

        data = await fetch("a")
    """

    def decorate(fn: Callable[P, Awaitable[T]]) -> Callable[P, asyncio.Future[T]]:
        @wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> asyncio.Future[T]:
            budget = (
                resolve_config().max_attempts if max_attempts is None else max_attempts
            )
            return insist(lambda: fn(*args, **kwargs), budget, fatal=fatal)

        return wrapper

    return decorate
