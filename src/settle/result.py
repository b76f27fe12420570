"""Result primitives for observing a settled computation as plain data.

``outcome`` turns an awaitable into a ``Success`` or ``Failure`` value, which
keeps callers that fan out over many computations free of broad try/except
blocks.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable


@dataclasses.dataclass(frozen=True, slots=True)
class Success[T]:
    """A computation that settled with a value."""

    value: T


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[E: BaseException]:
    """A computation that settled with an error."""

    error: E


type Result[T, E: BaseException] = Success[T] | Failure[E]


async def outcome[T](src: Awaitable[T]) -> Result[T, Exception]:
    """Await *src* and return its outcome as data.

    Only ``Exception`` instances are captured; cancellation and other
    non-``Exception`` errors propagate.
    """
    try:
        value = await src
    except Exception as exc:
        return Failure(exc)
    return Success(value)
