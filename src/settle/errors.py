"""Exception hierarchy and fatal-error classifiers for settle."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

#: Decides, per call site, whether an error must propagate untouched.
type FatalClassifier = Callable[[BaseException], bool]

# Process-level resource exhaustion; never recovered or retried.
FATAL_ERROR_TYPES: tuple[type[BaseException], ...] = (MemoryError, RecursionError)


class SettleError(Exception):
    """Base exception for all settle errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(SettleError):
    """Configuration validation or resolution failed."""


class AttemptsExhaustedError(SettleError):
    """Every permitted attempt of a retried computation failed.

    Distinct from the failure of any single attempt: the last attempt's error
    (if any attempt ran) is kept on ``last_error`` and chained as
    ``__cause__``.
    """

    def __init__(
        self,
        attempts: int,
        *,
        last_error: BaseException | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(f"Reached max attempts ({attempts})", hint=hint)
        self.attempts = attempts
        self.last_error = last_error


def is_fatal(exc: BaseException) -> bool:
    """Return True when *exc* must never be recovered or retried.

    Contract:
    - Anything that is not an ``Exception`` (cancellation, interpreter exit,
      keyboard interrupts) is fatal.
    - ``MemoryError`` and ``RecursionError`` are fatal.
    - Every other ``Exception`` is ordinary.
    """
    return not isinstance(exc, Exception) or isinstance(exc, FATAL_ERROR_TYPES)


def fatal_when(
    *types: type[BaseException], follow_chain: bool = False
) -> FatalClassifier:
    """Build a classifier that also treats *types* as fatal.

    With ``follow_chain=True`` a match anywhere on the ``__cause__`` /
    ``__context__`` chain counts, which helps when a library wraps the
    underlying error.
    """

    def _classify(exc: BaseException) -> bool:
        if is_fatal(exc):
            return True
        candidates = _walk_exception_chain(exc) if follow_chain else (exc,)
        return any(isinstance(e, types) for e in candidates)

    return _classify


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
