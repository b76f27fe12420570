"""Configuration: frozen defaults for the combinators, resolved from the environment."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import logging
import os
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from settle.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

load_dotenv()

log = logging.getLogger(__name__)

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})

# Field name -> environment variable
_ENV_VARS: dict[str, str] = {
    "max_attempts": "SETTLE_MAX_ATTEMPTS",
    "cancel_pending": "SETTLE_CANCEL_PENDING",
}


@dataclass(frozen=True)
class Config:
    """Immutable defaults applied when a call site does not choose explicitly.

    Example:
        config = resolve_config(overrides={"cancel_pending": True})
    """

    #: Attempt budget used by ``insisting()`` when none is given.
    max_attempts: int = 3
    #: Cancel the still-running sibling once ``concurrent_pair`` has failed.
    cancel_pending: bool = False

    def __post_init__(self) -> None:
        """Validate invariants so combinator behavior stays predictable."""
        if isinstance(self.max_attempts, bool) or not isinstance(
            self.max_attempts, int
        ):
            raise ConfigurationError(
                f"max_attempts must be an integer, got {self.max_attempts!r}",
            )
        if self.max_attempts < 0:
            raise ConfigurationError(
                f"max_attempts must be ≥ 0, got {self.max_attempts}",
                hint="0 means the computation is never attempted.",
            )
        if not isinstance(self.cancel_pending, bool):
            raise ConfigurationError(
                f"cancel_pending must be a bool, got {self.cancel_pending!r}",
            )


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigurationError(
        f"{name} must be a boolean, got {raw!r}",
        hint="Use one of: 1, true, yes, on, 0, false, no, off.",
    )


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}",
            hint="Attempt budgets are whole numbers ≥ 0.",
        ) from None


def _from_env() -> dict[str, Any]:
    values: dict[str, Any] = {}
    raw = os.environ.get(_ENV_VARS["max_attempts"])
    if raw is not None:
        values["max_attempts"] = _parse_int(_ENV_VARS["max_attempts"], raw)
    raw = os.environ.get(_ENV_VARS["cancel_pending"])
    if raw is not None:
        values["cancel_pending"] = _parse_bool(_ENV_VARS["cancel_pending"], raw)
    return values


def resolve_config(overrides: Mapping[str, Any] | None = None) -> Config:
    """Resolve a ``Config`` from defaults, environment, then *overrides*.

    Unknown override keys raise ``ConfigurationError``.
    """
    known = {f.name for f in fields(Config)}
    overrides = dict(overrides or {})
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ConfigurationError(
            f"Unknown config field(s): {', '.join(unknown)}",
            hint=f"Valid fields: {', '.join(sorted(known))}",
        )

    env_values = _from_env()
    if env_values:
        log.debug("Config values from environment: %s", sorted(env_values))
    return replace(Config(), **{**env_values, **overrides})
