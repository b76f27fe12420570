"""settle: combinators for asyncio computations.

Public API:
    - transform(), recover(): map or rescue a single computation
    - sequence(), pipeline(): dependent, short-circuiting composition
    - concurrent_pair(): independent composition with fail-fast joining
    - insist(), insisting(): bounded retry over a computation factory
    - succeed(), fail(), outcome(): construct and observe results
"""

from __future__ import annotations

import logging

from settle.combinators import (
    concurrent_pair,
    fail,
    pipeline,
    recover,
    sequence,
    succeed,
    transform,
)
from settle.config import Config, resolve_config
from settle.errors import (
    AttemptsExhaustedError,
    ConfigurationError,
    FatalClassifier,
    SettleError,
    fatal_when,
    is_fatal,
)
from settle.result import Failure, Result, Success, outcome
from settle.retry import insist, insisting

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("settle")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("settle").addHandler(logging.NullHandler())

__all__ = [
    "AttemptsExhaustedError",
    "Config",
    "ConfigurationError",
    "Failure",
    "FatalClassifier",
    "Result",
    "SettleError",
    "Success",
    "concurrent_pair",
    "fail",
    "fatal_when",
    "insist",
    "insisting",
    "is_fatal",
    "outcome",
    "pipeline",
    "recover",
    "resolve_config",
    "sequence",
    "succeed",
    "transform",
]
