"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off factory classes as coverage expands.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from tests.conftest import CountingFactory


class Boom(Exception):
    """Ordinary failure raised by test doubles."""


@dataclass
class ScriptedFactory(CountingFactory):
    """Factory that plays a scripted sequence of values/exceptions.

    Once the script is used up, every further call succeeds with ``value``.
    """

    script: list[Any] = field(default_factory=list)

    async def _run(self) -> Any:
        self.started += 1
        if not self.script:
            return self.value
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


@dataclass
class GateFactory(CountingFactory):
    """Factory with an explicit barrier for ordering and race tests.

    ``started`` is set when the computation begins running; it then waits on
    ``release`` before settling.
    """

    started_event: asyncio.Event = field(default_factory=asyncio.Event)
    release: asyncio.Event = field(default_factory=asyncio.Event)
    settled: bool = False
    cancelled: bool = False

    async def _run(self) -> Any:
        self.started += 1
        self.started_event.set()
        try:
            await self.release.wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        self.settled = True
        if self.error is not None:
            raise self.error
        return self.value


async def drain(cycles: int = 5) -> None:
    """Let the running loop advance a few scheduling rounds."""
    for _ in range(cycles):
        await asyncio.sleep(0)
