"""Named match clocks and the asyncio ticker that drives them in real time."""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol

from .linhas_state import ClockName


class VirtualClock:
    """A start/tick/stop counter that forwards each accepted tick to a callback.

    Nothing here reads wall time: tests call `tick()` directly, and
    `WallClockTicker` calls it once per second in a running server.
    """

    def __init__(self, name: ClockName, on_tick: Callable[[ClockName], None]):
        self.name = name
        self._on_tick = on_tick
        self._running = False
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        self._running = False

    def tick(self) -> bool:
        """Advance one second. Returns False (and does nothing) while stopped."""
        if not self._running:
            return False
        self.ticks += 1
        self._on_tick(self.name)
        return True


class Ticker(Protocol):
    """Drives a clock from some time source."""

    def start(self) -> None: ...

    def stop(self) -> None: ...


TickerFactory = Callable[[VirtualClock], Ticker]


class WallClockTicker:
    """Calls `clock.tick()` every `interval_sec` on the running event loop."""

    def __init__(self, clock: VirtualClock, interval_sec: float = 1.0):
        self.clock = clock
        self.interval_sec = interval_sec
        self._task: asyncio.Task[None] | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.active:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"linhas-{self.clock.name.value}-clock")

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while self.clock.running:
            await asyncio.sleep(self.interval_sec)
            self.clock.tick()
