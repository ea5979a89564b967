"""A small discrete-event simulator and an in-memory datagram network."""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Hashable

Handler = Callable[[bytes, Hashable], Any]
Reachability = Callable[[Hashable, Hashable], bool]


@dataclass(order=True)
class Event:
    """A callback scheduled at a given simulated time."""

    time: float
    seq: int
    callback: Callable[..., Any] = field(compare=False)
    args: tuple = field(compare=False, default=())
    cancelled: bool = field(compare=False, default=False)

    def cancel(self) -> None:
        self.cancelled = True


class Simulator:
    """Runs scheduled callbacks in time order; equal times run in scheduling order."""

    def __init__(self) -> None:
        self._queue: list[Event] = []
        self._seq = itertools.count()
        self.now: float = 0.0

    def schedule(self, delay: float, callback: Callable[..., Any], *args: Any) -> Event:
        """Run ``callback(*args)`` after ``delay`` seconds of simulated time."""
        if delay < 0:
            raise ValueError(f"cannot schedule an event in the past (delay={delay})")
        event = Event(self.now + delay, next(self._seq), callback, args)
        heapq.heappush(self._queue, event)
        return event

    def schedule_now(self, callback: Callable[..., Any], *args: Any) -> Event:
        """Run ``callback(*args)`` at the current simulated time."""
        return self.schedule(0, callback, *args)

    @property
    def pending(self) -> int:
        """Number of events still waiting to run."""
        return sum(1 for event in self._queue if not event.cancelled)

    def run(self, until: float | None = None) -> None:
        """Process events up to and including time ``until`` (all events if None)."""
        while self._queue:
            event = self._queue[0]
            if until is not None and event.time > until:
                break
            heapq.heappop(self._queue)
            if event.cancelled:
                continue
            self.now = event.time
            event.callback(*event.args)
        if until is not None and until > self.now:
            self.now = until


class Network:
    """Delivers datagrams between bound addresses through the simulator."""

    def __init__(self, simulator: Simulator, reachable: Reachability | None = None) -> None:
        self.simulator = simulator
        self.reachable = reachable
        self._handlers: dict[Hashable, Handler] = {}

    def bind(self, address: Hashable, handler: Handler) -> None:
        """Deliver datagrams addressed to ``address`` to ``handler(data, source)``."""
        if address in self._handlers:
            raise ValueError(f"address {address!r} is already bound")
        self._handlers[address] = handler

    def send(self, source: Hashable, destination: Hashable, data: bytes) -> bool:
        """Queue ``data`` for delivery; return False if it is dropped."""
        handler = self._handlers.get(destination)
        if handler is None:
            return False
        if self.reachable is not None and not self.reachable(source, destination):
            return False
        self.simulator.schedule_now(handler, bytes(data), source)
        return True