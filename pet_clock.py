from __future__ import annotations

import logging
import math
import threading
import time
from enum import Enum
from typing import Callable

logger = logging.getLogger("VirtualPet")

# --- Constants ---
TICK_INTERVAL_SECONDS = 10.0
STOP_JOIN_TIMEOUT_SECONDS = 5.0


class ClockState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


def is_valid_interval(seconds: float) -> bool:
    # Event.wait overflows above TIMEOUT_MAX.
    return math.isfinite(seconds) and 0 < seconds <= threading.TIMEOUT_MAX


class AgingClock:
    """
    Fires ``on_tick`` every ``interval`` seconds on a single background thread.

    Firings never overlap. A late firing pushes the next deadline forward
    instead of being dropped, and an exception in one firing is logged and
    does not end the cadence. Once stopped the clock cannot be restarted.
    """

    def __init__(
        self,
        on_tick: Callable[[], object],
        interval: float = TICK_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not is_valid_interval(interval):
            raise ValueError(f"interval must be a positive number of seconds, got {interval!r}")
        self._on_tick = on_tick
        self._interval = float(interval)
        self._clock = clock
        self._stop_event = threading.Event()
        self._state_lock = threading.Lock()
        self._state = ClockState.IDLE
        self._thread: threading.Thread | None = None
        self._ticks = 0
        self._failures = 0

    @property
    def state(self) -> ClockState:
        return self._state

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def failures(self) -> int:
        return self._failures

    def start(self) -> None:
        with self._state_lock:
            if self._state == ClockState.RUNNING:
                return
            if self._state == ClockState.STOPPED:
                raise RuntimeError("aging clock cannot be restarted after stop()")
            self._thread = threading.Thread(target=self._run, name="aging-clock", daemon=True)
            self._state = ClockState.RUNNING
            self._thread.start()
        logger.info("Aging clock started (every %.2fs)", self._interval)

    def stop(self, timeout: float = STOP_JOIN_TIMEOUT_SECONDS) -> None:
        with self._state_lock:
            if self._state == ClockState.STOPPED:
                return
            self._state = ClockState.STOPPED
            self._stop_event.set()
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Aging clock thread did not finish within %.1fs", timeout)
        logger.info("Aging clock stopped after %d ticks", self._ticks)

    def _run(self) -> None:
        next_fire = self._clock() + self._interval
        while not self._stop_event.wait(max(0.0, next_fire - self._clock())):
            self._fire()
            next_fire += self._interval
            now = self._clock()
            if next_fire < now:
                # Fell behind; keep the next firing but do not try to catch up in a burst.
                next_fire = now

    def _fire(self) -> None:
        self._ticks += 1
        try:
            self._on_tick()
        except Exception:
            self._failures += 1
            logger.exception("Aging clock tick %d failed", self._ticks)
        else:
            logger.debug("Aging clock tick %d", self._ticks)
