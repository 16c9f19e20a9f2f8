"""Background one-second ticker."""
from __future__ import annotations

import threading
from typing import Callable, Optional


class ThreadTicker:
    """Calls ``on_tick`` every ``interval`` seconds on a daemon thread until stopped."""

    def __init__(self, interval: float = 1.0) -> None:
        self._interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self, on_tick: Callable[[], None]) -> None:
        if self._thread is not None:
            return

        def _run() -> None:
            while not self._stop.wait(self._interval):
                on_tick()

        self._thread = threading.Thread(target=_run, name="recording-ticker", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._interval * 2)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()


__all__ = ["ThreadTicker"]
