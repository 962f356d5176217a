"""
Fixed-interval refresh of a remote list.

The poller calls `fetch` immediately and then every `interval` seconds on a
daemon thread. Each successful result is handed to `on_update` and replaces
whatever the caller held before; nothing is merged. A failing fetch goes to
`on_error` (or the log) and polling continues.

`stop()` and leaving the context manager both end the thread; no callback
starts after they return, even when the join times out on a slow fetch.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, Optional, TypeVar

from orderdesk.config import get_config
from orderdesk.logging import get_logger

T = TypeVar("T")


class OrderPoller(Generic[T]):
    def __init__(
        self,
        fetch: Callable[[], T],
        on_update: Callable[[T], None],
        interval: Optional[float] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        self.fetch = fetch
        self.on_update = on_update
        self.interval = interval if interval is not None else get_config().poll_interval_seconds
        if self.interval <= 0:
            raise ValueError(f"Polling interval must be positive, got {self.interval}")
        self.on_error = on_error
        self.latest: Optional[T] = None
        self.ticks = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.logger = get_logger(__name__)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "OrderPoller[T]":
        if self.running:
            if not self._stop.is_set():
                return self
            # a stopped worker still finishing its last fetch
            self._thread.join()
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="order-poller", daemon=True)
        self._thread.start()
        self.logger.debug(f"Polling every {self.interval}s")
        return self

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        if thread is None or not thread.is_alive():
            self._thread = None
        self.logger.debug("Polling stopped")

    def poll_once(self) -> Optional[T]:
        """Run a single fetch and deliver its result. Returns None on failure."""
        return self._tick(background=False)

    def _tick(self, background: bool) -> Optional[T]:
        try:
            result = self.fetch()
        except Exception as e:
            if background and self._stop.is_set():
                return None
            if self.on_error is not None:
                self.on_error(e)
            else:
                self.logger.warning(f"Refresh failed: {e}")
            return None
        if background and self._stop.is_set():
            # stop() was called while the fetch was in flight
            return None
        self.latest = result
        self.ticks += 1
        self.on_update(result)
        return result

    def _run(self) -> None:
        while not self._stop.is_set():
            self._tick(background=True)
            if self._stop.wait(self.interval):
                break

    def __enter__(self) -> "OrderPoller[T]":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
