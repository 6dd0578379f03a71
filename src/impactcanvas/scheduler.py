# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""
Frame coalescing and frame-rate measurement.

Both services are plain objects owned by whoever creates them (usually one
per canvas); there is no process-wide instance.

Usage:
    monitor = FrameRateMonitor()
    scheduler = FrameScheduler(request_frame=ui.call_on_next_frame, monitor=monitor)

    # During a drag, many pointer events per frame collapse into one update
    scheduler.schedule(('move', node_id), lambda: canvas.move_node(node_id, pos))

    # Without a request_frame hook the owner flushes explicitly
    scheduler.flush()
    scheduler.close()
"""

from collections import deque
from typing import Callable, Deque, Dict, Hashable, Optional
import logging
import time

logger = logging.getLogger(__name__)


class FrameRateMonitor:
    """Frames-per-second estimate from recorded frame timestamps."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter, window: int = 60):
        self._clock = clock
        self._times: Deque[float] = deque(maxlen=max(2, window))
        self._running = False
        self.frame_count = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        self._running = True
        self._times.clear()

    def stop(self) -> None:
        self._running = False

    def record_frame(self, now: Optional[float] = None) -> None:
        if not self._running:
            return
        self._times.append(self._clock() if now is None else now)
        self.frame_count += 1

    @property
    def fps(self) -> float:
        """Rate implied by the two most recent frames."""
        if len(self._times) < 2:
            return 0.0
        delta = self._times[-1] - self._times[-2]
        return 1.0 / delta if delta > 0 else 0.0

    @property
    def average_fps(self) -> float:
        """Mean rate over the recorded window."""
        if len(self._times) < 2:
            return 0.0
        span = self._times[-1] - self._times[0]
        return (len(self._times) - 1) / span if span > 0 else 0.0


class FrameScheduler:
    """
    Collects work during a display frame and runs it as one batch.

    Work is keyed: scheduling a key that is already pending replaces the
    earlier callback, so only the latest update per key runs.
    """

    def __init__(
        self,
        request_frame: Optional[Callable[[Callable[[], None]], None]] = None,
        monitor: Optional[FrameRateMonitor] = None
    ):
        """
        Args:
            request_frame: Called with ``self.flush`` once per frame in which
                work is scheduled. None means the owner calls ``flush``.
            monitor: Optional monitor receiving one frame per flush.
        """
        self._request_frame = request_frame
        self._monitor = monitor
        self._pending: Dict[Hashable, Callable[[], None]] = {}
        self._frame_requested = False
        self._closed = False

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def schedule(self, key: Hashable, callback: Callable[[], None]) -> None:
        if self._closed:
            raise RuntimeError("FrameScheduler is closed")
        # Re-insert so the latest update also takes the latest slot in order
        self._pending.pop(key, None)
        self._pending[key] = callback
        if self._request_frame is not None and not self._frame_requested:
            self._frame_requested = True
            self._request_frame(self.flush)

    def flush(self) -> int:
        """
        Run every pending callback in scheduling order.

        A failing callback does not stop the batch; the first failure is
        re-raised after all callbacks ran.

        Returns:
            Number of callbacks run.
        """
        batch = list(self._pending.values())
        self._pending.clear()
        self._frame_requested = False

        first_error: Optional[BaseException] = None
        for callback in batch:
            try:
                callback()
            except Exception as e:
                logger.error(f"Frame update failed: {e}")
                if first_error is None:
                    first_error = e

        if self._monitor is not None:
            self._monitor.record_frame()
        if first_error is not None:
            raise first_error
        return len(batch)

    def close(self) -> None:
        """Drop pending work and refuse new work."""
        if self._pending:
            logger.debug(f"Discarding {len(self._pending)} pending frame updates")
        self._pending.clear()
        self._closed = True
