import asyncio
import time
from collections import defaultdict
from typing import Dict, Hashable, Optional, Set

from ddmanager.sensors import OperatorSensor


class QueueShutDown(Exception):
    """The queue was shut down, no more keys will be handed out."""


class WorkQueue:
    """De-duplicating work queue of object keys.

    A key is pending at most once. Adding a key that is already pending is a
    no-op. Adding a key that a worker is processing marks it dirty, it is
    queued again once the worker calls `done()`. Several workers may consume
    the queue, a key is never processed by two of them at the same time.

    Failed keys are re-added with exponential backoff via `add_rate_limited()`.
    """

    def __init__(
        self,
        name: str,
        base_delay: float = 1.0,
        max_delay: float = 300.0,
        sensor: Optional[OperatorSensor] = None,
    ) -> None:
        self.name = name
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._sensor = sensor
        self._queue: asyncio.Queue = asyncio.Queue()
        # Keys waiting to be processed
        self._dirty: Set[Hashable] = set()
        # Keys currently held by a worker
        self._processing: Set[Hashable] = set()
        self._queued_at: Dict[Hashable, float] = {}
        self._requeues: Dict[Hashable, int] = defaultdict(int)
        self._timers: Dict[Hashable, asyncio.TimerHandle] = {}
        self._shutting_down = False

    def __len__(self) -> int:
        return len(self._dirty)

    @property
    def shutting_down(self) -> bool:
        return self._shutting_down

    def is_pending(self, key: Hashable) -> bool:
        return key in self._dirty

    def is_processing(self, key: Hashable) -> bool:
        return key in self._processing

    def add(self, key: Hashable) -> bool:
        """Mark `key` for processing.

        Returns:
            Whether the key was added, `False` if it was already pending.
        """
        if self._shutting_down or key in self._dirty:
            return False
        self._dirty.add(key)
        self._queued_at[key] = time.monotonic()
        if key not in self._processing:
            self._queue.put_nowait(key)
        if self._sensor:
            self._sensor.on_reconcile_queued(self.name, str(key), len(self._dirty))
        return True

    async def get(self) -> Hashable:
        """Wait for the next key and mark it as processing.

        Raises:
            QueueShutDown: Once the queue is shut down.
        """
        while True:
            if self._shutting_down:
                raise QueueShutDown(self.name)
            key = await self._queue.get()
            if key is None or self._shutting_down:
                # Wake up the next waiting worker too.
                self._queue.put_nowait(None)
                raise QueueShutDown(self.name)
            if key in self._processing or key not in self._dirty:
                continue
            self._dirty.discard(key)
            self._processing.add(key)
            queued_at = self._queued_at.pop(key, None)
            if self._sensor and queued_at is not None:
                self._sensor.on_reconcile_dequeued(
                    self.name, str(key), time.monotonic() - queued_at
                )
            return key

    def done(self, key: Hashable) -> None:
        """Release `key`, queueing it again if it was added while processing."""
        self._processing.discard(key)
        if key in self._dirty and not self._shutting_down:
            self._queue.put_nowait(key)

    def num_requeues(self, key: Hashable) -> int:
        return self._requeues.get(key, 0)

    def backoff(self, key: Hashable) -> float:
        """Delay before the next retry of `key`."""
        return min(self._base_delay * (2 ** self.num_requeues(key)), self._max_delay)

    def add_rate_limited(self, key: Hashable) -> float:
        """Add `key` again after its backoff delay.

        Returns:
            The delay in seconds.
        """
        delay = self.backoff(key)
        self._requeues[key] += 1
        self.add_after(key, delay)
        return delay

    def add_after(self, key: Hashable, delay: float) -> None:
        if self._shutting_down:
            return
        if delay <= 0:
            self.add(key)
            return
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()
        loop = asyncio.get_running_loop()
        self._timers[key] = loop.call_later(delay, self._fire, key)

    def _fire(self, key: Hashable) -> None:
        self._timers.pop(key, None)
        self.add(key)

    def forget(self, key: Hashable) -> None:
        """Reset the retry history of `key`."""
        self._requeues.pop(key, None)
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def shut_down(self) -> None:
        """Stop handing out keys and release waiting workers."""
        if self._shutting_down:
            return
        self._shutting_down = True
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._queue.put_nowait(None)
