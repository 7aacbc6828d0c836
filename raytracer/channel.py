"""A thread-safe FIFO of packets."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any, Deque, Optional


class Channel:
    """Thread-safe first-in first-out queue; ``pop`` returns None when empty."""

    def __init__(self) -> None:
        self._queue: Deque[Any] = deque()
        self._lock = threading.Lock()

    def push(self, packet: Any) -> None:
        with self._lock:
            self._queue.append(packet)

    def pop(self) -> Optional[Any]:
        with self._lock:
            return self._queue.popleft() if self._queue else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)

    def empty(self) -> bool:
        with self._lock:
            return not self._queue