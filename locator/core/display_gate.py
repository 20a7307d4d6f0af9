"""Readiness gate for a display that is expensive to bring up.

Operations submitted before the display is ready are queued and run in order
once it becomes ready. The first submission triggers the loader.
"""

from __future__ import annotations

import logging
from collections import deque
from enum import Enum
from typing import Callable, Deque, Optional

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    READY = "ready"


class DisplayGate:
    def __init__(self, loader: Optional[Callable[["DisplayGate"], None]] = None) -> None:
        self._loader = loader
        self._queue: Deque[Callable[[], None]] = deque()
        self.state = GateState.NOT_LOADED

    @property
    def pending(self) -> int:
        return len(self._queue)

    def submit(self, operation: Callable[[], None]) -> None:
        if self.state is GateState.READY:
            operation()
            return
        self._queue.append(operation)
        if self.state is GateState.NOT_LOADED:
            self.begin_loading()

    def begin_loading(self) -> None:
        if self.state is not GateState.NOT_LOADED:
            return
        self.state = GateState.LOADING
        logger.debug("Display loading started")
        if self._loader is not None:
            self._loader(self)

    def mark_ready(self) -> None:
        if self.state is GateState.READY:
            return
        self.state = GateState.READY
        logger.debug("Display ready; draining %d queued operations", len(self._queue))
        while self._queue:
            operation = self._queue.popleft()
            try:
                operation()
            except Exception as exc:  # noqa: BLE001
                logger.exception("Queued display operation failed: %s", exc)
