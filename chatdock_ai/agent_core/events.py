"""Minimal in-process event emitter used by the supervisor and the scheduler."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, List, Set

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]


class EventEmitter:
    """
    Named-event pub/sub.

    Listeners run synchronously in registration order. A listener returning a
    coroutine has it scheduled on the running loop. Listener errors are logged
    and never reach the emitter.
    """

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, List[Listener]] = defaultdict(list)
        self._pending: Set[asyncio.Task] = set()

    def on(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Listener) -> bool:
        try:
            self._listeners[event].remove(listener)
        except ValueError:
            return False
        return True

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def emit(self, event: str, payload: Any = None) -> None:
        for listener in list(self._listeners.get(event, ())):
            try:
                result = listener(payload)
            except Exception as e:
                logger.error(f"Listener for '{event}' failed: {e}", exc_info=True)
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._pending.add(task)
                task.add_done_callback(self._on_listener_done)

    def _on_listener_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Async listener failed: {task.exception()}")
