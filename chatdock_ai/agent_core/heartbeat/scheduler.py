from __future__ import annotations

"""Proactive scheduler ("heartbeat").

Wakes the agent every ``interval_ms`` with a fixed prompt. Timer beats never
overlap: a slow beat delays the next tick, and ``stop`` ends the timer without
interrupting a beat that is already running. A loop started after a stop
waits for that beat to finish before its first tick. ``trigger`` runs outside
the timer.

Results are published as events; deciding where a beat's reply goes is left
to the listeners.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ..events import EventEmitter
from ..schemas.domain import HeartbeatConfig, HeartbeatStatus

logger = logging.getLogger(__name__)


class HeartbeatScheduler(EventEmitter):
    """
    Periodic agent wake-ups.

    Events:
        ``beat``: ``{"timestamp", "response"}`` after a successful beat.
        ``error``: ``{"timestamp", "error"}`` when a beat fails.
    """

    def __init__(self, config: Optional[HeartbeatConfig] = None, agent: Any = None) -> None:
        super().__init__()
        self._config = config or HeartbeatConfig()
        self._agent = agent
        self._task: Optional[asyncio.Task] = None
        self._stopped_task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._last_beat: Optional[datetime] = None

    @property
    def config(self) -> HeartbeatConfig:
        return self._config

    @property
    def running(self) -> bool:
        return self._task is not None

    def set_agent(self, agent: Any) -> None:
        self._agent = agent

    def start(self) -> bool:
        """
        Start the timer loop on the running event loop.

        Returns:
            True if the loop was started; False (logged) when disabled, when no
            agent is attached, or when already running.
        """
        if not self._config.enabled:
            logger.info("Heartbeat disabled in config; not starting")
            return False
        if self._agent is None:
            logger.error("Heartbeat has no agent configured; not starting")
            return False
        if self._task is not None:
            logger.debug("Heartbeat already running")
            return False

        logger.info(f"Starting heartbeat with interval {self._config.interval_ms}ms")
        self._stop_event = asyncio.Event()
        previous, self._stopped_task = self._stopped_task, None
        self._task = asyncio.get_running_loop().create_task(self._run(self._stop_event, previous), name="heartbeat")
        return True

    def stop(self) -> None:
        if self._task is None:
            return
        if self._stop_event is not None:
            self._stop_event.set()
        self._stopped_task = self._task
        self._task = None
        self._stop_event = None
        logger.info("Heartbeat stopped")

    async def _run(self, stop_event: asyncio.Event, previous: Optional[asyncio.Task] = None) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait({previous})
        interval = self._config.interval_ms / 1000
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                await self._beat()

    async def trigger(self) -> Optional[str]:
        """Run one beat now, independent of the timer."""
        return await self._beat()

    async def _beat(self) -> Optional[str]:
        if self._agent is None:
            logger.error("Heartbeat has no agent for beat")
            return None

        self._last_beat = datetime.now(timezone.utc)
        timestamp = self._last_beat
        logger.info("Executing proactive beat")
        try:
            response = await self._agent.process_direct(self._config.prompt, is_heartbeat=True)
        except Exception as e:
            logger.error(f"Heartbeat beat failed: {e}")
            self.emit("error", {"timestamp": timestamp, "error": str(e) or e.__class__.__name__})
            return None

        logger.debug(f"Beat result: {str(response)[:100]}")
        self.emit("beat", {"timestamp": timestamp, "response": response})
        return response

    def get_status(self) -> HeartbeatStatus:
        return HeartbeatStatus(
            enabled=self._config.enabled,
            interval_ms=self._config.interval_ms,
            last_beat=self._last_beat,
            running=self.running,
        )

    def update_config(self, **changes: Any) -> HeartbeatConfig:
        """
        Apply a partial config update.

        A running scheduler is stopped, updated and restarted if still enabled.
        Switching ``enabled`` on while stopped starts it.

        Raises:
            pydantic.ValidationError: If the merged config is invalid; nothing
                changes in that case.
        """
        merged = HeartbeatConfig.model_validate({**self._config.model_dump(), **changes})
        was_running = self.running
        was_enabled = self._config.enabled

        if was_running:
            self.stop()
        self._config = merged

        if merged.enabled and (was_running or not was_enabled):
            self.start()
        return merged
