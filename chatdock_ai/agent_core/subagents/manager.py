from __future__ import annotations

"""Background task supervisor.

``SubagentManager`` runs agent turns in the background, one ``asyncio.Task``
per record, and tracks each record through a one-way state machine::

    running ──▶ completed | failed | cancelled

Terminal states are written exactly once together with ``end_time``. A task
that settles after its record was cancelled has its outcome discarded.
Records live in memory only.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ..events import EventEmitter
from ..schemas.domain import (
    OutboundMessage,
    Subagent,
    SubagentStatus,
    SubagentStatusView,
)
from ..transport import MessageRouter

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_MS = 3_600_000


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _elapsed_ms(start: datetime, end: datetime) -> int:
    return max(int((end - start).total_seconds() * 1000), 0)


class SubagentManager(EventEmitter):
    """
    Spawn and supervise background agent turns.

    Events:
        ``complete``: ``{"id", "name", "result"}`` when a record completes.
        ``error``: ``{"id", "name", "error"}`` when a record fails.
    """

    def __init__(
        self,
        agent: Any,
        router: Optional[MessageRouter] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Args:
            agent: Anything with an async ``process_direct(task, **context)``.
            router: Transport used to notify the originating chat, if any.
            clock: Source of "now"; defaults to UTC wall time.
        """
        super().__init__()
        self._agent = agent
        self._router = router
        self._clock = clock or _utc_now
        self._records: Dict[str, Subagent] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    def spawn(
        self,
        task: str,
        name: Optional[str] = None,
        notify: bool = True,
        channel_type: Optional[str] = None,
        chat_id: Optional[str] = None,
    ) -> SubagentStatusView:
        """
        Register a ``running`` record and schedule the work; returns immediately.

        Must be called from within a running event loop.
        """
        record = Subagent(
            name="pending",
            task=task,
            notify=notify,
            origin_channel=channel_type,
            origin_chat_id=chat_id,
            start_time=self._clock(),
        )
        record.name = name or f"Subagent-{record.id[:8]}"
        self._records[record.id] = record

        handle = asyncio.get_running_loop().create_task(self._execute(record.id), name=f"subagent-{record.id}")
        self._tasks[record.id] = handle
        handle.add_done_callback(lambda _t, rid=record.id: self._tasks.pop(rid, None))

        logger.info(f"Spawned subagent {record.name} ({record.id})")
        return self._view(record)

    async def _execute(self, record_id: str) -> None:
        record = self._records.get(record_id)
        if record is None:
            return

        try:
            result = await self._agent.process_direct(
                record.task,
                is_subagent=True,
                subagent_id=record_id,
                channel_type=record.origin_channel,
                chat_id=record.origin_chat_id,
            )
        except Exception as e:
            error = str(e) or e.__class__.__name__
            logger.error(f"Subagent {record.name} ({record_id}) failed: {error}")
            settled = self._settle(record_id, SubagentStatus.failed, error=error)
        else:
            settled = self._settle(record_id, SubagentStatus.completed, result=str(result or ""))

        if settled is not None:
            await self._notify(settled)

    def _settle(
        self,
        record_id: str,
        status: SubagentStatus,
        *,
        result: Optional[str] = None,
        error: Optional[str] = None,
    ) -> Optional[Subagent]:
        record = self._records.get(record_id)
        if record is None or record.status != SubagentStatus.running:
            logger.info(f"Discarding late outcome for subagent {record_id}")
            return None

        record.status = status
        record.result = result
        record.error = error
        record.end_time = self._clock()

        if status == SubagentStatus.completed:
            logger.info(f"Subagent completed: {record.name} ({record_id})")
            self.emit("complete", {"id": record_id, "name": record.name, "result": result})
        else:
            self.emit("error", {"id": record_id, "name": record.name, "error": error})
        return record

    async def _notify(self, record: Subagent) -> None:
        if not record.notify or self._router is None:
            return
        if not record.origin_channel or not record.origin_chat_id:
            return

        if record.status == SubagentStatus.completed:
            content = f"Background task '{record.name}' completed:\n\n{record.result}"
        else:
            content = f"Background task '{record.name}' failed: {record.error}"
        message = OutboundMessage(content=content, chat_id=record.origin_chat_id, channel_type=record.origin_channel)

        try:
            delivered = await self._router.send_to_channel(message)
        except Exception as e:
            logger.error(f"Failed to notify {record.origin_channel}:{record.origin_chat_id} for {record.id}: {e}")
            return
        if not delivered:
            logger.warning(f"Router did not deliver notification for subagent {record.id}")

    def _view(self, record: Subagent) -> SubagentStatusView:
        end = record.end_time or self._clock()
        return SubagentStatusView(
            id=record.id,
            name=record.name,
            task=record.task,
            status=record.status,
            result=record.result,
            error=record.error,
            duration_ms=_elapsed_ms(record.start_time, end),
        )

    def get_status(self, record_id: str) -> Optional[SubagentStatusView]:
        record = self._records.get(record_id)
        return self._view(record) if record is not None else None

    def list(self, status: SubagentStatus | str | None = None) -> List[SubagentStatusView]:
        """List records in spawn order, optionally filtered by status."""
        wanted = SubagentStatus(status) if status is not None else None
        return [self._view(r) for r in self._records.values() if wanted is None or r.status == wanted]

    def cancel(self, record_id: str) -> bool:
        """
        Mark a running record ``cancelled``.

        The underlying work keeps running; its eventual outcome is discarded.
        Returns False for unknown or already terminal records.
        """
        record = self._records.get(record_id)
        if record is None or record.status != SubagentStatus.running:
            return False
        record.status = SubagentStatus.cancelled
        record.end_time = self._clock()
        logger.info(f"Cancelled subagent {record.name} ({record_id})")
        return True

    def cleanup(self, max_age_ms: int = DEFAULT_MAX_AGE_MS) -> int:
        """Remove terminal records that ended more than ``max_age_ms`` ago."""
        now = self._clock()
        stale = [
            rid
            for rid, r in self._records.items()
            if r.status != SubagentStatus.running
            and r.end_time is not None
            and _elapsed_ms(r.end_time, now) > max_age_ms
        ]
        for rid in stale:
            del self._records[rid]
            logger.debug(f"Cleaned up subagent {rid}")
        return len(stale)

    async def wait(self, record_id: str, timeout: Optional[float] = None) -> Optional[SubagentStatusView]:
        """
        Wait until the record's background task has finished.

        Raises:
            TimeoutError: If ``timeout`` seconds elapse first.
        """
        handle = self._tasks.get(record_id)
        if handle is not None:
            await asyncio.wait_for(asyncio.shield(handle), timeout)
        return self.get_status(record_id)

    async def shutdown(self) -> None:
        """Cancel outstanding tasks and mark their records ``cancelled``."""
        pending = list(self._tasks.values())
        for handle in pending:
            handle.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        for record_id, record in self._records.items():
            if record.status == SubagentStatus.running:
                self.cancel(record_id)
