from __future__ import annotations

"""Outbound message transport interface.

The multi-channel transport (chat apps, local UI, ...) lives outside this
package. Components that want to message the user depend only on this
protocol; a missing router is a valid configuration.
"""

from typing import Protocol, runtime_checkable

from .schemas.domain import OutboundMessage


@runtime_checkable
class MessageRouter(Protocol):
    async def send_to_channel(self, message: OutboundMessage) -> bool:
        """Deliver ``message`` to its channel; returns False when it could not be delivered."""
        ...
