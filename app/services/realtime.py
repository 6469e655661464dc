"""WebSocket connection registry and the force-logout relay."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from fastapi import WebSocket

logger = logging.getLogger(__name__)

AccountKey = Tuple[str, int]


class ConnectionManager:
    """Tracks live WebSocket connections per account.

    Moderation code runs in sync request handlers on a worker thread, so
    ``push`` hands the send coroutine to the application's event loop and
    returns immediately. Delivery is at-most-once: nothing is queued for
    accounts that are not connected.
    """

    def __init__(self) -> None:
        self.active_connections: Dict[AccountKey, List[WebSocket]] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def bind_loop(self, loop: Optional[asyncio.AbstractEventLoop]) -> None:
        self._loop = loop

    async def connect(self, websocket: WebSocket, account_type: str, account_id: int) -> None:
        await websocket.accept()
        key = (account_type, account_id)
        self.active_connections.setdefault(key, []).append(websocket)
        logger.info(
            "WebSocket connected for %s %s (connections=%s)",
            account_type,
            account_id,
            len(self.active_connections[key]),
        )

    def disconnect(self, websocket: WebSocket, account_type: str, account_id: int) -> None:
        key = (account_type, account_id)
        slots = self.active_connections.get(key, [])
        if websocket in slots:
            slots.remove(websocket)
        if not slots:
            self.active_connections.pop(key, None)
        logger.info("WebSocket disconnected for %s %s", account_type, account_id)

    def is_connected(self, account_type: str, account_id: int) -> bool:
        return bool(self.active_connections.get((account_type, account_id)))

    async def send_to_account(self, message: dict, account_type: str, account_id: int) -> int:
        """Send a payload to every socket of an account; returns deliveries."""
        key = (account_type, account_id)
        delivered = 0
        broken: List[WebSocket] = []
        for connection in list(self.active_connections.get(key, [])):
            try:
                await connection.send_json(message)
                delivered += 1
            except Exception as exc:
                logger.warning("Error sending to %s %s: %s", account_type, account_id, exc)
                broken.append(connection)
        for connection in broken:
            self.disconnect(connection, account_type, account_id)
        return delivered

    def push(self, message: dict, account_type: str, account_id: int) -> bool:
        """Schedule a send from sync code. False when nothing was scheduled."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return False
        if not self.is_connected(account_type, account_id):
            return False

        future = asyncio.run_coroutine_threadsafe(
            self.send_to_account(message, account_type, account_id), loop
        )

        def _log_failure(fut) -> None:
            exc = fut.exception()
            if exc is not None:
                logger.warning(
                    "Realtime push failed for %s %s: %s", account_type, account_id, exc
                )

        future.add_done_callback(_log_failure)
        return True


manager = ConnectionManager()


def banned_event_name(account_type: str) -> str:
    return f"{account_type}-banned"


__all__ = ["ConnectionManager", "manager", "banned_event_name"]
