from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, Optional, Set


logger = logging.getLogger("commit-deploy.events")

DEPLOYMENT_STATUS_CHANGED = "deployment-status-changed"
CONFIG_UPDATED = "config-updated"


class EventHub:
    """Fans events out to asyncio queues, one per WebSocket subscriber.

    ``publish`` may be called from any thread; it never blocks.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None, max_queue: int = 100):
        self._loop = loop
        self._max_queue = max_queue
        self._subscribers: Set[asyncio.Queue[Dict[str, Any]]] = set()

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def subscribe(self) -> asyncio.Queue[Dict[str, Any]]:
        self._loop = asyncio.get_running_loop()
        queue: asyncio.Queue[Dict[str, Any]] = asyncio.Queue(maxsize=self._max_queue)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[Dict[str, Any]]) -> None:
        self._subscribers.discard(queue)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: str, payload: Optional[Dict[str, Any]] = None) -> None:
        message = {"event": event, "payload": payload or {}}
        loop = self._loop
        if loop is None or loop.is_closed() or not self._subscribers:
            return
        for queue in list(self._subscribers):
            loop.call_soon_threadsafe(self._offer, queue, message)

    @staticmethod
    def _offer(queue: asyncio.Queue[Dict[str, Any]], message: Dict[str, Any]) -> None:
        try:
            queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning("Dropping %s event for a slow subscriber", message["event"])

    def publish_active_projects(self, active_projects: Iterable[str]) -> None:
        self.publish(DEPLOYMENT_STATUS_CHANGED, {"active_projects": sorted(active_projects)})

    def publish_config_updated(self) -> None:
        self.publish(CONFIG_UPDATED)
