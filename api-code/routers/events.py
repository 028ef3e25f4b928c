from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from services import DeploymentGate, EventHub
from services.event_hub import DEPLOYMENT_STATUS_CHANGED


logger = logging.getLogger("commit-deploy.events")


def build_events_router(hub: EventHub, gate: DeploymentGate) -> APIRouter:
    router = APIRouter(prefix="/api/v1", tags=["events"])

    @router.websocket("/events")
    async def stream_events(websocket: WebSocket) -> None:
        """Push gate and config changes; a disconnect releases the caller's projects."""
        await websocket.accept()
        caller_id = websocket.query_params.get("caller_id")
        queue = hub.subscribe()

        async def pump() -> None:
            while True:
                message = await queue.get()
                await websocket.send_json(message)

        await websocket.send_json(
            {
                "event": DEPLOYMENT_STATUS_CHANGED,
                "payload": {"active_projects": sorted(gate.list_active())},
            }
        )
        sender = asyncio.create_task(pump())
        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            logger.debug("Event subscriber disconnected caller=%s", caller_id)
        finally:
            # Cleanup runs before any await; the handler may be cancelled on shutdown.
            hub.unsubscribe(queue)
            if caller_id:
                released = gate.release_caller(caller_id)
                if released:
                    logger.info("Released deployments %s held by caller=%s", released, caller_id)
            sender.cancel()
            await asyncio.gather(sender, return_exceptions=True)

    return router
