"""
Standalone Socket.io demo that streams simulated folder sync events.

Clients emit ``subscribe_project`` with a project ID and then receive a
``folder_sync`` event every few seconds until they disconnect. Nothing here
touches the database or the real file store.

Run with ``python -m realtime.folder_sync_demo``.
"""

import asyncio
import logging
import time
from datetime import datetime

import socketio
import uvicorn

import config
import logging_config

logger = logging.getLogger(__name__)


def build_folder_sync_event(project_id: str, sequence: int, now: datetime | None = None) -> dict:
    """Simulated event; even sequences add a folder, odd ones remove it."""
    now = now or datetime.now()
    return {
        "projectId": project_id,
        "projectName": f"Test Project {project_id}",
        "actionType": "folder added" if sequence % 2 == 0 else "folder removed",
        "folderOrFileName": f"TestFolder_{int(time.time() * 1000)}",
        "timestamp": now.strftime("%H:%M:%S"),
    }


class FolderSyncDemo:
    """Socket.io server with one emitting task per client and project."""

    def __init__(self, interval: float | None = None):
        self.interval = interval if interval is not None else config.settings.SOCKET_DEMO_INTERVAL_SECONDS
        self.sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins="*")
        self.app = socketio.ASGIApp(self.sio)
        self.tasks: dict[str, dict[str, asyncio.Task]] = {}

        self.sio.on("connect", self.on_connect)
        self.sio.on("subscribe_project", self.on_subscribe_project)
        self.sio.on("disconnect", self.on_disconnect)

    async def on_connect(self, sid, environ, auth=None):
        logger.info("Socket client connected: %s", sid)

    async def on_subscribe_project(self, sid, project_id):
        if not isinstance(project_id, str) or not project_id:
            logger.warning("Ignoring subscribe_project from %s without a project ID", sid)
            return
        subscriptions = self.tasks.setdefault(sid, {})
        if project_id in subscriptions:
            logger.debug("Socket client %s already subscribed to project %s", sid, project_id)
            return
        subscriptions[project_id] = asyncio.create_task(self._emit_loop(sid, project_id))
        logger.info("Socket client %s subscribed to project %s", sid, project_id)

    async def on_disconnect(self, sid, reason=None):
        for task in self.tasks.pop(sid, {}).values():
            task.cancel()
        logger.info("Socket client disconnected: %s", sid)

    async def _emit_loop(self, sid: str, project_id: str) -> None:
        sequence = 0
        while True:
            await asyncio.sleep(self.interval)
            await self.sio.emit("folder_sync", build_folder_sync_event(project_id, sequence), to=sid)
            sequence += 1


def main() -> None:
    logging_config.setup_logging()
    demo = FolderSyncDemo()
    logger.info("Folder sync demo listening on port %d", config.settings.SOCKET_DEMO_PORT)
    uvicorn.run(demo.app, host="0.0.0.0", port=config.settings.SOCKET_DEMO_PORT)


if __name__ == "__main__":
    main()
