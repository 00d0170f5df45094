"""In-process change notifications for the watch-disk long-poll."""

import asyncio
import logging
from datetime import datetime, timezone
from uuid import UUID

logger = logging.getLogger(__name__)


class ProjectChangeNotifier:
    """
    Per-project change events.

    Every waiter gets its own ``asyncio.Event``; ``notify`` sets all events
    registered for a project, so each waiter wakes exactly once.
    """

    def __init__(self):
        self._waiters: dict[UUID, set[asyncio.Event]] = {}

    def waiter_count(self, project_id: UUID) -> int:
        return len(self._waiters.get(project_id, ()))

    async def wait(self, project_id: UUID, timeout: float) -> dict | None:
        """
        Wait for a change on a project.

        Returns:
            ``{"changed": True, "project_id", "timestamp"}`` on change,
            None on timeout
        """
        event = asyncio.Event()
        self._waiters.setdefault(project_id, set()).add(event)
        try:
            await asyncio.wait_for(event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return None
        finally:
            waiters = self._waiters.get(project_id)
            if waiters is not None:
                waiters.discard(event)
                if not waiters:
                    self._waiters.pop(project_id, None)

        return {
            "changed": True,
            "project_id": str(project_id),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def notify(self, project_id: UUID) -> int:
        """Wake every waiter of a project. Returns how many were woken."""
        waiters = self._waiters.get(project_id, set())
        for event in waiters:
            event.set()
        if waiters:
            logger.debug("Notified %d watcher(s) of project %s", len(waiters), project_id)
        return len(waiters)


notifier = ProjectChangeNotifier()
