"""Client side of the watch-disk long-poll."""

import asyncio
import logging
from typing import Awaitable, Callable
from uuid import UUID

from portal.http import ApiClient, ApiError

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[dict], Awaitable[None] | None]


async def watch_disk(
    api: ApiClient,
    project_id: UUID | str,
    on_change: ChangeCallback,
    stop: asyncio.Event,
    retry_delay: float = 5.0,
    poll_timeout: float = 60.0,
) -> None:
    """
    Long-poll a project until ``stop`` is set.

    A 200 calls ``on_change`` and polls again straight away, a 204 just polls
    again. Errors are logged and retried after ``retry_delay``; setting
    ``stop`` ends the wait early.
    """
    path = f"/files/{project_id}/watch-disk"
    while not stop.is_set():
        try:
            response = await api.request("GET", path, timeout=poll_timeout)
        except ApiError as e:
            logger.warning("watch-disk for project %s failed: %s", project_id, e)
            try:
                await asyncio.wait_for(stop.wait(), timeout=retry_delay)
            except asyncio.TimeoutError:
                pass
            continue

        if response.status_code == 200 and not stop.is_set():
            result = on_change(response.json())
            if asyncio.iscoroutine(result):
                await result
