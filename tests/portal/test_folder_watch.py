"""Tests for the client side of the watch-disk long-poll."""

import asyncio

import httpx
import pytest

from portal.folder_watch import watch_disk
from tests.portal.mock_api import ADMIN


@pytest.mark.asyncio
async def test_watch_disk_reports_changes_until_stopped(make_session):
    """
    Test: 204s are ignored, 200s reach the callback, errors back off and retry.
    """
    responses = iter(
        [
            httpx.Response(204),
            httpx.Response(200, json={"changed": True, "project_id": "p1"}),
            httpx.Response(500, json={"detail": "boom"}),
            httpx.Response(200, json={"changed": True, "project_id": "p1"}),
        ]
    )
    paths = []

    def handler(request):
        paths.append(request.url.path)
        try:
            return next(responses)
        except StopIteration:
            return httpx.Response(204)

    session = make_session(handler, user=ADMIN)
    stop = asyncio.Event()
    changes = []

    async def on_change(change):
        changes.append(change)
        if len(changes) == 2:
            stop.set()

    await asyncio.wait_for(
        watch_disk(session.api, "p1", on_change, stop, retry_delay=0.01, poll_timeout=1),
        timeout=5,
    )

    assert len(changes) == 2
    assert paths[0] == "/api/v1/files/p1/watch-disk"
    assert len(paths) == 4


@pytest.mark.asyncio
async def test_watch_disk_without_token_retries_until_stopped(make_session):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(204)

    session = make_session(handler, token=None)
    stop = asyncio.Event()
    changes = []

    task = asyncio.create_task(watch_disk(session.api, "p1", changes.append, stop, retry_delay=10))
    await asyncio.sleep(0.05)
    stop.set()
    await asyncio.wait_for(task, timeout=1)

    assert calls == []
    assert changes == []
