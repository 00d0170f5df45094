"""Integration tests for liveness and readiness."""

import pytest
from fastapi import status

from db import ensure_storage_dirs


@pytest.mark.asyncio
async def test_health_reports_watchers(client):
    """
    Test: /health answers without auth and reports the watcher flag.
    """
    response = await client.get("/api/v1/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["watchers"] is True


@pytest.mark.asyncio
async def test_ready_when_storage_exists(client, storage_dirs):
    """
    Test: Readiness is 200 once both storage roots exist.
    """
    ensure_storage_dirs()

    response = await client.get("/api/v1/health/ready")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "status": "ready",
        "checks": {"files": "ok", "recycle_bin": "ok", "database": "ok"},
    }


@pytest.mark.asyncio
async def test_not_ready_without_recycle_bin(client, storage_dirs):
    """
    Test: A missing recycle bin root makes readiness 503.
    """
    files_dir, _ = storage_dirs
    files_dir.mkdir(parents=True)

    response = await client.get("/api/v1/health/ready")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    body = response.json()
    assert body["status"] == "degraded"
    assert body["checks"]["recycle_bin"] == "missing"
    assert body["checks"]["files"] == "ok"


def test_ensure_storage_dirs_creates_both_roots(storage_dirs):
    """
    Test: ensure_storage_dirs creates the files and recycle bin roots.
    """
    files_dir, bin_dir = storage_dirs

    ensure_storage_dirs()

    assert files_dir.is_dir()
    assert bin_dir.is_dir()
