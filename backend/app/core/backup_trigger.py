"""Trigger a new backup run on the companion backup service (PYTHON_BACKUP_API_URL)."""

import logging
from typing import Any

import httpx

from app.core.config import Settings

logger = logging.getLogger(__name__)


class BackupTriggerError(Exception):
    pass


async def trigger_backup(
    settings: Settings, client: httpx.AsyncClient | None = None
) -> dict[str, Any]:
    """
    POST <PYTHON_BACKUP_API_URL>/backup. Returns the service's JSON body ({} if none).

    Raises BackupTriggerError on transport errors and non-2xx responses.
    """
    base = (settings.PYTHON_BACKUP_API_URL or "").rstrip("/")
    url = f"{base}/backup"
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=settings.BACKUP_API_TIMEOUT_SECONDS)
    try:
        resp = await client.post(url)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        raise BackupTriggerError(f"Backup service request failed: {e}") from e
    finally:
        if owns_client:
            await client.aclose()

    logger.info("Backup triggered via %s (status %s)", url, resp.status_code)
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
