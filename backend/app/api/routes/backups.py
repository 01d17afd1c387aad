"""
Backups: list / create / delete / download against the backup bucket.

Method and auth are enforced by the request gate; handlers only do the work.
Blocking boto3 calls run in a worker thread.
"""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter
from fastapi.responses import RedirectResponse, Response

from app.api.deps import S3ClientDep, SettingsDep, error_response
from app.core.backup_trigger import BackupTriggerError, trigger_backup
from app.core.storage import (
    BackupKeyError,
    check_key,
    delete_backup,
    list_backups,
    presign_download,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/backups", tags=["backups"])

BUCKET_NOT_CONFIGURED = "S3 bucket not configured on server."
MISSING_KEY = "Missing required 'key' query parameter."


@router.get("/list", response_model=None)
async def backups_list(settings: SettingsDep, s3: S3ClientDep) -> Any:
    """List backup archives, newest first."""
    if not settings.BACKUP_S3_BUCKET:
        return error_response(500, BUCKET_NOT_CONFIGURED)
    try:
        files = await asyncio.to_thread(
            list_backups, s3, settings.BACKUP_S3_BUCKET, settings.BACKUP_S3_PREFIX
        )
    except Exception:
        logger.exception("Error listing S3 objects")
        return error_response(500, "Failed to list backups from S3.")
    return {"files": [f.model_dump(by_alias=True) for f in files]}


@router.post("/create", response_model=None)
async def backups_create(settings: SettingsDep) -> Any:
    """Ask the backup service to run a backup now."""
    if not settings.PYTHON_BACKUP_API_URL:
        return error_response(500, "Backup service not configured on server.")
    try:
        upstream = await trigger_backup(settings)
    except BackupTriggerError:
        logger.exception("Error triggering backup")
        return error_response(502, "Failed to trigger backup.")
    out: dict[str, Any] = {"message": "Backup triggered."}
    if upstream:
        out["result"] = upstream
    return out


@router.delete("/delete", response_model=None)
async def backups_delete(
    settings: SettingsDep, s3: S3ClientDep, key: str | None = None
) -> Any:
    if not settings.BACKUP_S3_BUCKET:
        return error_response(500, BUCKET_NOT_CONFIGURED)
    if not key:
        return error_response(400, MISSING_KEY)
    try:
        check_key(key, settings.BACKUP_S3_PREFIX)
    except BackupKeyError as e:
        return error_response(400, str(e))
    try:
        await asyncio.to_thread(delete_backup, s3, settings.BACKUP_S3_BUCKET, key)
    except Exception:
        logger.exception("Error deleting S3 object %s", key)
        return error_response(500, "Failed to delete backup from S3.")
    return {"message": "Backup deleted.", "key": key}


@router.get("/download", response_model=None)
async def backups_download(
    settings: SettingsDep, s3: S3ClientDep, key: str | None = None
) -> Response:
    """Redirect (302) to a short-lived presigned URL for the archive."""
    if not settings.BACKUP_S3_BUCKET:
        return error_response(500, BUCKET_NOT_CONFIGURED)
    if not key:
        return error_response(400, MISSING_KEY)
    try:
        check_key(key, settings.BACKUP_S3_PREFIX)
    except BackupKeyError as e:
        return error_response(400, str(e))
    try:
        url = await asyncio.to_thread(
            presign_download,
            s3,
            settings.BACKUP_S3_BUCKET,
            key,
            settings.BACKUP_DOWNLOAD_URL_TTL,
        )
    except Exception:
        logger.exception("Error generating download URL for %s", key)
        return error_response(500, "Failed to generate download URL.")
    return RedirectResponse(url=url, status_code=302)

