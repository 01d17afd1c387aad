"""
Backup object store (S3-compatible) via boto3.

Credentials come from the standard AWS provider chain (env vars, shared
config/credentials files, or an instance role); nothing is exposed to the browser.
"""

import logging
from datetime import datetime, timezone
from typing import Any

import boto3
from pydantic import BaseModel, ConfigDict, Field

from app.core.config import Settings

logger = logging.getLogger(__name__)

LIST_MAX_KEYS = 200


class BackupFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: str
    last_modified: str | None = Field(default=None, serialization_alias="lastModified")
    size: int = 0


class BackupKeyError(ValueError):
    """Requested key is outside the configured backup prefix."""


def create_s3_client(settings: Settings) -> Any:
    if settings.AWS_REGION:
        return boto3.client("s3", region_name=settings.AWS_REGION)
    return boto3.client("s3")


def _to_backup_file(obj: dict[str, Any]) -> BackupFile:
    last_modified = obj.get("LastModified")
    if isinstance(last_modified, datetime):
        last_modified = last_modified.isoformat()
    elif last_modified is not None:
        last_modified = str(last_modified)
    return BackupFile(
        key=obj.get("Key") or "",
        last_modified=last_modified,
        size=obj.get("Size") or 0,
    )


def list_backups(client: Any, bucket: str, prefix: str | None = None) -> list[BackupFile]:
    """
    List up to LIST_MAX_KEYS objects under prefix, newest first.

    Objects without a key are dropped; objects without a timestamp sort last.
    """
    kwargs: dict[str, Any] = {"Bucket": bucket, "MaxKeys": LIST_MAX_KEYS}
    if prefix:
        kwargs["Prefix"] = prefix
    result = client.list_objects_v2(**kwargs)

    files = [_to_backup_file(obj) for obj in result.get("Contents") or []]
    dated: list[tuple[datetime, BackupFile]] = []
    undated: list[BackupFile] = []
    for f in files:
        if not f.key:
            continue
        ts = _parse_timestamp(f.last_modified)
        if ts is None:
            undated.append(f)
        else:
            dated.append((ts, f))
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [f for _, f in dated] + undated


def _parse_timestamp(value: str | None) -> datetime | None:
    """Unparseable timestamps are treated as missing."""
    if not value:
        return None
    try:
        ts = datetime.fromisoformat(value)
    except ValueError:
        logger.warning("Ignoring unparseable LastModified %r", value)
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def check_key(key: str, prefix: str | None) -> None:
    """Raise BackupKeyError when key does not live under the backup prefix."""
    if prefix and not key.startswith(prefix):
        raise BackupKeyError(f"Key must start with '{prefix}'.")
    if ".." in key.split("/"):
        raise BackupKeyError("Key must not contain '..' segments.")


def delete_backup(client: Any, bucket: str, key: str) -> None:
    client.delete_object(Bucket=bucket, Key=key)
    logger.info("Deleted backup s3://%s/%s", bucket, key)


def presign_download(client: Any, bucket: str, key: str, expires_in: int) -> str:
    filename = key.rsplit("/", 1)[-1] or key
    return client.generate_presigned_url(
        "get_object",
        Params={
            "Bucket": bucket,
            "Key": key,
            "ResponseContentDisposition": f'attachment; filename="{filename}"',
        },
        ExpiresIn=expires_in,
    )


def check_bucket(client: Any, bucket: str) -> bool:
    """HEAD the bucket. Returns True if reachable."""
    try:
        client.head_bucket(Bucket=bucket)
        return True
    except Exception:
        logger.warning("Bucket %s is not reachable", bucket, exc_info=True)
        return False
