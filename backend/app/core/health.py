"""
Health-check helpers for liveness and readiness probes.

Liveness:  is the process alive and not deadlocked?  (cheap, no I/O)
Readiness: can it serve traffic?  (backup bucket configured and reachable)
"""

import logging
from typing import Any

from app.core.config import Settings
from app.core.storage import check_bucket

logger = logging.getLogger(__name__)


def liveness_check() -> tuple[bool, list[str]]:
    """
    Lightweight liveness probe. Just confirms the Python process is responsive.
    No I/O.  Return format matches readiness_check for consistency.
    """
    return (True, [])


def readiness_check(settings: Settings, s3_client: Any) -> tuple[bool, list[str]]:
    """
    Returns (ok, list of failure messages). ok is False if any required check fails.
    """
    failures: list[str] = []
    if not settings.BACKUP_S3_BUCKET:
        failures.append("s3_bucket_not_configured")
    elif not check_bucket(s3_client, settings.BACKUP_S3_BUCKET):
        failures.append("s3")
    if failures:
        logger.warning("Readiness check failed: %s", ", ".join(failures))
    return (not failures, failures)
