import asyncio
import logging
from typing import Any

from fastapi import APIRouter

from app.api.deps import SettingsDep, error_response
from app.core.process_monitor import PM2Unavailable, get_bot_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pm2", tags=["pm2"])


@router.get("/status", response_model=None)
async def pm2_status(settings: SettingsDep) -> Any:
    """Status of the Discord bot process(es) as reported by PM2."""
    try:
        processes = await asyncio.to_thread(get_bot_status, settings)
    except PM2Unavailable:
        logger.warning("pm2 executable %r not found", settings.PM2_BIN)
        return error_response(503, "PM2 is not available on this host.")
    except Exception as e:
        logger.exception("Error reading PM2 process list")
        return error_response(500, f"Failed to get PM2 status: {e}")

    if not processes:
        return error_response(404, "No Discord bot process found.")
    return {"processes": [p.model_dump(exclude_none=True) for p in processes]}
