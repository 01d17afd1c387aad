"""
PM2 process monitor: read `pm2 jlist` and report the bot process(es).

PM2 entries are loosely shaped; each reported field has an explicit fallback chain:

- status:  pm2_env.status -> "online" when pm_id is present -> "unknown"
- uptime:  now - pm2_env.pm_uptime (seconds) -> 0
- memory:  monit.memory -> pm2_env.used_memory -> 0 (bytes, reported in MB)
- version: pm2_env.version -> pm2_env.env.VERSION -> omitted
"""

import json
import logging
import subprocess
import time
from typing import Any

from pydantic import BaseModel, ConfigDict

from app.core.config import Settings

logger = logging.getLogger(__name__)

_BYTES_PER_MB = 1024 * 1024


class PM2Unavailable(Exception):
    """The pm2 executable is not installed or not on PATH."""


class PM2Error(Exception):
    """pm2 ran but its process list could not be read."""


class _Loose(BaseModel):
    model_config = ConfigDict(extra="ignore")


class PM2EnvVars(_Loose):
    VERSION: str | None = None


class PM2Env(_Loose):
    status: str | None = None
    pm_uptime: float | None = None
    restart_time: int | None = None
    version: str | None = None
    used_memory: float | None = None
    env: PM2EnvVars | None = None


class PM2Monit(_Loose):
    memory: float | None = None
    cpu: float | None = None


class PM2Process(_Loose):
    name: str | None = None
    pm_id: int | None = None
    pm2_env: PM2Env | None = None
    monit: PM2Monit | None = None


class ProcessStatus(BaseModel):
    name: str
    status: str
    uptime: int
    memory: int
    cpu: float
    restarts: int
    version: str | None = None


def to_process_status(proc: PM2Process, now_ms: float | None = None) -> ProcessStatus:
    if now_ms is None:
        now_ms = time.time() * 1000
    env = proc.pm2_env or PM2Env()
    monit = proc.monit or PM2Monit()

    if env.status:
        status = env.status
    elif proc.pm_id is not None:
        status = "online"
    else:
        status = "unknown"

    uptime = round((now_ms - env.pm_uptime) / 1000) if env.pm_uptime else 0

    memory_bytes = monit.memory if monit.memory is not None else env.used_memory
    memory = round((memory_bytes or 0) / _BYTES_PER_MB)

    version = env.version or (env.env.VERSION if env.env else None)

    return ProcessStatus(
        name=proc.name or "unknown",
        status=status,
        uptime=max(uptime, 0),
        memory=memory,
        cpu=monit.cpu or 0,
        restarts=env.restart_time or 0,
        version=version,
    )


def select_bot_processes(
    raw: Any, match: str, now_ms: float | None = None
) -> list[ProcessStatus]:
    """Keep entries whose name contains match (case-insensitive), in PM2 order."""
    if not isinstance(raw, list):
        return []
    needle = match.lower()
    out: list[ProcessStatus] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        proc = PM2Process.model_validate(item)
        if not proc.name or needle not in proc.name.lower():
            continue
        out.append(to_process_status(proc, now_ms))
    return out


def run_pm2_jlist(settings: Settings) -> Any:
    """
    Run `pm2 jlist` and return the decoded JSON. Blocking; call from a worker thread.

    Raises PM2Unavailable if the binary is missing, PM2Error for anything else.
    """
    try:
        completed = subprocess.run(
            [settings.PM2_BIN, "jlist"],
            capture_output=True,
            text=True,
            timeout=settings.PM2_TIMEOUT_SECONDS,
            check=False,
        )
    except FileNotFoundError as e:
        raise PM2Unavailable(str(e)) from e
    except subprocess.TimeoutExpired as e:
        raise PM2Error(f"pm2 jlist timed out after {settings.PM2_TIMEOUT_SECONDS}s") from e

    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()
        raise PM2Error(stderr or f"pm2 jlist exited with {completed.returncode}")

    stdout = (completed.stdout or "").strip()
    if not stdout:
        return []
    try:
        return json.loads(stdout)
    except json.JSONDecodeError as e:
        raise PM2Error(f"pm2 jlist returned invalid JSON: {e}") from e


def get_bot_status(settings: Settings) -> list[ProcessStatus]:
    return select_bot_processes(run_pm2_jlist(settings), settings.BOT_PROCESS_MATCH)
