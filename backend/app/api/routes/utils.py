import asyncio

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.api.deps import S3ClientDep, SettingsDep
from app.core.health import liveness_check, readiness_check

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/liveness", response_model=None)
async def liveness() -> bool | JSONResponse:
    """
    Liveness probe: is the process alive and responsive?

    Lightweight: no S3 I/O.  If this fails the process should be restarted.
    """
    ok, failures = liveness_check()
    if not ok:
        return JSONResponse(
            status_code=503,
            content={"error": "Process unhealthy", "failures": failures},
        )
    return True


@router.get("/health-check", response_model=None)
async def health_check(settings: SettingsDep, s3: S3ClientDep) -> bool | JSONResponse:
    """
    Readiness probe: can the service handle traffic?

    Returns 200 with true when the backup bucket is configured and reachable; 503 otherwise.
    """
    ok, failures = await asyncio.to_thread(readiness_check, settings, s3)
    if not ok:
        return JSONResponse(
            status_code=503,
            content={"error": "Service Unavailable", "failures": failures},
        )
    return True
