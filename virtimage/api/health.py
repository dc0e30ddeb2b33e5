import logging
from fastapi import APIRouter, status

from ..core.config import APP_NAME, APP_VERSION
from ..deps import get_host

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["Health"])


@router.get("/ping", status_code=status.HTTP_200_OK)
def ping():
    """Basic liveness check."""
    return {"ping": "pong"}


@router.get("/healthz", status_code=status.HTTP_200_OK)
def healthz():
    """Report whether the managed storage pool is reachable."""
    try:
        host = get_host()
        volumes = host.volumes.list_volumes()
        summary = {
            "app_name": APP_NAME,
            "version": APP_VERSION,
            "uri": host.uri,
            "pool": host.pool,
            "volume_count": len(volumes),
        }
        return {"status": "ok", "details": summary}
    except Exception as exc:
        logger.exception("Health check failed: %s", exc)
        return {"status": "error", "error": str(exc)}
