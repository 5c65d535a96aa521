"""
Health check route.
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pastebin.database import PasteStore
from pastebin.models import HealthCheck
from pastebin.routes.pastes import get_store

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/api/healthz",
    response_model=HealthCheck,
    response_model_exclude_none=True,
    responses={503: {"model": HealthCheck}},
)
def health_check(store: PasteStore = Depends(get_store)):
    """
    Health check endpoint.
    Returns 200 with ok=true if the store answers, 503 with ok=false otherwise.
    """
    try:
        is_healthy = store.check_health()
    except Exception:
        logger.exception("Health probe raised")
        is_healthy = False

    if is_healthy:
        return HealthCheck(ok=True)

    return JSONResponse(
        status_code=503,
        content=HealthCheck(ok=False, error="Database unavailable").model_dump(),
    )
