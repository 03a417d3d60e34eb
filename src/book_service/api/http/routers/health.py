"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.book_service.api.http.deps import get_database_service
from src.book_service.core.services import DbSessionService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe: 200 as long as the process is running."""
    return {"status": "healthy", "service": "api"}


@router.get("/ready", response_model=None)
def readiness(
    database_service: DbSessionService | None = Depends(get_database_service),
) -> dict[str, Any] | JSONResponse:
    """Readiness probe: 200 if the store is reachable, 503 otherwise."""
    checks: dict[str, Any] = {}

    if database_service is None:
        checks["database"] = {"status": "healthy", "type": "memory"}
        all_healthy = True
    else:
        all_healthy = database_service.health_check()
        checks["database"] = {
            "status": "healthy" if all_healthy else "unhealthy",
            "type": database_service.engine.dialect.name,
        }

    body = {"status": "ready" if all_healthy else "not_ready", "checks": checks}
    if not all_healthy:
        return JSONResponse(status_code=503, content=body)
    return body
