"""
Request logging middleware.
Logs every call to a record endpoint with its outcome and duration.
"""
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

# Endpoints that read or write patient records
RECORD_PATH_PREFIXES = (
    "/api/v1/patients",
    "/api/v1/diseases",
    "/api/v1/medical-histories",
    "/api/v1/therapies",
    "/api/v1/therapy-tools",
    "/api/v1/satellites",
    "/api/v1/medical-reports",
    "/api/v1/ops",
)

ACTION_MAP = {
    "GET": "view",
    "POST": "create",
    "PUT": "update",
    "PATCH": "update",
    "DELETE": "delete",
}


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Middleware that logs access to record endpoints."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not any(path.startswith(prefix) for prefix in RECORD_PATH_PREFIXES):
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("%s %s failed", request.method, path)
            raise
        elapsed_ms = (time.perf_counter() - started) * 1000

        # Derive resource type and ID from path, e.g. /api/v1/patients/3
        parts = [p for p in path.split("/") if p]
        resource_type = parts[2] if len(parts) >= 3 else "unknown"
        resource_id = parts[3] if len(parts) >= 4 else "-"
        action = ACTION_MAP.get(request.method, request.method.lower())

        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            "%s %s/%s -> %d (%.1f ms)",
            action, resource_type, resource_id, response.status_code, elapsed_ms,
        )
        return response
