import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs one line per request.

    A caller-supplied ``X-Request-ID`` is reused so a learner's actions can be
    followed across the frontend and this service.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        caller = "bearer" if request.headers.get("authorization") else "anonymous"
        route = f"{request.method} {request.url.path}"
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                f"[{request_id}] {route} failed",
                extra={"request_id": request_id, "caller": caller},
            )
            raise

        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.log(
            logging.WARNING if response.status_code >= 400 else logging.INFO,
            f"[{request_id}] {route} -> {response.status_code} ({elapsed_ms}ms, {caller})",
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
                "caller": caller,
            },
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
