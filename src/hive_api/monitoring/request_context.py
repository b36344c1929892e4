"""Request context middleware for logging."""
import asyncio
import json
import time
import uuid
from typing import Any
from typing import Callable
from typing import Optional

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from hive_api.monitoring.logger import redact_body
from hive_api.monitoring.logger import redact_headers
from hive_api.monitoring.logger import redact_query_params

# Maximum size for request body logging (to avoid memory issues)
MAX_BODY_LOG_SIZE = 10000  # 10KB limit


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to capture and log request context information."""

    async def dispatch(self, request: Request, call_next: Callable) -> Any:
        """
        Capture request context and add to logging.

        Captures:
        - Request ID (from header or generated)
        - Client IP (forwarded header or direct)
        - Request path and method
        - Request body (for POST/PUT/PATCH)

        Hive tokens in the query string, the X-Hive-Token header or a JSON body are redacted. Response bodies
        are never logged because CreateHive responses carry freshly issued tokens.
        """
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        client_ip = self._get_client_ip(request)
        request_path = f"{request.method} {request.url.path}"

        # Store in request state early so error handlers can access it
        request.state.request_body = None
        if request.method in ("POST", "PUT", "PATCH"):
            request.state.request_body = redact_body(await self._get_request_body(request))

        with logger.contextualize(
            request_id=request_id,
            client_ip=client_ip,
            request_path=request_path,
        ):
            start_time = time.time()
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000

            logger.info(
                "{} {} - {}",
                request.method,
                request.url.path,
                response.status_code,
                event_type="http_request",
                http_method=request.method,
                url_path=str(request.url.path),
                query_params=redact_query_params(request.query_params),
                headers=redact_headers(request.headers),
                user_agent=request.headers.get("User-Agent", "unknown"),
                request_body=getattr(request.state, "request_body", None),
                status_code=response.status_code,
                response_time_ms=round(duration_ms, 2),
            )

            response.headers["X-Request-ID"] = request_id
            return response

    async def _get_request_body(self, request: Request) -> Optional[dict]:
        """
        Read the request body with a timeout to prevent hanging.

        Returns:
            Parsed JSON body, a truncation marker, or None if not JSON/empty
        """
        try:
            body = await asyncio.wait_for(request.body(), timeout=2.0)
        except asyncio.TimeoutError:
            return {"_error": "Request body read timeout (>2s)"}

        if not body:
            return None

        if "application/json" not in request.headers.get("Content-Type", "").lower():
            return {"_size": len(body)}

        if len(body) > MAX_BODY_LOG_SIZE:
            return {"_truncated": True, "_size": len(body)}

        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return {"_error": "Failed to parse request body", "_error_detail": str(e)}

    def _get_client_ip(self, request: Request) -> str:
        """Get real client IP address, preferring the first X-Forwarded-For hop."""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"

