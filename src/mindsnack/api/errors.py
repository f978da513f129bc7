"""Error responses for the Mindsnack API.

Every error is rendered as:

    {"error": "Failed to fetch articles", "code": "UpstreamError", "timestamp": "..."}
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import HTTPException, Request
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel

from mindsnack.cache.proxy import UpstreamFetchError

logger = logging.getLogger(__name__)


class ErrorBody(BaseModel):
    model_config = {"extra": "forbid"}

    error: str
    code: str
    timestamp: str


class ApiError(HTTPException):
    """Base exception for API errors."""

    def __init__(
        self,
        status_code: int,
        code: str,
        text: str,
        headers: dict[str, str] | None = None,
    ):
        self.code = code
        self.text = text
        super().__init__(status_code=status_code, detail=text, headers=headers)

    def to_body(self) -> ErrorBody:
        return ErrorBody(error=self.text, code=self.code, timestamp=_now())


class UnauthorizedError(ApiError):
    """Missing or wrong bearer credential (401)."""

    def __init__(self) -> None:
        super().__init__(
            status_code=401,
            code="Unauthorized",
            text="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )


class ServiceUnavailableError(ApiError):
    """A required collaborator is not configured (503)."""

    def __init__(self, text: str):
        super().__init__(status_code=503, code="ServiceUnavailable", text=text)


def _now() -> str:
    return datetime.now(UTC).isoformat()


async def api_exception_handler(request: Request, exc: ApiError) -> ORJSONResponse:
    """Exception handler for ApiError and subclasses."""
    return ORJSONResponse(
        status_code=exc.status_code,
        content=exc.to_body().model_dump(),
        headers=exc.headers,
    )


async def upstream_exception_handler(request: Request, exc: UpstreamFetchError) -> ORJSONResponse:
    """Propagate the upstream status code; nothing is cached on this path."""
    return ORJSONResponse(
        status_code=exc.status_code,
        content=ErrorBody(error=exc.message, code="UpstreamError", timestamp=_now()).model_dump(),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Exception handler for unexpected errors."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return ORJSONResponse(
        status_code=500,
        content=ErrorBody(
            error="Internal server error",
            code="InternalServerError",
            timestamp=_now(),
        ).model_dump(),
    )
