"""Global exception handlers returning RFC 7807 problem details.

Unexpected exceptions become ``application/problem+json`` responses
carrying a correlation id, which is also echoed in the
``X-Correlation-ID`` response header. Exception details are only exposed
when the application runs in debug mode.
"""

from __future__ import annotations

import re
from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from ulid import ULID

from infrastructure.database.exceptions import CrossTenantAccessError

CORRELATION_ID_HEADER = "X-Correlation-ID"
PROBLEM_JSON = "application/problem+json"
MAX_CORRELATION_ID_LENGTH = 128

_SAFE_CORRELATION_ID = re.compile(
    rf"[A-Za-z0-9._:-]{{1,{MAX_CORRELATION_ID_LENGTH}}}"
)

logger = structlog.get_logger()


class ProblemDetail(BaseModel):
    """Problem details body."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = "about:blank"
    title: str
    status: int
    instance: str
    correlation_id: str = Field(serialization_alias="correlationId")
    detail: str | None = None


def correlation_id_for(request: Request) -> str:
    """Correlation id from the request header, or a fresh ULID.

    A caller-supplied id is only trusted when it is at most
    ``MAX_CORRELATION_ID_LENGTH`` characters of letters, digits, ``.``,
    ``_``, ``:`` or ``-``.
    """
    supplied = request.headers.get(CORRELATION_ID_HEADER)
    if supplied and _SAFE_CORRELATION_ID.fullmatch(supplied):
        return supplied
    return str(ULID())


def create_problem_response(problem: ProblemDetail) -> JSONResponse:
    payload: dict[str, Any] = problem.model_dump(
        mode="json", by_alias=True, exclude_none=True
    )
    return JSONResponse(
        payload,
        status_code=problem.status,
        media_type=PROBLEM_JSON,
        headers={CORRELATION_ID_HEADER: problem.correlation_id},
    )


def register_exception_handlers(app: FastAPI, debug: bool = False) -> None:
    """Install the problem-details handlers on an application.

    Args:
        app: The FastAPI application
        debug: Attach exception type and message as ``detail``
    """

    def _detail(exc: Exception) -> str | None:
        if not debug:
            return None
        return f"{type(exc).__name__}: {exc}"

    @app.exception_handler(CrossTenantAccessError)
    async def handle_cross_tenant_access(
        request: Request, exc: CrossTenantAccessError
    ) -> JSONResponse:
        problem = ProblemDetail(
            type="https://httpstatuses.com/404",
            title="Resource not found",
            status=status.HTTP_404_NOT_FOUND,
            instance=request.url.path,
            correlation_id=correlation_id_for(request),
            detail=_detail(exc),
        )
        logger.warning(
            "cross_tenant_access",
            correlation_id=problem.correlation_id,
            path=request.url.path,
            entity=exc.entity,
        )
        return create_problem_response(problem)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        problem = ProblemDetail(
            type="https://httpstatuses.com/500",
            title="An unexpected error occurred",
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            instance=request.url.path,
            correlation_id=correlation_id_for(request),
            detail=_detail(exc),
        )
        logger.exception(
            "unhandled_exception",
            correlation_id=problem.correlation_id,
            path=request.url.path,
            method=request.method,
        )
        return create_problem_response(problem)
