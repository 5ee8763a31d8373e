"""civicdesk FastAPI application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from civicdesk.api import admin, health, reports, sos, tasks, ws
from civicdesk.core.config import settings
from civicdesk.core.exceptions import DomainError

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map domain errors to HTTP responses (NotFound 404, ValidationFailure 422, Conflict 409)."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(health.router)
app.include_router(reports.router)
app.include_router(sos.router)
app.include_router(admin.router)
app.include_router(tasks.router)
app.include_router(ws.router)
