"""Global error handlers mapping core failures to classified JSON responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cardex.models.failure import ApiResponse, KnownError

logger = logging.getLogger(__name__)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(KnownError)
    async def known_error_handler(request: Request, exc: KnownError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_response().model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def unknown_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = ApiResponse.unknown_failure(detail=type(exc).__name__)
        return JSONResponse(status_code=500, content=response.model_dump(mode="json"))
