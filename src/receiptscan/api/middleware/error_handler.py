"""Error handlers for the FastAPI app."""

import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from ...core.errors import ImageProcessingError, OcrExtractionError, ReceiptProcessingError

logger = logging.getLogger(__name__)

STAGE_STATUS_CODES: dict[type[ReceiptProcessingError], int] = {
    ImageProcessingError: 422,
    OcrExtractionError: 502,
}


async def error_handler_middleware(request: Request, call_next: Callable) -> Response:
    """Turn exceptions no handler claimed into a JSON 500."""
    try:
        return await call_next(request)
    except Exception as e:
        logger.exception(f"Unhandled error processing {request.method} {request.url.path}")
        detail = str(e) if logger.isEnabledFor(logging.DEBUG) else "An unexpected error occurred"
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": detail},
        )


def setup_error_handlers(app: FastAPI) -> None:
    """Register the JSON error responses on the app."""

    app.middleware("http")(error_handler_middleware)

    @app.exception_handler(ReceiptProcessingError)
    async def receipt_error_handler(request: Request, exc: ReceiptProcessingError) -> JSONResponse:
        logger.error(f"Receipt processing failed at {exc.stage} for {request.url.path}: {exc}")
        return JSONResponse(
            status_code=STAGE_STATUS_CODES.get(type(exc), 500),
            content={
                "error": "Failed to process receipt",
                "detail": str(exc),
                "stage": exc.stage,
            },
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "detail": str(exc)},
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(request: Request, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"error": "File not found", "detail": str(exc)},
        )
