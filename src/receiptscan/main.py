"""ASGI application for the receipt scanning service."""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.middleware import setup_error_handlers
from .api.routes import health_router, receipts_router
from .config import Settings, get_settings
from .extractors import configure_tesseract_cmd

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app: logging, CORS, error mapping and the v1 routers."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    configure_tesseract_cmd(settings.tesseract_cmd)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info(
            f"Receiptscan {__version__} ready: engine={settings.ocr_engine} "
            f"language={settings.ocr_language} uploads={settings.upload_dir} debug={settings.debug}"
        )
        yield
        logger.info("Receiptscan stopped")

    app = FastAPI(
        title="Receiptscan API",
        description="Scan receipt photos and extract amount, currency, date, merchant and category.",
        version=__version__,
        lifespan=lifespan,
    )

    # The pipeline does no queueing of its own
    app.state.scan_slots = asyncio.Semaphore(settings.max_concurrent_scans)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_error_handlers(app)

    for router in (health_router, receipts_router):
        app.include_router(router, prefix=API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    cfg = get_settings()
    uvicorn.run("receiptscan.main:app", host=cfg.host, port=cfg.port, reload=cfg.debug)
