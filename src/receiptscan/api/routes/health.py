"""Liveness and readiness probes."""

from fastapi import APIRouter

from ... import __version__
from ...config import get_settings
from ...extractors import create_engine

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    """Liveness: the process is up."""
    return {"status": "healthy", "service": "receiptscan", "version": __version__}


@router.get("/ready")
async def ready() -> dict:
    """Readiness: the configured OCR engine can be used."""
    engine = create_engine(get_settings())
    engine_ok = engine.is_available()

    return {
        "ready": engine_ok,
        "engine": engine.name,
        "checks": {"api": True, "ocr_engine": engine_ok},
    }
