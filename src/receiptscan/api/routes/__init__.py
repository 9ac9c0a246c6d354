"""API routes."""

from .health import router as health_router
from .receipts import router as receipts_router

__all__ = ["health_router", "receipts_router"]
