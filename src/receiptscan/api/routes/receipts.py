"""Receipt scanning endpoints."""

import asyncio
import logging
from functools import lru_cache
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel, Field

from ...config import get_settings
from ...core.pipeline import ReceiptPipeline
from ...utils.file_handlers import FileHandler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/receipts", tags=["receipts"])


class ScannedData(BaseModel):
    """Extracted fields as returned to the client."""

    amount: float | None
    currency: str
    date: str | None
    merchant: str | None
    category: str | None
    confidence: float
    raw_text: str = Field(alias="rawText")
    word_count: int = Field(alias="wordCount")
    line_count: int = Field(alias="lineCount")


class StoredFile(BaseModel):
    """Stored upload metadata."""

    filename: str
    path: str
    size: int
    mimetype: str | None


class ScanResponse(BaseModel):
    """Response for receipt scanning."""

    message: str
    data: ScannedData
    file: StoredFile


@lru_cache
def get_pipeline() -> ReceiptPipeline:
    """Shared pipeline; stages are stateless between calls."""
    return ReceiptPipeline()


def get_file_handler() -> FileHandler:
    settings = get_settings()
    return FileHandler(settings.upload_dir, settings.max_file_size_bytes)


def _scan_slots(request: Request) -> asyncio.Semaphore:
    return request.app.state.scan_slots


@router.post("/scan", response_model=ScanResponse, response_model_by_alias=True)
async def scan_receipt(
    request: Request,
    receipt: Annotated[UploadFile, File(description="Receipt image")],
    pipeline: Annotated[ReceiptPipeline, Depends(get_pipeline)],
    file_handler: Annotated[FileHandler, Depends(get_file_handler)],
    language: Annotated[str | None, Form()] = None,
) -> ScanResponse:
    """
    Upload a receipt image and extract expense data using OCR.

    The stored file is deleted if processing fails.
    """
    settings = get_settings()

    try:
        content, file_type = await file_handler.read_upload(receipt)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    path = file_handler.save(content, file_type, receipt.filename)
    logger.info(f"Processing receipt {receipt.filename} as {path.name} ({file_type.value})")

    try:
        async with _scan_slots(request):
            result = await pipeline.process(path, language=language)
    except Exception:
        file_handler.cleanup(path)
        raise

    data = result.to_json()
    data["currency"] = data["currency"] or settings.default_currency

    return ScanResponse(
        message="Receipt scanned successfully",
        data=ScannedData(**data),
        file=StoredFile(
            filename=path.name,
            path=f"/uploads/{path.name}",
            size=len(content),
            mimetype=receipt.content_type,
        ),
    )


@router.delete("/files/{filename}")
async def delete_receipt_file(
    filename: str,
    file_handler: Annotated[FileHandler, Depends(get_file_handler)],
) -> dict:
    """Delete a stored receipt upload."""
    try:
        path = file_handler.resolve(filename)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not file_handler.cleanup(path):
        raise HTTPException(status_code=404, detail="Receipt file not found")

    return {"message": "Receipt deleted successfully", "filename": filename}
