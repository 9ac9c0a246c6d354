"""Error taxonomy for the receipt pipeline."""


class ReceiptProcessingError(Exception):
    """Base error for a failed pipeline stage."""

    stage = "unknown"

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        message = super().__str__()
        if self.cause is not None:
            return f"{message}: {self.cause}"
        return message


class ImageProcessingError(ReceiptProcessingError):
    """Source image could not be read or decoded."""

    stage = "normalize"


class OcrExtractionError(ReceiptProcessingError):
    """Recognition engine failed, rejected the input, or timed out."""

    stage = "extract"
