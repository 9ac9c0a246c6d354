"""Receipt upload storage: type sniffing, size limits and cleanup."""

import logging
from enum import Enum
from pathlib import Path
from uuid import uuid4

import magic
from fastapi import UploadFile

logger = logging.getLogger(__name__)


class FileType(str, Enum):
    """Image kinds accepted as receipts."""

    IMAGE_JPEG = "image_jpeg"
    IMAGE_PNG = "image_png"
    IMAGE_TIFF = "image_tiff"
    IMAGE_WEBP = "image_webp"
    IMAGE_HEIC = "image_heic"
    IMAGE_OTHER = "image_other"
    UNKNOWN = "unknown"


# (type, MIME types, extensions); the first extension names stored files
_IMAGE_FORMATS: tuple[tuple[FileType, tuple[str, ...], tuple[str, ...]], ...] = (
    (FileType.IMAGE_JPEG, ("image/jpeg", "image/pjpeg"), (".jpg", ".jpeg")),
    (FileType.IMAGE_PNG, ("image/png",), (".png",)),
    (FileType.IMAGE_TIFF, ("image/tiff",), (".tiff", ".tif")),
    (FileType.IMAGE_WEBP, ("image/webp",), (".webp",)),
    (FileType.IMAGE_HEIC, ("image/heic", "image/heif"), (".heic", ".heif")),
    (FileType.IMAGE_OTHER, ("image/gif", "image/bmp"), (".gif", ".bmp")),
)

MIME_TO_FILETYPE = {mime: kind for kind, mimes, _ in _IMAGE_FORMATS for mime in mimes}
EXTENSION_TO_FILETYPE = {ext: kind for kind, _, exts in _IMAGE_FORMATS for ext in exts}
FILETYPE_TO_SUFFIX = {
    kind: exts[0] for kind, _, exts in _IMAGE_FORMATS if kind is not FileType.IMAGE_OTHER
}

# libmagic results that say nothing about the content
UNTYPED_MIMES = frozenset({"", "application/octet-stream"})


def detect_file_type(content: bytes | None = None, filename: str | None = None) -> FileType:
    """
    Classify an upload as one of the accepted image kinds.

    libmagic decides whenever it names a concrete type. The filename
    extension is only consulted for untyped bytes, since some libmagic
    builds report HEIC as application/octet-stream.
    """
    if content:
        mime = magic.from_buffer(content, mime=True)
        if mime not in UNTYPED_MIMES:
            return MIME_TO_FILETYPE.get(mime, FileType.UNKNOWN)

    if filename:
        return EXTENSION_TO_FILETYPE.get(Path(filename).suffix.lower(), FileType.UNKNOWN)
    return FileType.UNKNOWN


class FileHandler:
    """Validate, store and clean up uploaded receipt images."""

    def __init__(self, upload_dir: Path, max_size_bytes: int = 10 * 1024 * 1024):
        self.upload_dir = upload_dir
        self.max_size_bytes = max_size_bytes

    async def read_upload(self, upload: UploadFile) -> tuple[bytes, FileType]:
        """
        Read an upload into memory and check it is an acceptable image.

        Raises:
            ValueError: Empty upload, over the size limit, or not an image
        """
        data = await upload.read()
        size = len(data)

        if size == 0:
            raise ValueError("Uploaded file is empty")
        if size > self.max_size_bytes:
            raise ValueError(f"Receipt of {size} bytes exceeds maximum of {self.max_size_bytes} bytes")

        kind = detect_file_type(data, upload.filename)
        if kind is FileType.UNKNOWN:
            raise ValueError("Only image files are allowed")
        return data, kind

    def save(self, content: bytes, file_type: FileType, original_name: str | None = None) -> Path:
        """Store upload bytes under a fresh UUID filename."""
        suffix = FILETYPE_TO_SUFFIX.get(file_type)
        if suffix is None:
            suffix = Path(original_name).suffix.lower() if original_name else ""

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path = self.upload_dir / f"{uuid4()}{suffix}"
        path.write_bytes(content)
        logger.info(f"Saved uploaded receipt to {path}")
        return path

    def resolve(self, filename: str) -> Path:
        """
        Resolve a stored filename inside the upload directory.

        Raises:
            ValueError: If the name points outside the upload directory
        """
        root = self.upload_dir.resolve()
        path = (root / filename).resolve()
        if path.parent != root:
            raise ValueError(f"Invalid filename: {filename}")
        return path

    def cleanup(self, path: Path) -> bool:
        """Delete a stored file. Failures are logged, not raised."""
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to clean up file {path}: {e}")
            return False
        logger.info(f"Cleaned up file: {path}")
        return True
