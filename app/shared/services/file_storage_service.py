# app/shared/services/file_storage_service.py
import os
import re
import uuid
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from pydantic import BaseModel

from app.config.settings import settings
from app.core.errors import ExpenseValidationError

logger = logging.getLogger(__name__)


class StoredFile(BaseModel):
    """Metadata of an invoice written to disk"""
    filename: str
    original_name: str
    path: str
    size: int
    mimetype: str


class FileStorageService:
    """Disk-backed storage for invoice uploads"""

    def __init__(
        self,
        upload_dir: Optional[str] = None,
        max_size: Optional[int] = None,
        allowed_types: Optional[set] = None,
    ):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.max_size = max_size if max_size is not None else settings.max_invoice_size
        self.allowed_types = allowed_types or settings.allowed_invoice_types
        self.chunk_size = settings.upload_chunk_size

    def validate_content_type(self, upload: UploadFile) -> None:
        if upload.content_type not in self.allowed_types:
            raise ExpenseValidationError(
                [{"field": "invoice", "message": "Only PDF, JPG, JPEG, and PNG files are allowed"}],
                message="Invalid invoice file",
            )

    async def save_invoice(self, upload: UploadFile) -> StoredFile:
        """
        Stream an upload to disk under a generated name.

        Args:
            upload: Invoice file from the multipart body

        Returns:
            StoredFile: metadata to record on the expense

        Raises:
            ExpenseValidationError: disallowed media type, or more than
                max_size bytes (the partial file is removed)
        """
        self.validate_content_type(upload)

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        filename = self._generate_filename(upload.filename or "")
        path = self.upload_dir / filename

        await upload.seek(0)
        size = 0
        with open(path, "wb") as out:
            while True:
                chunk = await upload.read(self.chunk_size)
                if not chunk:
                    break
                size += len(chunk)
                if size > self.max_size:
                    break
                out.write(chunk)

        if size > self.max_size:
            self.delete(str(path))
            raise ExpenseValidationError(
                [{"field": "invoice", "message": f"File must not exceed {self.max_size // (1024 * 1024)}MB"}],
                message="Invalid invoice file",
            )

        logger.info(f"Stored invoice {filename} ({size} bytes, {upload.content_type})")

        return StoredFile(
            filename=filename,
            original_name=upload.filename or filename,
            path=str(path),
            size=size,
            mimetype=upload.content_type,
        )

    def resolve(self, path: str) -> Optional[Path]:
        """Path of a stored file, or None if it is gone"""
        candidate = Path(path)
        if not candidate.is_file():
            return None
        return candidate

    def delete(self, path: str) -> bool:
        try:
            os.remove(path)
            return True
        except FileNotFoundError:
            return False

    def _generate_filename(self, original_name: str) -> str:
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S%f")
        file_id = uuid.uuid4().hex[:12]
        return f"invoice-{timestamp}-{file_id}{self._safe_extension(original_name)}"

    def _safe_extension(self, original_name: str) -> str:
        ext = os.path.splitext(original_name)[1].lower()
        # Keep only a short alphanumeric extension
        ext = re.sub(r'[^a-z0-9.]', '', ext)[:10]
        return ext if ext not in ("", ".") else ""


file_storage_service = FileStorageService()
