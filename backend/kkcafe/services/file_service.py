"""
KK's Cafe Backend - Image File Service
=======================================

What:  Validates, stores and removes uploaded drink images.
Why:   Centralizes every file system operation on the upload directory, so
       path handling and type checks live in one place.
How:   Validates extension, declared and sniffed MIME type, size and count,
       writes files with generated names, and maps public references ("/uploads/x.png")
       back to paths inside the upload directory.
Who:   Route handlers store uploads before calling DrinkService;
       DrinkService asks it to delete images that became orphans.

Upload rules:
    1. At most max_files_per_request image parts per request
    2. Extension in {.jpeg, .jpg, .png, .gif, .webp}
    3. Declared MIME type is one of the matching image/* types
    4. Size <= max_file_size (5MB by default)
    5. Content bytes sniffed with libmagic are an allowed image type

Naming:
    drink-<epoch ms>-<random 0..1e9><original extension>
    e.g. drink-1718000000000-482913754.png  →  "/uploads/drink-1718000000000-482913754.png"

Path safety:
    Only references under the configured URL prefix that resolve to a
    file directly inside upload_dir are ever deleted. "/uploads/../data.json"
    and external URLs are left alone.
"""

import logging
import secrets
import time
from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence, Tuple

import aiofiles
import aiofiles.os
import magic

from kkcafe.exceptions import StorageError, UploadRejectedError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/pjpeg",
    "image/png",
    "image/gif",
    "image/webp",
}


class IncomingFile(NamedTuple):
    """One file part of a multipart request, already read into memory."""
    filename: str
    content: bytes
    content_type: Optional[str] = None


class FileService:
    """
    Manages the lifecycle of image files in the upload directory.

    Directory Structure (flat, served as-is under the URL prefix):
        uploads/
        ├── drink-1718000000000-482913754.png
        └── drink-1718000004211-90117.webp
    """

    def __init__(
        self,
        upload_dir: str,
        url_prefix: str = "/uploads",
        max_file_size: int = 5_242_880,
        max_files: int = 10,
    ):
        self.upload_dir = Path(upload_dir).resolve()
        self.url_prefix = "/" + url_prefix.strip("/")
        self.max_file_size = max_file_size
        self.max_files = max_files
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with upload_dir=%s", self.upload_dir)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_file_count(self, count: int) -> None:
        if count > self.max_files:
            raise UploadRejectedError(
                message=f"Too many files. At most {self.max_files} images can be uploaded at once.",
                context={"count": count, "max_files": self.max_files},
            )

    def validate_extension(self, filename: str) -> str:
        """
        Returns:  Normalized extension (lowercase with dot).
        Raises:   UploadRejectedError if the extension is not an allowed image type.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise UploadRejectedError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_declared_type(self, content_type: Optional[str], filename: str) -> str:
        """
        Check the MIME type the client declared for the part.

        Parameters such as "; charset=binary" are ignored.
        """
        mime_type = (content_type or "").split(";")[0].strip().lower()
        if mime_type not in ALLOWED_MIME_TYPES:
            raise UploadRejectedError(
                message=f"File '{filename}' is not an image. Only image files are allowed.",
                context={"declared_mime": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    def validate_mime_type(self, file_content: bytes, filename: str) -> str:
        """
        Validate the actual MIME type by inspecting the file's header bytes.

        What:    libmagic matches the leading bytes against known signatures
                 (PNG starts with 89 50 4E 47, JPEG with FF D8 FF).
        Why:     The extension and declared type both come from the client;
                 a renamed HTML page would otherwise be served from /uploads.

        Returns:
            Detected MIME type string (e.g., "image/png")

        Raises:
            UploadRejectedError if the content is not an allowed image type
            StorageError if libmagic itself fails
        """
        try:
            mime_type = magic.from_buffer(file_content, mime=True)
        except magic.MagicException as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise StorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise UploadRejectedError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"Only image files are allowed."
                ),
                context={"detected_mime": mime_type, "filename": filename},
            )
        return mime_type

    def validate_size(self, actual_size: int) -> None:
        """Reject files above max_file_size."""
        if actual_size > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            raise UploadRejectedError(
                message=(
                    f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds "
                    f"maximum of {max_mb:.0f}MB."
                ),
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    # ── Storage ───────────────────────────────────────────────────────────

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """
        Returns: Tuple of (absolute_path, public_reference).
        """
        unique_name = f"drink-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{extension}"
        return self.upload_dir / unique_name, f"{self.url_prefix}/{unique_name}"

    async def store_file(self, content: bytes, extension: str) -> str:
        """
        Write validated file content to the upload directory.

        Returns:
            Public reference of the stored file ("/uploads/drink-...png").

        Raises:
            StorageError if the write fails.
        """
        absolute_path, reference = self._generate_storage_path(extension)

        try:
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise StorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", reference, len(content))
        return reference

    async def store_uploads(self, uploads: Sequence[IncomingFile]) -> List[str]:
        """
        Validate and store every file part of one request.

        What:    The boundary step that turns multipart file parts into image
                 references before DrinkService runs.
        Returns: References in upload order.

        Parts with an empty filename (an untouched file input) are skipped.
        Every part is validated before anything is written; if a write fails
        midway, files already written for this request are removed.
        """
        files = [u for u in uploads if u.filename]
        self.validate_file_count(len(files))

        extensions = []
        for upload in files:
            extensions.append(self.validate_extension(upload.filename))
            self.validate_declared_type(upload.content_type, upload.filename)
            self.validate_size(len(upload.content))
            self.validate_mime_type(upload.content, upload.filename)

        stored: List[str] = []
        try:
            for upload, ext in zip(files, extensions):
                stored.append(await self.store_file(upload.content, ext))
        except Exception:
            await self.discard(stored)
            raise
        return stored

    # ── References & Cleanup ──────────────────────────────────────────────

    def is_local_reference(self, reference: str) -> bool:
        """True for references served from the upload directory."""
        return reference.startswith(self.url_prefix + "/") and len(reference) > len(self.url_prefix) + 1

    def local_path(self, reference: str) -> Optional[Path]:
        """
        Map a local reference to its file inside upload_dir.

        Returns None for external URLs and for references that would
        resolve anywhere other than directly inside upload_dir.
        """
        if not self.is_local_reference(reference):
            return None
        name = reference[len(self.url_prefix) + 1:]
        path = (self.upload_dir / name).resolve()
        if path.parent != self.upload_dir:
            logger.warning("Refusing to map reference outside upload dir: %s", reference)
            return None
        return path

    async def delete_image(self, reference: str) -> bool:
        """
        Remove the file behind a local reference.

        Returns:
            True if a file was removed. A missing file, an external URL or an
            unsafe reference returns False.

        Failures to delete are logged, not raised: the drink change that
        orphaned the file has already been persisted.
        """
        path = self.local_path(reference)
        if path is None:
            return False
        try:
            if not await aiofiles.os.path.exists(path):
                logger.debug("Cleanup: file already gone: %s", path.name)
                return False
            await aiofiles.os.remove(path)
        except OSError as e:
            logger.warning("Failed to delete image %s: %s", path.name, str(e))
            return False
        logger.info("Deleted image file: %s", path.name)
        return True

    async def discard(self, references: Sequence[str]) -> None:
        """Remove files stored for a request that did not complete."""
        for reference in references:
            await self.delete_image(reference)
