"""
ChurchApp Backend — Upload Storage Service
============================================

What:  Validates and stores avatar / church logo / event images.
How:   Declared type, size and sniffed type are checked before anything
       touches the disk; accepted files are written with aiofiles under
       <UPLOADS_ROOT>/avatars/<timestamp-ms>-<random>.<ext> and exposed
       back as the relative URL /uploads/avatars/<name>.
Who:   routes/uploads.py (three upload kinds share one directory).

Validation order:
    1. Declared content type in {image/jpeg, image/png, image/webp}
    2. Non-empty body
    3. Size <= settings.max_upload_size (5 MB by default)
    4. Type detected from the leading bytes (python-magic) is allowed AND
       equals the declared type

Why step 4: the multipart Content-Type is whatever the client says. A
script labeled image/png would otherwise be stored and served back from
/uploads as an avatar.

Stored names contain no client input, so the original filename can never
steer the write path.
"""

import logging
import re
import secrets
import time
from pathlib import Path
from typing import Optional

import aiofiles
import magic

from churchapp.config import settings
from churchapp.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}

AVATARS_DIR = "avatars"
PUBLIC_PREFIX = "/uploads/avatars"

# Names produced by _generate_name; anything else is refused when serving
STORED_NAME_RE = re.compile(r"^\d{13}-[0-9a-f]{12}\.(jpg|png|webp)$")

# libmagic only needs the file header
SNIFF_BYTES = 2048


def _normalize(content_type: Optional[str]) -> str:
    return (content_type or "").split(";")[0].strip().lower()


class UploadService:
    """Writes validated images below a single avatars directory."""

    def __init__(self, uploads_root: Optional[str] = None):
        self.uploads_root = Path(uploads_root or settings.uploads_root).resolve()

    @property
    def avatars_dir(self) -> Path:
        return self.uploads_root / AVATARS_DIR

    def validate_content_type(self, content_type: Optional[str]) -> str:
        """Returns the stored-file extension for an accepted content type."""
        normalized = _normalize(content_type)
        if normalized not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                message="Formato de arquivo não suportado. Envie JPEG, PNG ou WEBP.",
                field="file",
                context={"content_type": normalized, "allowed": sorted(ALLOWED_CONTENT_TYPES)},
            )
        return ALLOWED_CONTENT_TYPES[normalized]

    def validate_size(self, size: int) -> None:
        if size == 0:
            raise ValidationError(message="Arquivo vazio", field="file")
        if size > settings.max_upload_size:
            max_mb = settings.max_upload_size / (1024 * 1024)
            raise ValidationError(
                message=f"Arquivo excede o tamanho máximo de {max_mb:.0f}MB",
                field="file",
                context={"max_size": settings.max_upload_size, "actual_size": size},
            )

    def detect_content_type(self, content: bytes) -> str:
        """MIME type of `content` according to its magic bytes."""
        try:
            return magic.from_buffer(content[:SNIFF_BYTES], mime=True)
        except magic.MagicException as e:
            logger.error("MIME type detection failed: %s", e)
            raise FileStorageError(
                message="Não foi possível verificar o tipo do arquivo",
                context={"error": str(e)},
            )

    def verify_content(self, content: bytes, declared_type: str) -> None:
        """
        Check the bytes against the declared type.

        Raises:
            ValidationError: detected type not allowed, or different from
                the declared one (e.g. PNG bytes sent as image/jpeg)
        """
        detected = self.detect_content_type(content)
        if detected not in ALLOWED_CONTENT_TYPES or detected != declared_type:
            logger.warning(
                "Upload rejected: declared %s, detected %s", declared_type, detected
            )
            raise ValidationError(
                message="O conteúdo do arquivo não corresponde a uma imagem JPEG, PNG ou WEBP",
                field="file",
                context={"declared": declared_type, "detected": detected},
            )

    def _generate_name(self, extension: str) -> str:
        return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}.{extension}"

    async def store(self, content: bytes, extension: str) -> str:
        """Write `content` and return the public relative URL."""
        name = self._generate_name(extension)
        path = self.avatars_dir / name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", path, e)
            raise FileStorageError(context={"path": str(path), "os_error": str(e)})

        logger.info("Upload stored: %s (%d bytes)", name, len(content))
        return f"{PUBLIC_PREFIX}/{name}"

    async def validate_and_store(self, content_type: Optional[str], content: bytes) -> str:
        extension = self.validate_content_type(content_type)
        self.validate_size(len(content))
        self.verify_content(content, _normalize(content_type))
        return await self.store(content, extension)

    def resolve_stored(self, name: str) -> Path:
        """
        Map a public file name back to its path on disk.

        Raises:
            NotFoundError: unknown, malformed or traversal-style names
        """
        if not STORED_NAME_RE.match(name):
            raise NotFoundError(message="Arquivo não encontrado", resource="upload")
        path = (self.avatars_dir / name).resolve()
        if path.parent != self.avatars_dir.resolve() or not path.is_file():
            raise NotFoundError(message="Arquivo não encontrado", resource="upload")
        return path


upload_service = UploadService()
