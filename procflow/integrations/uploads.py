"""Upload collaborator for file form fields.

Content arrives as a self-describing blob (a data URL such as
``data:image/png;base64,....`` or bare base64). The store writes it under a
server-assigned unique name and returns only that name; the file is later
served from the static data prefix.
"""

import asyncio
import base64
import binascii
import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Tuple, runtime_checkable

from procflow.domain.errors import UploadFailure

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=.-]+)*;base64,(?P<payload>.*)$", re.DOTALL)

# Names are built from a uuid and a sanitized extension only
SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


@dataclass
class UploadResult:
    """Server-assigned reference to a stored file."""
    filename: str


@runtime_checkable
class UploadStore(Protocol):
    """Upload collaborator."""

    async def upload(self, filename: str, content: str, mime_type: Optional[str] = None) -> UploadResult:
        """Store content and return its server-assigned name. Raises UploadFailure."""
        ...


def decode_content(content: str) -> Tuple[bytes, Optional[str]]:
    """Decode a data URL or bare base64 string.

    Returns (raw bytes, mime type declared in the data URL if any).
    """
    mime = None
    payload = content or ""
    match = DATA_URL_PATTERN.match(payload)
    if match:
        mime = match.group("mime")
        payload = match.group("payload")
    elif payload.startswith("data:"):
        raise UploadFailure("Only base64 data URLs are supported")

    try:
        return base64.b64decode(payload, validate=True), mime
    except (binascii.Error, ValueError) as e:
        raise UploadFailure(f"Invalid base64 content: {e}") from e


def assign_name(filename: str) -> str:
    """Unique stored name keeping the original extension."""
    extension = Path(filename or "").suffix.lower()
    if not SAFE_EXTENSION.match(extension):
        extension = ""
    return f"{uuid.uuid4().hex}{extension}"


class LocalUploadStore:
    """Stores uploads in a local directory."""

    def __init__(self, base_dir: str, max_bytes: int = 20 * 1024 * 1024):
        self.base_dir = Path(base_dir)
        self.max_bytes = max_bytes

    async def upload(self, filename: str, content: str, mime_type: Optional[str] = None) -> UploadResult:
        raw, declared_mime = decode_content(content)
        if not raw:
            raise UploadFailure("Upload is empty")
        if len(raw) > self.max_bytes:
            raise UploadFailure(f"Upload exceeds {self.max_bytes} bytes")

        stored_name = assign_name(filename)
        target = self.base_dir / stored_name
        try:
            await asyncio.to_thread(self._write, target, raw)
        except OSError as e:
            logger.error(f"Failed to store upload {filename}: {e}")
            raise UploadFailure(f"Could not store file: {e}") from e

        logger.info(
            f"Stored upload {filename} as {stored_name} "
            f"({len(raw)} bytes, {mime_type or declared_mime or 'unknown type'})"
        )
        return UploadResult(filename=stored_name)

    @staticmethod
    def _write(target: Path, raw: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(raw)
