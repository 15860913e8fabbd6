"""
Local filesystem and content decoding service for downloaded blobs.
"""

import asyncio
import base64
import binascii
from pathlib import Path
from typing import Union

from ..infrastructure.error_handler import DecodeError, FilesystemError
from ..infrastructure.logger import logger


def decode_blob_content(content: str, encoding: str) -> bytes:
    """
    Decode the ``content`` field of a git blob payload.

    Args:
        content: Encoded content as returned by the API
        encoding: ``base64`` or ``utf-8``

    Returns:
        Raw file bytes

    Raises:
        DecodeError: On malformed base64 or an unsupported encoding
    """
    if encoding == "base64":
        # GitHub wraps base64 content at 60 columns
        compact = "".join(content.split())
        try:
            return base64.b64decode(compact, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError("Malformed base64 blob content", e)

    if encoding in ("utf-8", "utf8"):
        return content.encode("utf-8")

    raise DecodeError(f"Unsupported blob encoding: {encoding!r}")


class DownloadService:
    """Writes decoded content below an output directory."""

    @staticmethod
    def _make_dirs(path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _write_bytes(path: Path, content: bytes) -> int:
        with open(path, "wb") as handle:
            return handle.write(content)

    async def ensure_directory(self, path: Union[str, Path]) -> None:
        """
        Create ``path`` and any missing ancestors.

        Safe to call concurrently for directories sharing an ancestor.

        Raises:
            FilesystemError: If the directory cannot be created
        """
        try:
            await asyncio.to_thread(self._make_dirs, Path(path))
        except OSError as e:
            raise FilesystemError(f"Could not create directory {path}", e)

    async def save_content(self, content: bytes, target_path: Union[str, Path]) -> int:
        """
        Write ``content`` to ``target_path``, creating parent directories.

        Args:
            content: Raw bytes to write
            target_path: Destination file path

        Returns:
            Number of bytes written

        Raises:
            FilesystemError: If the file cannot be written
        """
        target_path = Path(target_path)
        await self.ensure_directory(target_path.parent)

        try:
            written = await asyncio.to_thread(self._write_bytes, target_path, content)
        except OSError as e:
            raise FilesystemError(f"Could not write {target_path}", e)

        logger.debug(f"Wrote {written} bytes to {target_path}")
        return written


__all__ = ["DownloadService", "decode_blob_content"]
