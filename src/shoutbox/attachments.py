# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Attachment file reading and content type lookup.

This module provides the collaborators the options normalizer uses for
attachments without inline content: a filesystem reader and a MIME type
lookup by filename.

Security: When a base directory is configured, resolved paths must stay
inside it.

Example:
    Reading an attachment::

        reader = FilesystemReader()
        content = await reader.read("/var/reports/q1.pdf")
        guess_content_type("q1.pdf")  # "application/pdf"
"""

from __future__ import annotations

import asyncio
import mimetypes
from pathlib import Path
from typing import Protocol

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class AttachmentReader(Protocol):
    """Anything able to return the bytes stored at a path."""

    async def read(self, path: str) -> bytes: ...


class FilesystemReader:
    """Reader for attachments stored on the local filesystem.

    Absolute paths are read as given. Relative paths are resolved against
    ``base_dir`` when one is configured, otherwise against the current
    working directory.

    Attributes:
        _base_dir: Base directory for relative paths and security boundary.
    """

    def __init__(self, base_dir: str | None = None):
        self._base_dir: Path | None = None
        if base_dir:
            self._base_dir = Path(base_dir).resolve()

    async def read(self, path: str) -> bytes:
        """Read file content from the filesystem.

        Args:
            path: File path (absolute or relative).

        Returns:
            Binary content of the file.

        Raises:
            ValueError: If the path is empty or escapes base_dir.
            FileNotFoundError: If the file does not exist.
            PermissionError: If the file cannot be read.
        """
        if not path:
            raise ValueError("Empty path provided")

        resolved_path = self._resolve(path)
        return await asyncio.to_thread(resolved_path.read_bytes)

    def _resolve(self, path: str) -> Path:
        path_obj = Path(path)
        if self._base_dir is None:
            return path_obj

        if path_obj.is_absolute():
            resolved = path_obj.resolve()
        else:
            resolved = (self._base_dir / path_obj).resolve()
        try:
            resolved.relative_to(self._base_dir)
        except ValueError:
            raise ValueError(
                f"Path traversal detected: '{path}' resolves outside base directory"
            ) from None
        return resolved

    @property
    def base_dir(self) -> Path | None:
        """The configured base directory."""
        return self._base_dir


def guess_content_type(filename: str) -> str | None:
    """Look up the MIME type for a filename based on its extension.

    Returns:
        The MIME type string, or None when the extension is unknown.
    """
    mt, _ = mimetypes.guess_type(filename)
    return mt
