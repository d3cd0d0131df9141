"""Thin ingress checks for callers that accept uploaded files.

The measurement core trusts its input path; upload endpoints call
``validate_upload`` first to reject oversized files and extensions outside
the configured allow-list before any decoding starts.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePath

from parcel_metrics.core.config import PipelineConfig
from parcel_metrics.core.exceptions import (
    FileTooLargeError,
    MissingFileError,
    UnsupportedFormatError,
)

logger = logging.getLogger("parcel_metrics.core.ingress")


def declared_extension(declared_file_name: str) -> str:
    """Return the lower-cased extension of a declared name (``""`` if none)."""
    return PurePath(declared_file_name).suffix.lower()


def validate_upload(
    file_path: Path | str,
    declared_file_name: str,
    *,
    config: PipelineConfig | None = None,
) -> int:
    """Check an uploaded file against the extension allow-list and size limit.

    Args:
        file_path: Where the upload was stored.
        declared_file_name: The client-supplied file name.
        config: Pipeline configuration (defaults to ``PipelineConfig()``).

    Returns:
        The file size in bytes.

    Raises:
        UnsupportedFormatError: If the extension is not allowed.
        MissingFileError: If ``file_path`` does not exist.
        FileTooLargeError: If the file exceeds ``max_file_size_bytes``.
    """
    config = config or PipelineConfig()
    extension = declared_extension(declared_file_name)
    if extension not in config.allowed_extensions:
        raise UnsupportedFormatError(extension, stage="ingress")

    path = Path(file_path)
    if not path.is_file():
        raise MissingFileError(str(path), stage="ingress")

    size = path.stat().st_size
    if size > config.max_file_size_bytes:
        msg = (
            f"File {declared_file_name} is {size} bytes, exceeds limit of "
            f"{config.max_file_size_bytes} bytes"
        )
        raise FileTooLargeError(msg)

    logger.info("Upload accepted | file=%s | size=%d", declared_file_name, size)
    return size
