"""Tests for the upload ingress checks.

Validates:
- ``declared_extension`` lower-cases the last suffix
- ``validate_upload`` enforces the allow-list, existence and size limit
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from parcel_metrics.core.config import PipelineConfig
from parcel_metrics.core.exceptions import (
    FileTooLargeError,
    MissingFileError,
    UnsupportedFormatError,
)
from parcel_metrics.core.ingress import declared_extension, validate_upload

if TYPE_CHECKING:
    from pathlib import Path


class TestDeclaredExtension:
    """Extension extraction from client-supplied names."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("farm.KML", ".kml"),
            ("farm.tar.SHP", ".shp"),
            ("farm", ""),
            ("/uploads/2024/Farm.Kmz", ".kmz"),
        ],
    )
    def test_extension(self, name: str, expected: str) -> None:
        """Only the last suffix counts, lower-cased."""
        assert declared_extension(name) == expected


class TestValidateUpload:
    """Allow-list, existence and size checks."""

    def test_accepts_and_returns_size(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """An allowed upload returns its size and is logged."""
        path = tmp_path / "upload.bin"
        path.write_bytes(b"x" * 64)
        with caplog.at_level(logging.INFO, logger="parcel_metrics.core.ingress"):
            assert validate_upload(path, "Farm.KML") == 64
        assert "Upload accepted | file=Farm.KML | size=64" in caplog.text

    def test_extension_outside_allow_list(self, tmp_path: Path) -> None:
        """A disallowed extension is rejected at ingress."""
        path = tmp_path / "farm.kml"
        path.write_bytes(b"<kml/>")
        config = PipelineConfig(allowed_extensions=(".shp",))
        with pytest.raises(UnsupportedFormatError) as exc_info:
            validate_upload(path, "farm.kml", config=config)
        assert exc_info.value.stage == "ingress"
        assert exc_info.value.extension == ".kml"

    def test_extension_checked_before_existence(self, tmp_path: Path) -> None:
        """The extension is checked before the file."""
        with pytest.raises(UnsupportedFormatError):
            validate_upload(tmp_path / "absent.pdf", "absent.pdf")

    def test_missing_file(self, tmp_path: Path) -> None:
        """An absent file raises MissingFileError at ingress."""
        with pytest.raises(MissingFileError) as exc_info:
            validate_upload(tmp_path / "absent.shp", "absent.shp")
        assert exc_info.value.stage == "ingress"

    def test_too_large(self, tmp_path: Path) -> None:
        """A file over the limit is rejected."""
        path = tmp_path / "farm.kmz"
        path.write_bytes(b"x" * 11)
        with pytest.raises(FileTooLargeError, match="exceeds limit of 10 bytes"):
            validate_upload(path, "farm.kmz", config=PipelineConfig(max_file_size_bytes=10))

    def test_limit_is_inclusive(self, tmp_path: Path) -> None:
        """A file exactly at the limit is accepted."""
        path = tmp_path / "farm.kmz"
        path.write_bytes(b"x" * 10)
        config = PipelineConfig(max_file_size_bytes=10)
        assert validate_upload(path, "farm.kmz", config=config) == 10
