"""Unified exception taxonomy for the parcel measurement pipeline.

Every domain exception inherits from ``PipelineError`` and carries
structured context fields so that callers can map failures to user
messages, HTTP statuses or log records without string matching.

Taxonomy categories
-------------------
- ``ValidationError``: problems with the submitted file, never retryable.
- ``PermanentError``: the file could not be decoded or measured.
- ``ContractError`` : an internal stage received input that violates
  its boundary contract.

Nothing in this package is retried: a structurally invalid file will be
just as invalid on the second attempt. Every exception exposes
``to_error_dict()`` for a stable structured payload.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Pipeline stage where the error occurred
            (e.g. ``"dispatch"``, ``"decode_kml"``, ``"aggregate"``).
        code: Machine-readable error code (e.g. ``"NO_POLYGON_FOUND"``).
        retryable: Whether a caller may usefully retry the operation.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ContractError):
            return "contract"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, PermanentError):
            return "permanent"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(PipelineError):
    """Input validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(PipelineError):
    """Unrecoverable domain failure. Not retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ContractError(PipelineError):
    """Boundary contract violated between pipeline stages. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Input errors
# ---------------------------------------------------------------------------


class UnsupportedFormatError(ValidationError):
    """Raised when the declared file extension maps to no decoder.

    Attributes:
        extension: The offending extension, lower-cased (may be ``""``).
    """

    default_stage = "dispatch"
    default_code = "UNSUPPORTED_FORMAT"

    def __init__(self, extension: str, message: str = "", **kwargs: object) -> None:
        self.extension = extension
        shown = extension or "(none)"
        super().__init__(message or f"Unsupported file format: {shown}", **kwargs)


class MissingFileError(ValidationError):
    """Raised when a required input file does not exist.

    Attributes:
        path: The path that was expected to exist.
    """

    default_stage = "decode"
    default_code = "MISSING_FILE"

    def __init__(self, path: str, message: str = "", **kwargs: object) -> None:
        self.path = path
        super().__init__(message or f"Required file not found: {path}", **kwargs)


class FileTooLargeError(ValidationError):
    """Raised when an uploaded file exceeds the configured size limit."""

    default_stage = "ingress"
    default_code = "FILE_TOO_LARGE"


class NoGeometryFoundError(ValidationError):
    """Raised when a file decodes but contains no geometry at all."""

    default_stage = "decode"
    default_code = "NO_GEOMETRY_FOUND"


class NoPolygonFoundError(ValidationError):
    """Raised when a file contains geometry but none of it is a polygon."""

    default_stage = "decode"
    default_code = "NO_POLYGON_FOUND"


# ---------------------------------------------------------------------------
# Decode / measurement errors
# ---------------------------------------------------------------------------


class DecodeError(PermanentError):
    """Raised when a file's binary or XML structure is malformed."""

    default_stage = "decode"
    default_code = "DECODE_FAILED"


class MeasurementError(PermanentError):
    """Raised when a geometry cannot be measured."""

    default_stage = "measure"
    default_code = "MEASUREMENT_FAILED"


class EmptyFeatureSetError(ContractError):
    """Raised when the aggregator is handed zero features."""

    default_stage = "aggregate"
    default_code = "EMPTY_FEATURE_SET"
