"""Pipeline orchestration.

Runs one property file end to end:
1. Dispatch on the declared extension → select a decoder
2. Decode → canonical features
3. Measure each feature → aggregate into a PropertyReport
"""

from parcel_metrics.orchestrators.property_pipeline import (
    SourceFormat,
    UploadOutcome,
    detect_format,
    process_property_file,
    run_property_upload,
)

__all__ = [
    "SourceFormat",
    "UploadOutcome",
    "detect_format",
    "process_property_file",
    "run_property_upload",
]
