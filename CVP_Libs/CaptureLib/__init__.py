"""
CaptureLib - Camera stream and file ingestion

Produces the raw image artifact that starts the photo pipeline.
"""

from CVP_Libs.CaptureLib.capture_source import (
    CaptureConstraints,
    StreamHandle,
    capture_frame,
    heif_supported,
    ingest_file,
    start_capture,
    stop_capture,
)

__all__ = [
    "CaptureConstraints",
    "StreamHandle",
    "capture_frame",
    "heif_supported",
    "ingest_file",
    "start_capture",
    "stop_capture",
]
