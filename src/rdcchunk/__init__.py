from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("rdc-chunks")
except PackageNotFoundError:  # pragma: no cover
    # Allow running from source (e.g. `PYTHONPATH=src`) without installed package metadata.
    __version__ = "0.0.0+dev"

from .errors import (
    BuildError,
    CaptureError,
    DecodeError,
    DuplicateResourceIdError,
    InvalidFieldError,
    RecordMetaError,
    TruncatedRecordError,
    ValueTooLargeError,
)
from .graph import CaptureGraph, build_capture_graph
from .meta import RecordMeta
from .registry import create_record, decode_record

__all__ = [
    "BuildError",
    "CaptureError",
    "CaptureGraph",
    "DecodeError",
    "DuplicateResourceIdError",
    "InvalidFieldError",
    "RecordMeta",
    "RecordMetaError",
    "TruncatedRecordError",
    "ValueTooLargeError",
    "build_capture_graph",
    "create_record",
    "decode_record",
]
