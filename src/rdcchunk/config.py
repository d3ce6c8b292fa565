from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .meta import RecordMeta, load_record_metas

META_SIDECAR_SUFFIX = ".chunks.json"
DEFAULT_LOG_LEVEL = "WARNING"


def default_meta_path(buffer_path: Path) -> Path:
    """`capture.bin` -> `capture.bin.chunks.json`."""
    return buffer_path.with_name(buffer_path.name + META_SIDECAR_SUFFIX)


@dataclass(frozen=True, slots=True)
class CaptureInputs:
    buffer_path: Path
    meta_path: Path

    @classmethod
    def for_buffer(cls, buffer_path: Path, meta_path: Path | None = None) -> CaptureInputs:
        buffer_path = Path(buffer_path)
        return cls(
            buffer_path=buffer_path,
            meta_path=Path(meta_path) if meta_path is not None else default_meta_path(buffer_path),
        )

    def read_buffer(self) -> bytearray:
        return bytearray(self.buffer_path.read_bytes())

    def read_metas(self) -> list[RecordMeta]:
        return load_record_metas(self.meta_path)
