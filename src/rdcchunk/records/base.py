from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Callable, ClassVar

from construct import Construct, ConstructError, StreamError

from ..errors import DecodeError, InvalidFieldError, TruncatedRecordError
from ..meta import RecordMeta
from ..tags import chunk_type_name

if TYPE_CHECKING:
    from ..graph import CaptureGraph


def read_payload(buffer: bytes | bytearray, meta: RecordMeta) -> bytes:
    start = int(meta.offset)
    end = meta.end
    if end > len(buffer):
        raise TruncatedRecordError(
            f"record range {start:#x}..{end:#x} exceeds buffer of {len(buffer)} bytes",
            offset=start,
            type_tag=int(meta.type_tag),
        )
    return bytes(buffer[start:end])


def parse_layout(layout: Construct, payload: bytes, meta: RecordMeta) -> Any:
    try:
        return layout.parse(payload)
    except StreamError as exc:
        raise TruncatedRecordError(
            f"payload shorter than layout ({len(payload)} bytes): {exc}",
            offset=int(meta.offset),
            type_tag=int(meta.type_tag),
        ) from exc
    except ConstructError as exc:
        raise InvalidFieldError(
            str(exc),
            field="<layout>",
            offset=int(meta.offset),
            type_tag=int(meta.type_tag),
        ) from exc


def bounded_count(name: str, limit: int) -> Callable[[Any], int]:
    """Array count taken from an earlier field, rejected above `limit` before any element is read."""

    def _count(ctx: Any) -> int:
        value = int(ctx[name])
        if value > limit:
            raise InvalidFieldError(f"{name}={value} exceeds {limit}", field=name)
        return value

    return _count


def bool_byte(name: str) -> Callable[[Any], bool]:
    def _flag(ctx: Any) -> bool:
        value = int(ctx[name])
        if value not in (0, 1):
            raise InvalidFieldError(f"{name}={value} is not a boolean byte", field=name)
        return value == 1

    return _flag


def enum_field(value: int, enum_type: type[IntEnum], name: str) -> int:
    value = int(value)
    try:
        enum_type(value)
    except ValueError:
        raise InvalidFieldError(f"{name}={value} is not a valid {enum_type.__name__}", field=name) from None
    return value


def decode_text(raw: bytes, name: str, encoding: str = "utf-8") -> str:
    try:
        return bytes(raw).decode(encoding)
    except UnicodeDecodeError as exc:
        raise InvalidFieldError(f"{name} is not valid {encoding}: {exc}", field=name) from exc


@dataclass(slots=True)
class Record:
    """One decoded chunk.

    Also the generic fallback shape: records whose tag has no registered
    decoder keep only their common fields and decode no payload.

    `parent_index` / `child_indices` are positions in the owning graph's
    record list, filled in by the builder.
    """

    type_tag: int
    index: int = 0
    event_index: int = 0
    resource_id: int = 0
    parent_id: int = 0
    display_name: str = ""
    meta: RecordMeta | None = None
    parent_index: int | None = field(default=None, compare=False)
    child_indices: list[int] = field(default_factory=list, compare=False)

    LAYOUT: ClassVar[Construct | None] = None

    @property
    def type_name(self) -> str:
        return chunk_type_name(self.type_tag)

    def decode(self, meta: RecordMeta, buffer: bytes | bytearray) -> None:
        self.meta = meta
        try:
            payload = read_payload(buffer, meta)
            if self.LAYOUT is None:
                return
            self._load(parse_layout(self.LAYOUT, payload, meta))
        except DecodeError as exc:
            if exc.offset is None:
                exc.offset = int(meta.offset)
            if exc.type_tag is None:
                exc.type_tag = int(meta.type_tag)
            raise

    def _load(self, parsed: Any) -> None:
        pass

    def post_load(self, graph: CaptureGraph) -> None:
        pass

    def referenced_resource_ids(self) -> tuple[int, ...]:
        return ()

    def patch_field(self, buffer: bytearray, value: Any) -> None:
        raise TypeError(f"{self.type_name} records have no patchable field")
