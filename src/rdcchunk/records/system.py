from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any

from construct import Array, Bytes, GreedyBytes, Int32ul, Int64ul, Prefixed, PrefixedArray, Struct

from ..errors import InvalidFieldError, ValueTooLargeError
from .base import Record, decode_text, enum_field

if TYPE_CHECKING:
    from ..graph import CaptureGraph

MAX_FEATURE_LEVELS = 7
DEVICE_NAME_OFFSET = 0x2C
DEVICE_NAME_SIZE = 0x100
# 128 UTF-16 code units, one of them reserved for the terminator.
DEVICE_NAME_MAX_UNITS = DEVICE_NAME_SIZE // 2 - 1


class ResourceType(IntEnum):
    UNKNOWN = 0
    BUFFER = 1
    TEXTURE_1D = 2
    TEXTURE_2D = 3
    TEXTURE_3D = 4


DRIVER_INIT_STRUCT = Struct(
    "driver_type" / Int32ul,
    "flags" / Int32ul,
    "sdk_version" / Int32ul,
    "num_feature_levels" / Int32ul,
    "feature_levels" / Array(MAX_FEATURE_LEVELS, Int32ul),
    "device_name" / Bytes(DEVICE_NAME_SIZE),
    "vendor_id" / Int32ul,
    "device_id" / Int32ul,
    "sub_sys_id" / Int32ul,
    "revision" / Int32ul,
    "dedicated_video_memory" / Int64ul,
    "dedicated_system_memory" / Int64ul,
    "shared_system_memory" / Int64ul,
)

INITIAL_CONTENTS_STRUCT = Struct(
    "resource_id" / Int64ul,
    "resource_type" / Int32ul,
    "subresources" / PrefixedArray(Int32ul, Prefixed(Int32ul, GreedyBytes)),
)


def decode_device_name(raw: bytes) -> str:
    end = len(raw)
    for idx in range(0, len(raw) - 1, 2):
        if raw[idx] == 0 and raw[idx + 1] == 0:
            end = idx
            break
    return decode_text(raw[:end], "device_name", "utf-16-le")


def encode_device_name(name: str) -> bytes:
    """Encode `name` into the fixed 256-byte UTF-16LE field, zero filled."""
    if "\x00" in name:
        raise InvalidFieldError("device name contains NUL", field="device_name")
    try:
        encoded = name.encode("utf-16-le")
    except UnicodeEncodeError as exc:
        raise InvalidFieldError(f"device name is not encodable as UTF-16: {exc}", field="device_name") from exc
    units = len(encoded) // 2
    if units > DEVICE_NAME_MAX_UNITS:
        raise ValueTooLargeError(
            f"device name is {units} UTF-16 units, field holds {DEVICE_NAME_MAX_UNITS}",
            capacity=DEVICE_NAME_MAX_UNITS,
        )
    return encoded.ljust(DEVICE_NAME_SIZE, b"\x00")


@dataclass(slots=True)
class DriverInitRecord(Record):
    driver_type: int = 0
    flags: int = 0
    sdk_version: int = 0
    feature_levels: tuple[int, ...] = ()
    device_name: str = ""
    vendor_id: int = 0
    device_id: int = 0
    sub_sys_id: int = 0
    revision: int = 0
    dedicated_video_memory: int = 0
    dedicated_system_memory: int = 0
    shared_system_memory: int = 0
    # Absolute [start, end) of the device name in the capture buffer.
    device_name_span: tuple[int, int] | None = None

    LAYOUT = DRIVER_INIT_STRUCT

    def _load(self, parsed: Any) -> None:
        count = int(parsed["num_feature_levels"])
        if count > MAX_FEATURE_LEVELS:
            raise InvalidFieldError(f"num_feature_levels={count} exceeds {MAX_FEATURE_LEVELS}", field="num_feature_levels")
        self.driver_type = int(parsed["driver_type"])
        self.flags = int(parsed["flags"])
        self.sdk_version = int(parsed["sdk_version"])
        self.feature_levels = tuple(int(level) for level in parsed["feature_levels"][:count])
        self.device_name = decode_device_name(parsed["device_name"])
        self.vendor_id = int(parsed["vendor_id"])
        self.device_id = int(parsed["device_id"])
        self.sub_sys_id = int(parsed["sub_sys_id"])
        self.revision = int(parsed["revision"])
        self.dedicated_video_memory = int(parsed["dedicated_video_memory"])
        self.dedicated_system_memory = int(parsed["dedicated_system_memory"])
        self.shared_system_memory = int(parsed["shared_system_memory"])
        self.display_name = self.device_name
        if self.meta is None:
            raise RuntimeError("driver init fields loaded without record metadata")
        start = int(self.meta.offset) + DEVICE_NAME_OFFSET
        self.device_name_span = (start, start + DEVICE_NAME_SIZE)

    def patch_field(self, buffer: bytearray, value: str) -> None:
        """Overwrite the device name in `buffer` in place.

        Only the 256-byte name field is written; the decoded fields of this
        record are left as they were.
        """
        if self.device_name_span is None:
            raise RuntimeError("driver init record has not been decoded")
        start, end = self.device_name_span
        try:
            payload = encode_device_name(value)
        except (InvalidFieldError, ValueTooLargeError) as exc:
            exc.offset = start
            exc.type_tag = self.type_tag
            exc.record_index = self.index
            raise
        with memoryview(buffer) as view:
            if view.readonly:
                raise TypeError("capture buffer is read-only")
            view[start:end] = payload


@dataclass(slots=True)
class InitialContentsRecord(Record):
    resource_type: int = 0
    subresources: tuple[bytes, ...] = ()
    target_index: int | None = field(default=None, compare=False)

    LAYOUT = INITIAL_CONTENTS_STRUCT

    @property
    def target_id(self) -> int:
        return self.parent_id

    def _load(self, parsed: Any) -> None:
        self.parent_id = int(parsed["resource_id"])
        self.resource_type = enum_field(parsed["resource_type"], ResourceType, "resource_type")
        self.subresources = tuple(bytes(blob) for blob in parsed["subresources"])

    def post_load(self, graph: CaptureGraph) -> None:
        self.target_index = graph.index_of_resource(self.parent_id)
