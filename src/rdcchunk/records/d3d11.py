from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any, ClassVar

from construct import Array, Byte, GreedyBytes, If, Int32ul, Int64ul, Prefixed, PrefixedArray, Struct, this

from .base import Record, bool_byte, bounded_count, decode_text, enum_field

if TYPE_CHECKING:
    from ..graph import CaptureGraph

IA_VERTEX_INPUT_RESOURCE_SLOT_COUNT = 32


class Usage(IntEnum):
    DEFAULT = 0
    IMMUTABLE = 1
    DYNAMIC = 2
    STAGING = 3


class TextureLayout(IntEnum):
    UNDEFINED = 0
    ROW_MAJOR = 1
    STANDARD_SWIZZLE_64K = 2


class SrvDimension(IntEnum):
    UNKNOWN = 0
    BUFFER = 1
    TEXTURE1D = 2
    TEXTURE1DARRAY = 3
    TEXTURE2D = 4
    TEXTURE2DARRAY = 5
    TEXTURE2DMS = 6
    TEXTURE2DMSARRAY = 7
    TEXTURE3D = 8
    TEXTURECUBE = 9
    TEXTURECUBEARRAY = 10
    BUFFEREX = 11


class RtvDimension(IntEnum):
    UNKNOWN = 0
    BUFFER = 1
    TEXTURE1D = 2
    TEXTURE1DARRAY = 3
    TEXTURE2D = 4
    TEXTURE2DARRAY = 5
    TEXTURE2DMS = 6
    TEXTURE2DMSARRAY = 7
    TEXTURE3D = 8


class DsvDimension(IntEnum):
    UNKNOWN = 0
    TEXTURE1D = 1
    TEXTURE1DARRAY = 2
    TEXTURE2D = 3
    TEXTURE2DARRAY = 4
    TEXTURE2DMS = 5
    TEXTURE2DMSARRAY = 6


_BLOB = Prefixed(Int32ul, GreedyBytes)


def _texture_2d_struct(*, with_layout: bool) -> Struct:
    fields = [
        "resource_id" / Int64ul,
        "width" / Int32ul,
        "height" / Int32ul,
        "mip_levels" / Int32ul,
        "array_size" / Int32ul,
        "format" / Int32ul,
        "sample_count" / Int32ul,
        "sample_quality" / Int32ul,
        "usage" / Int32ul,
        "bind_flags" / Int32ul,
        "cpu_access_flags" / Int32ul,
        "misc_flags" / Int32ul,
    ]
    if with_layout:
        fields.append("texture_layout" / Int32ul)
    fields.append("initial_data" / PrefixedArray(Int32ul, _BLOB))
    return Struct(*fields)


def _update_subresource_struct(*, with_copy_flags: bool) -> Struct:
    fields = [
        "resource_id" / Int64ul,
        "subresource" / Int32ul,
        "has_box" / Byte,
        "box" / If(bool_byte("has_box"), Array(6, Int32ul)),
        "src_row_pitch" / Int32ul,
        "src_depth_pitch" / Int32ul,
    ]
    if with_copy_flags:
        fields.append("copy_flags" / Int32ul)
    fields.append("contents" / _BLOB)
    return Struct(*fields)


SET_RESOURCE_NAME_STRUCT = Struct(
    "resource_id" / Int64ul,
    "name" / _BLOB,
)

RELEASE_RESOURCE_STRUCT = Struct(
    "resource_id" / Int64ul,
)

CREATE_SWAP_BUFFER_STRUCT = Struct(
    "swap_chain" / Int64ul,
    "buffer_index" / Int32ul,
    "resource_id" / Int64ul,
    "width" / Int32ul,
    "height" / Int32ul,
    "format" / Int32ul,
)

CREATE_TEXTURE_2D_STRUCT = _texture_2d_struct(with_layout=False)
CREATE_TEXTURE_2D1_STRUCT = _texture_2d_struct(with_layout=True)

CREATE_BUFFER_STRUCT = Struct(
    "resource_id" / Int64ul,
    "byte_width" / Int32ul,
    "usage" / Int32ul,
    "bind_flags" / Int32ul,
    "cpu_access_flags" / Int32ul,
    "misc_flags" / Int32ul,
    "structure_byte_stride" / Int32ul,
    "initial_data" / _BLOB,
)

CREATE_VIEW_STRUCT = Struct(
    "resource" / Int64ul,
    "view_id" / Int64ul,
    "format" / Int32ul,
    "view_dimension" / Int32ul,
    "mip_slice" / Int32ul,
    "first_array_slice" / Int32ul,
    "array_size" / Int32ul,
)

UPDATE_SUBRESOURCE_STRUCT = _update_subresource_struct(with_copy_flags=False)
UPDATE_SUBRESOURCE1_STRUCT = _update_subresource_struct(with_copy_flags=True)

IA_SET_VERTEX_BUFFERS_STRUCT = Struct(
    "start_slot" / Int32ul,
    "num_buffers" / Int32ul,
    "buffers" / Array(bounded_count("num_buffers", IA_VERTEX_INPUT_RESOURCE_SLOT_COUNT), Int64ul),
    "strides" / Array(this.num_buffers, Int32ul),
    "offsets" / Array(this.num_buffers, Int32ul),
)

IA_SET_INDEX_BUFFER_STRUCT = Struct(
    "buffer" / Int64ul,
    "format" / Int32ul,
    "offset" / Int32ul,
)


@dataclass(slots=True)
class SetResourceNameRecord(Record):
    LAYOUT = SET_RESOURCE_NAME_STRUCT

    def _load(self, parsed: Any) -> None:
        self.parent_id = int(parsed["resource_id"])
        self.display_name = decode_text(parsed["name"], "name")


@dataclass(slots=True)
class ReleaseResourceRecord(Record):
    LAYOUT = RELEASE_RESOURCE_STRUCT

    def _load(self, parsed: Any) -> None:
        self.parent_id = int(parsed["resource_id"])


@dataclass(slots=True)
class ResourceCreationRecord(Record):
    """Record that defines a resource; named after the fact by `SetResourceName` children."""

    def post_load(self, graph: CaptureGraph) -> None:
        if self.display_name:
            return
        for child in graph.children_of(self):
            if isinstance(child, SetResourceNameRecord) and child.display_name:
                self.display_name = child.display_name


@dataclass(slots=True)
class CreateSwapBufferRecord(ResourceCreationRecord):
    swap_chain: int = 0
    buffer_index: int = 0
    width: int = 0
    height: int = 0
    format: int = 0

    LAYOUT = CREATE_SWAP_BUFFER_STRUCT

    def _load(self, parsed: Any) -> None:
        self.resource_id = int(parsed["resource_id"])
        self.swap_chain = int(parsed["swap_chain"])
        self.buffer_index = int(parsed["buffer_index"])
        self.width = int(parsed["width"])
        self.height = int(parsed["height"])
        self.format = int(parsed["format"])


@dataclass(slots=True)
class CreateTexture2DRecord(ResourceCreationRecord):
    width: int = 0
    height: int = 0
    mip_levels: int = 0
    array_size: int = 0
    format: int = 0
    sample_count: int = 0
    sample_quality: int = 0
    usage: int = 0
    bind_flags: int = 0
    cpu_access_flags: int = 0
    misc_flags: int = 0
    initial_data: tuple[bytes, ...] = ()

    LAYOUT = CREATE_TEXTURE_2D_STRUCT

    def _load(self, parsed: Any) -> None:
        self.resource_id = int(parsed["resource_id"])
        self.width = int(parsed["width"])
        self.height = int(parsed["height"])
        self.mip_levels = int(parsed["mip_levels"])
        self.array_size = int(parsed["array_size"])
        self.format = int(parsed["format"])
        self.sample_count = int(parsed["sample_count"])
        self.sample_quality = int(parsed["sample_quality"])
        self.usage = enum_field(parsed["usage"], Usage, "usage")
        self.bind_flags = int(parsed["bind_flags"])
        self.cpu_access_flags = int(parsed["cpu_access_flags"])
        self.misc_flags = int(parsed["misc_flags"])
        self.initial_data = tuple(bytes(blob) for blob in parsed["initial_data"])


@dataclass(slots=True)
class CreateTexture2D1Record(CreateTexture2DRecord):
    texture_layout: int = 0

    LAYOUT = CREATE_TEXTURE_2D1_STRUCT

    def _load(self, parsed: Any) -> None:
        CreateTexture2DRecord._load(self, parsed)
        self.texture_layout = enum_field(parsed["texture_layout"], TextureLayout, "texture_layout")


@dataclass(slots=True)
class CreateBufferRecord(ResourceCreationRecord):
    byte_width: int = 0
    usage: int = 0
    bind_flags: int = 0
    cpu_access_flags: int = 0
    misc_flags: int = 0
    structure_byte_stride: int = 0
    initial_data: bytes = b""

    LAYOUT = CREATE_BUFFER_STRUCT

    def _load(self, parsed: Any) -> None:
        self.resource_id = int(parsed["resource_id"])
        self.byte_width = int(parsed["byte_width"])
        self.usage = enum_field(parsed["usage"], Usage, "usage")
        self.bind_flags = int(parsed["bind_flags"])
        self.cpu_access_flags = int(parsed["cpu_access_flags"])
        self.misc_flags = int(parsed["misc_flags"])
        self.structure_byte_stride = int(parsed["structure_byte_stride"])
        self.initial_data = bytes(parsed["initial_data"])


@dataclass(slots=True)
class CreateViewRecord(ResourceCreationRecord):
    format: int = 0
    view_dimension: int = 0
    mip_slice: int = 0
    first_array_slice: int = 0
    array_size: int = 0

    LAYOUT = CREATE_VIEW_STRUCT
    DIMENSIONS: ClassVar[type[IntEnum]] = SrvDimension

    def _load(self, parsed: Any) -> None:
        self.resource_id = int(parsed["view_id"])
        self.parent_id = int(parsed["resource"])
        self.format = int(parsed["format"])
        self.view_dimension = enum_field(parsed["view_dimension"], self.DIMENSIONS, "view_dimension")
        self.mip_slice = int(parsed["mip_slice"])
        self.first_array_slice = int(parsed["first_array_slice"])
        self.array_size = int(parsed["array_size"])


@dataclass(slots=True)
class CreateShaderResourceViewRecord(CreateViewRecord):
    DIMENSIONS = SrvDimension


@dataclass(slots=True)
class CreateRenderTargetViewRecord(CreateViewRecord):
    DIMENSIONS = RtvDimension


@dataclass(slots=True)
class CreateDepthStencilViewRecord(CreateViewRecord):
    DIMENSIONS = DsvDimension


@dataclass(slots=True)
class UpdateSubresourceRecord(Record):
    subresource: int = 0
    box: tuple[int, ...] | None = None
    src_row_pitch: int = 0
    src_depth_pitch: int = 0
    contents: bytes = b""

    LAYOUT = UPDATE_SUBRESOURCE_STRUCT

    def _load(self, parsed: Any) -> None:
        self.parent_id = int(parsed["resource_id"])
        self.subresource = int(parsed["subresource"])
        box = parsed["box"]
        self.box = None if box is None else tuple(int(value) for value in box)
        self.src_row_pitch = int(parsed["src_row_pitch"])
        self.src_depth_pitch = int(parsed["src_depth_pitch"])
        self.contents = bytes(parsed["contents"])


@dataclass(slots=True)
class UpdateSubresource1Record(UpdateSubresourceRecord):
    copy_flags: int = 0

    LAYOUT = UPDATE_SUBRESOURCE1_STRUCT

    def _load(self, parsed: Any) -> None:
        UpdateSubresourceRecord._load(self, parsed)
        self.copy_flags = int(parsed["copy_flags"])


@dataclass(slots=True)
class IASetVertexBuffersRecord(Record):
    start_slot: int = 0
    buffers: tuple[int, ...] = ()
    strides: tuple[int, ...] = ()
    offsets: tuple[int, ...] = ()
    # Graph position per bound id, `None` where no record defines it.
    bound_indices: tuple[int | None, ...] = field(default=(), compare=False)

    LAYOUT = IA_SET_VERTEX_BUFFERS_STRUCT

    def _load(self, parsed: Any) -> None:
        self.start_slot = int(parsed["start_slot"])
        self.buffers = tuple(int(value) for value in parsed["buffers"])
        self.strides = tuple(int(value) for value in parsed["strides"])
        self.offsets = tuple(int(value) for value in parsed["offsets"])

    def referenced_resource_ids(self) -> tuple[int, ...]:
        return self.buffers

    def post_load(self, graph: CaptureGraph) -> None:
        self.bound_indices = tuple(graph.index_of_resource(resource_id) for resource_id in self.buffers)


@dataclass(slots=True)
class IASetIndexBufferRecord(Record):
    format: int = 0
    byte_offset: int = 0

    LAYOUT = IA_SET_INDEX_BUFFER_STRUCT

    def _load(self, parsed: Any) -> None:
        self.parent_id = int(parsed["buffer"])
        self.format = int(parsed["format"])
        self.byte_offset = int(parsed["offset"])
