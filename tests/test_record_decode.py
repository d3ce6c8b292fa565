from __future__ import annotations

import struct

import pytest

from capture_builder import CaptureBuilder, driver_init_payload, texture_2d_fields, update_fields
from rdcchunk.errors import InvalidFieldError, TruncatedRecordError
from rdcchunk.meta import RecordMeta
from rdcchunk.records import (
    CreateBufferRecord,
    CreateDepthStencilViewRecord,
    CreateShaderResourceViewRecord,
    CreateSwapBufferRecord,
    CreateTexture2D1Record,
    CreateTexture2DRecord,
    DriverInitRecord,
    IASetIndexBufferRecord,
    IASetVertexBuffersRecord,
    InitialContentsRecord,
    Record,
    ReleaseResourceRecord,
    SetResourceNameRecord,
    UpdateSubresource1Record,
    UpdateSubresourceRecord,
)
from rdcchunk.records.d3d11 import CREATE_TEXTURE_2D_STRUCT, SET_RESOURCE_NAME_STRUCT, UPDATE_SUBRESOURCE_STRUCT
from rdcchunk.records.system import DEVICE_NAME_OFFSET, DEVICE_NAME_SIZE
from rdcchunk.registry import decode_record
from rdcchunk.tags import D3D11Chunk, SystemChunk


def _decode_last(capture: CaptureBuilder) -> Record:
    return decode_record(capture.buffer, capture.metas[-1], index=len(capture.metas) - 1)


def test_driver_init_decodes_device_fields_and_name_span(capture: CaptureBuilder) -> None:
    capture.add(SystemChunk.CAPTURE_SCOPE, b"\x00" * 12)
    meta = capture.driver_init("NVIDIA GeForce RTX 4090")
    record = _decode_last(capture)

    assert isinstance(record, DriverInitRecord)
    assert record.device_name == "NVIDIA GeForce RTX 4090"
    assert record.display_name == "NVIDIA GeForce RTX 4090"
    assert record.feature_levels == (0xB000, 0xA100)
    assert record.vendor_id == 0x10DE
    assert record.dedicated_video_memory == 24 << 30
    assert record.resource_id == 0
    assert record.parent_id == 0
    start = meta.offset + DEVICE_NAME_OFFSET
    assert record.device_name_span == (start, start + DEVICE_NAME_SIZE)
    assert capture.buffer[start : start + 2] == "N".encode("utf-16-le")


def test_driver_init_rejects_too_many_feature_levels(capture: CaptureBuilder) -> None:
    capture.add(SystemChunk.DRIVER_INIT, driver_init_payload(num_feature_levels=8))
    with pytest.raises(InvalidFieldError) as excinfo:
        _decode_last(capture)
    assert excinfo.value.field == "num_feature_levels"
    assert excinfo.value.type_tag == int(SystemChunk.DRIVER_INIT)
    assert excinfo.value.offset == 0


def test_initial_contents_targets_resource_through_parent_id(capture: CaptureBuilder) -> None:
    capture.initial_contents(77, [b"\x01\x02", b""])
    record = _decode_last(capture)
    assert isinstance(record, InitialContentsRecord)
    assert record.resource_id == 0
    assert record.parent_id == 77
    assert record.target_id == 77
    assert record.subresources == (b"\x01\x02", b"")


def test_initial_contents_rejects_unknown_resource_type(capture: CaptureBuilder) -> None:
    capture.initial_contents(77, resource_type=9)
    with pytest.raises(InvalidFieldError) as excinfo:
        _decode_last(capture)
    assert excinfo.value.field == "resource_type"


def test_texture_2d_defines_resource(capture: CaptureBuilder) -> None:
    capture.texture_2d(10, width=640, height=480, initial_data=[b"abcd"])
    record = _decode_last(capture)
    assert isinstance(record, CreateTexture2DRecord)
    assert record.resource_id == 10
    assert record.parent_id == 0
    assert (record.width, record.height) == (640, 480)
    assert record.initial_data == (b"abcd",)


def test_texture_2d_rejects_usage_out_of_range(capture: CaptureBuilder) -> None:
    capture.texture_2d(10, usage=7)
    with pytest.raises(InvalidFieldError) as excinfo:
        _decode_last(capture)
    assert excinfo.value.field == "usage"


def test_texture_2d1_reads_texture_layout(capture: CaptureBuilder) -> None:
    capture.texture_2d1(11, texture_layout=2)
    record = _decode_last(capture)
    assert isinstance(record, CreateTexture2D1Record)
    assert record.resource_id == 11
    assert record.texture_layout == 2

    capture.texture_2d1(12, texture_layout=3)
    with pytest.raises(InvalidFieldError) as excinfo:
        _decode_last(capture)
    assert excinfo.value.field == "texture_layout"


def test_buffer_and_swap_buffer_define_resources(capture: CaptureBuilder) -> None:
    capture.buffer_resource(20, b"\x00" * 48, usage=2)
    record = _decode_last(capture)
    assert isinstance(record, CreateBufferRecord)
    assert record.resource_id == 20
    assert record.byte_width == 48
    assert record.usage == 2
    assert record.initial_data == b"\x00" * 48

    capture.swap_buffer(21, swap_chain=900)
    record = _decode_last(capture)
    assert isinstance(record, CreateSwapBufferRecord)
    assert record.resource_id == 21
    assert record.swap_chain == 900
    assert record.parent_id == 0


def test_views_point_at_their_resource(capture: CaptureBuilder) -> None:
    capture.view(30, 10)
    record = _decode_last(capture)
    assert isinstance(record, CreateShaderResourceViewRecord)
    assert record.resource_id == 30
    assert record.parent_id == 10
    assert record.view_dimension == 4


def test_view_dimension_domain_depends_on_view_kind(capture: CaptureBuilder) -> None:
    capture.view(30, 10, view_dimension=7)
    assert _decode_last(capture).view_dimension == 7

    capture.view(31, 10, tag=D3D11Chunk.CREATE_DEPTH_STENCIL_VIEW, view_dimension=6)
    assert isinstance(_decode_last(capture), CreateDepthStencilViewRecord)

    capture.view(32, 10, tag=D3D11Chunk.CREATE_DEPTH_STENCIL_VIEW, view_dimension=7)
    with pytest.raises(InvalidFieldError) as excinfo:
        _decode_last(capture)
    assert excinfo.value.field == "view_dimension"


def test_set_resource_name_and_release_are_children(capture: CaptureBuilder) -> None:
    capture.set_name(10, "Albedo é")
    record = _decode_last(capture)
    assert isinstance(record, SetResourceNameRecord)
    assert record.parent_id == 10
    assert record.resource_id == 0
    assert record.display_name == "Albedo é"

    capture.release(10)
    record = _decode_last(capture)
    assert isinstance(record, ReleaseResourceRecord)
    assert record.parent_id == 10


def test_set_resource_name_rejects_invalid_utf8(capture: CaptureBuilder) -> None:
    capture.add(D3D11Chunk.SET_RESOURCE_NAME, SET_RESOURCE_NAME_STRUCT.build({"resource_id": 10, "name": b"\xff\xfe"}))
    with pytest.raises(InvalidFieldError) as excinfo:
        _decode_last(capture)
    assert excinfo.value.field == "name"


def test_update_subresource_with_and_without_box(capture: CaptureBuilder) -> None:
    capture.update(10, b"pixels", box=[0, 0, 0, 4, 4, 1])
    record = _decode_last(capture)
    assert isinstance(record, UpdateSubresourceRecord)
    assert record.parent_id == 10
    assert record.box == (0, 0, 0, 4, 4, 1)
    assert record.contents == b"pixels"

    capture.update(10, b"rest")
    record = _decode_last(capture)
    assert record.box is None
    assert record.contents == b"rest"

    capture.update1(10, b"x", copy_flags=2)
    record = _decode_last(capture)
    assert isinstance(record, UpdateSubresource1Record)
    assert record.copy_flags == 2
    assert record.contents == b"x"


def test_update_subresource_rejects_non_boolean_box_flag(capture: CaptureBuilder) -> None:
    payload = bytearray(UPDATE_SUBRESOURCE_STRUCT.build(update_fields(10, b"abc")))
    # resource_id u64 + subresource u32, then the has_box byte.
    payload[12] = 2
    capture.add(D3D11Chunk.UPDATE_SUBRESOURCE, bytes(payload))
    with pytest.raises(InvalidFieldError) as excinfo:
        _decode_last(capture)
    assert excinfo.value.field == "has_box"


def test_vertex_buffers_keep_every_referenced_id(capture: CaptureBuilder) -> None:
    capture.vertex_buffers([1, 2, 3], start_slot=2)
    record = _decode_last(capture)
    assert isinstance(record, IASetVertexBuffersRecord)
    assert record.start_slot == 2
    assert record.buffers == (1, 2, 3)
    assert record.referenced_resource_ids() == (1, 2, 3)
    assert record.strides == (16, 16, 16)
    assert record.parent_id == 0


def test_vertex_buffers_reject_slot_count_before_reading_ids(capture: CaptureBuilder) -> None:
    capture.add(D3D11Chunk.IA_SET_VERTEX_BUFFERS, struct.pack("<II", 0, 33))
    with pytest.raises(InvalidFieldError) as excinfo:
        _decode_last(capture)
    assert excinfo.value.field == "num_buffers"


def test_index_buffer_binding_is_child_of_buffer(capture: CaptureBuilder) -> None:
    capture.index_buffer(20)
    record = _decode_last(capture)
    assert isinstance(record, IASetIndexBufferRecord)
    assert record.parent_id == 20
    assert record.format == 42


def test_short_payload_is_truncated(capture: CaptureBuilder) -> None:
    payload = CREATE_TEXTURE_2D_STRUCT.build(texture_2d_fields(10))
    capture.buffer += payload
    capture.metas.append(RecordMeta(type_tag=int(D3D11Chunk.CREATE_TEXTURE_2D), offset=0, length=len(payload) - 5))
    with pytest.raises(TruncatedRecordError) as excinfo:
        _decode_last(capture)
    assert excinfo.value.offset == 0
    assert excinfo.value.type_tag == int(D3D11Chunk.CREATE_TEXTURE_2D)


@pytest.mark.parametrize("tag", [int(D3D11Chunk.CREATE_BUFFER), int(D3D11Chunk.DRAW)])
def test_range_past_end_of_buffer_is_truncated(tag: int) -> None:
    buffer = bytes(16)
    with pytest.raises(TruncatedRecordError):
        decode_record(buffer, RecordMeta(type_tag=tag, offset=8, length=9))


def test_trailing_padding_inside_declared_length_is_ignored(capture: CaptureBuilder) -> None:
    capture.index_buffer(20)
    padded = capture.add(D3D11Chunk.IA_SET_INDEX_BUFFER, capture.buffer[0:16], padding=8)
    record = _decode_last(capture)
    assert record.parent_id == 20
    assert record.meta == padded


def test_decode_is_deterministic_and_leaves_buffer_untouched(capture: CaptureBuilder) -> None:
    capture.driver_init()
    capture.texture_2d(10, initial_data=[b"\x01" * 8])
    capture.vertex_buffers([10, 11])
    capture.update(10, b"data", box=[1, 2, 3, 4, 5, 6])
    before = bytes(capture.buffer)

    for index, meta in enumerate(capture.metas):
        first = decode_record(capture.buffer, meta, index=index)
        copy = bytearray(len(capture.buffer))
        copy[meta.offset : meta.end] = capture.buffer[meta.offset : meta.end]
        second = decode_record(copy, meta, index=index)
        assert first == second

    assert bytes(capture.buffer) == before
