from __future__ import annotations

from typing import Mapping

from .meta import RecordMeta
from .records import (
    CreateBufferRecord,
    CreateDepthStencilViewRecord,
    CreateRenderTargetViewRecord,
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
from .tags import D3D11Chunk, SystemChunk, is_system_tag

SYSTEM_RECORD_TYPES: Mapping[int, type[Record]] = {
    SystemChunk.DRIVER_INIT: DriverInitRecord,
    SystemChunk.INITIAL_CONTENTS: InitialContentsRecord,
}

D3D11_RECORD_TYPES: Mapping[int, type[Record]] = {
    D3D11Chunk.SET_RESOURCE_NAME: SetResourceNameRecord,
    D3D11Chunk.RELEASE_RESOURCE: ReleaseResourceRecord,
    D3D11Chunk.CREATE_SWAP_BUFFER: CreateSwapBufferRecord,
    D3D11Chunk.CREATE_TEXTURE_2D: CreateTexture2DRecord,
    D3D11Chunk.CREATE_TEXTURE_2D1: CreateTexture2D1Record,
    D3D11Chunk.CREATE_BUFFER: CreateBufferRecord,
    D3D11Chunk.CREATE_SHADER_RESOURCE_VIEW: CreateShaderResourceViewRecord,
    D3D11Chunk.CREATE_RENDER_TARGET_VIEW: CreateRenderTargetViewRecord,
    D3D11Chunk.CREATE_DEPTH_STENCIL_VIEW: CreateDepthStencilViewRecord,
    D3D11Chunk.UPDATE_SUBRESOURCE: UpdateSubresourceRecord,
    D3D11Chunk.UPDATE_SUBRESOURCE1: UpdateSubresource1Record,
    D3D11Chunk.IA_SET_VERTEX_BUFFERS: IASetVertexBuffersRecord,
    D3D11Chunk.IA_SET_INDEX_BUFFER: IASetIndexBufferRecord,
}


def record_type_for_tag(tag: int) -> type[Record]:
    """Select the record shape for `tag`; unknown tags fall back to the generic `Record`."""
    table = SYSTEM_RECORD_TYPES if is_system_tag(tag) else D3D11_RECORD_TYPES
    return table.get(int(tag), Record)


def create_record(tag: int) -> Record:
    return record_type_for_tag(tag)(type_tag=int(tag))


def decode_record(buffer: bytes | bytearray, meta: RecordMeta, *, index: int = 0) -> Record:
    record = create_record(meta.type_tag)
    record.index = int(index)
    record.decode(meta, buffer)
    return record
