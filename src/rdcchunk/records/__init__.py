from __future__ import annotations

from .base import Record
from .d3d11 import (
    CreateBufferRecord,
    CreateDepthStencilViewRecord,
    CreateRenderTargetViewRecord,
    CreateShaderResourceViewRecord,
    CreateSwapBufferRecord,
    CreateTexture2D1Record,
    CreateTexture2DRecord,
    CreateViewRecord,
    IASetIndexBufferRecord,
    IASetVertexBuffersRecord,
    ReleaseResourceRecord,
    ResourceCreationRecord,
    SetResourceNameRecord,
    UpdateSubresource1Record,
    UpdateSubresourceRecord,
)
from .system import DriverInitRecord, InitialContentsRecord

__all__ = [
    "CreateBufferRecord",
    "CreateDepthStencilViewRecord",
    "CreateRenderTargetViewRecord",
    "CreateShaderResourceViewRecord",
    "CreateSwapBufferRecord",
    "CreateTexture2D1Record",
    "CreateTexture2DRecord",
    "CreateViewRecord",
    "DriverInitRecord",
    "IASetIndexBufferRecord",
    "IASetVertexBuffersRecord",
    "InitialContentsRecord",
    "Record",
    "ReleaseResourceRecord",
    "ResourceCreationRecord",
    "SetResourceNameRecord",
    "UpdateSubresource1Record",
    "UpdateSubresourceRecord",
]
