from __future__ import annotations

from enum import IntEnum

FIRST_DRIVER_CHUNK = 1000


class SystemChunk(IntEnum):
    DRIVER_INIT = 1
    INITIAL_CONTENTS_LIST = 2
    INITIAL_CONTENTS = 3
    CAPTURE_BEGIN = 4
    CAPTURE_SCOPE = 5
    CAPTURE_END = 6


class D3D11Chunk(IntEnum):
    DEVICE_INITIALISATION = FIRST_DRIVER_CHUNK
    SET_RESOURCE_NAME = 1001
    RELEASE_RESOURCE = 1002
    CREATE_SWAP_BUFFER = 1003
    CREATE_TEXTURE_1D = 1004
    CREATE_TEXTURE_2D = 1005
    CREATE_TEXTURE_3D = 1006
    CREATE_BUFFER = 1007
    CREATE_VERTEX_SHADER = 1008
    CREATE_HULL_SHADER = 1009
    CREATE_DOMAIN_SHADER = 1010
    CREATE_GEOMETRY_SHADER = 1011
    CREATE_GEOMETRY_SHADER_WITH_STREAM_OUTPUT = 1012
    CREATE_PIXEL_SHADER = 1013
    CREATE_COMPUTE_SHADER = 1014
    GET_CLASS_INSTANCE = 1015
    CREATE_CLASS_INSTANCE = 1016
    CREATE_CLASS_LINKAGE = 1017
    CREATE_SHADER_RESOURCE_VIEW = 1018
    CREATE_RENDER_TARGET_VIEW = 1019
    CREATE_DEPTH_STENCIL_VIEW = 1020
    CREATE_UNORDERED_ACCESS_VIEW = 1021
    CREATE_INPUT_LAYOUT = 1022
    CREATE_BLEND_STATE = 1023
    CREATE_DEPTH_STENCIL_STATE = 1024
    CREATE_RASTERIZER_STATE = 1025
    CREATE_SAMPLER_STATE = 1026
    CREATE_QUERY = 1027
    CREATE_PREDICATE = 1028
    CREATE_COUNTER = 1029
    CREATE_DEFERRED_CONTEXT = 1030
    SET_EXCEPTION_MODE = 1031
    OPEN_SHARED_RESOURCE = 1032
    CAPTURE_SCOPE = 1033
    SET_SHADER_DEBUG_PATH = 1034
    IA_SET_INPUT_LAYOUT = 1035
    IA_SET_VERTEX_BUFFERS = 1036
    IA_SET_INDEX_BUFFER = 1037
    IA_SET_PRIMITIVE_TOPOLOGY = 1038
    VS_SET_CONSTANT_BUFFERS = 1039
    VS_SET_SHADER_RESOURCES = 1040
    VS_SET_SAMPLERS = 1041
    VS_SET_SHADER = 1042
    PS_SET_CONSTANT_BUFFERS = 1043
    PS_SET_SHADER_RESOURCES = 1044
    PS_SET_SAMPLERS = 1045
    PS_SET_SHADER = 1046
    RS_SET_VIEWPORTS = 1047
    RS_SET_STATE = 1048
    OM_SET_RENDER_TARGETS = 1049
    OM_SET_BLEND_STATE = 1050
    OM_SET_DEPTH_STENCIL_STATE = 1051
    DRAW_INDEXED_INSTANCED = 1052
    DRAW_INSTANCED = 1053
    DRAW_INDEXED = 1054
    DRAW = 1055
    MAP = 1056
    UNMAP = 1057
    COPY_SUBRESOURCE_REGION = 1058
    COPY_RESOURCE = 1059
    UPDATE_SUBRESOURCE = 1060
    CLEAR_RENDER_TARGET_VIEW = 1061
    CLEAR_DEPTH_STENCIL_VIEW = 1062
    PRESENT = 1063
    CREATE_TEXTURE_2D1 = 1064
    UPDATE_SUBRESOURCE1 = 1065


def is_system_tag(tag: int) -> bool:
    return int(tag) < FIRST_DRIVER_CHUNK


def chunk_type_name(tag: int) -> str:
    tag = int(tag)
    table = SystemChunk if is_system_tag(tag) else D3D11Chunk
    try:
        return table(tag).name
    except ValueError:
        return f"Unknown({tag})"
