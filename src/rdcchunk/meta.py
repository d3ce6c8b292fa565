from __future__ import annotations

from pathlib import Path
from typing import Annotated, Iterable, TypeAlias

import msgspec

from .errors import RecordMetaError

U64_MAX = 0xFFFF_FFFF_FFFF_FFFF

U32: TypeAlias = Annotated[int, msgspec.Meta(ge=0, le=0xFFFF_FFFF)]
# msgspec bounds must fit in an int64; the uint64 ceiling is checked in __post_init__.
U64: TypeAlias = Annotated[int, msgspec.Meta(ge=0)]


class RecordMeta(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    """Where one record lives in the capture buffer and which tag it declares."""

    type_tag: U32
    offset: U64
    length: U64

    def __post_init__(self) -> None:
        for name in ("offset", "length"):
            value = getattr(self, name)
            if value > U64_MAX:
                raise RecordMetaError(f"{name}={value} exceeds the u64 range")

    @property
    def end(self) -> int:
        return int(self.offset) + int(self.length)


def decode_record_metas(data: bytes | str) -> list[RecordMeta]:
    try:
        return msgspec.json.decode(data, type=list[RecordMeta])
    except msgspec.ValidationError as exc:
        raise RecordMetaError(f"invalid record metadata table: {exc}") from exc
    except msgspec.DecodeError as exc:
        raise RecordMetaError(f"malformed record metadata table: {exc}") from exc


def encode_record_metas(metas: Iterable[RecordMeta]) -> bytes:
    return msgspec.json.encode(list(metas))


def load_record_metas(path: Path) -> list[RecordMeta]:
    return decode_record_metas(Path(path).read_bytes())


def dump_record_metas(metas: Iterable[RecordMeta], path: Path) -> None:
    Path(path).write_bytes(encode_record_metas(metas))
