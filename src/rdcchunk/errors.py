from __future__ import annotations


class CaptureError(ValueError):
    pass


class DecodeError(CaptureError):
    """A record payload could not be decoded (or patched).

    `offset` is the absolute buffer offset of the record; the builder fills in
    `record_index` when the failure happens during a load.
    """

    def __init__(
        self,
        message: str,
        *,
        offset: int | None = None,
        type_tag: int | None = None,
        record_index: int | None = None,
    ) -> None:
        super().__init__(message)
        self.offset = offset
        self.type_tag = type_tag
        self.record_index = record_index

    def __str__(self) -> str:
        message = super().__str__()
        where: list[str] = []
        if self.record_index is not None:
            where.append(f"record {self.record_index}")
        if self.type_tag is not None:
            where.append(f"tag {self.type_tag}")
        if self.offset is not None:
            where.append(f"offset {self.offset:#x}")
        if not where:
            return message
        return f"{message} ({', '.join(where)})"


class TruncatedRecordError(DecodeError):
    pass


class InvalidFieldError(DecodeError):
    def __init__(self, message: str, *, field: str, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.field = field


class ValueTooLargeError(DecodeError):
    def __init__(self, message: str, *, capacity: int, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.capacity = capacity


class BuildError(CaptureError):
    pass


class DuplicateResourceIdError(BuildError):
    def __init__(self, resource_id: int, *, first_index: int, duplicate_index: int, what: str = "resource") -> None:
        super().__init__(
            f"duplicate {what} id {resource_id}: records {first_index} and {duplicate_index}",
        )
        self.resource_id = resource_id
        self.first_index = first_index
        self.duplicate_index = duplicate_index


class RecordMetaError(CaptureError):
    pass
