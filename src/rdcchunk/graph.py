from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .errors import DecodeError, DuplicateResourceIdError
from .log import get_logger
from .meta import RecordMeta
from .records import DriverInitRecord, InitialContentsRecord, Record
from .registry import decode_record
from .tags import SystemChunk

logger = get_logger(__name__)


@dataclass(slots=True)
class CaptureGraph:
    """Decoded records of one capture buffer, in buffer order.

    The graph owns `records`; every other index and link holds positions into
    that list. `buffer` is borrowed: it is read during the build and written
    only by `set_device_name`, which must not run concurrently with reads.
    """

    buffer: bytes | bytearray
    records: list[Record] = field(default_factory=list)
    resources: dict[int, int] = field(default_factory=dict)
    initial_contents: dict[int, int] = field(default_factory=dict)
    driver_init_index: int | None = None
    capture_begin_index: int | None = None

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def __getitem__(self, index: int) -> Record:
        return self.records[index]

    @property
    def driver_init(self) -> DriverInitRecord | None:
        if self.driver_init_index is None:
            return None
        record = self.records[self.driver_init_index]
        if not isinstance(record, DriverInitRecord):
            raise RuntimeError(f"record {self.driver_init_index} is {record.type_name}, not a driver init record")
        return record

    def index_of_resource(self, resource_id: int) -> int | None:
        return self.resources.get(int(resource_id))

    def record_by_resource_id(self, resource_id: int) -> Record | None:
        index = self.resources.get(int(resource_id))
        return None if index is None else self.records[index]

    def initial_contents_for(self, resource_id: int) -> InitialContentsRecord | None:
        index = self.initial_contents.get(int(resource_id))
        if index is None:
            return None
        record = self.records[index]
        return record if isinstance(record, InitialContentsRecord) else None

    def parent_of(self, record: Record) -> Record | None:
        if record.parent_index is None:
            return None
        return self.records[record.parent_index]

    def children_of(self, record: Record) -> list[Record]:
        return [self.records[index] for index in record.child_indices]

    def resolved_resource_id(self, record: Record) -> int:
        if record.resource_id != 0:
            return record.resource_id
        parent = self.parent_of(record)
        return 0 if parent is None else parent.resource_id

    def resolved_name(self, record: Record) -> str:
        if record.display_name:
            return record.display_name
        parent = self.parent_of(record)
        return "" if parent is None else parent.display_name

    def referenced_resources(self, record: Record) -> tuple[tuple[int, Record | None], ...]:
        return tuple((resource_id, self.record_by_resource_id(resource_id)) for resource_id in record.referenced_resource_ids())

    def set_device_name(self, name: str) -> bool:
        """Patch the driver-init device name in the capture buffer.

        Returns False (and leaves the buffer alone) when the capture has no
        driver-init record. Raises `ValueTooLargeError` for names that do not
        fit; the buffer is untouched in that case too.
        """
        record = self.driver_init
        if record is None:
            logger.debug("device_name_patch_skipped", reason="no_driver_init")
            return False
        record.patch_field(self.buffer, name)
        logger.info("device_name_patched", index=record.index, device_name=name)
        return True

    def redecode(self, index: int) -> Record:
        """Decode record `index` again from the current buffer contents (unlinked)."""
        meta = self.records[index].meta
        if meta is None:
            raise RuntimeError(f"record {index} was not decoded from the capture buffer")
        return decode_record(self.buffer, meta, index=index)


class CaptureGraphBuilder:
    def __init__(self, buffer: bytes | bytearray) -> None:
        self.graph = CaptureGraph(buffer=buffer)

    def add(self, record: Record) -> None:
        graph = self.graph
        index = len(graph.records)
        record.index = index
        graph.records.append(record)

        if record.resource_id != 0:
            first = graph.resources.get(record.resource_id)
            if first is not None:
                raise DuplicateResourceIdError(record.resource_id, first_index=first, duplicate_index=index)
            graph.resources[record.resource_id] = index

        if isinstance(record, InitialContentsRecord) and record.target_id != 0:
            first = graph.initial_contents.get(record.target_id)
            if first is not None:
                raise DuplicateResourceIdError(
                    record.target_id,
                    first_index=first,
                    duplicate_index=index,
                    what="initial contents",
                )
            graph.initial_contents[record.target_id] = index

        if isinstance(record, DriverInitRecord):
            graph.driver_init_index = index

        if record.type_tag == SystemChunk.CAPTURE_BEGIN and graph.capture_begin_index is None:
            graph.capture_begin_index = index
        elif graph.capture_begin_index is not None:
            record.event_index = index - graph.capture_begin_index

        self._link(record)

    def _link(self, record: Record) -> None:
        if record.parent_id == 0:
            return
        graph = self.graph
        parent_index = graph.resources.get(record.parent_id)
        # Only parents decoded earlier are visible; producers write parents first.
        if parent_index is None or parent_index == record.index:
            logger.debug("record_parent_unresolved", index=record.index, parent_id=record.parent_id)
            return
        record.parent_index = parent_index
        graph.records[parent_index].child_indices.append(record.index)

    def finish(self) -> CaptureGraph:
        graph = self.graph
        for record in graph.records:
            record.post_load(graph)
        logger.info(
            "capture_graph_built",
            records=len(graph.records),
            resources=len(graph.resources),
            initial_contents=len(graph.initial_contents),
            driver_init=graph.driver_init_index is not None,
        )
        return graph


def build_capture_graph(buffer: bytes | bytearray, metas: Iterable[RecordMeta]) -> CaptureGraph:
    """Decode every record described by `metas` and link them into a graph.

    Any decode failure or duplicate resource id aborts the whole build.
    """
    builder = CaptureGraphBuilder(buffer)
    for index, meta in enumerate(metas):
        try:
            record = decode_record(buffer, meta, index=index)
        except DecodeError as exc:
            exc.record_index = index
            logger.warning(
                "record_decode_failed",
                index=index,
                type_tag=int(meta.type_tag),
                offset=int(meta.offset),
                error=str(exc),
            )
            raise
        builder.add(record)
    return builder.finish()
