from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .graph import CaptureGraph
from .records import Record


@dataclass(frozen=True, slots=True)
class ListingRow:
    index: int
    event_index: int
    type_name: str
    type_tag: int
    offset: int
    length: int
    resource_ids: str
    names: str


def _binding_columns(graph: CaptureGraph, record: Record) -> tuple[str, str]:
    ids: list[str] = []
    names: list[str] = []
    for resource_id, resource in graph.referenced_resources(record):
        ids.append(str(resource_id))
        if resource is not None:
            names.append(resource.display_name)
    return ",".join(ids), ", ".join(names)


def listing_row(graph: CaptureGraph, record: Record) -> ListingRow:
    if record.referenced_resource_ids():
        resource_ids, names = _binding_columns(graph, record)
    else:
        resource_id = graph.resolved_resource_id(record)
        resource_ids = "" if resource_id == 0 else str(resource_id)
        names = graph.resolved_name(record)
    meta = record.meta
    return ListingRow(
        index=record.index,
        event_index=record.event_index,
        type_name=record.type_name,
        type_tag=record.type_tag,
        offset=0 if meta is None else int(meta.offset),
        length=0 if meta is None else int(meta.length),
        resource_ids=resource_ids,
        names=names,
    )


def listing_rows(graph: CaptureGraph) -> Iterator[ListingRow]:
    for record in graph:
        yield listing_row(graph, record)


def format_listing(graph: CaptureGraph) -> str:
    lines = [f"{'index':<6} {'event':<8}  {'chunk':<30}  {'tag':<6}  {'offset':<17}  {'length':<12} {'resource':<12} name"]
    for row in listing_rows(graph):
        lines.append(
            f"{row.index:<6} {row.event_index:<8}  {row.type_name:<30}  {row.type_tag:<6}  "
            f"offset:{row.offset:<10}  len:{row.length:<8} {row.resource_ids:<12} {row.names}".rstrip()
        )
    return "\n".join(lines) + "\n"
