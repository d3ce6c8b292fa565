from __future__ import annotations

from pathlib import Path

import msgspec
import typer

from .config import DEFAULT_LOG_LEVEL, CaptureInputs
from .errors import CaptureError
from .graph import CaptureGraph, build_capture_graph
from .listing import format_listing
from .log import configure_logging

app = typer.Typer(add_completion=False)

_META_HELP = "metadata table JSON (default: <buffer>.chunks.json)"


@app.callback()
def cli_root(
    log_level: str = typer.Option(DEFAULT_LOG_LEVEL, "--log-level", help="DEBUG|INFO|WARNING|ERROR"),
    json_logs: bool = typer.Option(False, "--json-logs", help="emit logs as JSON lines"),
) -> None:
    """Inspect and patch decompressed capture chunk buffers."""
    try:
        configure_logging(level=log_level, json_output=json_logs)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


def _load_graph(inputs: CaptureInputs) -> CaptureGraph:
    try:
        buffer = inputs.read_buffer()
        metas = inputs.read_metas()
        return build_capture_graph(buffer, metas)
    except OSError as exc:
        typer.echo(f"cannot read capture: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except CaptureError as exc:
        typer.echo(f"failed to load capture: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command("dump")
def cmd_dump(
    buffer_path: Path = typer.Argument(..., help="decompressed chunk buffer"),
    meta: Path | None = typer.Option(None, "--meta", help=_META_HELP),
) -> None:
    """Print one line per decoded record."""
    graph = _load_graph(CaptureInputs.for_buffer(buffer_path, meta))
    typer.echo(format_listing(graph), nl=False)


@app.command("resource")
def cmd_resource(
    buffer_path: Path = typer.Argument(..., help="decompressed chunk buffer"),
    resource_id: int = typer.Argument(..., min=1, help="resource id"),
    meta: Path | None = typer.Option(None, "--meta", help=_META_HELP),
) -> None:
    """Print a resource record with its children and initial contents as JSON."""
    graph = _load_graph(CaptureInputs.for_buffer(buffer_path, meta))
    record = graph.record_by_resource_id(resource_id)
    if record is None:
        typer.echo(f"resource {resource_id} not found", err=True)
        raise typer.Exit(code=1)
    doc = {
        "record": record,
        "type_name": record.type_name,
        "children": graph.children_of(record),
        "initial_contents": graph.initial_contents_for(resource_id),
    }
    typer.echo(msgspec.json.format(msgspec.json.encode(doc)).decode("utf-8"))


@app.command("set-device-name")
def cmd_set_device_name(
    buffer_path: Path = typer.Argument(..., help="decompressed chunk buffer"),
    name: str = typer.Argument(..., help="new device name"),
    meta: Path | None = typer.Option(None, "--meta", help=_META_HELP),
    out: Path | None = typer.Option(None, "--out", help="write the patched buffer here (default: in place)"),
) -> None:
    """Rewrite the driver-init device name without re-encoding the buffer."""
    inputs = CaptureInputs.for_buffer(buffer_path, meta)
    graph = _load_graph(inputs)
    try:
        patched = graph.set_device_name(name)
    except CaptureError as exc:
        typer.echo(f"cannot set device name: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    if not patched:
        typer.echo("no driver init record; buffer unchanged")
        return
    dest = out if out is not None else inputs.buffer_path
    dest.write_bytes(bytes(graph.buffer))
    typer.echo(f"device name set to {name!r} in {dest}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
