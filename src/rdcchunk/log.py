"""Structured logging for capture loading and patching.

structlog events are routed through stdlib `logging`, so library users can
attach their own handlers; the CLI calls `configure_logging` once at startup.

Events emitted by this package:

- ``capture_graph_built`` (info): record, resource and initial-contents counts.
- ``record_decode_failed`` (warning): index, tag and offset of the failing record.
- ``record_parent_unresolved`` (debug): parent id not defined by an earlier record.
- ``device_name_patched`` (info) / ``device_name_patch_skipped`` (debug).
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

LOGGER_PREFIX = "rdcchunk"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_logger(name: str) -> Any:
    """Lazy logger for a module of this package, tagged with its short module name.

    The logger is only assembled on first use, so `configure_logging` may run
    after the module importing it.
    """
    return structlog.get_logger(name, component=name.removeprefix(f"{LOGGER_PREFIX}."))


def _drop_formatter_keys(logger: logging.Logger | None, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.pop("_record", None)
    event_dict.pop("_from_structlog", None)
    return event_dict


def _processors(json_output: bool) -> tuple[list[Any], list[Any]]:
    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_output:
        renderer: list[Any] = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=False)]
    return shared, [_drop_formatter_keys, *renderer]


def configure_logging(*, level: str = "WARNING", json_output: bool = False) -> None:
    """Send package events to stderr at `level`; raises ValueError for unknown levels."""
    name = level.upper()
    if name not in _LEVELS:
        raise ValueError(f"unknown log level: {level!r} (expected one of {', '.join(_LEVELS)})")

    shared, final = _processors(json_output)
    structlog.configure(
        processors=[*shared, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ProcessorFormatter(processors=final, foreign_pre_chain=shared))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(name)
