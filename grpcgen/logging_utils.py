# © Copyright 2025-2026, Query.Farm LLC - https://query.farm
# SPDX-License-Identifier: Apache-2.0

"""JSON formatter for generator diagnostics.

:class:`JsonFormatter` renders each record as one JSON object per line on
stderr.  ``proto_file``, set through ``extra`` on per-file records, is
promoted next to the logger name; other ``extra`` fields follow the message.

Stdout is reserved for the ``CodeGeneratorResponse`` when running as a
``protoc`` plugin, so handlers configured by ``grpcgen.cli`` always write to
stderr.
"""

from __future__ import annotations

import json
import logging

__all__ = ["JsonFormatter"]

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()) | {
    "message",
    "asctime",
}

# Keys the formatter writes itself, in output order.
_HEADER_KEYS: tuple[str, ...] = ("timestamp", "level", "logger", "proto_file", "message")
_TRAILER_KEYS: frozenset[str] = frozenset({"exception", "stack_info"})


class JsonFormatter(logging.Formatter):
    """Single-line JSON formatter.

    Every object starts with ``timestamp``, ``level`` and ``logger``,
    followed by ``proto_file`` when the record names the ``.proto`` file it
    concerns, then ``message``.  None of these can be overwritten by an
    ``extra`` field of the same name.  Remaining ``extra`` fields follow;
    exception and stack information close the object under ``exception``
    and ``stack_info``.  Values that are not JSON-serializable are written
    with ``str()``.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a single-line JSON string."""
        record.message = record.getMessage()
        obj: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
        }
        proto_file = record.__dict__.get("proto_file")
        if proto_file is not None:
            obj["proto_file"] = proto_file
        obj["message"] = record.message
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and key not in _HEADER_KEYS and key not in _TRAILER_KEYS:
                obj[key] = value
        if record.exc_info and record.exc_info[1]:
            obj["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            obj["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(obj, default=str)
