"""
logfmt output for the EVA MCP server.

The server speaks MCP over stdio, so every log line goes to stderr. Request
records from EvaClient (`eva.request`) and tool records from the registry
(`tool_call`) carry their context as LogRecord extras; the formatter prints
the known ones and skips the rest.
"""

import logging
import sys
from typing import Any

LOG_EXTRA_FIELDS = (
    "tool",
    "method",
    "url",
    "call_site",
    "callid",
    "status",
    "duration_ms",
    "error",
    "error_type",
)


class LogfmtFormatter(logging.Formatter):
    """
    One line per record: level, logger, event, then whichever of
    LOG_EXTRA_FIELDS the record carries. Request and response bodies are
    never printed, even on debug records.
    """

    def format(self, record: logging.LogRecord) -> str:
        kv: list[str] = [
            f"level={record.levelname.lower()}",
            f"logger={record.name}",
        ]

        msg = record.getMessage()
        if msg:
            kv.append(f"event={self._fmt_val(msg)}")

        for key in LOG_EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is None:
                continue
            kv.append(f"{key}={self._fmt_val(val)}")

        if record.exc_info and record.exc_info[0] is not None:
            kv.append(f"exc_type={record.exc_info[0].__name__}")

        return " ".join(kv)

    @staticmethod
    def _fmt_val(val: Any) -> str:
        if isinstance(val, (int, float, bool)):
            return str(val)
        s = str(val)
        if " " in s or "=" in s or '"' in s:
            s = '"' + s.replace('"', '\\"') + '"'
        return s


def setup_logging(level: str = "INFO") -> None:
    """
    Replace root handlers with a single stderr logfmt handler.
    Unknown level names fall back to INFO.
    """
    root = logging.getLogger()
    # Avoid duplicate handlers if called twice
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(LogfmtFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


__all__ = ["setup_logging", "LogfmtFormatter", "LOG_EXTRA_FIELDS"]
