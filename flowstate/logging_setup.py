# flowstate/logging_setup.py

from __future__ import annotations

import logging
import sys


class _ContextFormatter(logging.Formatter):
    """Append `extra={...}` context to the event name, key=value style."""

    _RESERVED = set(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = {k: v for k, v in vars(record).items() if k not in self._RESERVED}
        if not context:
            return base
        pairs = " ".join(f"{k}={v}" for k, v in sorted(context.items()))
        return f"{base} {pairs}"


def setup_logging(level: str | int = logging.INFO) -> None:
    """
    Configure root logging with a single stderr handler.

    Call this ONCE, before the server starts. Re-running replaces the
    handler instead of stacking duplicates.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = _ContextFormatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    # uvicorn's access log duplicates our request middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.captureWarnings(True)
