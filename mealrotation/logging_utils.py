"""
Shared logging setup.

One line per record:
<RunId>|<Date>|<Time>|<Level>|<Module.Func>|<Detail>
"""

from __future__ import annotations

import datetime
import logging
import uuid

RUN_ID: str = uuid.uuid4().hex[:8]


class PipeFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.datetime.fromtimestamp(record.created)
        run_id = getattr(record, "run_id", RUN_ID)
        line = (
            f"{run_id}|{dt.strftime('%Y-%m-%d')}|{dt.strftime('%H:%M:%S')}|"
            f"{record.levelname}|{record.module}.{record.funcName}|{record.getMessage()}"
        )
        if record.exc_info:
            line = f"{line} | EXC={self.formatException(record.exc_info)!r}"
        return line


def init_logging(level: int = logging.INFO) -> None:
    """
    Attach the pipe formatter to the package logger once.

    Safe to call repeatedly (REPLs, tests); a second call only adjusts the level.
    """
    base = logging.getLogger("mealrotation")
    base.setLevel(level)
    if any(isinstance(h.formatter, PipeFormatter) for h in base.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(PipeFormatter())
    base.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the package namespace.

    Usage:
        logger = get_logger(__name__)
        logger.info("Generated %d assignments", n)
    """
    if not name.startswith("mealrotation"):
        name = f"mealrotation.{name}"
    return logging.getLogger(name)
