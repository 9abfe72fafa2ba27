"""Run-scoped logging for sweeps: one run id per process, optional JSON lines."""
import functools
import json
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Optional

_RUN_ID: Optional[str] = None

# extras passed by the sweep pipeline via ``logging.info(..., extra=...)``
SWEEP_FIELDS = ("region", "resource_type", "resource_id", "action")

TEXT_FORMAT = "%(asctime)s [%(levelname)s] [%(run_id)s] %(message)s"


def get_run_id() -> str:
    global _RUN_ID
    if _RUN_ID is None:
        _RUN_ID = uuid.uuid4().hex[:8]
    return _RUN_ID


class RunIdFilter(logging.Filter):
    """Stamps every record passing the handler with the run id."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "run_id", None):
            record.run_id = get_run_id()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, carrying the sweep fields that were set."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "run_id": getattr(record, "run_id", None) or get_run_id(),
            "message": record.getMessage(),
        }
        entry.update({k: getattr(record, k) for k in SWEEP_FIELDS if hasattr(record, k)})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(verbosity: int = 0, json_format: bool = False) -> None:
    """Replace the root handlers with a single stderr handler.

    ``verbosity`` 0 logs warnings, 1 adds info, 2 or more adds debug.
    botocore never logs below INFO.
    """
    level = logging.WARNING if verbosity <= 0 else logging.INFO if verbosity == 1 else logging.DEBUG

    handler = logging.StreamHandler()
    handler.addFilter(RunIdFilter())
    handler.setFormatter(JSONFormatter() if json_format
                         else logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    logging.getLogger("botocore").setLevel(max(level, logging.INFO))


def timed(func):
    """Log how long each call of ``func`` took, even when it raises."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        started = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            logging.info(f"{func.__name__} took {time.perf_counter() - started:.2f}s")
    return wrapper
