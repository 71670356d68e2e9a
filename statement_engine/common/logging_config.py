"""
Structured JSON logging.

Every record is one JSON object. While an extraction is running, the
records also carry that extraction's context (its id and, once known,
the bank format) so a host can group the lines of one pass together.
"""
import datetime
import json
import logging
import os
import uuid
from contextlib import contextmanager
from threading import local
from typing import Any, Dict, Iterator, List, Optional

_context = local()

GLOBAL_CONTEXT = "GLOBAL"


def _context_fields() -> Dict[str, Any]:
    return getattr(_context, "fields", None) or {}


class JSONFormatter(logging.Formatter):
    """
    Custom formatter that outputs JSON records.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "extraction_id": GLOBAL_CONTEXT,
        }
        log_data.update(_context_fields())

        if isinstance(getattr(record, "extra_fields", None), dict):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Decimals and dates in extra fields
        return json.dumps(log_data, ensure_ascii=False, default=str)


def _build_handlers(log_file: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        if os.path.dirname(log_file):
            os.makedirs(os.path.dirname(log_file), exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
    return handlers


def setup_logging(log_level: int = logging.INFO, log_file: Optional[str] = None):
    """
    Route all logging through JSONFormatter.

    Only entry points (the CLI, a host service) call this; engine modules
    just ask for loggers. Replaces any handlers already on the root logger.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    for handler in _build_handlers(log_file):
        handler.setFormatter(JSONFormatter())
        root_logger.addHandler(handler)

    logging.info("Logging infrastructure initialized.", extra={"extra_fields": {"log_file": log_file}})


@contextmanager
def extraction_context(extraction_id: Optional[str] = None) -> Iterator[str]:
    """
    Scope log records to one extraction.

    Yields the extraction id (a fresh uuid hex unless one is given). The
    enclosing context, if any, is restored on exit.
    """
    previous = getattr(_context, "fields", None)
    fields = {"extraction_id": extraction_id or uuid.uuid4().hex}
    _context.fields = fields
    try:
        yield fields["extraction_id"]
    finally:
        _context.fields = previous


def bind_context(**fields: Any) -> None:
    """Add fields to the current extraction context. No-op outside one."""
    current = getattr(_context, "fields", None)
    if current is not None:
        current.update(fields)


def get_extraction_id() -> Optional[str]:
    return _context_fields().get("extraction_id")


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Adapter that turns keyword arguments into JSON fields.

        logger.info("Layout detected", bank_id="us_bank", matches=4)

    The caller's own `extra` dict is copied, never mutated.
    """
    _LOG_KWARGS = frozenset({'exc_info', 'stack_info', 'stacklevel', 'extra'})

    def process(self, msg: Any, kwargs: Any) -> tuple:
        extra = dict(kwargs.get("extra") or {})
        extra_fields = dict(extra.get("extra_fields") or {})

        log_kwargs = {}
        for key, value in kwargs.items():
            if key in self._LOG_KWARGS:
                log_kwargs[key] = value
            else:
                extra_fields[key] = value

        extra["extra_fields"] = extra_fields
        log_kwargs["extra"] = extra
        return msg, log_kwargs


def get_logger(name: str) -> StructuredLoggerAdapter:
    return StructuredLoggerAdapter(logging.getLogger(name), {})
