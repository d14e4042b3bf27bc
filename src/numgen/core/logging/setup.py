from __future__ import annotations

import logging
import sys
from typing import Any, MutableMapping, TextIO

import orjson
import structlog

from numgen.core.config.settings import settings

# Name of the root handler installed by configure_logging (replaced on reconfigure)
_HANDLER_NAME = "numgen"


def _json_serializer(obj: Any, default: Any) -> str:
    return orjson.dumps(obj, default=default).decode("utf-8")


class _StaticFields:
    """Processor stamping fixed fields (e.g. env) on every event."""

    def __init__(self, **fields: Any) -> None:
        self._fields = fields

    def __call__(self, logger: Any, method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        for key, value in self._fields.items():
            event_dict.setdefault(key, value)
        return event_dict


def _shared_processors(env: str) -> list[Any]:
    # Runs for structlog events and for foreign stdlib records alike
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _StaticFields(env=env),
    ]


def configure_logging(
    *,
    level: str | None = None,
    env: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    Route numgen's structlog events and stdlib logging to one JSON stream.

    numgen never calls this itself; applications embedding it call it at
    startup. ``level`` and ``env`` default to the process settings, ``stream``
    to stdout. Calling it again replaces the previous setup.
    """
    level = level or settings.log_level
    env = env or settings.env
    stream = stream or sys.stdout
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared = _shared_processors(env)
    renderer = structlog.processors.JSONRenderer(serializer=_json_serializer)

    structlog.configure(
        processors=[
            *shared,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.dict_tracebacks,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(stream)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    _remove_handler(root)
    root.addHandler(handler)
    root.setLevel(log_level)


def reset_logging() -> None:
    """Undo configure_logging: drop the root handler and structlog config."""
    _remove_handler(logging.getLogger())
    structlog.reset_defaults()


def _remove_handler(root: logging.Logger) -> None:
    for handler in [h for h in root.handlers if h.get_name() == _HANDLER_NAME]:
        root.removeHandler(handler)
        handler.close()


def bind_context(**values: Any) -> None:
    """
    Bind fields to every later log entry in the current context.

    Example:
        bind_context(component="pricing", generator="retry_backoff")
    """
    structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
