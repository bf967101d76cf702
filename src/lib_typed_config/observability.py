"""Structured logging for configuration builds.

Purpose
    Every build step (a source providing data, a secret being refused, a
    reload) is logged as a short event name plus a ``context`` mapping, so a
    log pipeline can filter by source or key path without parsing messages.

Contents
    - ``TRACE_ID``: context variable carrying the current trace identifier.
    - ``get_logger``: the package logger (silent until the host adds handlers).
    - ``bind_trace_id`` / ``trace_scope``: set the trace identifier globally for
      the context or for one block.
    - ``log_debug`` / ``log_info`` / ``log_error``: emit one structured event.
    - ``make_event``: build the ``source``/``path`` fields shared by all events.

System Integration
    The engine, the sources and the reloader log through this module. Secret
    values are never passed in; events name paths and source identities only.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Final, Iterator, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_typed_config_trace_id", default=None)
"""Identifier attached to every event emitted in the current context."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_typed_config")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Return the package logger so applications may attach handlers.

    Why
        A library must not print on its own; the :class:`logging.NullHandler`
        keeps it quiet until the host configures logging.
    """

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the trace identifier for the current context.

    Examples
    --------
    >>> bind_trace_id('abc123')
    >>> TRACE_ID.get()
    'abc123'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


@contextmanager
def trace_scope(trace_id: str) -> Iterator[str]:
    """Bind *trace_id* for the duration of the block, then restore the previous one.

    Examples
    --------
    >>> with trace_scope("reload-1"):
    ...     TRACE_ID.get()
    'reload-1'
    >>> TRACE_ID.get() is None
    True
    """

    token = TRACE_ID.set(trace_id)
    try:
        yield trace_id
    finally:
        TRACE_ID.reset(token)


def log_debug(message: str, **fields: Any) -> None:
    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    _emit(logging.ERROR, message, fields)


def make_event(source: str, path: object | None, payload: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Return the fields for one build event.

    *source* is the identity of a source (its ``repr``) or a phase name such as
    ``"final"``. *path* is a :class:`~lib_typed_config.domain.path.KeyPath`, a
    file path, or ``None``; it is rendered with ``str``. Extra *payload* keys
    are added after the two fixed ones.

    Examples
    --------
    >>> make_event("EnvSource(prefix='APP_')", None, {"keys": 3})
    {'source': "EnvSource(prefix='APP_')", 'path': None, 'keys': 3}
    """

    event: dict[str, Any] = {"source": source, "path": None if path is None else str(path)}
    if payload:
        event.update(payload)
    return event


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    context = {"trace_id": TRACE_ID.get(), **fields}
    _LOGGER.log(level, message, extra={"context": context})
