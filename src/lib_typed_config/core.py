"""Composition root for ``lib_typed_config``.

Purpose
-------
Provide the user-facing entry points: collect sources in override order, run
the build engine, and render built configuration as plain data for display.

Contents
--------
* :class:`ConfigBuilder` – fluent collector of sources; later sources win.
* :func:`read_config` – one-call helper over :class:`ConfigBuilder`.
* :func:`as_plain_data` / :func:`to_json` – turn built dataclasses into
  JSON-compatible data with secrets redacted.

System Role
-----------
Connects adapters (inline text, files, dotenv, environment) with the
application engine in :mod:`lib_typed_config.application.merge`. It is the
canonical place to change how override order maps onto engine priority.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from datetime import date, time, timedelta
from decimal import Decimal
from enum import Enum
from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network
from pathlib import PurePath
from typing import Any, Generic, TypeVar
from uuid import UUID

from .application.merge import DefaultSource, build_from_sources
from .application.ports import Source
from .domain.secrets import REDACTED, SecretString
from .observability import log_debug

T = TypeVar("T")


class ConfigBuilder(Generic[T]):
    """Collect sources for *target*; each :meth:`override_with` beats earlier ones.

    Why
    ----
    Applications think in layers ("defaults, then the file, then the
    environment"). The engine wants the opposite, highest priority first, so
    this class owns the reversal.

    What
    ----
    With no sources the target is built from defaults alone. Sources are kept
    after :meth:`try_build`, so the same builder can build again later (used by
    :class:`~lib_typed_config.reloading.ReloadingConfig`).

    Examples
    --------
    >>> from .adapters.sources.inline import TomlSource
    >>> builder = ConfigBuilder(dict[str, int])
    >>> _ = builder.override_with(TomlSource('a = 1\\nb = 2')).override_with(TomlSource('b = 20'))
    >>> builder.try_build()
    {'b': 20, 'a': 1}
    """

    def __init__(self, target: Any) -> None:
        self._target = target
        self._sources: list[Source] = []

    @property
    def target(self) -> Any:
        return self._target

    @property
    def sources(self) -> tuple[Source, ...]:
        """Sources in the order they were added (lowest priority first)."""

        return tuple(self._sources)

    def override_with(self, source: Source) -> ConfigBuilder[T]:
        """Add *source* with priority over every source added before it."""

        self._sources.append(source)
        log_debug("source_added", source=repr(source), path=None, position=len(self._sources))
        return self

    def try_build(self) -> T:
        """Build the target; see :func:`~lib_typed_config.application.merge.build_from_sources`."""

        if not self._sources:
            return build_from_sources(self._target, [DefaultSource()])
        return build_from_sources(self._target, reversed(self._sources))

    def __repr__(self) -> str:
        return f"ConfigBuilder({getattr(self._target, '__qualname__', self._target)!s}, sources={len(self._sources)})"


def read_config(target: Any, *sources: Source) -> Any:
    """Build *target* from *sources* listed lowest priority first.

    Examples
    --------
    >>> from .adapters.sources.inline import JsonSource
    >>> read_config(list[int], JsonSource('[1, 2]'), JsonSource('[3]'))
    [3]
    """

    builder: ConfigBuilder[Any] = ConfigBuilder(target)
    for source in sources:
        builder.override_with(source)
    return builder.try_build()


def as_plain_data(value: Any) -> Any:
    """Convert a built configuration into JSON-compatible data.

    Why
    ----
    Operators need to see what a service would run with; secrets must stay
    hidden while doing so.

    Examples
    --------
    >>> from dataclasses import make_dataclass
    >>> Creds = make_dataclass("Creds", [("user", str), ("password", SecretString)])
    >>> as_plain_data(Creds("admin", SecretString("hunter2")))
    {'user': 'admin', 'password': '[redacted]'}
    """

    if isinstance(value, SecretString):
        return REDACTED
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {field.name: as_plain_data(getattr(value, field.name)) for field in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return as_plain_data(value.value)
    if isinstance(value, Mapping):
        return {str(as_plain_data(key)): as_plain_data(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [as_plain_data(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted((as_plain_data(item) for item in value), key=repr)
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (Decimal, PurePath, UUID, IPv4Address, IPv6Address, IPv4Network, IPv6Network)):
        return str(value)
    return value


def to_json(value: Any, *, indent: int | None = None) -> str:
    """Serialise a built configuration to JSON with secrets redacted.

    Examples
    --------
    >>> to_json({"port": 8080, "hosts": ("a", "b")})
    '{"port":8080,"hosts":["a","b"]}'
    """

    return json.dumps(as_plain_data(value), indent=indent, separators=(",", ":"), ensure_ascii=False)
