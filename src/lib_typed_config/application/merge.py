"""Application-layer build engine.

Purpose
-------
Turn an ordered collection of sources into one typed configuration value:
ask each source for its builder, refuse secrets from sources that are not
trusted with them, fold the builders together, and build the result.

Contents
--------
* :func:`build_from_sources` – the engine entry point.
* :class:`DefaultSource` – contributes an empty builder so field defaults apply.
* :func:`_provide` – per-source stanza wrapping failures and running the
  secret check.

System Role
-----------
Driven by :class:`lib_typed_config.core.ConfigBuilder`, which passes sources in
*priority order* (first wins). The engine is free of I/O; sources do the
reading.
"""

from __future__ import annotations

from typing import Any, Iterable

from ..domain.builders import ConfigurationBuilder
from ..domain.errors import MissingValue, SourceError, UnexpectedSecret
from ..observability import log_debug, log_error, log_info, make_event
from .ports import BuilderSchema, Source
from .schema import schema_for


class DefaultSource:
    """Source that knows nothing and therefore lets declared defaults win.

    Examples
    --------
    >>> from .schema import schema_for
    >>> DefaultSource().provide(schema_for(int)).contains_non_secret_data()
    False
    """

    def allows_secrets(self) -> bool:
        return True

    def provide(self, schema: BuilderSchema[Any]) -> ConfigurationBuilder[Any]:
        return schema.empty()

    def __repr__(self) -> str:
        return "DefaultSource()"


def build_from_sources(target: Any, sources: Iterable[Source]) -> Any:
    """Build *target* from *sources*, earlier sources taking priority.

    Why
    ----
    Keeps precedence, secret policy, and error propagation in one place no
    matter which sources a caller combines.

    What
    ----
    For each source: call ``provide`` (any exception becomes
    :class:`SourceError`), run the secret check unless the source allows
    secrets (annotating :class:`UnexpectedSecret` with the source), then merge
    the accumulated builder with the new one so the accumulated side keeps
    priority. Finally ``try_build`` the merged builder.

    Parameters
    ----------
    target:
        Type annotation to build (usually a dataclass).
    sources:
        Sources ordered from highest to lowest priority.

    Raises
    ------
    MissingValue
        When *sources* is empty or required data is absent.
    SourceError, UnexpectedSecret, FailedTryInto
        As described above.

    Examples
    --------
    >>> build_from_sources(int | None, [DefaultSource()]) is None
    True
    """

    schema = schema_for(target)
    accumulated: ConfigurationBuilder[Any] | None = None
    count = 0
    for source in sources:
        builder = _provide(source, schema)
        accumulated = builder if accumulated is None else accumulated.merge(builder)
        count += 1
    if accumulated is None:
        raise MissingValue()
    value = accumulated.try_build()
    log_info("configuration_built", **make_event("final", None, {"target": _describe(target), "sources": count}))
    return value


def _provide(source: Source, schema: BuilderSchema[Any]) -> ConfigurationBuilder[Any]:
    identity = repr(source)
    try:
        builder = source.provide(schema)
    except Exception as exc:  # noqa: BLE001 - sources may fail in arbitrary ways
        log_error("source_failed", **make_event(identity, None, {"error": str(exc)}))
        raise SourceError(exc, identity) from exc
    if not source.allows_secrets():
        try:
            builder.contains_non_secret_data()
        except UnexpectedSecret as exc:
            exc.source = identity
            log_error("secret_rejected", **make_event(identity, exc.path))
            raise
    log_debug("source_provided", **make_event(identity, None, {"allows_secrets": source.allows_secrets()}))
    return builder


def _describe(target: Any) -> str:
    return getattr(target, "__qualname__", None) or repr(target)
