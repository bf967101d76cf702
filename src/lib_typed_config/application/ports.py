"""Application-layer ports describing what sources and schemas must provide.

Purpose
-------
Define the structural contracts between the build engine and the adapters that
feed it, so the engine never depends on a concrete source implementation.

Contents
--------
* :class:`BuilderSchema` – creates empty or populated builders for one type.
* :class:`Source` – a configuration input with a secret-permission flag.

System Role
-----------
These protocols enforce Dependency Inversion (DIP). Adapters under
:mod:`lib_typed_config.adapters` implement :class:`Source`; schemas from
:mod:`lib_typed_config.application.schema` implement :class:`BuilderSchema`.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

from ..domain.builders import ConfigurationBuilder

T = TypeVar("T")


@runtime_checkable
class BuilderSchema(Protocol[T]):
    """Produce builders for a single target type.

    Why
    ----
    Sources parse text into generic Python data; only the schema knows how that
    data maps onto the target type's builders.
    """

    def empty(self) -> ConfigurationBuilder[T]:
        """Return a builder holding no data."""

    def load(self, raw: object, location: tuple[str, ...] = ()) -> ConfigurationBuilder[T]:
        """Turn parsed *raw* data into a builder or raise ``InvalidFormat``."""


@runtime_checkable
class Source(Protocol):
    """A provider of partial configuration data.

    Why
    ----
    The engine treats all inputs alike: ask for a builder, check secrets unless
    the source is trusted with them, merge.
    """

    def allows_secrets(self) -> bool:
        """Return ``True`` when this source may supply secret-tagged data."""

    def provide(self, schema: BuilderSchema[Any]) -> ConfigurationBuilder[Any]:
        """Return this source's builder for *schema*; may raise any exception."""
