"""Sources backed by in-memory TOML, JSON, or YAML text.

Purpose
-------
Let applications ship defaults as a literal string next to their dataclasses,
and let tests feed configuration without touching the filesystem.

Contents
--------
* :class:`TomlSource`, :class:`JsonSource`, :class:`YamlSource` – one class per
  format sharing :class:`TextSource`.

System Role
-----------
Parsing is delegated to :mod:`lib_typed_config.adapters.file_loaders.structured`;
the parsed data is handed to the target schema unchanged.
"""

from __future__ import annotations

from typing import Any, Self

from ...application.ports import BuilderSchema
from ...domain.builders import ConfigurationBuilder
from ..file_loaders.structured import BaseFileLoader, JSONFileLoader, TOMLFileLoader, YAMLFileLoader


class TextSource:
    """Parse a text document with :attr:`loader` and load it into the schema.

    The text itself never appears in ``repr`` because it may hold credentials;
    pass *name* to make log lines and error messages easier to trace.
    """

    loader: type[BaseFileLoader] = BaseFileLoader

    def __init__(self, text: str, *, name: str | None = None) -> None:
        self._text = text
        self._name = name
        self._allow_secrets = False

    def allow_secrets(self) -> Self:
        """Permit secret fields in this document and return ``self``."""

        self._allow_secrets = True
        return self

    def allows_secrets(self) -> bool:
        return self._allow_secrets

    def provide(self, schema: BuilderSchema[Any]) -> ConfigurationBuilder[Any]:
        data = self.loader().loads(self._text, origin=repr(self))
        if data is None:
            return schema.empty()
        return schema.load(data)

    def __repr__(self) -> str:
        label = repr(self._name) if self._name is not None else "<inline>"
        return f"{type(self).__name__}({label})"


class TomlSource(TextSource):
    """TOML text source.

    Examples
    --------
    >>> from ...application.schema import schema_for
    >>> TomlSource('port = 8080').provide(schema_for(dict[str, int])).try_build()
    {'port': 8080}
    """

    loader = TOMLFileLoader


class JsonSource(TextSource):
    """JSON text source; the document may be any JSON value, not just an object."""

    loader = JSONFileLoader


class YamlSource(TextSource):
    """YAML text source (requires the ``yaml`` extra)."""

    loader = YAMLFileLoader
