"""Mount another source below a field path of the target.

Purpose
-------
Feed a sub-record from a source that only knows that sub-record, e.g. a
mounted ``database.toml`` for the ``database`` field, or a secrets file for
``services.billing.credentials``.

Contents
--------
* :class:`OffsetSource` – wraps an inner source and a path of field names.
"""

from __future__ import annotations

from typing import Any, Sequence

from ...application.ports import BuilderSchema, Source
from ...application.schema import OptionSchema, RecordSchema, SecretSchema
from ...domain.builders import ConfigurationBuilder, OptionBuilder
from ...domain.errors import InvalidFormat
from ...domain.secrets import SecretBuilder


class OffsetSource:
    """Place the inner source's builder at *path*; every other field stays empty.

    The secret permission is the inner source's. Path segments name record
    fields by attribute name or renamed key.

    Examples
    --------
    >>> from .inline import TomlSource
    >>> repr(OffsetSource(TomlSource('port = 1'), "server.http"))
    "OffsetSource(TomlSource(<inline>), path='server.http')"
    """

    def __init__(self, inner: Source, path: str | Sequence[str]) -> None:
        self._inner = inner
        self._path = tuple(path.split(".")) if isinstance(path, str) else tuple(path)

    def allows_secrets(self) -> bool:
        return self._inner.allows_secrets()

    def provide(self, schema: BuilderSchema[Any]) -> ConfigurationBuilder[Any]:
        return self._place(schema, self._path)

    def _place(self, schema: Any, path: tuple[str, ...]) -> ConfigurationBuilder[Any]:
        if not path:
            return self._inner.provide(schema)
        if isinstance(schema, SecretSchema):
            return SecretBuilder(self._place(schema.inner, path))
        if isinstance(schema, OptionSchema):
            return OptionBuilder.some(self._place(schema.inner, path))
        if not isinstance(schema, RecordSchema):
            raise InvalidFormat(f"Cannot offset into {schema!r} at `{path[0]}`")
        head, rest = path[0], path[1:]
        try:
            name = schema.field_name(head)
        except KeyError:
            raise InvalidFormat(f"{schema.target.__name__} has no field `{head}`") from None
        return schema.empty().replace(name, self._place(schema.field_schema(name), rest))

    def __repr__(self) -> str:
        return f"OffsetSource({self._inner!r}, path={'.'.join(self._path)!r})"
