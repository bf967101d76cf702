"""Source reading a TOML, JSON, or YAML file from disk.

Purpose
-------
Give deployments a file-based layer (``/etc/app/config.toml``, a mounted
secrets file) with the format picked from the suffix unless stated.

Contents
--------
* :class:`FileSource` – reads on every :meth:`provide` call so reloading picks
  up edits.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ...application.ports import BuilderSchema
from ...domain.builders import ConfigurationBuilder
from ...observability import log_debug
from ..file_loaders.structured import loader_for


class FileSource:
    """Read a structured configuration file.

    Parameters
    ----------
    path:
        File to read.
    format:
        ``"toml"``, ``"json"``, or ``"yaml"``; inferred from the suffix when omitted.
    allow_missing:
        When ``True`` a missing file contributes no data instead of failing.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> from ...application.schema import schema_for
    >>> tmp = TemporaryDirectory()
    >>> path = Path(tmp.name) / 'app.json'
    >>> _ = path.write_text('{"workers": 4}', encoding='utf-8')
    >>> FileSource(path).provide(schema_for(dict[str, int])).try_build()
    {'workers': 4}
    >>> FileSource(Path(tmp.name) / 'absent.toml', allow_missing=True).provide(schema_for(int)).contains_non_secret_data()
    False
    >>> tmp.cleanup()
    """

    def __init__(self, path: str | Path, *, format: str | None = None, allow_missing: bool = False) -> None:
        self._path = Path(path)
        self._loader = loader_for(self._path, format)
        self._allow_missing = allow_missing
        self._allow_secrets = False

    @property
    def path(self) -> Path:
        return self._path

    def allow_secrets(self) -> FileSource:
        """Permit secret fields in this file and return ``self``."""

        self._allow_secrets = True
        return self

    def allows_secrets(self) -> bool:
        return self._allow_secrets

    def provide(self, schema: BuilderSchema[Any]) -> ConfigurationBuilder[Any]:
        if self._allow_missing and not self._path.is_file():
            log_debug("config_file_missing", source=repr(self), path=str(self._path))
            return schema.empty()
        data = self._loader.load(self._path)
        if data is None:
            return schema.empty()
        return schema.load(data)

    def __repr__(self) -> str:
        return f"FileSource({str(self._path)!r})"
