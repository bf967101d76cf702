"""Structured text and file loaders.

Purpose
-------
Convert TOML, JSON, and YAML text (inline or on disk) into plain Python data
that schemas can load into builders. Loaders are small wrappers around
``tomllib``/``json``/``yaml.safe_load`` so error handling and observability
live in one place.

Contents
--------
* :class:`BaseFileLoader` – shared file reading plus the ``load``/``loads`` pair.
* :class:`TOMLFileLoader` – loader for the canonical TOML format.
* :class:`JSONFileLoader` – JSON loader; the document may be any JSON value.
* :class:`YAMLFileLoader` – optional YAML loader (only when PyYAML is installed).
* :func:`loader_for` – choose a loader by name or file suffix.

System Role
-----------
Used by the inline sources in :mod:`lib_typed_config.adapters.sources.inline`
and by :class:`~lib_typed_config.adapters.sources.file.FileSource`. Loaders do
not validate shape; the target schema does that.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Final

from ...domain.errors import InvalidFormat, NotFound
from ...observability import log_debug, log_error

try:
    import yaml  # type: ignore[import-not-found]
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    yaml = None  # type: ignore[assignment]


class BaseFileLoader:
    """Common utilities shared by the structured loaders."""

    format: str = "text"

    def _read(self, path: str | Path) -> str:
        """Read *path* as UTF-8 text, raising :class:`NotFound` when the file is missing.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile(delete=False)
        >>> _ = tmp.write(b"key = 'value'")
        >>> tmp.close()
        >>> BaseFileLoader()._read(tmp.name)[:3]
        'key'
        >>> Path(tmp.name).unlink()
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise NotFound(f"Configuration file not found: {path}")
        payload = file_path.read_bytes()
        log_debug("config_file_read", source="file", path=str(path), size=len(payload))
        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidFormat(f"File {path} is not valid UTF-8: {exc}") from exc

    def load(self, path: str | Path) -> object:
        """Read and parse the file at *path*."""

        return self.loads(self._read(path), origin=str(path))

    def loads(self, text: str, *, origin: str = "<inline>") -> object:
        """Parse *text*; *origin* names the input in error messages."""

        try:
            data = self._parse(text)
        except InvalidFormat as exc:
            log_error("config_text_invalid", source=origin, path=None, format=self.format, error=str(exc))
            raise InvalidFormat(f"Invalid {self.format.upper()} in {origin}: {exc}") from exc
        log_debug("config_text_loaded", source=origin, path=None, format=self.format)
        return data

    def _parse(self, text: str) -> object:
        raise NotImplementedError


class TOMLFileLoader(BaseFileLoader):
    """Load TOML documents using the standard library parser.

    Examples
    --------
    >>> TOMLFileLoader().loads('key = "value"')["key"]
    'value'
    """

    format = "toml"

    def _parse(self, text: str) -> object:
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise InvalidFormat(str(exc)) from exc


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents.

    Examples
    --------
    >>> JSONFileLoader().loads('{"enabled": true}')["enabled"]
    True
    """

    format = "json"

    def _parse(self, text: str) -> object:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise InvalidFormat(str(exc)) from exc


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents when PyYAML is available.

    An empty document parses to ``None``, which schemas treat as "no data".

    Raises
    ------
    NotFound
        When PyYAML is not installed.
    """

    format = "yaml"

    def _parse(self, text: str) -> object:
        if yaml is None:
            raise NotFound("PyYAML is required for YAML configuration support")
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:  # type: ignore[attr-defined]
            raise InvalidFormat(str(exc)) from exc


_BY_NAME: Final[dict[str, type[BaseFileLoader]]] = {
    "toml": TOMLFileLoader,
    "json": JSONFileLoader,
    "yaml": YAMLFileLoader,
    "yml": YAMLFileLoader,
}


def loader_for(path: str | Path, format: str | None = None) -> BaseFileLoader:
    """Return the loader for *format*, or for *path*'s suffix when no format is given.

    Examples
    --------
    >>> type(loader_for("settings.toml")).__name__
    'TOMLFileLoader'
    >>> type(loader_for("settings.conf", "json")).__name__
    'JSONFileLoader'
    """

    key = (format or Path(path).suffix.lstrip(".")).lower()
    try:
        return _BY_NAME[key]()
    except KeyError:
        raise InvalidFormat(f"Unsupported configuration format for {path}: {key or '<none>'}") from None
