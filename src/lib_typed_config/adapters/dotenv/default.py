"""`.env` source.

Purpose
-------
Read ``KEY=value`` pairs from a dotenv file, either an explicit path or the
first ``.env`` found walking upwards from a start directory, and load them with
the same nesting rules as :class:`~lib_typed_config.adapters.env.default.EnvSource`.

Contents
--------
* :class:`DotEnvSource` – the source itself.
* Helper functions (`_iter_candidates`, `_parse_dotenv`, `_strip_quotes`) that
  perform discovery and parsing.

System Role
-----------
Dotenv files typically carry developer overrides and local credentials, so the
source is commonly combined with :meth:`DotEnvSource.allow_secrets`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

from ...application.ports import BuilderSchema
from ...domain.builders import ConfigurationBuilder
from ...domain.errors import InvalidFormat, NotFound
from ...observability import log_debug, log_error
from ..env.default import assign_nested


class DotEnvSource:
    """Load a dotenv file into the target schema.

    Why
    ----
    `.env` files supply secrets and developer overrides. They need deterministic
    discovery and identical nesting semantics to environment variables.

    Parameters
    ----------
    path:
        Explicit file to read; a missing file raises :class:`NotFound`.
    start_dir:
        Directory that seeds the upward search when *path* is not given
        (defaults to the working directory). Finding nothing yields no data.
    prefix:
        Optional key prefix filter, mirroring :class:`EnvSource`.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> path = Path(tmp.name) / '.env'
    >>> _ = path.write_text('SERVICE__TOKEN=secret', encoding='utf-8')
    >>> source = DotEnvSource(start_dir=tmp.name)
    >>> source.collect()["service"]["token"]
    'secret'
    >>> source.last_loaded_path == str(path)
    True
    >>> tmp.cleanup()
    """

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        start_dir: str | Path | None = None,
        prefix: str | None = None,
        separator: str = "__",
    ) -> None:
        self._path = Path(path) if path is not None else None
        self._start_dir = start_dir
        self._prefix = f"{prefix}_" if prefix and not prefix.endswith("_") else (prefix or "")
        self._separator = separator
        self._allow_secrets = False
        self.last_loaded_path: str | None = None

    def allow_secrets(self) -> DotEnvSource:
        """Permit secret fields in this file and return ``self``."""

        self._allow_secrets = True
        return self

    def allows_secrets(self) -> bool:
        return self._allow_secrets

    def provide(self, schema: BuilderSchema[Any]) -> ConfigurationBuilder[Any]:
        collected = self.collect()
        if not collected:
            return schema.empty()
        return schema.load(collected)

    def collect(self) -> dict[str, object]:
        """Return the nested mapping parsed from the selected dotenv file."""

        self.last_loaded_path = None
        candidate = self._locate()
        if candidate is None:
            log_debug("dotenv_not_found", source=repr(self), path=None)
            return {}
        self.last_loaded_path = str(candidate)
        data = _parse_dotenv(candidate, prefix=self._prefix, separator=self._separator)
        log_debug("dotenv_loaded", source=repr(self), path=self.last_loaded_path, keys=sorted(data.keys()))
        return data

    def _locate(self) -> Path | None:
        if self._path is not None:
            if not self._path.is_file():
                raise NotFound(f"Dotenv file not found: {self._path}")
            return self._path
        for candidate in _iter_candidates(self._start_dir):
            if candidate.is_file():
                return candidate
        return None

    def __repr__(self) -> str:
        if self._path is not None:
            return f"DotEnvSource({str(self._path)!r})"
        return f"DotEnvSource(start_dir={None if self._start_dir is None else str(self._start_dir)!r})"


def _iter_candidates(start_dir: str | Path | None) -> Iterable[Path]:
    """Yield candidate dotenv paths walking from ``start_dir`` to filesystem root.

    Examples
    --------
    >>> next(_iter_candidates('.')).name
    '.env'
    """

    base = Path(start_dir) if start_dir else Path.cwd()
    for directory in [base, *base.parents]:
        yield directory / ".env"


def _parse_dotenv(path: Path, *, prefix: str = "", separator: str = "__") -> dict[str, object]:
    """Parse ``path`` into a nested dictionary, raising ``InvalidFormat`` on malformed lines.

    Examples
    --------
    >>> import os
    >>> tmp = Path('example.env')
    >>> body = os.linesep.join(['FEATURE=true', 'export SERVICE__TIMEOUT=10']) + os.linesep
    >>> _ = tmp.write_text(body, encoding='utf-8')
    >>> parsed = _parse_dotenv(tmp)
    >>> parsed["service"]["timeout"]
    '10'
    >>> tmp.unlink()
    """

    result: dict[str, object] = {}
    with path.open("r", encoding="utf-8") as handle:
        for line_number, raw_line in enumerate(handle, start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[len("export ") :].lstrip()
            if "=" not in line:
                log_error("dotenv_invalid_line", source="dotenv", path=str(path), line=line_number)
                raise InvalidFormat(f"Malformed line {line_number} in {path}")
            key, value = line.split("=", 1)
            key = key.strip()
            if prefix:
                if not key.startswith(prefix):
                    continue
                key = key[len(prefix) :]
            if not key:
                continue
            assign_nested(result, key, _strip_quotes(value.strip()), separator=separator)
    return result


def _strip_quotes(value: str) -> str:
    """Trim surrounding quotes and inline comments from ``value``.

    Examples
    --------
    >>> _strip_quotes('"token"')
    'token'
    >>> _strip_quotes("value # comment")
    'value'
    """

    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    if value.startswith("#"):
        return ""
    if " #" in value:
        return value.split(" #", 1)[0].strip()
    return value
