"""Environment variable source.

Purpose
-------
Translate process environment variables into nested raw data and load it into
the target schema. It is usually the highest-priority source of an
application.

Key behaviours
--------------
* Filters by a configurable prefix (see :func:`default_env_prefix`) so only
  relevant keys are captured.
* Uses ``__`` as the default nesting delimiter
  (``APP_SERVICE__PORT`` → ``{"service": {"port": ...}}``).
* Leaves values as strings; the target schema coerces them (``"8080"`` →
  ``8080`` for ``int`` fields, ``"true"`` → ``True`` for ``bool`` fields).
* Numeric segments address sequence items (``APP_HOSTS__0``).
* Refuses secrets unless :meth:`EnvSource.allow_secrets` is called.
"""

from __future__ import annotations

import os
from typing import Any, Mapping

from ...application.ports import BuilderSchema
from ...domain.builders import ConfigurationBuilder
from ...domain.errors import InvalidFormat
from ...observability import log_debug


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Why
    ----
    Namespacing prevents unrelated environment variables from leaking into the
    configuration payload.

    Parameters
    ----------
    slug:
        Package/application slug (typically ``kebab-case``).

    Returns
    -------
    str
        Upper-case prefix with dashes converted to underscores.

    Examples
    --------
    >>> default_env_prefix('lib-typed-config')
    'LIB_TYPED_CONFIG'
    """

    return slug.replace("-", "_").upper()


class EnvSource:
    """Read configuration from environment variables.

    Parameters
    ----------
    prefix:
        Only variables starting with this prefix are read; ``_`` is appended
        when missing. ``None`` or ``""`` reads every variable.
    separator:
        Delimiter between nesting levels.
    environ:
        Mapping to read from instead of :data:`os.environ` (useful in tests).

    Examples
    --------
    >>> env = {'DEMO_SERVICE__RETRIES': '3', 'OTHER': 'x'}
    >>> EnvSource('DEMO', environ=env).collect()
    {'service': {'retries': '3'}}
    """

    def __init__(
        self,
        prefix: str | None = None,
        *,
        separator: str = "__",
        environ: Mapping[str, str] | None = None,
    ) -> None:
        if not separator:
            raise ValueError("separator must not be empty")
        self._prefix = f"{prefix}_" if prefix and not prefix.endswith("_") else (prefix or "")
        self._separator = separator
        self._environ = environ
        self._allow_secrets = False

    def allow_secrets(self) -> EnvSource:
        """Permit secret fields to be read from the environment and return ``self``."""

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
        """Return matching variables as a nested mapping with lower-case keys."""

        environ = os.environ if self._environ is None else self._environ
        collected: dict[str, object] = {}
        for key, value in environ.items():
            if self._prefix and not key.startswith(self._prefix):
                continue
            stripped = key[len(self._prefix) :]
            if not stripped:
                continue
            assign_nested(collected, stripped, value, separator=self._separator)
        log_debug("env_variables_loaded", source=repr(self), path=None, keys=sorted(collected.keys()))
        return collected

    def __repr__(self) -> str:
        return f"EnvSource(prefix={self._prefix!r})"


def assign_nested(target: dict[str, object], key: str, value: object, *, separator: str = "__") -> None:
    """Assign ``value`` inside ``target`` using *separator* as a nesting delimiter.

    Why
    ----
    Reuse the same semantics for environment variables and dotenv files so
    callers see consistent shapes.

    Examples
    --------
    >>> data: dict[str, object] = {}
    >>> assign_nested(data, 'SERVICE__TIMEOUT', '5')
    >>> data
    {'service': {'timeout': '5'}}
    """

    parts = key.split(separator)
    cursor = target
    for part in parts[:-1]:
        cursor = _ensure_child_mapping(cursor, part)
    final_key = _resolve_key(cursor, parts[-1])
    cursor[final_key] = value


def _resolve_key(mapping: dict[str, object], key: str) -> str:
    """Return an existing key that matches ``key`` (case-insensitive) or a new lowercase key.

    Why
    ----
    Preserve case stability while avoiding duplicates that differ only by case.
    """

    lower = key.lower()
    for existing in mapping.keys():
        if existing.lower() == lower:
            return existing
    return lower


def _ensure_child_mapping(mapping: dict[str, object], key: str) -> dict[str, object]:
    """Ensure ``mapping[key]`` is a ``dict`` (creating or validating as necessary).

    Why
    ----
    Prevent accidental overwrites of scalar values when nested keys are
    introduced.
    """

    resolved = _resolve_key(mapping, key)
    if resolved not in mapping:
        mapping[resolved] = {}
    child = mapping[resolved]
    if not isinstance(child, dict):
        raise InvalidFormat(f"Cannot override scalar with mapping for key {key}")
    return child
