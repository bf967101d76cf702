"""Secret wrappers and the taint rules that keep them out of plain sources.

Purpose
-------
Mark parts of a configuration as secret so that sources which are not trusted
with credentials (inline defaults, checked-in files, the process environment)
cannot silently supply them.

Contents
--------
* :class:`SecretBuilder` – wraps any builder; any data inside is tainted.
* :class:`SecretOption` – scalar slot that is tainted whenever it is set.
* :class:`SecretString` – redacting container for secret text values.

System Role
-----------
:meth:`ConfigurationBuilder.contains_non_secret_data` doubles as the taint
check: secret wrappers raise :class:`UnexpectedSecret` instead of answering, and
enclosing builders prepend their segment while the error unwinds. The engine
runs the check once per source that has not opted into secrets.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

from .builders import ConfigurationBuilder, has_non_secret_data
from .errors import MissingValue, UnexpectedSecret

T = TypeVar("T")

REDACTED = "[redacted]"


@dataclass(frozen=True, slots=True)
class SecretBuilder(ConfigurationBuilder[T]):
    """Transparent wrapper turning any builder into secret data.

    What
    ----
    Merging and building delegate to the wrapped builder. The presence check
    raises :class:`UnexpectedSecret` whenever the wrapped builder holds data and
    reports ``False`` otherwise, so an empty secret never blocks a source.

    Examples
    --------
    >>> from .builders import ScalarBuilder
    >>> SecretBuilder(ScalarBuilder()).contains_non_secret_data()
    False
    >>> has_non_secret_data(SecretBuilder(ScalarBuilder("hunter2")))
    True
    """

    inner: ConfigurationBuilder[T]

    def merge(self, other: SecretBuilder[T]) -> SecretBuilder[T]:
        return SecretBuilder(self.inner.merge(other.inner))

    def try_build(self) -> T:
        return self.inner.try_build()

    def contains_non_secret_data(self) -> bool:
        if has_non_secret_data(self.inner):
            raise UnexpectedSecret()
        return False


@dataclass(frozen=True, slots=True)
class SecretOption(ConfigurationBuilder[T]):
    """Scalar slot for values whose type is inherently secret (:class:`SecretString`)."""

    value: T | None = None

    def merge(self, other: SecretOption[T]) -> SecretOption[T]:
        return other if self.value is None else self

    def try_build(self) -> T:
        if self.value is None:
            raise MissingValue()
        return self.value

    def contains_non_secret_data(self) -> bool:
        if self.value is not None:
            raise UnexpectedSecret()
        return False


class SecretString:
    """Text value that never shows up in ``repr``, ``str``, or logs.

    Why
    ----
    Configuration objects are printed in tracebacks and debug logs all the time;
    the only way to read a credential should be an explicit call.

    Examples
    --------
    >>> password = SecretString("hunter2")
    >>> password
    SecretString('[redacted]')
    >>> str(password)
    '[redacted]'
    >>> password.expose_secret()
    'hunter2'
    """

    __slots__ = ("_secret",)

    def __init__(self, secret: str) -> None:
        if not isinstance(secret, str):
            raise TypeError(f"SecretString expects str, got {type(secret).__name__}")
        self._secret = secret

    def expose_secret(self) -> str:
        """Return the wrapped plaintext."""

        return self._secret

    def __repr__(self) -> str:
        return f"SecretString({REDACTED!r})"

    def __str__(self) -> str:
        return REDACTED

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SecretString):
            return NotImplemented
        return self._secret == other._secret

    def __hash__(self) -> int:
        return hash(self._secret)

    def __len__(self) -> int:
        return len(self._secret)
