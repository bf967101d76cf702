"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by builders, sources, the build engine,
and consuming applications. The hierarchy lives in the domain layer so adapters
and the composition root can depend on it without creating cycles.

Contents
--------
* :class:`ConfigError` – umbrella base class for all configuration failures.
* :class:`InvalidFormat` – raw text or data could not be turned into a builder.
* :class:`NotFound` – an expected resource (file, optional parser) is missing.
* :class:`BuildError` – base for failures that carry a dotted :class:`KeyPath`.
* :class:`MissingValue` – a required value was absent from every source.
* :class:`UnexpectedSecret` – secret data came from a source that forbids it.
* :class:`FailedTryInto` – a declared fallible field conversion failed.
* :class:`SourceError` – a source's ``provide`` call failed.

System Role
-----------
Builders raise :class:`BuildError` subclasses and every enclosing builder
catches them, prepends its own segment, and re-raises the same object. The
engine wraps source failures in :class:`SourceError` and stamps the source
identity onto :class:`UnexpectedSecret`. Callers catch :class:`ConfigError` to
handle every library failure uniformly.
"""

from __future__ import annotations

from typing import Self

from .path import KeyPath


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_typed_config``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class InvalidFormat(ConfigError):
    """Raised when an input artifact cannot be parsed into builder data.

    Typical Sources
    ---------------
    Inline and file sources (:mod:`tomllib`, :mod:`json`, :mod:`yaml`), dotenv
    parsing, and schema loading when raw data has the wrong shape.
    """


class NotFound(ConfigError):
    """Represents missing resources such as configuration files.

    Why
    ----
    Lets :class:`~lib_typed_config.adapters.sources.file.FileSource` distinguish
    "absent" from "malformed" so optional files can be skipped.
    """


class BuildError(ConfigError):
    """Failure that knows where in the configuration tree it happened.

    What
    ----
    Holds a :class:`KeyPath` which enclosing builders extend through
    :meth:`prepend` as the error travels back towards the root.
    """

    def __init__(self, path: KeyPath | None = None) -> None:
        super().__init__()
        self.path = path if path is not None else KeyPath()

    def prepend(self, segment: object) -> Self:
        """Add *segment* as the outermost path component and return ``self``."""

        self.path.prepend(segment)
        return self


class MissingValue(BuildError):
    """A required value had no data in any source after defaults were applied.

    Examples
    --------
    >>> str(MissingValue().prepend("port").prepend("server"))
    'Missing value for path `server.port`'
    """

    def __str__(self) -> str:
        return f"Missing value for path `{self.path}`"


class UnexpectedSecret(BuildError):
    """Secret-tagged data was provided by a source that does not permit secrets.

    Attributes
    ----------
    source:
        ``repr`` of the offending source, attached by the build engine once the
        taint walk has finished. ``None`` while the error is still unwinding.
    """

    def __init__(self, path: KeyPath | None = None, source: str | None = None) -> None:
        super().__init__(path)
        self.source = source

    def __str__(self) -> str:
        if self.source is None:
            return f"Found secret at path `{self.path}`"
        return f"Found secret at path `{self.path}` in source {self.source} that does not permit secrets"


class FailedTryInto(BuildError):
    """A fallible conversion declared on a field rejected the built value.

    Attributes
    ----------
    error:
        The exception raised by the conversion. It is also chained as
        ``__cause__`` when the engine re-raises.
    """

    def __init__(self, error: BaseException, path: KeyPath | None = None) -> None:
        super().__init__(path)
        self.error = error

    def __str__(self) -> str:
        return f"Failed try_into for path `{self.path}`: {self.error}"


class SourceError(ConfigError):
    """A source failed to provide its builder (I/O error, parse error, ...).

    Attributes
    ----------
    source:
        ``repr`` of the failing source.
    error:
        The original exception, also available as ``__cause__``.
    """

    def __init__(self, error: BaseException, source: str) -> None:
        super().__init__(error, source)
        self.error = error
        self.source = source

    def __str__(self) -> str:
        return f"Source {self.source} returned an error: {self.error}"
