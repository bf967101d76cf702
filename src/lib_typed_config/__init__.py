"""Public package surface for ``lib_typed_config``.

Declare configuration as dataclasses, layer sources over their defaults with
:class:`ConfigBuilder`, and get back a fully typed value. Secret fields are
only accepted from sources that opt in via ``allow_secrets()``.
"""

from __future__ import annotations

from .adapters.dotenv.default import DotEnvSource
from .adapters.env.default import EnvSource, default_env_prefix
from .adapters.sources.file import FileSource
from .adapters.sources.inline import JsonSource, TomlSource, YamlSource
from .adapters.sources.offset import OffsetSource
from .application.merge import DefaultSource, build_from_sources
from .application.ports import BuilderSchema, Source
from .application.schema import SECRET, FieldOptions, config_field, register_scalar, schema_for
from .common import DatabaseConnectionConfig, DatabaseKind
from .core import ConfigBuilder, as_plain_data, read_config, to_json
from .domain.builders import ConfigurationBuilder, has_non_secret_data
from .domain.errors import (
    BuildError,
    ConfigError,
    FailedTryInto,
    InvalidFormat,
    MissingValue,
    NotFound,
    SourceError,
    UnexpectedSecret,
)
from .domain.path import KeyPath
from .domain.secrets import SecretString
from .observability import bind_trace_id, get_logger, trace_scope
from .reloading import ReloadingConfig

__all__ = [
    "SECRET",
    "BuildError",
    "BuilderSchema",
    "ConfigBuilder",
    "ConfigError",
    "ConfigurationBuilder",
    "DatabaseConnectionConfig",
    "DatabaseKind",
    "DefaultSource",
    "DotEnvSource",
    "EnvSource",
    "FailedTryInto",
    "FieldOptions",
    "FileSource",
    "InvalidFormat",
    "JsonSource",
    "KeyPath",
    "MissingValue",
    "NotFound",
    "OffsetSource",
    "ReloadingConfig",
    "SecretString",
    "Source",
    "SourceError",
    "TomlSource",
    "UnexpectedSecret",
    "YamlSource",
    "as_plain_data",
    "bind_trace_id",
    "build_from_sources",
    "config_field",
    "default_env_prefix",
    "get_logger",
    "has_non_secret_data",
    "read_config",
    "register_scalar",
    "schema_for",
    "to_json",
    "trace_scope",
]
