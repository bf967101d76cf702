"""Shared configuration types and file helpers for the test-suite.

Dataclasses live at module level so ``typing.get_type_hints`` can resolve their
postponed annotations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Annotated

from lib_typed_config import SECRET, SecretString, config_field


@dataclass(frozen=True)
class Param:
    param: int


@dataclass(frozen=True)
class Server:
    host: str
    port: int = 8080


@dataclass(frozen=True)
class Credentials:
    username: str
    password: SecretString


@dataclass(frozen=True)
class Service:
    name: str
    server: Server
    credentials: Credentials | None = None
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class WithOptional:
    timeout: int | None


@dataclass(frozen=True)
class WithDefaultServer:
    server: Server = field(default_factory=lambda: Server("localhost", 1))


@dataclass(frozen=True)
class Tcp:
    host: str
    port: int


@dataclass(frozen=True)
class Unix:
    path: str


@dataclass(frozen=True)
class Disabled:
    pass


@dataclass(frozen=True)
class Listener:
    endpoint: Tcp | Unix | Disabled


@dataclass(frozen=True)
class OptionalListener:
    endpoint: Tcp | Unix | None = None


@dataclass(frozen=True)
class SecretLeaf:
    token: str = config_field(secret=True)


@dataclass(frozen=True)
class SecretDefault:
    token: str = config_field(secret=True, default="fallback")


@dataclass(frozen=True)
class AnnotatedSecret:
    api_key: Annotated[str, SECRET]


@dataclass(frozen=True)
class Nested:
    inner: SecretLeaf


@dataclass(frozen=True)
class SecretsInContainers:
    by_name: dict[str, SecretLeaf] = field(default_factory=dict)
    items: list[SecretLeaf] = field(default_factory=list)


@dataclass(frozen=True)
class SecretPair:
    pair: tuple[SecretLeaf, SecretLeaf] | None = None


@dataclass(frozen=True)
class SecretTcp:
    port: int = 0
    token: str = config_field(secret=True, default="")


@dataclass(frozen=True)
class SecretEndpoint:
    ep: SecretTcp | Unix | None = None


@dataclass(frozen=True)
class Tagged:
    tags: list[str]


@dataclass(frozen=True)
class Weights:
    weights: dict[str, int]


@dataclass(frozen=True)
class Pair:
    pair: tuple[int, int]


class Level(Enum):
    DEBUG = "debug"
    INFO = "info"


def _positive(value: int) -> int:
    if value <= 0:
        raise ValueError(f"{value} is not positive")
    return value


@dataclass(frozen=True)
class Converted:
    workers: int = config_field(try_from=str, convert=lambda raw: _positive(int(raw)))
    root: Path = config_field(from_type=str, default=Path("/srv"))


@dataclass(frozen=True)
class Renamed:
    log_level: Level = config_field(name="log-level", default=Level.INFO)
    cached: int = config_field(skip=True, default=7)


@dataclass(frozen=True)
class Tree:
    value: int
    child: Tree | None = None


def write_file(directory: Path, name: str, body: str) -> Path:
    """Write *body* to ``directory / name`` and return the path."""

    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    return path
