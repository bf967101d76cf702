"""Derive builder schemas from ordinary Python type annotations.

Purpose
-------
Let applications declare configuration as plain dataclasses and annotations.
A *schema* knows how to create the empty builder for a type and how to turn raw
source data (parsed TOML/JSON/YAML, nested environment strings) into a
populated builder.

Contents
--------
* :class:`FieldOptions` / :func:`config_field` – per-field declarations
  (secret, ``from_type``, ``try_from``, rename, skip).
* :data:`SECRET` – marker for ``Annotated[T, SECRET]``.
* :func:`schema_for` – cached annotation → schema mapping.
* :func:`register_scalar` – teach the library about additional leaf types.
* Schema classes: :class:`ScalarSchema`, :class:`OptionSchema`,
  :class:`UnkeyedSchema`, :class:`KeyedSchema`, :class:`ArraySchema`,
  :class:`SecretSchema`, :class:`RecordSchema`, :class:`VariantSchema`.

System Role
-----------
Sources receive a schema through :meth:`Source.provide` and call
:meth:`load` or :meth:`empty`; they never need to know the target type. The
engine asks :func:`schema_for` once per build.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import types
from dataclasses import MISSING, dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network
from pathlib import Path, PurePath, PurePosixPath, PureWindowsPath
from typing import (
    AbstractSet,
    Annotated,
    Any,
    Callable,
    Final,
    FrozenSet,
    Iterable,
    Literal,
    Mapping,
    MutableMapping,
    MutableSequence,
    MutableSet,
    Sequence,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)
from uuid import UUID

from ..domain.builders import (
    ArrayBuilder,
    ConfigurationBuilder,
    KeyedContainerBuilder,
    OptionBuilder,
    ScalarBuilder,
    UnkeyedContainerBuilder,
)
from ..domain.errors import InvalidFormat
from ..domain.records import FieldPlan, RecordBuilder, RecordShape, VariantBuilder
from ..domain.secrets import SecretBuilder, SecretOption, SecretString

CONFIG_METADATA_KEY: Final[str] = "lib_typed_config"
"""Key under which :func:`config_field` stores :class:`FieldOptions` in field metadata."""

Location = tuple[str, ...]


class _SecretMarker:
    __slots__ = ()

    def __repr__(self) -> str:
        return "SECRET"


SECRET: Final = _SecretMarker()
"""Mark an annotation as secret: ``password: Annotated[str, SECRET]``."""


@dataclass(frozen=True, slots=True)
class FieldOptions:
    """Per-field configuration declarations stored in dataclass field metadata.

    Attributes
    ----------
    secret:
        Wrap the field's builder so only secret-permitting sources may set it.
    from_type:
        Build the field from this type, then convert with an infallible call.
    try_from:
        Build the field from this type, then convert; ``TypeError``/``ValueError``
        raised by the conversion become :class:`FailedTryInto`.
    convert:
        Conversion callable; defaults to the field's annotated class.
    name:
        Key used in sources instead of the attribute name.
    skip:
        Exclude the field from configuration entirely; the dataclass default is used.
    """

    secret: bool = False
    from_type: Any = None
    try_from: Any = None
    convert: Callable[[Any], Any] | None = None
    name: str | None = None
    skip: bool = False


_DEFAULT_OPTIONS: Final = FieldOptions()


def config_field(
    *,
    default: Any = MISSING,
    default_factory: Any = MISSING,
    secret: bool = False,
    from_type: Any = None,
    try_from: Any = None,
    convert: Callable[[Any], Any] | None = None,
    name: str | None = None,
    skip: bool = False,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field together with its configuration options.

    Why
    ----
    Mirrors :func:`dataclasses.field` so declarations read naturally, while
    recording secret/conversion/rename flags for :func:`schema_for`.

    Examples
    --------
    >>> from dataclasses import dataclass, fields
    >>> @dataclass
    ... class Service:
    ...     token: str = config_field(secret=True, default="")
    >>> fields(Service)[0].metadata[CONFIG_METADATA_KEY].secret
    True
    """

    if from_type is not None and try_from is not None:
        raise TypeError("Cannot support both `try_from` and `from_type` on one field")
    if skip and default is MISSING and default_factory is MISSING:
        raise TypeError("Skipped fields need a `default` or `default_factory`")
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[CONFIG_METADATA_KEY] = FieldOptions(
        secret=secret,
        from_type=from_type,
        try_from=try_from,
        convert=convert,
        name=name,
        skip=skip,
    )
    return dataclasses.field(default=default, default_factory=default_factory, metadata=metadata, **kwargs)


def _dotted(location: Location) -> str:
    return ".".join(location) or "<root>"


class ScalarSchema:
    """Leaf values coerced by a single callable.

    ``None`` means "not provided" and yields an empty builder. Coercion errors
    become :class:`InvalidFormat` naming the raw location.
    """

    __slots__ = ("name", "coerce", "leaf")

    def __init__(
        self,
        name: str,
        coerce: Callable[[object], Any],
        leaf: type[ScalarBuilder[Any]] | type[SecretOption[Any]] = ScalarBuilder,
    ) -> None:
        self.name = name
        self.coerce = coerce
        self.leaf = leaf

    def empty(self) -> ConfigurationBuilder[Any]:
        return self.leaf()

    def load(self, raw: object, location: Location = ()) -> ConfigurationBuilder[Any]:
        if raw is None:
            return self.leaf()
        return self.leaf(self.coerce_at(raw, location))

    def coerce_at(self, raw: object, location: Location) -> Any:
        try:
            return self.coerce(raw)
        except (TypeError, ValueError, ArithmeticError) as exc:
            raise InvalidFormat(f"Invalid value at `{_dotted(location)}`: expected {self.name}, got {raw!r}") from exc

    def __repr__(self) -> str:
        return f"ScalarSchema({self.name})"


class OptionSchema:
    """``T | None``: raw ``None`` is an explicit ``None``; absence is unspecified."""

    __slots__ = ("inner",)

    def __init__(self, inner: Any) -> None:
        self.inner = inner

    def empty(self) -> OptionBuilder[Any]:
        return OptionBuilder.unspecified()

    def load(self, raw: object, location: Location = ()) -> OptionBuilder[Any]:
        if raw is None:
            return OptionBuilder.explicit_none()
        return OptionBuilder.some(self.inner.load(raw, location))

    def __repr__(self) -> str:
        return f"OptionSchema({self.inner!r})"


def _is_indexed_mapping(raw: object) -> bool:
    """Environment-style containers arrive as ``{"0": ..., "1": ...}``."""

    return isinstance(raw, Mapping) and all(_index_of(key) is not None for key in raw)


def _index_of(key: object) -> int | None:
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key if key >= 0 else None
    if isinstance(key, str) and key.isdigit():
        return int(key)
    return None


def _sequence_items(raw: object, location: Location) -> list[object]:
    if isinstance(raw, (list, tuple, set, frozenset)):
        return list(raw)
    if isinstance(raw, Mapping) and _is_indexed_mapping(raw):
        ordered = sorted(raw.items(), key=lambda item: _index_of(item[0]) or 0)
        return [value for _, value in ordered]
    raise InvalidFormat(f"Invalid value at `{_dotted(location)}`: expected a sequence, got {raw!r}")


class UnkeyedSchema:
    """Lists, sets and variadic tuples built with ``factory``."""

    __slots__ = ("element", "factory")

    def __init__(self, element: Any, factory: Callable[[Iterable[Any]], Any]) -> None:
        self.element = element
        self.factory = factory

    def empty(self) -> UnkeyedContainerBuilder[Any]:
        return UnkeyedContainerBuilder(self.factory)

    def load(self, raw: object, location: Location = ()) -> UnkeyedContainerBuilder[Any]:
        if raw is None:
            return self.empty()
        items = _sequence_items(raw, location)
        return UnkeyedContainerBuilder(
            self.factory,
            tuple(self.element.load(item, location + (str(index),)) for index, item in enumerate(items)),
        )

    def __repr__(self) -> str:
        return f"UnkeyedSchema({self.element!r}, {getattr(self.factory, '__name__', self.factory)})"


class KeyedSchema:
    """Mappings whose keys are coerced by a scalar schema."""

    __slots__ = ("key", "value", "factory")

    def __init__(self, key: ScalarSchema, value: Any, factory: Callable[[Mapping[Any, Any]], Any] = dict) -> None:
        self.key = key
        self.value = value
        self.factory = factory

    def empty(self) -> KeyedContainerBuilder[Any]:
        return KeyedContainerBuilder(self.factory)

    def load(self, raw: object, location: Location = ()) -> KeyedContainerBuilder[Any]:
        if raw is None:
            return self.empty()
        if not isinstance(raw, Mapping):
            raise InvalidFormat(f"Invalid value at `{_dotted(location)}`: expected a mapping, got {raw!r}")
        entries: dict[Any, ConfigurationBuilder[Any]] = {}
        for raw_key, raw_value in raw.items():
            child = location + (str(raw_key),)
            entries[self.key.coerce_at(raw_key, child)] = self.value.load(raw_value, child)
        return KeyedContainerBuilder(self.factory, entries)

    def __repr__(self) -> str:
        return f"KeyedSchema({self.key!r}, {self.value!r})"


class ArraySchema:
    """Fixed-length tuples such as ``tuple[int, str]``."""

    __slots__ = ("elements",)

    def __init__(self, elements: Sequence[Any]) -> None:
        self.elements = tuple(elements)

    def empty(self) -> ArrayBuilder:
        return ArrayBuilder(tuple(element.empty() for element in self.elements))

    def load(self, raw: object, location: Location = ()) -> ArrayBuilder:
        if raw is None:
            return self.empty()
        if isinstance(raw, Mapping) and _is_indexed_mapping(raw):
            by_index = {_index_of(key): value for key, value in raw.items()}
            if any(index is None or index >= len(self.elements) for index in by_index):
                raise InvalidFormat(
                    f"Invalid value at `{_dotted(location)}`: index out of range for array of {len(self.elements)}"
                )
            return ArrayBuilder(
                tuple(
                    element.load(by_index[index], location + (str(index),)) if index in by_index else element.empty()
                    for index, element in enumerate(self.elements)
                )
            )
        if not isinstance(raw, (list, tuple)):
            raise InvalidFormat(f"Invalid value at `{_dotted(location)}`: expected an array, got {raw!r}")
        if len(raw) != len(self.elements):
            raise InvalidFormat(
                f"Invalid value at `{_dotted(location)}`: expected {len(self.elements)} items, got {len(raw)}"
            )
        return ArrayBuilder(
            tuple(element.load(item, location + (str(index),)) for index, (element, item) in enumerate(zip(self.elements, raw)))
        )

    def __repr__(self) -> str:
        return f"ArraySchema({list(self.elements)!r})"


class SecretSchema:
    """Wraps another schema so every builder it produces is secret."""

    __slots__ = ("inner",)

    def __init__(self, inner: Any) -> None:
        self.inner = inner

    def empty(self) -> SecretBuilder[Any]:
        return SecretBuilder(self.inner.empty())

    def load(self, raw: object, location: Location = ()) -> SecretBuilder[Any]:
        return SecretBuilder(self.inner.load(raw, location))

    def __repr__(self) -> str:
        return f"SecretSchema({self.inner!r})"


@dataclass(frozen=True, slots=True)
class _FieldSlot:
    name: str
    key: str
    schema: Any


class RecordSchema:
    """Dataclass targets; fields are resolved lazily so recursive types work.

    What
    ----
    Unknown keys in raw data are ignored, which lets several records share one
    file or one environment prefix. A field missing from the raw mapping gets
    its empty builder.
    """

    __slots__ = ("target", "_slots", "_shape")

    def __init__(self, target: type) -> None:
        self.target = target
        self._slots: tuple[_FieldSlot, ...] | None = None
        self._shape: RecordShape | None = None

    @property
    def shape(self) -> RecordShape:
        return self._populate()[0]

    @property
    def slots(self) -> tuple[_FieldSlot, ...]:
        return self._populate()[1]

    def empty(self) -> RecordBuilder:
        return RecordBuilder(self.shape, {slot.name: slot.schema.empty() for slot in self.slots})

    def load(self, raw: object, location: Location = ()) -> RecordBuilder:
        if raw is None:
            return self.empty()
        if not isinstance(raw, Mapping):
            raise InvalidFormat(
                f"Invalid value at `{_dotted(location)}`: expected a table for {self.target.__name__}, got {raw!r}"
            )
        values = {
            slot.name: slot.schema.load(raw[slot.key], location + (slot.key,)) if slot.key in raw else slot.schema.empty()
            for slot in self.slots
        }
        return RecordBuilder(self.shape, values)

    def field_schema(self, name: str) -> Any:
        """Return the schema of field *name* (attribute name or source key)."""

        for slot in self.slots:
            if name in (slot.name, slot.key):
                return slot.schema
        raise KeyError(name)

    def field_name(self, name: str) -> str:
        for slot in self.slots:
            if name in (slot.name, slot.key):
                return slot.name
        raise KeyError(name)

    def _populate(self) -> tuple[RecordShape, tuple[_FieldSlot, ...]]:
        if self._shape is not None and self._slots is not None:
            return self._shape, self._slots
        hints = get_type_hints(self.target, include_extras=True)
        plans: list[FieldPlan] = []
        slots: list[_FieldSlot] = []
        for field in dataclasses.fields(self.target):
            options = field.metadata.get(CONFIG_METADATA_KEY, _DEFAULT_OPTIONS)
            if not field.init or options.skip:
                continue
            annotation = hints[field.name]
            source_type = options.from_type if options.from_type is not None else options.try_from
            schema = schema_for(annotation if source_type is None else source_type)
            if options.secret:
                schema = SecretSchema(schema)
            convert = None
            if source_type is not None:
                convert = options.convert if options.convert is not None else _converter_for(annotation)
            plans.append(
                FieldPlan(field.name, _default_of(field), convert, fallible=options.try_from is not None)
            )
            slots.append(_FieldSlot(field.name, options.name or field.name, schema))
        self._shape = RecordShape(self.target, tuple(plans))
        self._slots = tuple(slots)
        return self._shape, self._slots

    def __repr__(self) -> str:
        return f"RecordSchema({self.target.__name__})"


def _default_of(field: dataclasses.Field[Any]) -> Callable[[], Any] | None:
    if field.default is not MISSING:
        value = field.default
        return lambda: value
    if field.default_factory is not MISSING:
        return field.default_factory
    return None


def _converter_for(annotation: Any) -> Callable[[Any], Any]:
    target = _strip_annotated(annotation)
    if isinstance(target, type):
        return target
    raise TypeError(f"Converted field of type {annotation!r} needs an explicit `convert` callable")


class VariantSchema:
    """Union of dataclasses, externally tagged by class name.

    Raw data is either the bare tag (``"Disabled"``) or a single-key mapping
    ``{"Tcp": {"port": 80}}``.
    """

    __slots__ = ("variants",)

    def __init__(self, variants: Mapping[str, RecordSchema]) -> None:
        self.variants = dict(variants)

    def empty(self) -> VariantBuilder:
        return VariantBuilder()

    def load(self, raw: object, location: Location = ()) -> VariantBuilder:
        if raw is None:
            return self.empty()
        if isinstance(raw, str) and raw in self.variants:
            return VariantBuilder(raw, self.variants[raw].empty())
        if isinstance(raw, Mapping) and len(raw) == 1:
            ((tag, payload),) = raw.items()
            if tag in self.variants:
                return VariantBuilder(tag, self.variants[tag].load(payload, location + (tag,)))
        raise InvalidFormat(
            f"Invalid value at `{_dotted(location)}`: expected one of {sorted(self.variants)}, got {raw!r}"
        )

    def __repr__(self) -> str:
        return f"VariantSchema({sorted(self.variants)})"


def _reject_bool(raw: object) -> None:
    if isinstance(raw, bool):
        raise TypeError("booleans are not numbers here")


def _coerce_int(raw: object) -> int:
    _reject_bool(raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        return int(raw.strip())
    raise TypeError(type(raw).__name__)


def _coerce_float(raw: object) -> float:
    _reject_bool(raw)
    if isinstance(raw, (int, float, str)):
        return float(raw)
    raise TypeError(type(raw).__name__)


_TRUE: Final = frozenset({"true", "1", "yes", "on"})
_FALSE: Final = frozenset({"false", "0", "no", "off"})


def _coerce_bool(raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    raise ValueError(f"not a boolean: {raw!r}")


def _coerce_str(raw: object) -> str:
    if isinstance(raw, str):
        return raw
    raise TypeError(type(raw).__name__)


def _coerce_bytes(raw: object) -> bytes:
    if isinstance(raw, bytes):
        return raw
    if isinstance(raw, str):
        return raw.encode("utf-8")
    raise TypeError(type(raw).__name__)


def _coerce_decimal(raw: object) -> Decimal:
    _reject_bool(raw)
    if isinstance(raw, Decimal):
        return raw
    if isinstance(raw, (int, float, str)):
        return Decimal(str(raw))
    raise TypeError(type(raw).__name__)


def _coerce_timedelta(raw: object) -> timedelta:
    _reject_bool(raw)
    if isinstance(raw, timedelta):
        return raw
    if isinstance(raw, (int, float)):
        return timedelta(seconds=raw)
    if isinstance(raw, str):
        return timedelta(seconds=float(raw))
    raise TypeError(type(raw).__name__)


def _coerce_secret(raw: object) -> SecretString:
    if isinstance(raw, SecretString):
        return raw
    return SecretString(_coerce_str(raw))


def _parsed(target: type, parse: Callable[[str], Any]) -> Callable[[object], Any]:
    """Accept instances of *target* as-is and parse strings with *parse*."""

    def coerce(raw: object) -> Any:
        if isinstance(raw, target):
            return raw
        if isinstance(raw, str):
            return parse(raw)
        raise TypeError(type(raw).__name__)

    return coerce


def _coerce_date(raw: object) -> date:
    if isinstance(raw, datetime):
        raise TypeError("datetime given where a date is expected")
    return _parsed(date, date.fromisoformat)(raw)


def _called(target: type) -> Callable[[object], Any]:
    def coerce(raw: object) -> Any:
        return raw if isinstance(raw, target) else target(raw)

    return coerce


def _enum_coercer(target: type[Enum]) -> Callable[[object], Any]:
    def coerce(raw: object) -> Any:
        if isinstance(raw, target):
            return raw
        try:
            return target(raw)
        except ValueError:
            if isinstance(raw, str) and raw in target.__members__:
                return target[raw]
            raise

    return coerce


def _literal_coercer(values: tuple[Any, ...]) -> Callable[[object], Any]:
    def coerce(raw: object) -> Any:
        for value in values:
            if type(value) is type(raw) and value == raw:
                return value
        if isinstance(raw, str):
            for value in values:
                if str(value) == raw:
                    return value
        raise ValueError(f"expected one of {list(values)!r}")

    return coerce


def _identity(raw: object) -> Any:
    return raw


_SCALARS: dict[Any, ScalarSchema] = {
    int: ScalarSchema("int", _coerce_int),
    float: ScalarSchema("float", _coerce_float),
    bool: ScalarSchema("bool", _coerce_bool),
    str: ScalarSchema("str", _coerce_str),
    bytes: ScalarSchema("bytes", _coerce_bytes),
    Decimal: ScalarSchema("Decimal", _coerce_decimal),
    Path: ScalarSchema("Path", _parsed(PurePath, Path)),
    PurePath: ScalarSchema("PurePath", _parsed(PurePath, PurePath)),
    PurePosixPath: ScalarSchema("PurePosixPath", _parsed(PurePath, PurePosixPath)),
    PureWindowsPath: ScalarSchema("PureWindowsPath", _parsed(PurePath, PureWindowsPath)),
    datetime: ScalarSchema("datetime", _parsed(datetime, datetime.fromisoformat)),
    date: ScalarSchema("date", _coerce_date),
    time: ScalarSchema("time", _parsed(time, time.fromisoformat)),
    timedelta: ScalarSchema("timedelta", _coerce_timedelta),
    UUID: ScalarSchema("UUID", _parsed(UUID, UUID)),
    IPv4Address: ScalarSchema("IPv4Address", _parsed(IPv4Address, IPv4Address)),
    IPv6Address: ScalarSchema("IPv6Address", _parsed(IPv6Address, IPv6Address)),
    IPv4Network: ScalarSchema("IPv4Network", _parsed(IPv4Network, IPv4Network)),
    IPv6Network: ScalarSchema("IPv6Network", _parsed(IPv6Network, IPv6Network)),
    SecretString: ScalarSchema("SecretString", _coerce_secret, leaf=SecretOption),
    Any: ScalarSchema("any value", _identity),
    object: ScalarSchema("any value", _identity),
}

_CACHE: dict[Any, Any] = {}

_SEQUENCE_ORIGINS: Final = (list, collections.abc.Sequence, collections.abc.MutableSequence)
_SET_ORIGINS: Final = (set, collections.abc.Set, collections.abc.MutableSet)
_MAPPING_ORIGINS: Final = (dict, collections.abc.Mapping, collections.abc.MutableMapping)
_BARE_CONTAINERS: Final = {
    list: list[Any],
    tuple: tuple[Any, ...],
    set: set[Any],
    frozenset: frozenset[Any],
    dict: dict[Any, Any],
    Sequence: list[Any],
    MutableSequence: list[Any],
    AbstractSet: set[Any],
    MutableSet: set[Any],
    FrozenSet: frozenset[Any],
    Mapping: dict[Any, Any],
    MutableMapping: dict[Any, Any],
}


def register_scalar(
    target: type,
    coerce: Callable[[object], Any] | None = None,
    *,
    name: str | None = None,
    secret: bool = False,
) -> None:
    """Register *target* as a leaf type.

    Why
    ----
    Applications often carry small value types (URLs, durations, semantic
    versions). Registering them keeps declarations free of ``from_type``
    boilerplate.

    What
    ----
    *coerce* turns raw data (often a string from the environment) into the
    type; it should raise ``TypeError`` or ``ValueError`` on bad input. The
    default accepts instances and otherwise calls ``target(raw)``. With
    ``secret=True`` every value of the type is tainted like
    :class:`SecretString`.

    Examples
    --------
    >>> class Port(int):
    ...     pass
    >>> register_scalar(Port)
    >>> schema_for(Port).load("8080").try_build()
    8080
    """

    _SCALARS[target] = ScalarSchema(
        name or target.__name__,
        coerce if coerce is not None else _called(target),
        leaf=SecretOption if secret else ScalarBuilder,
    )
    _CACHE.clear()


def schema_for(annotation: Any) -> Any:
    """Return the (cached) builder schema for *annotation*.

    Raises
    ------
    TypeError
        When the annotation cannot be mapped to a schema.

    Examples
    --------
    >>> schema_for(int | None)
    OptionSchema(ScalarSchema(int))
    >>> schema_for(dict[str, list[int]])
    KeyedSchema(ScalarSchema(str), UnkeyedSchema(ScalarSchema(int), list))
    """

    try:
        cached = _CACHE.get(annotation)
    except TypeError:
        return _build_schema(annotation)
    if cached is not None:
        return cached
    if dataclasses.is_dataclass(annotation) and isinstance(annotation, type):
        record = RecordSchema(annotation)
        _CACHE[annotation] = record
        try:
            record.shape
        except Exception:
            _CACHE.pop(annotation, None)
            raise
        return record
    schema = _build_schema(annotation)
    _CACHE[annotation] = schema
    return schema


def _strip_annotated(annotation: Any) -> Any:
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def _build_schema(annotation: Any) -> Any:
    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Annotated:
        inner = schema_for(args[0])
        if any(marker is SECRET for marker in args[1:]):
            return SecretSchema(inner)
        return inner
    if annotation in _SCALARS:
        return _SCALARS[annotation]
    if isinstance(annotation, type) and issubclass(annotation, Enum):
        return ScalarSchema(annotation.__name__, _enum_coercer(annotation))
    if annotation in _BARE_CONTAINERS:
        return schema_for(_BARE_CONTAINERS[annotation])
    if dataclasses.is_dataclass(annotation) and isinstance(annotation, type):
        return schema_for(annotation)
    if origin is Literal:
        return ScalarSchema(f"Literal{list(args)!r}", _literal_coercer(args))
    if origin in (Union, types.UnionType):
        return _union_schema(annotation, args)
    if origin in _SEQUENCE_ORIGINS:
        return UnkeyedSchema(schema_for(args[0] if args else Any), list)
    if origin in _SET_ORIGINS:
        return UnkeyedSchema(schema_for(args[0] if args else Any), set)
    if origin is frozenset:
        return UnkeyedSchema(schema_for(args[0] if args else Any), frozenset)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return UnkeyedSchema(schema_for(args[0]), tuple)
        if args == ((),):
            return ArraySchema(())
        return ArraySchema([schema_for(arg) for arg in args])
    if origin in _MAPPING_ORIGINS:
        key_type, value_type = args if args else (Any, Any)
        key = schema_for(_strip_annotated(key_type))
        if not isinstance(key, ScalarSchema):
            raise TypeError(f"Mapping keys must be scalar types, got {key_type!r}")
        return KeyedSchema(key, schema_for(value_type), dict)
    raise TypeError(f"No configuration schema for {annotation!r}; declare it with register_scalar()")


def _union_schema(annotation: Any, args: tuple[Any, ...]) -> Any:
    members = [arg for arg in args if arg is not type(None)]
    optional = len(members) != len(args)
    if len(members) == 1:
        inner = schema_for(members[0])
    elif all(dataclasses.is_dataclass(member) and isinstance(member, type) for member in members):
        variants: dict[str, Any] = {}
        for member in members:
            if member.__name__ in variants:
                raise TypeError(f"Unsupported union {annotation!r}: two variants are named {member.__name__!r}")
            variants[member.__name__] = schema_for(member)
        inner = VariantSchema(variants)
    else:
        raise TypeError(f"Unsupported union {annotation!r}: only dataclass variants may be combined")
    return OptionSchema(inner) if optional else inner
