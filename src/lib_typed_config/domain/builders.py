"""Tri-state builders that accumulate partial configuration data.

Purpose
-------
Provide the value model every configuration source is parsed into. A builder
remembers whether a source said *nothing*, said something *explicitly empty*, or
supplied a *concrete* value, which is what makes merge precedence well defined.

Contents
--------
* :class:`ConfigurationBuilder` – the contract (``merge``, ``try_build``,
  ``contains_non_secret_data``).
* :func:`has_non_secret_data` – fail-safe presence check used before defaults.
* :class:`ScalarBuilder` – plain scalar; unset or present.
* :class:`OptionBuilder` – explicit optional; unspecified, ``None``, or ``Some``.
* :class:`UnkeyedContainerBuilder` – lists, sets, variadic tuples.
* :class:`KeyedContainerBuilder` – dictionaries with per-key merging.
* :class:`ArrayBuilder` – fixed-size tuples merged index by index.

System Role
-----------
Schemas in :mod:`lib_typed_config.application.schema` create these builders
from raw source data; :func:`lib_typed_config.application.merge.build_from_sources`
folds them together and converts the result into the target value. In every
``merge`` call ``self`` is the higher-priority side.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, Self, TypeVar

from .errors import BuildError, MissingValue, UnexpectedSecret

T = TypeVar("T")
C = TypeVar("C")


class ConfigurationBuilder(ABC, Generic[T]):
    """Accumulating, mergeable representation of a target configuration type.

    Why
    ----
    Every source produces one builder; the engine needs a uniform way to combine
    them, decide whether secrets leaked, and finally produce the typed value.

    What
    ----
    Implementations are immutable. ``merge`` returns a builder preferring data
    held by ``self``; ``try_build`` raises a :class:`BuildError` subclass when
    data is missing or invalid; ``contains_non_secret_data`` raises
    :class:`UnexpectedSecret` when secret-wrapped data is present.
    """

    __slots__ = ()

    @abstractmethod
    def merge(self, other: Self) -> Self:
        """Combine with *other*, preferring data already held by ``self``."""

    @abstractmethod
    def try_build(self) -> T:
        """Convert the accumulated data into the target value."""

    @abstractmethod
    def contains_non_secret_data(self) -> bool:
        """Report whether concrete data is present outside any secret wrapper."""


def has_non_secret_data(builder: ConfigurationBuilder[Any]) -> bool:
    """Return ``True`` when *builder* holds data, treating secret data as present.

    Why
    ----
    Defaults and secret wrappers only need a yes/no answer. A secret error is
    read as "data present" so a misconfigured secret is never hidden behind a
    default value.

    Examples
    --------
    >>> has_non_secret_data(ScalarBuilder())
    False
    >>> has_non_secret_data(ScalarBuilder(3))
    True
    """

    try:
        return builder.contains_non_secret_data()
    except UnexpectedSecret:
        return True


@dataclass(frozen=True, slots=True)
class ScalarBuilder(ConfigurationBuilder[T]):
    """Builder for leaf values: either unset (``None``) or a concrete value.

    Examples
    --------
    >>> ScalarBuilder(1).merge(ScalarBuilder(2)).try_build()
    1
    >>> ScalarBuilder().merge(ScalarBuilder(2)).try_build()
    2
    """

    value: T | None = None

    def merge(self, other: ScalarBuilder[T]) -> ScalarBuilder[T]:
        return other if self.value is None else self

    def try_build(self) -> T:
        if self.value is None:
            raise MissingValue()
        return self.value

    def contains_non_secret_data(self) -> bool:
        return self.value is not None


class OptionState(Enum):
    """The three states of an explicitly optional value."""

    UNSPECIFIED = "unspecified"
    NONE = "none"
    SOME = "some"


@dataclass(frozen=True, slots=True)
class OptionBuilder(ConfigurationBuilder[Optional[T]]):
    """Builder for ``T | None`` fields distinguishing silence from explicit ``None``.

    Why
    ----
    An optional field must build to ``None`` when no source mentions it, yet a
    higher-priority source must be able to force it back to ``None`` over a
    lower-priority value.

    Examples
    --------
    >>> OptionBuilder.explicit_none().merge(OptionBuilder.some(ScalarBuilder(3))).try_build() is None
    True
    >>> OptionBuilder.unspecified().merge(OptionBuilder.some(ScalarBuilder(3))).try_build()
    3
    """

    state: OptionState = OptionState.UNSPECIFIED
    inner: ConfigurationBuilder[T] | None = None

    @classmethod
    def unspecified(cls) -> OptionBuilder[T]:
        return cls()

    @classmethod
    def explicit_none(cls) -> OptionBuilder[T]:
        return cls(OptionState.NONE)

    @classmethod
    def some(cls, inner: ConfigurationBuilder[T]) -> OptionBuilder[T]:
        return cls(OptionState.SOME, inner)

    def __post_init__(self) -> None:
        if (self.state is OptionState.SOME) != (self.inner is not None):
            raise ValueError(f"{self.state.name} option with inner={self.inner!r}")

    def merge(self, other: OptionBuilder[T]) -> OptionBuilder[T]:
        if self.state is OptionState.UNSPECIFIED:
            return other
        if self.inner is not None and other.inner is not None:
            return OptionBuilder.some(self.inner.merge(other.inner))
        return self

    def try_build(self) -> T | None:
        if self.inner is None:
            return None
        return self.inner.try_build()

    def contains_non_secret_data(self) -> bool:
        if self.inner is not None:
            return self.inner.contains_non_secret_data()
        # An explicit None overrides defaults just like a value would.
        return self.state is OptionState.NONE


@dataclass(frozen=True, slots=True)
class UnkeyedContainerBuilder(ConfigurationBuilder[C]):
    """Builder for sequences and sets; the higher-priority container wins whole.

    Why
    ----
    Splicing lists element-wise across sources is rarely what operators expect;
    a list in an override replaces the list underneath it.

    Attributes
    ----------
    factory:
        Callable turning the built elements into the target container
        (``list``, ``set``, ``frozenset``, ``tuple``).
    items:
        Element builders, or ``None`` while no source supplied the container.
    """

    factory: Callable[[Iterable[Any]], C]
    items: tuple[ConfigurationBuilder[Any], ...] | None = None

    def merge(self, other: UnkeyedContainerBuilder[C]) -> UnkeyedContainerBuilder[C]:
        return other if self.items is None else self

    def try_build(self) -> C:
        if self.items is None:
            raise MissingValue()
        built: list[Any] = []
        for index, item in enumerate(self.items):
            try:
                built.append(item.try_build())
            except BuildError as exc:
                exc.prepend(index)
                raise
        return self.factory(built)

    def contains_non_secret_data(self) -> bool:
        if self.items is None:
            return False
        for index, item in enumerate(self.items):
            try:
                item.contains_non_secret_data()
            except UnexpectedSecret as exc:
                exc.prepend(index)
                raise
        # An explicitly empty container still counts as data and beats defaults.
        return True


@dataclass(frozen=True, slots=True)
class KeyedContainerBuilder(ConfigurationBuilder[C]):
    """Builder for mappings; keys are united and shared keys merge recursively.

    Examples
    --------
    >>> low = KeyedContainerBuilder(dict, {"a": ScalarBuilder(1), "b": ScalarBuilder(2)})
    >>> high = KeyedContainerBuilder(dict, {"b": ScalarBuilder(20)})
    >>> high.merge(low).try_build()
    {'b': 20, 'a': 1}
    """

    factory: Callable[[Mapping[Any, Any]], C]
    entries: Mapping[Any, ConfigurationBuilder[Any]] | None = None

    def merge(self, other: KeyedContainerBuilder[C]) -> KeyedContainerBuilder[C]:
        if self.entries is None:
            return other
        if other.entries is None:
            return self
        merged = dict(self.entries)
        for key, theirs in other.entries.items():
            ours = merged.get(key)
            merged[key] = theirs if ours is None else ours.merge(theirs)
        return KeyedContainerBuilder(self.factory, merged)

    def try_build(self) -> C:
        if self.entries is None:
            raise MissingValue()
        built: dict[Any, Any] = {}
        for key, value in self.entries.items():
            try:
                built[key] = value.try_build()
            except BuildError as exc:
                exc.prepend(key)
                raise
        return self.factory(built)

    def contains_non_secret_data(self) -> bool:
        if self.entries is None:
            return False
        for key, value in self.entries.items():
            try:
                value.contains_non_secret_data()
            except UnexpectedSecret as exc:
                exc.prepend(key)
                raise
        return True


@dataclass(frozen=True, slots=True)
class ArrayBuilder(ConfigurationBuilder[tuple[Any, ...]]):
    """Builder for fixed-size tuples; always holds one builder per position.

    Examples
    --------
    >>> high = ArrayBuilder((ScalarBuilder(0), ScalarBuilder()))
    >>> low = ArrayBuilder((ScalarBuilder(9), ScalarBuilder(1)))
    >>> high.merge(low).try_build()
    (0, 1)
    """

    elements: tuple[ConfigurationBuilder[Any], ...]

    def merge(self, other: ArrayBuilder) -> ArrayBuilder:
        return ArrayBuilder(tuple(ours.merge(theirs) for ours, theirs in zip(self.elements, other.elements, strict=True)))

    def try_build(self) -> tuple[Any, ...]:
        built: list[Any] = []
        for index, element in enumerate(self.elements):
            try:
                built.append(element.try_build())
            except BuildError as exc:
                exc.prepend(index)
                raise
        return tuple(built)

    def contains_non_secret_data(self) -> bool:
        found = False
        for index, element in enumerate(self.elements):
            try:
                found = element.contains_non_secret_data() or found
            except UnexpectedSecret as exc:
                exc.prepend(index)
                raise
        return found
