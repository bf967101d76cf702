"""Builders for composite targets: records (dataclasses) and tagged variants.

Purpose
-------
Merge user-declared configuration types field by field, apply per-field
defaults only when no source supplied data, and run declared conversions while
keeping error paths precise.

Contents
--------
* :class:`FieldPlan` – how one field is finished: default, conversion, name.
* :class:`RecordShape` – constructor plus the ordered field plans.
* :class:`RecordBuilder` – field-wise merging builder for record targets.
* :class:`VariantBuilder` – builder for a union of records selected by tag.

System Role
-----------
:class:`~lib_typed_config.application.schema.RecordSchema` derives a
:class:`RecordShape` from a dataclass once and hands it to every
:class:`RecordBuilder` it creates, so the builders themselves stay generic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from .builders import ConfigurationBuilder, has_non_secret_data
from .errors import BuildError, FailedTryInto, MissingValue, UnexpectedSecret


@dataclass(frozen=True, slots=True)
class FieldPlan:
    """Finishing instructions for a single record field.

    Attributes
    ----------
    name:
        Attribute name on the target; also the error-path segment.
    default:
        Zero-argument factory used when the field's builder holds no data.
    convert:
        Conversion applied to the built value (``from_type``/``try_from``).
    fallible:
        When ``True`` conversion errors become :class:`FailedTryInto`.
    """

    name: str
    default: Callable[[], Any] | None = None
    convert: Callable[[Any], Any] | None = None
    fallible: bool = False

    def resolve(self, builder: ConfigurationBuilder[Any]) -> Any:
        """Produce the final field value from *builder*.

        Defaults short-circuit before building; any :class:`BuildError` raised
        while building or converting gets this field's name prepended.
        """

        if self.default is not None and not has_non_secret_data(builder):
            return self.default()
        try:
            value = builder.try_build()
            if self.convert is not None:
                value = self._convert(self.convert, value)
        except BuildError as exc:
            exc.prepend(self.name)
            raise
        return value

    def _convert(self, convert: Callable[[Any], Any], value: Any) -> Any:
        if not self.fallible:
            return convert(value)
        try:
            return convert(value)
        except (TypeError, ValueError) as exc:
            raise FailedTryInto(exc) from exc


@dataclass(frozen=True, slots=True)
class RecordShape:
    """Constructor and field plans shared by all builders of one record type."""

    target: Callable[..., Any]
    fields: tuple[FieldPlan, ...]

    @property
    def name(self) -> str:
        return getattr(self.target, "__name__", repr(self.target))


@dataclass(frozen=True, slots=True)
class RecordBuilder(ConfigurationBuilder[Any]):
    """Builder holding one child builder per configurable field.

    Why
    ----
    Records are the unit users declare; merging them field-wise lets every
    source contribute a subset of fields.

    What
    ----
    ``values`` always contains an entry for each planned field (possibly an
    empty builder). Skipped fields are absent from both ``values`` and the shape
    and fall back to the dataclass default at construction time.
    """

    shape: RecordShape
    values: Mapping[str, ConfigurationBuilder[Any]]

    def merge(self, other: RecordBuilder) -> RecordBuilder:
        return RecordBuilder(
            self.shape,
            {name: builder.merge(other.values[name]) for name, builder in self.values.items()},
        )

    def try_build(self) -> Any:
        kwargs = {plan.name: plan.resolve(self.values[plan.name]) for plan in self.shape.fields}
        return self.shape.target(**kwargs)

    def contains_non_secret_data(self) -> bool:
        found = False
        for name, builder in self.values.items():
            try:
                found = builder.contains_non_secret_data() or found
            except UnexpectedSecret as exc:
                exc.prepend(name)
                raise
        return found

    def replace(self, name: str, builder: ConfigurationBuilder[Any]) -> RecordBuilder:
        """Return a copy whose field *name* holds *builder*."""

        if name not in self.values:
            raise KeyError(name)
        return RecordBuilder(self.shape, {**self.values, name: builder})


@dataclass(frozen=True, slots=True)
class VariantBuilder(ConfigurationBuilder[Any]):
    """Builder for "one of several records" targets.

    What
    ----
    ``tag`` names the selected record class; ``None`` means no source chose a
    variant yet. Builders with the same tag merge their payloads; with
    different tags the higher-priority selection wins outright.

    Examples
    --------
    >>> VariantBuilder().contains_non_secret_data()
    False
    """

    tag: str | None = None
    payload: RecordBuilder | None = None

    def __post_init__(self) -> None:
        if (self.tag is None) != (self.payload is None):
            raise ValueError(f"Variant tag {self.tag!r} and payload must be given together")

    def merge(self, other: VariantBuilder) -> VariantBuilder:
        if self.payload is None:
            return other
        if other.payload is None or other.tag != self.tag:
            return self
        return VariantBuilder(self.tag, self.payload.merge(other.payload))

    def try_build(self) -> Any:
        if self.tag is None or self.payload is None:
            raise MissingValue()
        try:
            return self.payload.try_build()
        except BuildError as exc:
            exc.prepend(self.tag)
            raise

    def contains_non_secret_data(self) -> bool:
        if self.tag is None or self.payload is None:
            return False
        try:
            self.payload.contains_non_secret_data()
        except UnexpectedSecret as exc:
            exc.prepend(self.tag)
            raise
        # Choosing a variant is itself data, even when its payload is empty.
        return True
