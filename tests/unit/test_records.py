"""Record and variant builders exercised directly, without schemas."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from lib_typed_config.domain.builders import ScalarBuilder
from lib_typed_config.domain.errors import FailedTryInto, MissingValue, UnexpectedSecret
from lib_typed_config.domain.records import FieldPlan, RecordBuilder, RecordShape, VariantBuilder
from lib_typed_config.domain.secrets import SecretBuilder


@dataclass
class Point:
    x: int
    y: int


POINT = RecordShape(Point, (FieldPlan("x"), FieldPlan("y", default=lambda: 0)))


def _point(x: int | None = None, y: int | None = None) -> RecordBuilder:
    return RecordBuilder(POINT, {"x": ScalarBuilder(x), "y": ScalarBuilder(y)})


def test_record_merges_field_wise() -> None:
    assert _point(x=1).merge(_point(x=5, y=2)).try_build() == Point(1, 2)


def test_default_used_only_without_data() -> None:
    assert _point(x=1).try_build() == Point(1, 0)
    assert _point(x=1, y=9).try_build() == Point(1, 9)


def test_missing_field_path_contains_field_name() -> None:
    with pytest.raises(MissingValue) as info:
        _point(y=1).try_build()
    assert str(info.value) == "Missing value for path `x`"


def test_record_presence_scans_every_field() -> None:
    shape = RecordShape(Point, (FieldPlan("x"), FieldPlan("y")))
    builder = RecordBuilder(shape, {"x": ScalarBuilder(1), "y": SecretBuilder(ScalarBuilder(2))})
    with pytest.raises(UnexpectedSecret) as info:
        builder.contains_non_secret_data()
    assert str(info.value.path) == "y"
    assert not _point().contains_non_secret_data()


def test_fallible_conversion_failure_is_path_tagged() -> None:
    def positive(value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    plan = FieldPlan("workers", convert=positive, fallible=True)
    assert plan.resolve(ScalarBuilder(3)) == 3
    with pytest.raises(FailedTryInto) as info:
        plan.resolve(ScalarBuilder(0))
    assert str(info.value.path) == "workers"
    assert isinstance(info.value.__cause__, ValueError)


def test_infallible_conversion_errors_propagate_unchanged() -> None:
    plan = FieldPlan("count", convert=int)
    with pytest.raises(ValueError):
        plan.resolve(ScalarBuilder("abc"))


def test_default_skips_conversion() -> None:
    plan = FieldPlan("root", default=lambda: "default", convert=str.upper)
    assert plan.resolve(ScalarBuilder()) == "default"
    assert plan.resolve(ScalarBuilder("x")) == "X"


def test_replace_swaps_one_field() -> None:
    replaced = _point().replace("x", ScalarBuilder(4))
    assert replaced.try_build() == Point(4, 0)
    with pytest.raises(KeyError):
        _point().replace("z", ScalarBuilder(1))


def test_variant_undefined_yields() -> None:
    chosen = VariantBuilder("Point", _point(x=1))
    assert VariantBuilder().merge(chosen) == chosen
    assert chosen.merge(VariantBuilder()) == chosen


def test_variant_same_tag_merges_payload() -> None:
    high = VariantBuilder("Point", _point(x=1))
    low = VariantBuilder("Point", _point(x=2, y=3))
    assert high.merge(low).try_build() == Point(1, 3)


def test_variant_different_tag_keeps_self_entirely() -> None:
    high = VariantBuilder("A", _point(y=1))
    low = VariantBuilder("B", _point(x=5, y=5))
    merged = high.merge(low)
    assert merged is high
    with pytest.raises(MissingValue) as info:
        merged.try_build()
    assert str(info.value.path) == "A.x"


def test_variant_presence() -> None:
    assert not VariantBuilder().contains_non_secret_data()
    assert VariantBuilder("Point", _point()).contains_non_secret_data()
    with pytest.raises(MissingValue):
        VariantBuilder().try_build()


def test_variant_tag_and_payload_come_together() -> None:
    with pytest.raises(ValueError):
        VariantBuilder("Point")
    with pytest.raises(ValueError):
        VariantBuilder(None, _point(x=1))


def test_variant_secret_path_names_tag() -> None:
    shape = RecordShape(Point, (FieldPlan("x"), FieldPlan("y")))
    secret = RecordBuilder(shape, {"x": ScalarBuilder(1), "y": SecretBuilder(ScalarBuilder(2))})
    with pytest.raises(UnexpectedSecret) as info:
        VariantBuilder("Point", secret).contains_non_secret_data()
    assert str(info.value.path) == "Point.y"
