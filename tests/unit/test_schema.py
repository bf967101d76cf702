"""Annotation-driven schemas: shapes, coercion, and declaration options."""

from __future__ import annotations

from dataclasses import make_dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any, Literal
from uuid import UUID

import pytest

from lib_typed_config.application.schema import (
    ArraySchema,
    KeyedSchema,
    OptionSchema,
    RecordSchema,
    ScalarSchema,
    SecretSchema,
    UnkeyedSchema,
    VariantSchema,
    config_field,
    register_scalar,
    schema_for,
)
from lib_typed_config.domain.errors import InvalidFormat, UnexpectedSecret
from lib_typed_config.domain.secrets import SecretString
from tests.support import (
    AnnotatedSecret,
    Converted,
    Disabled,
    Level,
    Listener,
    OptionalListener,
    Renamed,
    SecretLeaf,
    Server,
    Tcp,
    Tree,
)


@pytest.mark.parametrize(
    ("annotation", "kind"),
    [
        (int, ScalarSchema),
        (int | None, OptionSchema),
        (list[int], UnkeyedSchema),
        (set[str], UnkeyedSchema),
        (tuple[int, ...], UnkeyedSchema),
        (tuple[int, str], ArraySchema),
        (dict[str, int], KeyedSchema),
        (Server, RecordSchema),
        (Tcp | Disabled, VariantSchema),
    ],
)
def test_schema_kinds(annotation: Any, kind: type) -> None:
    assert isinstance(schema_for(annotation), kind)


def test_schemas_are_cached() -> None:
    assert schema_for(Server) is schema_for(Server)


def test_unsupported_annotation_raises_type_error() -> None:
    class Opaque:
        pass

    with pytest.raises(TypeError):
        schema_for(Opaque)
    with pytest.raises(TypeError):
        schema_for(int | str)


def test_union_rejects_variants_sharing_a_class_name() -> None:
    first = make_dataclass("Endpoint", [("host", str)])
    second = make_dataclass("Endpoint", [("path", str)])

    with pytest.raises(TypeError, match="Endpoint"):
        schema_for(first | second)


@pytest.mark.parametrize(
    ("annotation", "raw", "expected"),
    [
        (int, "42", 42),
        (float, "2.5", 2.5),
        (bool, "yes", True),
        (bool, "off", False),
        (Decimal, "1.10", Decimal("1.10")),
        (Path, "/tmp/x", Path("/tmp/x")),
        (datetime, "2024-01-02T03:04:05", datetime(2024, 1, 2, 3, 4, 5)),
        (timedelta, "90", timedelta(seconds=90)),
        (UUID, "12345678-1234-5678-1234-567812345678", UUID("12345678-1234-5678-1234-567812345678")),
        (Level, "debug", Level.DEBUG),
        (Level, "INFO", Level.INFO),
        (Literal["a", "b"], "b", "b"),
        (Literal[1, 2], "2", 2),
    ],
)
def test_scalars_coerce_strings(annotation: Any, raw: object, expected: object) -> None:
    assert schema_for(annotation).load(raw).try_build() == expected


@pytest.mark.parametrize(
    ("annotation", "raw"),
    [
        (int, "forty"),
        (int, True),
        (int, 1.5),
        (bool, "maybe"),
        (str, 5),
        (Decimal, "nan-ish"),
        (Level, "trace"),
        (Literal["a"], "c"),
    ],
)
def test_scalar_rejections_become_invalid_format(annotation: Any, raw: object) -> None:
    with pytest.raises(InvalidFormat):
        schema_for(annotation).load(raw, ("section", "value"))


def test_invalid_format_names_location() -> None:
    with pytest.raises(InvalidFormat, match="`server.port`"):
        schema_for(dict[str, Server]).load({"server": {"host": "h", "port": "eighty"}})


def test_none_means_unset_for_scalars_and_explicit_for_options() -> None:
    assert not schema_for(int).load(None).contains_non_secret_data()
    assert schema_for(int | None).load(None).contains_non_secret_data()
    assert schema_for(int | None).load(None).try_build() is None


def test_record_ignores_unknown_keys_and_fills_missing() -> None:
    builder = schema_for(Server).load({"host": "example", "unrelated": 1})
    assert builder.try_build() == Server("example", 8080)


def test_record_rejects_non_mapping() -> None:
    with pytest.raises(InvalidFormat, match="expected a table"):
        schema_for(Server).load([1, 2])


def test_indexed_mappings_load_as_sequences() -> None:
    builder = schema_for(list[int]).load({"1": "20", "0": "10"})
    assert builder.try_build() == [10, 20]


def test_array_length_must_match() -> None:
    schema = schema_for(tuple[int, int])
    assert schema.load([1, 2]).try_build() == (1, 2)
    with pytest.raises(InvalidFormat):
        schema.load([1, 2, 3])
    partial = schema.load({"1": "5"})
    assert partial.merge(schema.load([9, 9])).try_build() == (9, 5)


def test_mapping_keys_are_coerced() -> None:
    builder = schema_for(dict[int, str]).load({"1": "one"})
    assert builder.try_build() == {1: "one"}


def test_variant_loading_forms() -> None:
    schema = schema_for(Listener)
    tcp = schema.load({"endpoint": {"Tcp": {"host": "h", "port": 1}}}).try_build()
    assert tcp == Listener(Tcp("h", 1))
    disabled = schema.load({"endpoint": "Disabled"}).try_build()
    assert disabled == Listener(Disabled())
    with pytest.raises(InvalidFormat, match="expected one of"):
        schema.load({"endpoint": {"Pipe": {}}})


def test_optional_variant_defaults_to_none() -> None:
    assert schema_for(OptionalListener).empty().try_build() == OptionalListener()


def test_recursive_dataclass() -> None:
    builder = schema_for(Tree).load({"value": 1, "child": {"value": 2}})
    assert builder.try_build() == Tree(1, Tree(2))


def test_secret_declarations_wrap_schema() -> None:
    assert isinstance(schema_for(SecretLeaf).field_schema("token"), SecretSchema)
    assert isinstance(schema_for(AnnotatedSecret).field_schema("api_key"), SecretSchema)
    with pytest.raises(UnexpectedSecret) as info:
        schema_for(SecretLeaf).load({"token": "t"}).contains_non_secret_data()
    assert str(info.value.path) == "token"


def test_secret_string_type_is_tainted() -> None:
    builder = schema_for(dict[str, SecretString]).load({"db": "pw"})
    with pytest.raises(UnexpectedSecret) as info:
        builder.contains_non_secret_data()
    assert str(info.value.path) == "db"
    assert builder.try_build()["db"].expose_secret() == "pw"


def test_renamed_and_skipped_fields() -> None:
    schema = schema_for(Renamed)
    built = schema.load({"log-level": "debug", "cached": 1}).try_build()
    assert built == Renamed(log_level=Level.DEBUG)
    assert built.cached == 7
    assert schema.field_name("log-level") == "log_level"


def test_conversions_use_intermediate_type() -> None:
    built = schema_for(Converted).load({"workers": "4", "root": "/data"}).try_build()
    assert built == Converted(workers=4, root=Path("/data"))
    assert schema_for(Converted).load({"workers": "2"}).try_build().root == Path("/srv")


def test_config_field_rejects_conflicting_conversions() -> None:
    with pytest.raises(TypeError):
        config_field(from_type=str, try_from=str)
    with pytest.raises(TypeError):
        config_field(skip=True)


def test_register_scalar_adds_leaf_type() -> None:
    class Version(tuple):
        pass

    def parse(raw: object) -> Version:
        if not isinstance(raw, str):
            raise TypeError("expected text")
        return Version(int(part) for part in raw.split("."))

    register_scalar(Version, parse)
    assert schema_for(list[Version]).load(["1.2", "3.4"]).try_build() == [(1, 2), (3, 4)]


def test_register_scalar_secret_flag_taints() -> None:
    class Token(str):
        pass

    register_scalar(Token, secret=True)
    with pytest.raises(UnexpectedSecret):
        schema_for(Token).load("abc").contains_non_secret_data()
