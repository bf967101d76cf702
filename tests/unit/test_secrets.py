from __future__ import annotations

import pytest

from lib_typed_config.domain.builders import OptionBuilder, ScalarBuilder
from lib_typed_config.domain.errors import MissingValue, UnexpectedSecret
from lib_typed_config.domain.secrets import SecretBuilder, SecretOption, SecretString


def test_secret_builder_is_transparent_for_merge_and_build() -> None:
    high = SecretBuilder(ScalarBuilder())
    low = SecretBuilder(ScalarBuilder("from-low"))
    assert high.merge(low).try_build() == "from-low"


def test_empty_secret_does_not_taint() -> None:
    assert SecretBuilder(ScalarBuilder()).contains_non_secret_data() is False
    assert SecretBuilder(OptionBuilder.unspecified()).contains_non_secret_data() is False


def test_populated_secret_raises_with_empty_path() -> None:
    with pytest.raises(UnexpectedSecret) as info:
        SecretBuilder(ScalarBuilder("x")).contains_non_secret_data()
    assert len(info.value.path) == 0
    assert info.value.source is None


def test_secret_inside_secret_still_trips_outer_check() -> None:
    nested = SecretBuilder(SecretBuilder(ScalarBuilder("x")))
    with pytest.raises(UnexpectedSecret):
        nested.contains_non_secret_data()


def test_explicit_none_inside_secret_counts_as_data() -> None:
    with pytest.raises(UnexpectedSecret):
        SecretBuilder(OptionBuilder.explicit_none()).contains_non_secret_data()


def test_secret_option() -> None:
    assert SecretOption().contains_non_secret_data() is False
    with pytest.raises(UnexpectedSecret):
        SecretOption(SecretString("x")).contains_non_secret_data()
    with pytest.raises(MissingValue):
        SecretOption().try_build()
    assert SecretOption().merge(SecretOption("b")).try_build() == "b"


def test_secret_string_redacts() -> None:
    secret = SecretString("hunter2")
    assert "hunter2" not in repr(secret)
    assert "hunter2" not in str(secret)
    assert f"{secret}" == "[redacted]"
    assert secret.expose_secret() == "hunter2"
    assert secret == SecretString("hunter2")
    assert secret != SecretString("other")
    assert len(secret) == 7


def test_secret_string_rejects_non_text() -> None:
    with pytest.raises(TypeError):
        SecretString(42)  # type: ignore[arg-type]
