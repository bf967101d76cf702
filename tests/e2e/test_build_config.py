"""End-to-end layering scenarios through :func:`read_config`.

Each test reads like an application: defaults in the dataclass, a shipped
document, and overrides stacked on top, lowest priority first.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lib_typed_config import (
    ConfigBuilder,
    DotEnvSource,
    EnvSource,
    FileSource,
    JsonSource,
    MissingValue,
    OffsetSource,
    ReloadingConfig,
    SourceError,
    TomlSource,
    UnexpectedSecret,
    read_config,
)
from tests.support import (
    Credentials,
    Disabled,
    Listener,
    Nested,
    OptionalListener,
    Param,
    Server,
    Service,
    Tcp,
    Unix,
    WithDefaultServer,
    WithOptional,
    write_file,
)


def test_later_document_overrides_earlier() -> None:
    assert read_config(Param, TomlSource("param = 1"), TomlSource("param = 2")) == Param(2)


def test_absent_optional_builds_none() -> None:
    assert read_config(WithOptional, TomlSource("")) == WithOptional(None)


def test_explicit_none_beats_lower_value_but_not_higher_absence() -> None:
    assert read_config(WithOptional, TomlSource("timeout = 5"), JsonSource('{"timeout": null}')) == WithOptional(None)
    assert read_config(WithOptional, JsonSource('{"timeout": null}'), TomlSource("")) == WithOptional(None)


def test_switching_variant_discards_lower_payload() -> None:
    low = TomlSource('[endpoint.Tcp]\nhost = "h"\nport = 1\n')

    assert read_config(Listener, low, JsonSource('{"endpoint": {"Unix": {"path": "/run/app.sock"}}}')) == Listener(
        Unix("/run/app.sock")
    )
    assert read_config(Listener, low, JsonSource('{"endpoint": "Disabled"}')) == Listener(Disabled())

    with pytest.raises(MissingValue) as info:
        read_config(Listener, low, JsonSource('{"endpoint": {"Unix": {}}}'))
    assert str(info.value.path) == "endpoint.Unix.path"


def test_same_variant_merges_fields() -> None:
    low = TomlSource('[endpoint.Tcp]\nhost = "h"\nport = 1\n')
    high = JsonSource('{"endpoint": {"Tcp": {"port": 2}}}')
    assert read_config(OptionalListener, low, high) == OptionalListener(Tcp("h", 2))


def test_default_does_not_fill_partial_nested_data() -> None:
    assert read_config(WithDefaultServer, TomlSource("")) == WithDefaultServer(Server("localhost", 1))
    with pytest.raises(MissingValue) as info:
        read_config(WithDefaultServer, TomlSource("[server]\nport = 5\n"))
    assert str(info.value.path) == "server.host"


def test_secret_path_reported_for_nested_secret() -> None:
    with pytest.raises(UnexpectedSecret) as info:
        read_config(Nested, TomlSource('[inner]\ntoken = "t"\n'))
    assert str(info.value.path) == "inner.token"
    assert "TomlSource" in str(info.value)


def test_application_style_stack(tmp_path: Path) -> None:
    """Shipped defaults, a deployment file, a mounted secret and the environment."""

    shipped = TomlSource('name = "api"\ntags = ["default"]\n[server]\nhost = "0.0.0.0"\n', name="shipped")
    deployed = write_file(tmp_path, "deploy.conf", '{"server": {"port": 8443}, "tags": ["prod", "eu"]}')
    secret = write_file(tmp_path, "credentials.toml", 'username = "svc"\npassword = "s3cret"\n')
    dotenv = write_file(tmp_path, ".env", "SERVER__HOST=10.0.0.5\n")
    environ = {"APP_NAME": "api-eu", "APP_TAGS__0": "canary"}

    config = read_config(
        Service,
        shipped,
        FileSource(deployed, format="json"),
        OffsetSource(FileSource(secret).allow_secrets(), "credentials"),
        DotEnvSource(dotenv),
        EnvSource("APP", environ=environ),
    )

    assert config.name == "api-eu"
    assert config.server == Server("10.0.0.5", 8443)
    assert config.tags == ["canary"]
    assert config.credentials == Credentials("svc", config.credentials.password)
    assert config.credentials.password.expose_secret() == "s3cret"


def test_reloading_picks_up_file_edits(tmp_path: Path) -> None:
    path = write_file(tmp_path, "app.toml", "param = 1\n")
    updates: list[int] = []
    builder = ConfigBuilder(Param).override_with(FileSource(path))
    config = ReloadingConfig.from_builder(builder, on_update=lambda: updates.append(1))

    path.write_text("param = 2\n", encoding="utf-8")
    config.reload()
    assert config.load() == Param(2)

    path.write_text("param = \n", encoding="utf-8")
    with pytest.raises(SourceError):
        config.reload()
    assert config.load() == Param(2)
    assert updates == [1]
