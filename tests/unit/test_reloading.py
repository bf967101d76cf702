from __future__ import annotations

import os
import signal
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

from lib_typed_config import ConfigBuilder, FileSource, ReloadingConfig
from lib_typed_config.domain.errors import ConfigError
from tests.support import Param, write_file


def _builder(path: Path) -> ConfigBuilder[Param]:
    return ConfigBuilder(Param).override_with(FileSource(path))


def test_reload_picks_up_file_changes(tmp_path: Path) -> None:
    path = write_file(tmp_path, "app.toml", "param = 1\n")
    config = ReloadingConfig.from_builder(_builder(path))
    assert config.load() == Param(1)
    path.write_text("param = 2\n", encoding="utf-8")
    config.reload()
    assert config.load() == Param(2)


def test_failed_reload_keeps_previous_value_and_skips_callback(tmp_path: Path) -> None:
    path = write_file(tmp_path, "app.toml", "param = 1\n")
    calls: list[str] = []
    config = ReloadingConfig.from_builder(_builder(path), on_update=lambda: calls.append("updated"))
    path.write_text("param = 'not a number'\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        config.reload()
    assert config.load() == Param(1)
    assert calls == []


def test_on_update_runs_after_successful_reload() -> None:
    values = iter([1, 2])
    calls: list[int] = []
    config: ReloadingConfig[int] = ReloadingConfig(lambda: next(values))
    config = config.with_on_update(lambda: calls.append(config.load()))
    config.reload()
    assert calls == [2]


def test_with_on_update_shares_published_value() -> None:
    values = iter([1, 2])
    original: ReloadingConfig[int] = ReloadingConfig(lambda: next(values))
    copy = original.with_on_update(lambda: None)
    copy.reload()
    assert original.load() == 2


@pytest.mark.skipif(sys.platform == "win32", reason="SIGHUP is POSIX only")
def test_signal_handler_reloads(tmp_path: Path) -> None:
    path = write_file(tmp_path, "app.toml", "param = 1\n")
    config = ReloadingConfig.from_builder(_builder(path))
    previous = config.set_signal_handler()
    try:
        path.write_text("param = 3\n", encoding="utf-8")
        os.kill(os.getpid(), signal.SIGHUP)
        assert config.load() == Param(3)
        path.write_text("param = [", encoding="utf-8")
        os.kill(os.getpid(), signal.SIGHUP)
        assert config.load() == Param(3)
    finally:
        signal.signal(signal.SIGHUP, previous)


_NESTED_SIGNAL_SCRIPT = textwrap.dedent(
    """
    import os
    import signal

    from lib_typed_config import ReloadingConfig

    values = iter(range(10))
    seen = []

    def build():
        value = next(values)
        if value == 1:
            os.kill(os.getpid(), signal.SIGHUP)
            seen.append(config.load())
        return value

    config = ReloadingConfig(build, on_update=lambda: seen.append(config.load()))
    config.set_signal_handler()
    config.reload()
    print(seen, config.load())
    """
)


@pytest.mark.skipif(sys.platform == "win32", reason="SIGHUP is POSIX only")
def test_signal_arriving_mid_reload_does_not_block() -> None:
    """A SIGHUP delivered while the main thread is reloading or reading must complete."""

    src = Path(__file__).resolve().parents[2] / "src"
    env = {**os.environ, "PYTHONPATH": os.pathsep.join(filter(None, [str(src), os.environ.get("PYTHONPATH")]))}
    result = subprocess.run(
        [sys.executable, "-c", _NESTED_SIGNAL_SCRIPT],
        capture_output=True,
        text=True,
        timeout=20,
        env=env,
        check=True,
    )
    # nested reload publishes 2, the reader sees it, then the outer reload publishes 1
    assert result.stdout.strip() == "[2, 2, 1] 1"
