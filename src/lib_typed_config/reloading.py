"""Hold a built configuration and rebuild it on demand or on a signal.

Purpose
-------
Long-running services want to pick up configuration edits without a restart.
:class:`ReloadingConfig` keeps the current value in a shared cell, rebuilds it
with a user-supplied callable, and publishes the new value only when the build
succeeded.

Contents
--------
* :class:`ReloadingConfig` – load, reload, update callbacks, signal wiring.
"""

from __future__ import annotations

import copy
import signal
from types import FrameType
from typing import Any, Callable, Generic, TypeVar

from .observability import log_error, log_info, trace_scope

T = TypeVar("T")


class _Published(Generic[T]):
    """Value cell shared by a :class:`ReloadingConfig` and its copies.

    Publishing rebinds :attr:`value` in one step, so readers see either the old
    or the new configuration and never wait for a writer. No lock is taken:
    the signal handler runs on the main thread and may interrupt a reader.
    """

    __slots__ = ("value",)

    def __init__(self, value: T) -> None:
        self.value = value


class ReloadingConfig(Generic[T]):
    """Current configuration plus the recipe to rebuild it.

    Why
    ----
    A failed reload must never leave the service without configuration, so the
    previous value stays published until a new build succeeds.

    Parameters
    ----------
    build:
        Zero-argument callable returning a fresh configuration; usually
        ``ConfigBuilder(...).try_build`` or a function that also validates.
    on_update:
        Called after every successful :meth:`reload`.

    Examples
    --------
    >>> counter = iter(range(10))
    >>> config = ReloadingConfig(lambda: next(counter))
    >>> config.load()
    0
    >>> config.reload()
    >>> config.load()
    1
    """

    def __init__(self, build: Callable[[], T], *, on_update: Callable[[], None] | None = None) -> None:
        self._build = build
        self._on_update = on_update
        self._cell: _Published[T] = _Published(build())
        self._generation = 0

    @classmethod
    def from_builder(cls, builder: Any, *, on_update: Callable[[], None] | None = None) -> ReloadingConfig[Any]:
        """Wrap a :class:`~lib_typed_config.core.ConfigBuilder` so reloads re-read its sources."""

        return cls(builder.try_build, on_update=on_update)

    def load(self) -> T:
        """Return the most recently published configuration."""

        return self._cell.value

    def reload(self) -> None:
        """Rebuild and publish; on failure the error propagates and nothing changes."""

        self._cell.value = self._build()
        log_info("configuration_reloaded", source="reload", path=None)
        if self._on_update is not None:
            self._on_update()

    def with_on_update(self, on_update: Callable[[], None]) -> ReloadingConfig[T]:
        """Return a copy sharing the published value but using *on_update*."""

        clone = copy.copy(self)
        clone._on_update = on_update
        return clone

    def set_signal_handler(self, signum: int | None = None) -> Any:
        """Reload whenever *signum* (``SIGHUP`` by default) arrives.

        Failed reloads are logged and the previous configuration stays active.
        Returns the previously installed handler. Must be called from the main
        thread, as required by :func:`signal.signal`.
        """

        if signum is None:
            signum = signal.SIGHUP

        def _handle(received: int, _frame: FrameType | None) -> None:
            self._generation += 1
            with trace_scope(f"reload-{received}-{self._generation}"):
                try:
                    self.reload()
                except Exception as exc:  # noqa: BLE001 - a bad edit must not kill the process
                    log_error("configuration_reload_failed", source="signal", path=None, signal=received, error=str(exc))

        return signal.signal(signum, _handle)
