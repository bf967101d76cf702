"""Dotted error paths accumulated while failures unwind the builder tree.

Purpose
-------
Give every build failure a precise location (``service.ports.1``) without the
builders having to know where they sit in the overall configuration. Each
recursive step that fails adds its own segment on the way back up, so the path
is collected innermost-first and rendered root-first.

Contents
--------
* :class:`KeyPath` – prepend-only accumulator with dotted rendering.
"""

from __future__ import annotations

from typing import Iterable


class KeyPath:
    """Accumulate field, index, and key segments while an error propagates.

    Why
    ----
    Builders are nested arbitrarily deep; only the caller knows the name under
    which a child builder is stored. Prepending during unwind keeps the children
    ignorant of their position.

    Examples
    --------
    >>> path = KeyPath()
    >>> path.prepend("secret")
    >>> path.prepend("public")
    >>> str(path)
    'public.secret'
    >>> path.segments
    ('public', 'secret')
    """

    __slots__ = ("_reversed",)

    def __init__(self, segments: Iterable[object] = ()) -> None:
        """Seed the path with root-first *segments* (mainly useful in tests)."""

        self._reversed: list[str] = [str(segment) for segment in reversed(list(segments))]

    def prepend(self, segment: object) -> None:
        """Record *segment* as the new outermost component of the path."""

        self._reversed.append(str(segment))

    @property
    def segments(self) -> tuple[str, ...]:
        """Return the segments ordered from the configuration root to the failure site."""

        return tuple(reversed(self._reversed))

    def __str__(self) -> str:
        return ".".join(self.segments)

    def __repr__(self) -> str:
        return f"KeyPath({list(self.segments)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyPath):
            return NotImplemented
        return self._reversed == other._reversed

    def __len__(self) -> int:
        return len(self._reversed)
