"""Allow ``python -m lib_typed_config build package.module:Config --file app.toml``."""

from __future__ import annotations

import sys

from .cli import main

if __name__ == "__main__":  # pragma: no cover - exercised via python -m
    raise SystemExit(main(sys.argv[1:], restore_traceback=False))
