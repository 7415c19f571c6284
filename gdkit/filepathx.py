"""Locating a project's root directory."""

from __future__ import annotations

import os

MAX_DEPTH = 100


def find_project_abs(
    start: str | os.PathLike[str] | None = None,
    marker: str = "pyproject.toml",
) -> str:
    """Return the nearest ancestor of `start` (default: cwd) containing `marker`.

    Raises FileNotFoundError when no such directory is found.
    """
    prefix = f"can't find {marker} in parent ancestor"
    try:
        path = os.path.abspath(os.fspath(start) if start is not None else ".")
    except OSError as exc:
        raise FileNotFoundError(
            f"{prefix}: cannot find absolute path of '.'"
        ) from exc

    depth = 0
    while True:
        if depth > MAX_DEPTH:
            raise FileNotFoundError(
                f"{prefix}: '{path}' nested more than {MAX_DEPTH} level"
            )
        if path == "/":
            raise FileNotFoundError(prefix)
        try:
            entries = os.listdir(path)
        except OSError as exc:
            raise FileNotFoundError(f"{prefix}: cannot read in '{path}'") from exc
        if marker in entries:
            return path
        parent = os.path.dirname(path)
        if parent == path:
            raise FileNotFoundError(f"{prefix}: stuck in {parent}")
        path = parent
        depth += 1