"""Small file helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TextIO


def open_file(filename: str | os.PathLike[str]) -> TextIO:
    """Open a file for appending, creating it and its parent directories."""
    path = Path(filename)
    if not file_exists(path):
        path.parent.mkdir(parents=True, exist_ok=True)
    return open(path, "a", encoding="utf-8")


def file_exists(filename: str | os.PathLike[str]) -> bool:
    """Return False only when the path is known not to exist."""
    try:
        os.stat(filename)
    except FileNotFoundError:
        return False
    except OSError:
        return True
    return True


def file_empty(name: str | os.PathLike[str]) -> bool:
    """Return True when the file is missing or has no content."""
    try:
        return os.stat(name).st_size <= 0
    except FileNotFoundError:
        return True


def read_file(path: str | os.PathLike[str]) -> str:
    """Return the file's text, or an empty string if it cannot be read."""
    clean = os.path.normpath(os.fspath(path))
    try:
        data = Path(clean).read_bytes()
    except OSError:
        return ""
    return data.decode("utf-8", errors="replace")