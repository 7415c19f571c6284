"""Introspection of the calling function and source line."""

from __future__ import annotations

import sys
from pathlib import Path


def name(skip: int = 1) -> str:
    """Return 'module.qualname' of the function `skip` frames up the stack."""
    try:
        frame = sys._getframe(skip)
    except ValueError:
        return ""
    code = frame.f_code
    qualname = getattr(code, "co_qualname", code.co_name)
    module = Path(code.co_filename).stem
    return f"{module}.{qualname}" if module else qualname


def line(skip: int = 1) -> str:
    """Return 'path:line' of the code `skip` frames up the stack."""
    try:
        frame = sys._getframe(skip)
    except ValueError:
        return ""
    return f"{frame.f_code.co_filename}:{frame.f_lineno}"