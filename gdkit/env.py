"""Detection of the current deployment environment."""

from __future__ import annotations

import functools
import os

DEVELOPMENT = "development"
ALPHA = "alpha"
BETA = "beta"
STAGING = "staging"
PRODUCTION = "production"

ENV_VAR = "GDK_ENV"


@functools.lru_cache(maxsize=None)
def get_current() -> str:
    """Return the environment from GDK_ENV, read once; development by default."""
    return os.environ.get(ENV_VAR) or DEVELOPMENT


def reset() -> None:
    """Forget the cached environment so the next call reads it again."""
    get_current.cache_clear()


def is_development() -> bool:
    return get_current() == DEVELOPMENT


def is_alpha() -> bool:
    return get_current() == ALPHA


def is_beta() -> bool:
    return get_current() == BETA


def is_staging() -> bool:
    return get_current() == STAGING


def is_production() -> bool:
    return get_current() == PRODUCTION