"""HTTP errors that carry a status code, a message and an internal cause."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

_UNSET = object()


def _status_text(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


class HTTPError(Exception):
    """An error that occurred while handling a request.

    The message defaults to the standard text of the status code. An internal
    error from an external dependency can be attached with set_internal.
    """

    def __init__(self, code: int, message: Any = _UNSET) -> None:
        self.code = int(code)
        self.message = _status_text(self.code) if message is _UNSET else message
        self.internal: BaseException | None = None
        super().__init__(self.code, self.message)

    def set_internal(self, err: BaseException | None) -> HTTPError:
        """Attach the underlying error and return this error."""
        self.internal = err
        self.__cause__ = err
        return self

    def __str__(self) -> str:
        if self.internal is None:
            return f"code={self.code}, message={self.message}"
        return f"code={self.code}, message={self.message}, internal={self.internal}"

    def __repr__(self) -> str:
        return f"HTTPError(code={self.code!r}, message={self.message!r})"


def unsupported_media_type() -> HTTPError:
    """Return a fresh 415 Unsupported Media Type error."""
    return HTTPError(HTTPStatus.UNSUPPORTED_MEDIA_TYPE)