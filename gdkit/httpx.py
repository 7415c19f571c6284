"""HTTP client interfaces and a stand-in response body for tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Client(Protocol):
    """Anything that sends an HTTP request and returns the response."""

    def do(self, request: Any) -> Any: ...


@runtime_checkable
class ReadCloser(Protocol):
    """A readable, closable body."""

    def read(self, size: int = -1) -> bytes: ...

    def close(self) -> None: ...


@dataclass
class Dummy:
    """A response body whose read and close fail with preset errors."""

    read_err: BaseException | None = None
    close_err: BaseException | None = None

    def read(self, size: int = -1) -> bytes:
        """Raise read_err if set, otherwise return a single byte."""
        if self.read_err is not None:
            raise self.read_err
        return b"\x00"

    def close(self) -> None:
        """Raise close_err if set."""
        if self.close_err is not None:
            raise self.close_err


def new_dummy(err: BaseException | None) -> Dummy:
    """Return a Dummy whose read and close both fail with err."""
    return Dummy(read_err=err, close_err=err)