"""Compact, HTML-safe JSON encoding and decoding."""

from __future__ import annotations

import dataclasses
import io
import json
from typing import IO, Any

_ESCAPES = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON literal: {name}")


_DECODER = json.JSONDecoder(parse_constant=_reject_constant)


def _map_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, int) and not isinstance(key, bool):
        return str(key)
    raise TypeError(f"unsupported map key type: {type(key).__name__}")


def _prepare(value: Any) -> Any:
    """Turn a value into plain JSON data, sorting mapping keys."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: _prepare(getattr(value, field.name))
            for field in dataclasses.fields(value)
        }
    if isinstance(value, dict):
        items = ((_map_key(k), _prepare(v)) for k, v in value.items())
        return dict(sorted(items, key=lambda item: item[0]))
    if isinstance(value, (list, tuple)):
        return [_prepare(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return [_prepare(item) for item in value]
    return value


def marshal(value: Any) -> bytes:
    """Encode a value as compact JSON bytes.

    Mapping keys are sorted, dataclass fields keep their declared order and
    HTML-sensitive characters are escaped.
    """
    text = json.dumps(
        _prepare(value),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.translate(_ESCAPES).encode("utf-8")


def unmarshal(data: bytes | bytearray | str) -> Any:
    """Decode JSON text or bytes; raises ValueError on invalid input."""
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    return json.loads(data, parse_constant=_reject_constant)


def encode(value: Any, stream: IO[Any]) -> None:
    """Write a value as JSON followed by a newline to a text or binary stream."""
    payload = marshal(value) + b"\n"
    if isinstance(stream, io.TextIOBase):
        stream.write(payload.decode("utf-8"))
    else:
        stream.write(payload)


def decode(stream: IO[Any]) -> Any:
    """Read the first JSON value from a text or binary stream."""
    content = stream.read()
    if isinstance(content, (bytes, bytearray)):
        content = bytes(content).decode("utf-8")
    start = len(content) - len(content.lstrip())
    if start == len(content):
        raise EOFError("no JSON value in stream")
    value, _ = _DECODER.raw_decode(content, start)
    return value