"""Binding of query parameters onto dataclass instances.

Fields take part when their metadata holds a "query" name, for example
``field(default=0, metadata={"query": "id"})``. List fields accept
comma-separated values such as ``id=1,2,3``. Untagged fields holding a
dataclass instance are bound recursively.
"""

from __future__ import annotations

import dataclasses
import math
import re
import types
import typing
from collections.abc import Mapping
from typing import Any

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_NAMED_TYPES: dict[str, Any] = {
    "int": int,
    "str": str,
    "float": float,
    "bool": bool,
    "bytes": bytes,
    "list": list,
    "dict": dict,
    "None": type(None),
    "NoneType": type(None),
    "Any": Any,
}


class BindError(ValueError):
    """Raised when a query value cannot be bound to its field."""


def _type_name(annotation: Any) -> str:
    return getattr(annotation, "__name__", str(annotation))


def _split_top(text: str, separator: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    start = 0
    for index, char in enumerate(text):
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        elif char == separator and depth == 0:
            parts.append(text[start:index].strip())
            start = index + 1
    parts.append(text[start:].strip())
    return parts


def _union(args: list[Any]) -> Any:
    if len(args) == 1:
        return args[0]
    return typing.Union[tuple(args)]


def _resolve_text(text: str, current: Any) -> Any:
    text = text.strip()
    alternatives = _split_top(text, "|")
    if len(alternatives) > 1:
        return _union([_resolve_text(part, None) for part in alternatives])
    head, bracket, rest = text.partition("[")
    name = head.strip().rpartition(".")[2]
    if bracket:
        if not rest.endswith("]"):
            return text
        args = [_resolve_text(part, None) for part in _split_top(rest[:-1], ",")]
        if name == "Optional":
            return _union([args[0], type(None)])
        if name == "Union":
            return _union(args)
        if name in ("list", "List"):
            return list[args[0]]
        if name in ("dict", "Dict"):
            return dict
        return text
    if name in _NAMED_TYPES:
        return _NAMED_TYPES[name]
    if current is not None and type(current).__name__ == name:
        return type(current)
    return text


def _field_type(field: dataclasses.Field, current: Any) -> Any:
    annotation = field.type
    if isinstance(annotation, str):
        return _resolve_text(annotation, current)
    return annotation


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = typing.get_args(annotation)
        rest = [arg for arg in args if arg is not type(None)]
        if len(rest) == 1 and len(rest) != len(args):
            return rest[0], True
    return annotation, False


def _invalid(kind: str, query_tag: str, text: str, reason: str) -> BindError:
    return BindError(f"invalid {kind} in '{query_tag}': parsing {text!r}: {reason}")


def _parse_int(text: str, query_tag: str) -> int:
    if not _INT_PATTERN.fullmatch(text):
        raise _invalid("int", query_tag, text, "invalid syntax")
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise _invalid("int", query_tag, text, "value out of range")
    return number


def _parse_float(text: str, query_tag: str) -> float:
    if not text or "_" in text or text != text.strip():
        raise _invalid("float64", query_tag, text, "invalid syntax")
    try:
        number = float(text)
    except ValueError:
        try:
            number = float.fromhex(text)
        except ValueError:
            raise _invalid("float64", query_tag, text, "invalid syntax") from None
    if math.isinf(number) and "inf" not in text.lower():
        raise _invalid("float64", query_tag, text, "value out of range")
    return number


def _parse_bool(text: str, query_tag: str) -> bool:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise _invalid("bool", query_tag, text, "invalid syntax")


def bind_primitive(annotation: Any, raw: str, query_tag: str) -> Any:
    """Convert raw to a str, int, float or bool; strings are not trimmed."""
    trimmed = raw.strip()
    if annotation is str:
        return raw
    if annotation is bool:
        return _parse_bool(trimmed, query_tag)
    if annotation is int:
        return _parse_int(trimmed, query_tag)
    if annotation is float:
        return _parse_float(trimmed, query_tag)
    raise BindError(f"unsupported primitive type: {_type_name(annotation)}")


def bind_slice(annotation: Any, raw: str, query_tag: str) -> list[Any]:
    """Convert a comma-separated raw value to a list of the element type."""
    args = typing.get_args(annotation)
    if not args:
        raise BindError(f"unsupported slice element type: {_type_name(annotation)}")
    parts = raw.split(",")
    elem, optional = _unwrap_optional(args[0])
    if optional:
        return [bind_primitive(elem, part, query_tag) for part in parts]
    if elem is str:
        return parts
    if elem is int:
        return [_parse_int(part.strip(), query_tag) for part in parts]
    if elem is float:
        return [_parse_float(part.strip(), query_tag) for part in parts]
    raise BindError(f"unsupported slice element type: {_type_name(elem)}")


def bind_value(annotation: Any, raw: str, query_tag: str) -> Any:
    """Convert raw according to annotation: optional, list or primitive."""
    if isinstance(annotation, str):
        annotation = _resolve_text(annotation, None)
    inner, optional = _unwrap_optional(annotation)
    if optional:
        return bind_value(inner, raw, query_tag)
    if typing.get_origin(annotation) is list or annotation is list:
        return bind_slice(annotation, raw, query_tag)
    return bind_primitive(annotation, raw, query_tag)


def _query_param(query: Mapping[str, Any], key: str) -> str:
    value = query.get(key)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    values = list(value)
    return str(values[0]) if values else ""


def _bind_struct(target: Any, query: Mapping[str, Any]) -> None:
    for field in dataclasses.fields(target):
        query_tag = field.metadata.get("query", "")
        current = getattr(target, field.name, None)
        if not query_tag:
            if dataclasses.is_dataclass(current) and not isinstance(current, type):
                _bind_struct(current, query)
            continue
        raw = _query_param(query, query_tag)
        if raw == "":
            continue
        value = bind_value(_field_type(field, current), raw, query_tag)
        try:
            setattr(target, field.name, value)
        except dataclasses.FrozenInstanceError:
            continue


def bind_query(target: Any, query: Mapping[str, Any]) -> Any:
    """Bind query parameters onto a dataclass instance and return it.

    Query values may be strings or sequences of strings; the first is used.
    """
    if target is None or isinstance(target, type):
        raise BindError("binder expects pointer to struct")
    if not dataclasses.is_dataclass(target):
        raise BindError("binder expects struct")
    _bind_struct(target, query)
    return target