"""Binding of path parameters, query strings and request bodies onto objects.

Targets are dataclass instances or mutable mappings. A dataclass field takes
its input name from its metadata under the tag in use ("param", "query",
"form", "json" or "xml"), falling back to the field name. Names are matched
case-insensitively. A field whose value (or type) has an ``unmarshal_param``
method decodes the raw string itself.
"""

from __future__ import annotations

import dataclasses
import email.policy
import json
import math
import re
import types
import typing
import xml.etree.ElementTree as ElementTree
from collections.abc import Mapping, MutableMapping
from email.parser import BytesParser
from http import HTTPStatus
from typing import Any
from urllib.parse import parse_qs

from gdkit.http_errors import HTTPError, unsupported_media_type

MIME_APPLICATION_JSON = "application/json"
MIME_APPLICATION_XML = "application/xml"
MIME_TEXT_XML = "text/xml"
MIME_APPLICATION_FORM = "application/x-www-form-urlencoded"
MIME_MULTIPART_FORM = "multipart/form-data"

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


class _JSONTypeError(ValueError):
    def __init__(self, expected: str, got: str, field: str) -> None:
        super().__init__(f"cannot unmarshal {got} into field {field} of type {expected}")
        self.expected = expected
        self.got = got
        self.field = field


def _bad_request(exc: BaseException, message: str | None = None) -> HTTPError:
    text = str(exc) if message is None else message
    return HTTPError(HTTPStatus.BAD_REQUEST, text).set_internal(exc)


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


def _is_list(annotation: Any) -> bool:
    return annotation is list or typing.get_origin(annotation) is list


def _list_elem(annotation: Any) -> Any:
    args = typing.get_args(annotation)
    return args[0] if args else str


def _is_instance(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _has_unmarshaler(value: Any) -> bool:
    return callable(getattr(value, "unmarshal_param", None))


def _assign(target: Any, name: str, value: Any) -> None:
    try:
        setattr(target, name, value)
    except dataclasses.FrozenInstanceError:
        pass


def _as_list(values: Any) -> list[str]:
    if isinstance(values, str):
        return [values]
    return [str(value) for value in values]


def _lookup(data: Mapping[str, Any], name: str) -> list[str] | None:
    if name in data:
        return _as_list(data[name])
    folded = name.casefold()
    for key, values in data.items():
        if key.casefold() == folded:
            return _as_list(values)
    return None


def _unmarshal_field(annotation: Any, text: str, current: Any) -> tuple[bool, Any]:
    inner, _ = _unwrap_optional(annotation)
    if _has_unmarshaler(current):
        current.unmarshal_param(text)
        return True, current
    if isinstance(inner, type) and _has_unmarshaler(inner):
        obj = inner()
        obj.unmarshal_param(text)
        return True, obj
    return False, None


def _parse_int(text: str) -> int:
    if text == "":
        text = "0"
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError(f'strconv.ParseInt: parsing "{text}": invalid syntax')
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise ValueError(f'strconv.ParseInt: parsing "{text}": value out of range')
    return number


def _parse_bool(text: str) -> bool:
    if text == "":
        text = "false"
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f'strconv.ParseBool: parsing "{text}": invalid syntax')


def _parse_float(text: str) -> float:
    if text == "":
        text = "0.0"
    error = ValueError(f'strconv.ParseFloat: parsing "{text}": invalid syntax')
    if "_" in text or text != text.strip():
        raise error
    try:
        number = float(text)
    except ValueError:
        try:
            number = float.fromhex(text)
        except ValueError:
            raise error from None
    if math.isinf(number) and "inf" not in text.lower():
        raise ValueError(f'strconv.ParseFloat: parsing "{text}": value out of range')
    return number


def _set_with_proper_type(annotation: Any, text: str, current: Any) -> Any:
    handled, value = _unmarshal_field(annotation, text, current)
    if handled:
        return value
    inner, optional = _unwrap_optional(annotation)
    if optional:
        return _set_with_proper_type(inner, text, None)
    if annotation is bool:
        return _parse_bool(text)
    if annotation is int:
        return _parse_int(text)
    if annotation is float:
        return _parse_float(text)
    if annotation is str:
        return text
    raise ValueError("unknown type")


def bind_data(target: Any, data: Mapping[str, Any] | None, tag: str) -> None:
    """Bind string values onto target using field names from metadata[tag].

    Values in data may be strings or sequences of strings. Raises ValueError
    when a value cannot be converted or the target is not bindable.
    """
    if target is None or not data:
        return
    if isinstance(target, MutableMapping):
        for key, values in data.items():
            items = _as_list(values)
            if items:
                target[key] = items[0]
        return
    if not _is_instance(target):
        raise ValueError("binding element must be a struct")

    for field in dataclasses.fields(target):
        current = getattr(target, field.name, None)
        annotation = _field_type(field, current)
        input_name = field.metadata.get(tag, "")
        if not input_name:
            input_name = field.name
            if not _has_unmarshaler(current) and _is_instance(current):
                bind_data(current, data, tag)
                continue

        values = _lookup(data, input_name)
        if not values:
            continue

        handled, value = _unmarshal_field(annotation, values[0], current)
        if handled:
            _assign(target, field.name, value)
            continue

        inner, _ = _unwrap_optional(annotation)
        if _is_list(inner):
            elem = _list_elem(inner)
            converted = [_set_with_proper_type(elem, item, None) for item in values]
            _assign(target, field.name, converted)
        else:
            _assign(
                target,
                field.name,
                _set_with_proper_type(annotation, values[0], current),
            )


def _normalise_query(query: Any) -> dict[str, list[str]]:
    if query is None:
        return {}
    if isinstance(query, (bytes, bytearray)):
        query = bytes(query).decode("utf-8")
    if isinstance(query, str):
        return parse_qs(query, keep_blank_values=True)
    return {key: _as_list(values) for key, values in query.items()}


def _parse_multipart(content_type: str, body: bytes) -> dict[str, list[str]]:
    header = b"Content-Type: " + content_type.encode("latin-1") + b"\r\n\r\n"
    message = BytesParser(policy=email.policy.HTTP).parsebytes(header + body)
    if not message.is_multipart():
        raise ValueError("no multipart boundary param in Content-Type")
    result: dict[str, list[str]] = {}
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if not name or part.get_filename():
            continue
        payload = part.get_payload(decode=True) or b""
        result.setdefault(str(name), []).append(payload.decode("utf-8", "replace"))
    return result


def form_params(content_type: str, body: bytes | str) -> dict[str, list[str]]:
    """Parse an url-encoded or multipart form body into name -> values."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    if content_type.startswith(MIME_MULTIPART_FORM):
        return _parse_multipart(content_type, body)
    return parse_qs(
        body.decode("utf-8"), keep_blank_values=True, encoding="utf-8", errors="strict"
    )


def _json_kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _type_name(annotation: Any) -> str:
    return getattr(annotation, "__name__", str(annotation))


def _json_value(annotation: Any, value: Any, field: str, current: Any) -> Any:
    inner, optional = _unwrap_optional(annotation)
    if value is None:
        return None if optional else current
    annotation = inner

    def mismatch() -> _JSONTypeError:
        return _JSONTypeError(_type_name(annotation), _json_kind(value), field)

    if annotation is bool:
        if not isinstance(value, bool):
            raise mismatch()
        return value
    if annotation is int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise mismatch()
        return value
    if annotation is float:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise mismatch()
        return float(value)
    if annotation is str:
        if not isinstance(value, str):
            raise mismatch()
        return value
    if _is_list(annotation):
        if not isinstance(value, list):
            raise mismatch()
        elem = _list_elem(annotation)
        return [_json_value(elem, item, field, None) for item in value]
    if annotation is dict or typing.get_origin(annotation) is dict:
        if not isinstance(value, dict):
            raise mismatch()
        return dict(value)
    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        if not isinstance(value, dict):
            raise mismatch()
        obj = current if isinstance(current, annotation) else None
        if obj is None:
            try:
                obj = annotation()
            except TypeError as exc:
                raise ValueError(f"cannot create {annotation.__name__}") from exc
        _json_into(obj, value, field)
        return obj
    return value


def _json_into(target: Any, obj: Any, path: str = "") -> None:
    if obj is None:
        return
    if isinstance(target, MutableMapping):
        if not isinstance(obj, dict):
            raise _JSONTypeError("map", _json_kind(obj), path)
        target.update(obj)
        return
    if not _is_instance(target):
        raise ValueError("binding element must be a struct or a map")
    if not isinstance(obj, dict):
        raise _JSONTypeError(type(target).__name__, _json_kind(obj), path)

    names = {}
    for field in dataclasses.fields(target):
        json_name = field.metadata.get("json", field.name)
        if json_name != "-":
            names[json_name] = field
    for key, value in obj.items():
        field = names.get(key)
        if field is None:
            folded = key.casefold()
            field = next(
                (f for n, f in names.items() if n.casefold() == folded), None
            )
        if field is None:
            continue
        field_path = f"{path}.{key}" if path else key
        current = getattr(target, field.name, None)
        annotation = _field_type(field, current)
        _assign(target, field.name, _json_value(annotation, value, field_path, current))


def _xml_into(target: Any, element: ElementTree.Element) -> None:
    if isinstance(target, MutableMapping):
        for child in element:
            target[child.tag] = child.text or ""
        return
    for field in dataclasses.fields(target):
        name = field.metadata.get("xml", field.name)
        children = element.findall(name)
        if not children:
            continue
        current = getattr(target, field.name, None)
        annotation = _field_type(field, current)
        inner, _ = _unwrap_optional(annotation)
        if _is_instance(current):
            _xml_into(current, children[0])
        elif _is_list(inner):
            elem = _list_elem(inner)
            values = [
                _set_with_proper_type(elem, child.text or "", None) for child in children
            ]
            _assign(target, field.name, values)
        else:
            text = children[0].text or ""
            _assign(
                target, field.name, _set_with_proper_type(annotation, text, current)
            )


def _bind_json(target: Any, body: bytes) -> None:
    try:
        obj = json.loads(body.decode("utf-8"))
    except json.JSONDecodeError as exc:
        raise _bad_request(
            exc, f"syntax error: offset={exc.pos}, error={exc.msg}"
        ) from exc
    except UnicodeDecodeError as exc:
        raise _bad_request(exc) from exc
    try:
        _json_into(target, obj)
    except _JSONTypeError as exc:
        raise _bad_request(
            exc,
            "unmarshal type error: "
            f"expected={exc.expected}, got={exc.got}, field={exc.field}",
        ) from exc
    except ValueError as exc:
        raise _bad_request(exc) from exc


def _bind_xml(target: Any, body: bytes) -> None:
    if not isinstance(target, MutableMapping) and not _is_instance(target):
        exc = ValueError(f"unsupported type: {type(target).__name__}")
        raise _bad_request(
            exc,
            f"unsupported type error: type={type(target).__name__}, error={exc}",
        ) from exc
    try:
        root = ElementTree.fromstring(body)
    except ElementTree.ParseError as exc:
        raise _bad_request(
            exc, f"syntax error: line={exc.position[0]}, error={exc}"
        ) from exc
    try:
        _xml_into(target, root)
    except ValueError as exc:
        raise _bad_request(exc) from exc


def bind(
    target: Any,
    path_params: Mapping[str, str] | None = None,
    query: Any = None,
    content_type: str = "",
    body: bytes | str | None = None,
) -> Any:
    """Bind path parameters, the query and the body onto target and return it.

    Raises HTTPError 400 when a value cannot be bound and 415 for a body of
    an unsupported content type.
    """
    params = {key: [value] for key, value in (path_params or {}).items()}
    for data, tag in ((params, "param"), (_normalise_query(query), "query")):
        try:
            bind_data(target, data, tag)
        except ValueError as exc:
            raise _bad_request(exc) from exc

    if not body:
        return target
    if isinstance(body, str):
        body = body.encode("utf-8")

    if content_type.startswith(MIME_APPLICATION_JSON):
        _bind_json(target, body)
    elif content_type.startswith((MIME_APPLICATION_XML, MIME_TEXT_XML)):
        _bind_xml(target, body)
    elif content_type.startswith((MIME_APPLICATION_FORM, MIME_MULTIPART_FORM)):
        try:
            form = form_params(content_type, body)
            bind_data(target, form, "form")
        except ValueError as exc:
            raise _bad_request(exc) from exc
    else:
        raise unsupported_media_type()
    return target