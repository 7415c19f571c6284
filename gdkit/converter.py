"""Lenient conversions between common value types and human formats."""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any

from gdkit import jsonx

BYTE = 1
KILOBYTE = 1 << 10
MEGABYTE = 1 << 20
GIGABYTE = 1 << 30
TERABYTE = 1 << 40
PETABYTE = 1 << 50
EXABYTE = 1 << 60

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)")

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_UNITS = (
    (EXABYTE, "E"),
    (PETABYTE, "P"),
    (TERABYTE, "T"),
    (GIGABYTE, "G"),
    (MEGABYTE, "M"),
    (KILOBYTE, "K"),
)

_MULTIPLES = {
    "E": EXABYTE, "EB": EXABYTE, "EIB": EXABYTE,
    "P": PETABYTE, "PB": PETABYTE, "PIB": PETABYTE,
    "T": TERABYTE, "TB": TERABYTE, "TIB": TERABYTE,
    "G": GIGABYTE, "GB": GIGABYTE, "GIB": GIGABYTE,
    "M": MEGABYTE, "MB": MEGABYTE, "MIB": MEGABYTE,
    "K": KILOBYTE, "KB": KILOBYTE, "KIB": KILOBYTE,
    "B": BYTE,
}

_ROMAN = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"),
    (100, "C"), (90, "XC"), (50, "L"), (40, "XL"),
    (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)


class InvalidByteQuantityError(ValueError):
    """Raised when a byte quantity string cannot be parsed."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "byte quantity must be a positive integer with a unit of "
            "measurement like M, MB, MiB, G, GiB, or GB"
        )


def _atoi(text: str) -> int | None:
    """Parse a plain signed decimal integer in the 64-bit range."""
    if not _INT_PATTERN.fullmatch(text):
        return None
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return None
    return number


def _bytes_text(value: bytes | bytearray | memoryview) -> str:
    return bytes(value).decode("utf-8", errors="replace")


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return format(Decimal(repr(value)).normalize(), "f")


def to_string(value: Any) -> str:
    """Convert any value to a string; unknown values are JSON-encoded."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _bytes_text(value)
    try:
        return jsonx.marshal(value).decode("utf-8")
    except (TypeError, ValueError):
        return ""


def to_bool(value: Any) -> bool:
    """Convert a value to bool; strings accept the usual true/false spellings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text in _TRUE_WORDS:
            return True
        return False
    if isinstance(value, int):
        return value != 0
    return False


def to_int(value: Any) -> int:
    """Convert a value to int, returning 0 when it cannot be converted."""
    if isinstance(value, str):
        return _atoi(value.strip()) or 0
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _atoi(_bytes_text(value)) or 0
    return 0


def to_float(value: Any) -> float:
    """Convert a value to float; strings must hold a whole number."""
    if isinstance(value, str):
        return float(_atoi(value.strip()) or 0)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return float(_atoi(_bytes_text(value)) or 0)
    return 0.0


def _json_list(text: str, kind: type) -> list | None:
    try:
        parsed = jsonx.unmarshal(text)
    except ValueError:
        return None
    if parsed is None or not isinstance(parsed, list):
        return None
    result = []
    for item in parsed:
        if item is None:
            result.append(kind())
        elif kind is int and isinstance(item, int) and not isinstance(item, bool):
            if not _INT64_MIN <= item <= _INT64_MAX:
                return None
            result.append(item)
        elif kind is str and isinstance(item, str):
            result.append(item)
        else:
            return None
    return result


def arr_int(value: Any) -> list[int] | None:
    """Convert a sequence or a JSON array string to a list of ints."""
    if isinstance(value, str):
        return _json_list(value, int)
    if isinstance(value, (list, tuple)):
        allowed = (int, str, bytes, bytearray)
        if not all(isinstance(item, allowed) for item in value):
            return None
        return [to_int(item) for item in value]
    return None


def arr_str(value: Any) -> list[str] | None:
    """Convert a JSON array string or a sequence of bytes to a list of strings."""
    if isinstance(value, str):
        return _json_list(value, str)
    if isinstance(value, (list, tuple)):
        if not all(isinstance(item, (bytes, bytearray)) for item in value):
            return None
        return [_bytes_text(item) for item in value]
    return None


def byte_size(num_bytes: int) -> str:
    """Return a human-readable size such as 10M or 12.5K."""
    if num_bytes < 0:
        raise ValueError("byte count must not be negative")
    if num_bytes == 0:
        return "0B"
    for size, unit in _UNITS:
        if num_bytes >= size:
            value = num_bytes / size
            break
    else:
        unit, value = "B", float(num_bytes)
    text = f"{value:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return text + unit


def parse_bytes(text: str) -> int:
    """Parse a size such as 10M or 1.5GiB into bytes, all units base 2."""
    text = text.strip().upper()
    index = next((i for i, ch in enumerate(text) if ch.isalpha()), -1)
    if index == -1:
        raise InvalidByteQuantityError()
    number_text, multiple = text[:index], text[index:]
    if not _FLOAT_PATTERN.fullmatch(number_text):
        raise InvalidByteQuantityError()
    number = float(number_text)
    if number < 0:
        raise InvalidByteQuantityError()
    try:
        factor = _MULTIPLES[multiple]
    except KeyError:
        raise InvalidByteQuantityError() from None
    return int(number * factor)


def megabytes(text: str) -> int:
    """Parse a size string and return it in whole megabytes."""
    return parse_bytes(text) // MEGABYTE


def ordinal(number: int) -> str:
    """Return the ordinal form of a number, e.g. 1st, 2nd, 11th."""
    suffix = "th"
    if number >= 0:
        last, last_two = number % 10, number % 100
        if last == 1 and last_two != 11:
            suffix = "st"
        elif last == 2 and last_two != 12:
            suffix = "nd"
        elif last == 3 and last_two != 13:
            suffix = "rd"
    return f"{number}{suffix}"


def percentage(a: Any, b: Any) -> str:
    """Return a as a percentage of b with two decimals."""
    numerator = to_float(a) * 100
    denominator = to_float(b)
    if denominator == 0:
        if numerator > 0:
            return "+Inf%"
        if numerator < 0:
            return "-Inf%"
        return "NaN%"
    return f"{numerator / denominator:.2f}%"


def to_roman(number: int) -> str:
    """Convert a positive integer to Roman numerals."""
    parts = []
    for value, digit in _ROMAN:
        count, number = divmod(number, value) if number > 0 else (0, number)
        parts.append(digit * count)
    return "".join(parts)