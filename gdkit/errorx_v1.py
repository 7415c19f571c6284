"""Structured application errors with codes, messages and operation traces."""

from __future__ import annotations

import dataclasses
import enum
import json
from dataclasses import dataclass
from typing import Any

SEPARATOR = ":\n\t"
"""String placed between nested errors when they are rendered."""

DEFAULT_MESSAGE = "An internal error has occurred. Please contact technical support."
"""Message returned by get_message when no error in the chain carries one."""


class Code(str, enum.Enum):
    """Kind of error, for systems that act differently depending on it."""

    UNKNOWN = ""
    PERMISSION = "permission"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    GATEWAY = "gateway"
    STANDARD = "standard"


class Op(str):
    """An operation name, usually 'package.method'."""


class TextError(Exception):
    """A plain error that renders as its text."""

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self.text = text

    def __str__(self) -> str:
        return self.text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TextError):
            return NotImplemented
        return self.text == other.text

    def __hash__(self) -> int:
        return hash(self.text)


@dataclass
class Error(Exception):
    """A standard application error that can wrap another error."""

    code: Code = Code.UNKNOWN
    message: str = ""
    op: Op = Op("")
    err: BaseException | None = None

    def __hash__(self) -> int:
        return id(self)

    def __str__(self) -> str:
        out = ""
        if self.op:
            out += str(self.op)
        if self.op and (self.code is not Code.UNKNOWN or self.message):
            out += ": "
        if self.code is not Code.UNKNOWN:
            out += f"<{self.code.value}>"
            if self.message:
                out += " "
        if self.message:
            out += self.message
        if self.err is not None:
            if isinstance(self.err, Error):
                if not self._is_zero():
                    pass
                if not self.err._is_zero():
                    if out:
                        out += SEPARATOR
                    out += str(self.err)
            else:
                if out:
                    out += " => "
                out += str(self.err)
        return out or "no error"

    def _is_zero(self) -> bool:
        return (
            self.code is Code.UNKNOWN
            and not self.message
            and not self.op
            and self.err is None
        )


def e(*args: Any) -> Error:
    """Build an Error from its arguments, each interpreted by its type.

    An Op sets the operation, a Code the code, a str the message, an Error
    (copied) or any other exception the wrapped error. Later arguments of the
    same kind win. A duplicated code or an empty code/message is pulled up
    from a wrapped Error.
    """
    if not args:
        raise ValueError("call to e with no arguments")

    result = Error()
    for arg in args:
        if isinstance(arg, Code):
            result.code = arg
        elif isinstance(arg, Op):
            result.op = arg
        elif isinstance(arg, str):
            result.message = arg
        elif isinstance(arg, Error):
            result.err = dataclasses.replace(arg)
        elif isinstance(arg, BaseException):
            result.err = arg
        else:
            raise TypeError(
                f"unknown type {type(arg).__name__}, value {arg} in error call"
            )

    prev = result.err
    if not isinstance(prev, Error):
        return result
    if prev.code is result.code:
        prev.code = Code.UNKNOWN
    if result.code is Code.UNKNOWN:
        result.code = prev.code
        prev.code = Code.UNKNOWN
    if not result.message:
        result.message = prev.message
        prev.message = ""
    return result


def match(err1: BaseException | None, err2: BaseException | None) -> bool:
    """Report whether every non-empty part of err1 equals the same part of err2."""
    if not isinstance(err1, Error) or not isinstance(err2, Error):
        return False
    if err1.message and err1.message != err2.message:
        return False
    if err1.op and err1.op != err2.op:
        return False
    if err1.code is not Code.UNKNOWN and err1.code is not err2.code:
        return False
    if err1.err is not None:
        if isinstance(err1.err, Error):
            return match(err1.err, err2.err)
        if err2.err is None or str(err1.err) != str(err2.err):
            return False
    return True


def is_code(code: Code, err: BaseException | None) -> bool:
    """Report whether err is an Error whose first known code equals code."""
    if not isinstance(err, Error):
        return False
    if err.code is not Code.UNKNOWN:
        return err.code is code
    if err.err is not None:
        return is_code(code, err.err)
    return False


def get_code(err: BaseException | None) -> Code:
    """Return the first known code in the chain, INTERNAL when there is none."""
    if err is None:
        return Code.UNKNOWN
    if isinstance(err, Error):
        if err.code is not Code.UNKNOWN:
            return err.code
        if err.err is not None:
            return get_code(err.err)
    return Code.INTERNAL


def get_message(err: BaseException | None) -> str:
    """Return the first message in the chain, or DEFAULT_MESSAGE."""
    if err is None:
        return ""
    if isinstance(err, Error):
        if err.message:
            return err.message
        if err.err is not None:
            return get_message(err.err)
    return DEFAULT_MESSAGE


def get_ops(err: BaseException | None) -> list[Op] | None:
    """Return the stack of operations down the Error chain."""
    if not isinstance(err, Error):
        return None
    ops = [err.op]
    if isinstance(err.err, Error):
        ops.extend(get_ops(err.err) or [])
    return ops


def get_arr(err: BaseException | None) -> list[Error] | None:
    """Flatten an Error chain into a list of unwrapped Errors."""
    if not isinstance(err, Error):
        return None
    result = [Error(code=err.code, message=err.message, op=err.op)]
    if isinstance(err.err, Error):
        result.extend(get_arr(err.err) or [])
    elif err.err is not None:
        result.append(Error(code=Code.STANDARD, message=str(err.err)))
    return result


def get_arr_json(err: BaseException | None) -> bytes | None:
    """Return the flattened chain as compact JSON, omitting empty fields."""
    items = get_arr(err)
    if items is None:
        return None
    payload = []
    for item in items:
        entry: dict[str, str] = {}
        if item.code.value:
            entry["code"] = item.code.value
        if item.message:
            entry["message"] = item.message
        if item.op:
            entry["op"] = str(item.op)
        payload.append(entry)
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode(
        "utf-8"
    )


def str_error(text: str) -> TextError:
    """Return a plain error with the given text."""
    return TextError(text)


def errorf(fmt: str, *args: Any) -> TextError:
    """Return a plain error whose text is fmt formatted with args."""
    return TextError(fmt % args if args else fmt)