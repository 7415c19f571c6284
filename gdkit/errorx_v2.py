"""Application errors carrying codes, fields, operation traces and origin lines."""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from gdkit import fn

__all__ = [
    "Code",
    "MetricStatus",
    "Op",
    "Line",
    "Message",
    "Fields",
    "Error",
    "TextError",
    "e",
    "match",
    "is_code",
    "get_code",
    "func_name",
    "new",
    "errorf",
]

_CALLER = 2


class Code(str, enum.Enum):
    """Kind of error, for systems that act differently depending on it."""

    UNKNOWN = ""
    PERMISSION = "permission"
    INTERNAL = "internal"
    CONFLICT = "conflict"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    GATEWAY = "gateway"
    CONFIG = "config"
    CIRCUIT_BREAKER = "circuit_breaker"
    MARSHAL = "marshal"
    UNMARSHAL = "unmarshal"
    CONVERSION = "conversion"
    ENCRYPTION = "encryption"
    DECRYPTION = "decryption"
    DB = "db"
    DB_SCAN = "db_scan"
    DB_EXEC = "db_exec"
    DB_QUERY = "db_query"
    DB_BEGIN = "db_begin"
    DB_COMMIT = "db_commit"
    DB_ROLLBACK = "db_rollback"


class MetricStatus(str, enum.Enum):
    """Whether an error should be tracked by alerting."""

    SUCCESS = "success"
    ERROR = "error"
    EXPECTED_ERROR = "expected_error"


class Op(str):
    """Name of the operation an error passed through."""


class Line(str):
    """The 'path:line' where an error was first wrapped."""


class Message(str):
    """A human-readable message."""


class Fields(dict):
    """Context fields attached to an error."""


class TextError(Exception):
    """A plain error that reads as its text."""

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self.text = text

    def __str__(self) -> str:
        return self.text


@dataclass
class Error(Exception):
    """A standard application error wrapping an underlying error."""

    err: BaseException | None = None
    code: Code = Code.UNKNOWN
    fields: Fields | None = None
    op_traces: list[Op] = field(default_factory=list)
    message: Message = Message("")
    line: Line = Line("")
    metric_status: MetricStatus | None = None

    def __hash__(self) -> int:
        return id(self)

    def __str__(self) -> str:
        if self.err is None:
            return f"errorx.E: bad call without args from file={fn.line(_CALLER)}"
        return str(self.err)


def _merge_fields(current: Fields | None, extra: Mapping[str, Any]) -> Fields:
    if current is None:
        return Fields(extra)
    merged = Fields(current)
    for key, value in extra.items():
        merged.setdefault(key, value)
    return merged


def e(*args: Any) -> Error | TextError:
    """Build an Error from its arguments, each interpreted by its type.

    An Error is copied and becomes the base; any other exception or a plain
    str becomes the underlying error. Code, Message and MetricStatus set their
    field, Fields are merged with existing keys winning, and Op is ignored.
    The caller's name is pushed onto the operation trace whenever an error is
    taken in. A bad call returns a TextError describing it.
    """
    caller_op = Op(fn.name(_CALLER))
    caller_line = Line(fn.line(_CALLER))
    if not args:
        return TextError(f"errorx.E: bad call without args from file={caller_line}")

    result = Error()
    for arg in args:
        if isinstance(arg, Error):
            result = dataclasses.replace(
                arg,
                op_traces=[caller_op, *arg.op_traces],
                fields=Fields(arg.fields) if arg.fields is not None else None,
            )
        elif isinstance(arg, BaseException):
            result.err = arg
            result.line = caller_line
            result.op_traces = [caller_op, *result.op_traces]
        elif isinstance(arg, Code):
            result.code = arg
        elif isinstance(arg, MetricStatus):
            result.metric_status = arg
        elif isinstance(arg, Message):
            result.message = arg
        elif isinstance(arg, Op):
            continue
        elif isinstance(arg, Mapping):
            result.fields = _merge_fields(result.fields, arg)
        elif isinstance(arg, str) and not isinstance(arg, Line):
            result.err = TextError(arg)
            result.line = caller_line
            result.op_traces = [caller_op, *result.op_traces]
        else:
            return TextError(
                f"errorx.E: bad call from file={caller_line} args={list(args)!r}"
                f"; unknown_type={type(arg).__name__} value={arg}"
            )
    return result


def _text_of(err: BaseException | None) -> str:
    if isinstance(err, Error):
        err = err.err
    return "nil" if err is None else str(err)


def match(err1: BaseException | None, err2: BaseException | None) -> bool:
    """Report whether the underlying errors of both arguments read the same."""
    if err1 is None and err2 is None:
        return True
    return _text_of(err1) == _text_of(err2)


def is_code(err: BaseException | None, code: Code) -> bool:
    """Report whether err is an Error whose first known code equals code."""
    if not isinstance(err, Error):
        return False
    if err.code is not Code.UNKNOWN:
        return err.code is code
    if err.err is not None:
        return is_code(err.err, code)
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


def func_name() -> Op:
    """Return the name of the function that calls this one."""
    return Op(fn.name(_CALLER))


def new(text: str) -> TextError:
    """Return a plain error with the given text."""
    return TextError(text)


def errorf(fmt: str, *args: Any) -> TextError:
    """Return a plain error whose text is fmt formatted with args."""
    return TextError(fmt % args if args else fmt)