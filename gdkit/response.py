"""Standard response envelopes for HTTP handlers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from http import HTTPStatus
from typing import Any

from gdkit.converter import to_string


@dataclass
class GetResultData:
    """Result data for GET requests."""

    param: Any
    generated_date: str
    total_data: str
    data: Any


@dataclass
class PostResultData:
    """Result data for PUT, PATCH, POST and DELETE requests."""

    param: Any
    executed_date: str
    rows_affected: int


def _result_dict(result: Any) -> Any:
    if isinstance(result, GetResultData):
        return {
            "http_param": result.param,
            "generated_date": result.generated_date,
            "total_data": result.total_data,
            "data": result.data,
        }
    if isinstance(result, PostResultData):
        return {
            "http_param": result.param,
            "executed_date": result.executed_date,
            "rows_affected": result.rows_affected,
        }
    return result


@dataclass
class Response:
    """The default response envelope."""

    code: str
    display_msg: str
    raw_msg: str
    request_id: str
    result_data: Any

    def to_dict(self) -> dict[str, Any]:
        """Return the envelope keyed by its wire names."""
        return {
            "api_code": self.code,
            "api_display_message": self.display_msg,
            "api_raw_message": self.raw_msg,
            "trace_id": self.request_id,
            "api_result_data": _result_dict(self.result_data),
        }


def _now_rfc3339() -> str:
    text = datetime.now().astimezone().isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def _envelope(status: HTTPStatus, raw_msg: str, request_id: str, result: Any) -> Response:
    return Response(
        code=to_string(int(status)),
        display_msg=status.phrase,
        raw_msg=raw_msg,
        request_id=request_id,
        result_data=result,
    )


def get_default_response(query: Any, request_id: str = "") -> Response:
    """Return the default (failed) response for a GET request."""
    result = GetResultData(
        param=query, generated_date=_now_rfc3339(), total_data="", data=None
    )
    return _envelope(HTTPStatus.INTERNAL_SERVER_ERROR, "default", request_id, result)


def get_success_response(
    query: Any, request_id: str, total_data: int, data: Any
) -> Response:
    """Return the success response for a GET request."""
    result = GetResultData(
        param=query,
        generated_date=_now_rfc3339(),
        total_data=to_string(total_data),
        data=data,
    )
    return _envelope(HTTPStatus.OK, "", request_id, result)


def post_default_response(query: Any, request_id: str = "") -> Response:
    """Return the default (failed) response for a write request."""
    result = PostResultData(param=query, executed_date=_now_rfc3339(), rows_affected=0)
    return _envelope(HTTPStatus.INTERNAL_SERVER_ERROR, "default", request_id, result)


def post_success_response(request_id: str, param: Any, rows_affected: int) -> Response:
    """Return the success response for a write request."""
    result = PostResultData(
        param=param, executed_date=_now_rfc3339(), rows_affected=rows_affected
    )
    return _envelope(HTTPStatus.OK, "", request_id, result)