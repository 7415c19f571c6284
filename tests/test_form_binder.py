from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import pytest

from gdkit.form_binder import bind, bind_data, form_params
from gdkit.http_errors import HTTPError


@dataclass
class Point:
    x: int = 0
    y: int = 0

    def unmarshal_param(self, param: str) -> None:
        left, right = param.split(":")
        self.x = int(left)
        self.y = int(right)


@dataclass
class Inner:
    level: int = field(default=0, metadata={"query": "level"})


@dataclass
class User:
    id: int = field(default=0, metadata={"param": "id", "json": "id"})
    name: str = field(default="", metadata={"query": "name", "json": "name", "form": "name"})
    tags: list[str] = field(default_factory=list, metadata={"query": "tags", "form": "tags"})
    score: float = field(default=0.0, metadata={"query": "score"})
    active: bool = field(default=False, metadata={"query": "active"})
    age: Optional[int] = field(default=None, metadata={"query": "age"})
    inner: Inner = field(default_factory=Inner)
    point: Point = field(default_factory=Point, metadata={"query": "pt"})


def test_bind_data_primitives():
    user = User()
    bind_data(user, {"name": ["alice"], "score": ["2.5"], "active": ["true"]}, "query")
    assert user.name == "alice"
    assert user.score == 2.5
    assert user.active is True


def test_bind_data_case_insensitive_name():
    user = User()
    bind_data(user, {"NAME": ["bob"]}, "query")
    assert user.name == "bob"


def test_bind_data_list_field_takes_all_values():
    user = User()
    bind_data(user, {"tags": ["a", "b"]}, "query")
    assert user.tags == ["a", "b"]


def test_bind_data_optional_int_allocated():
    user = User()
    bind_data(user, {"age": ["30"]}, "query")
    assert user.age == 30


def test_bind_data_empty_int_becomes_zero():
    user = User(age=5)
    bind_data(user, {"age": [""]}, "query")
    assert user.age == 0


def test_bind_data_invalid_int_raises():
    user = User()
    with pytest.raises(ValueError, match="invalid syntax"):
        bind_data(user, {"age": ["abc"]}, "query")


def test_bind_data_nested_untagged_dataclass():
    user = User()
    bind_data(user, {"level": ["7"]}, "query")
    assert user.inner.level == 7


def test_bind_data_unmarshal_param_hook():
    user = User()
    bind_data(user, {"pt": ["3:4"]}, "query")
    assert (user.point.x, user.point.y) == (3, 4)


def test_bind_data_mapping_target_takes_first_value():
    target: dict[str, str] = {}
    bind_data(target, {"a": ["1", "2"], "b": ["x"]}, "query")
    assert target == {"a": "1", "b": "x"}


def test_bind_data_rejects_non_struct():
    with pytest.raises(ValueError, match="binding element must be a struct"):
        bind_data([], {"a": ["1"]}, "query")


def test_bind_data_empty_data_leaves_target():
    user = User(name="keep")
    bind_data(user, {}, "query")
    assert user.name == "keep"


def test_bind_path_and_query():
    user = bind(User(), path_params={"id": "12"}, query="name=carol&tags=x&tags=y")
    assert user.id == 12
    assert user.name == "carol"
    assert user.tags == ["x", "y"]


def test_bind_bad_query_gives_bad_request():
    with pytest.raises(HTTPError) as info:
        bind(User(), query={"age": ["nope"]})
    assert info.value.code == 400
    assert isinstance(info.value.internal, ValueError)


def test_bind_json_body():
    user = bind(User(), content_type="application/json", body=b'{"ID": 9, "name": "dave"}')
    assert user.id == 9
    assert user.name == "dave"


def test_bind_json_syntax_error():
    with pytest.raises(HTTPError) as info:
        bind(User(), content_type="application/json", body=b'{"id": ')
    assert info.value.code == 400
    assert str(info.value.message).startswith("syntax error")


def test_bind_json_type_error():
    with pytest.raises(HTTPError) as info:
        bind(User(), content_type="application/json", body=b'{"id": "x"}')
    assert info.value.code == 400
    assert str(info.value.message).startswith("unmarshal type error")


def test_bind_json_into_mapping():
    target: dict = {}
    bind(target, content_type="application/json", body=b'{"k": [1, 2]}')
    assert target == {"k": [1, 2]}


def test_bind_xml_body():
    body = b"<user><name>erin</name><score>1.5</score></user>"
    user = bind(User(), content_type="application/xml", body=body)
    assert user.name == "erin"
    assert user.score == 1.5


def test_bind_xml_syntax_error():
    with pytest.raises(HTTPError) as info:
        bind(User(), content_type="text/xml", body=b"<user><name>")
    assert info.value.code == 400
    assert str(info.value.message).startswith("syntax error")


def test_bind_urlencoded_form():
    user = bind(
        User(),
        content_type="application/x-www-form-urlencoded",
        body=b"name=frank&tags=p&tags=q",
    )
    assert user.name == "frank"
    assert user.tags == ["p", "q"]


def test_bind_multipart_form():
    body = (
        b"--XyZ\r\n"
        b'Content-Disposition: form-data; name="name"\r\n\r\n'
        b"grace\r\n"
        b"--XyZ--\r\n"
    )
    user = bind(User(), content_type="multipart/form-data; boundary=XyZ", body=body)
    assert user.name == "grace"


def test_form_params_urlencoded():
    assert form_params("application/x-www-form-urlencoded", "a=1&a=2&b=") == {
        "a": ["1", "2"],
        "b": [""],
    }


def test_bind_unsupported_media_type():
    with pytest.raises(HTTPError) as info:
        bind(User(), content_type="text/plain", body=b"hello")
    assert info.value.code == 415


def test_bind_empty_body_skips_content():
    user = bind(User(), content_type="text/plain", body=b"")
    assert user == User()