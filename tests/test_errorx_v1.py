import pytest

from gdkit.errorx_v1 import (
    DEFAULT_MESSAGE,
    Code,
    Error,
    Op,
    TextError,
    e,
    errorf,
    get_arr,
    get_arr_json,
    get_code,
    get_message,
    get_ops,
    is_code,
    match,
    str_error,
)


def one_layer():
    return Error(Code.INTERNAL, "Internal server error.", Op("userService.FindUserByID"))


def two_layer_std():
    return Error(
        Code.INTERNAL,
        "Internal server error.",
        Op("userService.FindUserByID"),
        ValueError("standard-error"),
    )


def two_layer():
    return Error(
        Code.UNKNOWN,
        "Unknown server error.",
        Op("userService.FindUserByID"),
        Error(Code.PERMISSION, "Permission error.", Op("accountGateway.FindUserByID")),
    )


def three_layer():
    return Error(
        Code.INTERNAL,
        "Internal server error.",
        Op("userService.FindUserByID"),
        Error(
            Code.GATEWAY,
            "Gateway server error.",
            Op("accountGateway.FindUserByID"),
            Error(Code.UNKNOWN, "Unknown error.", Op("io.Write")),
        ),
    )


@pytest.mark.parametrize(
    "err, want",
    [
        (None, None),
        (ValueError("standard-error"), None),
        (
            one_layer(),
            b'[{"code":"internal","message":"Internal server error.","op":"userService.FindUserByID"}]',
        ),
        (
            two_layer_std(),
            b'[{"code":"internal","message":"Internal server error.","op":"userService.FindUserByID"},{"code":"standard","message":"standard-error"}]',
        ),
        (
            two_layer(),
            b'[{"message":"Unknown server error.","op":"userService.FindUserByID"},{"code":"permission","message":"Permission error.","op":"accountGateway.FindUserByID"}]',
        ),
        (
            three_layer(),
            b'[{"code":"internal","message":"Internal server error.","op":"userService.FindUserByID"},{"code":"gateway","message":"Gateway server error.","op":"accountGateway.FindUserByID"},{"message":"Unknown error.","op":"io.Write"}]',
        ),
    ],
)
def test_get_arr_json(err, want):
    assert get_arr_json(err) == want


@pytest.mark.parametrize(
    "err, want",
    [
        (None, None),
        (ValueError("standard-error"), None),
        (
            one_layer(),
            [Error(Code.INTERNAL, "Internal server error.", Op("userService.FindUserByID"))],
        ),
        (
            two_layer_std(),
            [
                Error(Code.INTERNAL, "Internal server error.", Op("userService.FindUserByID")),
                Error(Code.STANDARD, "standard-error"),
            ],
        ),
        (
            two_layer(),
            [
                Error(Code.UNKNOWN, "Unknown server error.", Op("userService.FindUserByID")),
                Error(Code.PERMISSION, "Permission error.", Op("accountGateway.FindUserByID")),
            ],
        ),
        (
            three_layer(),
            [
                Error(Code.INTERNAL, "Internal server error.", Op("userService.FindUserByID")),
                Error(Code.GATEWAY, "Gateway server error.", Op("accountGateway.FindUserByID")),
                Error(Code.UNKNOWN, "Unknown error.", Op("io.Write")),
            ],
        ),
    ],
)
def test_get_arr(err, want):
    assert get_arr(err) == want


@pytest.mark.parametrize(
    "err, want",
    [
        (None, Code.UNKNOWN),
        (ValueError("standard-error"), Code.INTERNAL),
        (one_layer(), Code.INTERNAL),
        (two_layer_std(), Code.INTERNAL),
        (two_layer(), Code.PERMISSION),
        (three_layer(), Code.INTERNAL),
    ],
)
def test_get_code(err, want):
    assert get_code(err) is want


@pytest.mark.parametrize(
    "err, want",
    [
        (Error(), "no error"),
        (one_layer(), "userService.FindUserByID: <internal> Internal server error."),
        (
            two_layer_std(),
            "userService.FindUserByID: <internal> Internal server error. => standard-error",
        ),
        (
            Error(
                Code.INTERNAL,
                "Internal server error.",
                Op("userService.FindUserByID"),
                Error(Code.GATEWAY, "Gateway server error.", Op("accountGateway.FindUserByID")),
            ),
            "userService.FindUserByID: <internal> Internal server error.:\n\taccountGateway.FindUserByID: <gateway> Gateway server error.",
        ),
        (
            three_layer(),
            "userService.FindUserByID: <internal> Internal server error.:\n\taccountGateway.FindUserByID: <gateway> Gateway server error.:\n\tio.Write: Unknown error.",
        ),
        (
            Error(
                Code.INTERNAL,
                "Internal server error.",
                Op("userService.FindUserByID"),
                Error(
                    Code.UNKNOWN,
                    "",
                    Op("io.Write"),
                    Error(Code.GATEWAY, "Gateway server error.", Op("accountGateway.FindUserByID")),
                ),
            ),
            "userService.FindUserByID: <internal> Internal server error.:\n\tio.Write:\n\taccountGateway.FindUserByID: <gateway> Gateway server error.",
        ),
        (
            Error(
                Code.INTERNAL,
                "Internal server error.",
                Op("userService.FindUserByID"),
                Error(
                    Code.INTERNAL,
                    "",
                    Op(""),
                    Error(Code.GATEWAY, "Gateway server error.", Op("accountGateway.FindUserByID")),
                ),
            ),
            "userService.FindUserByID: <internal> Internal server error.:\n\t<internal>:\n\taccountGateway.FindUserByID: <gateway> Gateway server error.",
        ),
        (
            Error(
                Code.INTERNAL,
                "Internal server error.",
                Op("userService.FindUserByID"),
                Error(
                    Code.UNKNOWN,
                    "Random error.",
                    Op(""),
                    Error(Code.GATEWAY, "Gateway server error.", Op("accountGateway.FindUserByID")),
                ),
            ),
            "userService.FindUserByID: <internal> Internal server error.:\n\tRandom error.:\n\taccountGateway.FindUserByID: <gateway> Gateway server error.",
        ),
    ],
)
def test_error_str(err, want):
    assert str(err) == want


def test_e_without_args_raises():
    with pytest.raises(ValueError):
        e()


def test_e_one_layer():
    got = e("message", Code.CONFLICT, Op("userService.CreateUser"))
    assert got == Error(Code.CONFLICT, "message", Op("userService.CreateUser"))


def test_e_with_standard_error():
    std = ValueError("standard-error")
    got = e("message", Code.CONFLICT, Op("userService.CreateUser"), std)
    assert got == Error(Code.CONFLICT, "message", Op("userService.CreateUser"), std)


def test_e_two_layer_copies_inner():
    inner = Error(Code.GATEWAY, "gateway-message", Op("userGateway.FindUser"))
    got = e("message", Code.CONFLICT, Op("userService.CreateUser"), inner)
    assert got == Error(
        Code.CONFLICT,
        "message",
        Op("userService.CreateUser"),
        Error(Code.GATEWAY, "gateway-message", Op("userGateway.FindUser")),
    )
    assert got.err is not inner


def test_e_invalid_type():
    with pytest.raises(TypeError, match="unknown type int, value 123 in error call"):
        e(123)


def test_e_same_code():
    inner = Error(Code.CONFLICT, "gateway-message", Op("userGateway.FindUser"))
    got = e("message", Code.CONFLICT, Op("userService.CreateUser"), inner)
    assert got == Error(
        Code.CONFLICT,
        "message",
        Op("userService.CreateUser"),
        Error(Code.UNKNOWN, "gateway-message", Op("userGateway.FindUser")),
    )
    assert inner.code is Code.CONFLICT


def test_e_missing_code():
    inner = Error(Code.CONFLICT, "gateway-message", Op("userGateway.FindUser"))
    got = e("message", Op("userService.CreateUser"), inner)
    assert got == Error(
        Code.CONFLICT,
        "message",
        Op("userService.CreateUser"),
        Error(Code.UNKNOWN, "gateway-message", Op("userGateway.FindUser")),
    )


def test_e_missing_message():
    inner = Error(Code.CONFLICT, "gateway-message", Op("userGateway.FindUser"))
    got = e(Code.INTERNAL, Op("userService.CreateUser"), inner)
    assert got == Error(
        Code.INTERNAL,
        "gateway-message",
        Op("userService.CreateUser"),
        Error(Code.CONFLICT, "", Op("userGateway.FindUser")),
    )


def test_e_result_can_be_raised():
    err = e("boom", Code.INVALID)
    assert err.code is Code.INVALID
    assert str(err) == "<invalid> boom"
    with pytest.raises(Error) as info:
        raise err
    assert info.value is err


@pytest.mark.parametrize(
    "err1, err2, want",
    [
        (None, None, False),
        (Error(), None, False),
        (Error(message="err1"), Error(message="err2"), False),
        (
            Error(op=Op("userService.FindUser")),
            Error(op=Op("userService.FindUserByID")),
            False,
        ),
        (Error(code=Code.CONFLICT), Error(code=Code.GATEWAY), False),
        (Error(err=Error(code=Code.GATEWAY)), Error(code=Code.GATEWAY), False),
        (Error(err=ValueError("abc")), Error(code=Code.GATEWAY), False),
        (Error(), Error(code=Code.GATEWAY), True),
    ],
)
def test_match(err1, err2, want):
    assert match(err1, err2) is want


@pytest.mark.parametrize(
    "code, err, want",
    [
        (Code.UNKNOWN, None, False),
        (Code.UNKNOWN, ValueError("standard-error"), False),
        (Code.GATEWAY, Error(code=Code.GATEWAY), True),
        (Code.GATEWAY, Error(err=Error(code=Code.GATEWAY)), True),
        (Code.GATEWAY, Error(err=Error()), False),
    ],
)
def test_is_code(code, err, want):
    assert is_code(code, err) is want


@pytest.mark.parametrize(
    "err, want",
    [
        (None, ""),
        (ValueError("standard-error"), DEFAULT_MESSAGE),
        (one_layer(), "Internal server error."),
        (two_layer_std(), "Internal server error."),
        (
            Error(
                Code.UNKNOWN,
                "",
                Op("userService.FindUserByID"),
                Error(Code.GATEWAY, "Gateway server error.", Op("accountGateway.FindUserByID")),
            ),
            "Gateway server error.",
        ),
        (three_layer(), "Internal server error."),
    ],
)
def test_get_message(err, want):
    assert get_message(err) == want


@pytest.mark.parametrize(
    "err, want",
    [
        (None, None),
        (ValueError("standard-error"), None),
        (one_layer(), ["userService.FindUserByID"]),
        (two_layer_std(), ["userService.FindUserByID"]),
        (
            Error(
                Code.INTERNAL,
                "Internal server error.",
                Op("userService.FindUserByID"),
                Error(Code.GATEWAY, "Gateway server error.", Op("accountGateway.FindUserByID")),
            ),
            ["userService.FindUserByID", "accountGateway.FindUserByID"],
        ),
        (
            three_layer(),
            ["userService.FindUserByID", "accountGateway.FindUserByID", "io.Write"],
        ),
    ],
)
def test_get_ops(err, want):
    assert get_ops(err) == want


def test_text_error_str():
    assert str(TextError("message")) == "message"


def test_str_error():
    got = str_error("standard")
    assert isinstance(got, TextError)
    assert str(got) == "standard"


def test_errorf():
    assert str(errorf("message: %s", "standard")) == "message: standard"