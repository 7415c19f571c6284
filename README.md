# gdkit

A small toolkit of everyday helpers for Python services: lenient value
conversion, structured errors, JWT issuing and checking, request binding,
response envelopes and WSGI middleware.

## Installation

```
pip install gdkit
```

To run the test suite from a checkout:

```
pip install ".[test]"
pytest
```

## Modules

- `gdkit.converter`: lenient conversions that fall back to a zero value
  instead of raising: `to_string`, `to_int`, `to_float`, `to_bool`, `arr_int`,
  `arr_str`. Byte sizes are formatted with `byte_size` and parsed with
  `parse_bytes` and `megabytes`, where every unit is base 2 (`K`, `KB` and `KiB`
  all mean 1024). Unparsable sizes raise `InvalidByteQuantityError`. There are
  also `ordinal`, `percentage` and `to_roman`.
- `gdkit.jsonx`: compact JSON with sorted mapping keys and HTML-sensitive
  characters escaped: `marshal`, `unmarshal`, and the stream helpers `encode`
  and `decode`.
- `gdkit.env`: the deployment environment, read once from `GDK_ENV` and
  `development` when unset. It provides `get_current`, `reset`, `is_development`,
  `is_alpha`, `is_beta`, `is_staging` and `is_production`.
- `gdkit.fn`: `name` and `line` give the calling function's name and source
  location.
- `gdkit.filex`: `open_file` opens for appending and creates parent directories.
  Also `file_exists`, `file_empty` and `read_file`, which returns `""` on failure.
- `gdkit.filepathx`: `find_project_abs(start=None, marker="pyproject.toml")`
  walks up from `start` to the nearest directory holding `marker`. It stops
  after 100 levels and raises `FileNotFoundError` when nothing is found.
- `gdkit.errorx_v1`: `Error` with a `Code`, a message and an `Op`, wrapping
  another error. It comes with `e`, `match`, `is_code`, `get_code`,
  `get_message`, `get_ops`, `get_arr`, `get_arr_json`, `str_error` and `errorf`.
- `gdkit.errorx_v2`: `Error` that carries the underlying error, a `Code`,
  `Fields`, operation traces, a `Message`, the `Line` it was wrapped at and a
  `MetricStatus`. It comes with `e`, `match`, `is_code`, `get_code`,
  `func_name`, `new` and `errorf`.
- `gdkit.auth`: `Operator` signs HS256 tokens and checks them against a
  shared secret. It provides `generate_token`, `generate_token_with_ttl` and
  `validate_token`, and works with `Claims` and `TokenResponse`. Failures raise
  `InvalidTokenError`, `ExpiredTokenError` or `InvalidTypeError`. A disabled
  operator returns a fixed default identity from `validate_token`.
- `gdkit.balancer`: `RoundRobin` is thread-safe round-robin selection.
- `gdkit.httpx`: the `Client` and `ReadCloser` protocols, and `Dummy` /
  `new_dummy`, a stand-in response body whose `read` and `close` raise preset
  errors.
- `gdkit.http_errors`: `HTTPError` holds a status code, a message and an
  internal cause. `unsupported_media_type()` returns a 415 error.
- `gdkit.query_binder`: `bind_query` sets dataclass fields tagged
  `metadata={"query": ...}` from query parameters. List fields take
  comma-separated values. `bind_value`, `bind_slice` and `bind_primitive` are
  the conversion steps, and failures raise `BindError`.
- `gdkit.form_binder`: `bind` fills a dataclass or mapping from path
  parameters, the query and a JSON, XML, url-encoded or multipart body. It
  raises `HTTPError` 400 or 415. `bind_data` and `form_params` are also exposed.
- `gdkit.response`: the `Response`, `GetResultData` and `PostResultData`
  envelopes. They are built by `get_default_response`, `get_success_response`,
  `post_default_response` and `post_success_response`, and
  `Response.to_dict()` gives the wire names.
- `gdkit.cors`: WSGI middleware. `CORSMiddleware` takes a `CORSConfig`, and
  `default_cors_config` is the permissive one. `cors(app)` uses the permissive
  configuration when the environment is development. Otherwise it allows only
  `*.example.com` origins with credentials. `match_subdomain` matches origins
  against wildcard patterns. `remove_trailing_slash(app)` strips a trailing `/`
  from the path.

## Examples

```python
from gdkit import converter

converter.byte_size(1536)       # "1.5K"
converter.parse_bytes("2MB")    # 2097152
converter.ordinal(22)           # "22nd"
converter.to_roman(1998)        # "MCMXCVIII"
converter.percentage(1, 100)    # "1.00%"
```

```python
from gdkit import errorx_v1 as errorx

err = errorx.e(errorx.Code.NOT_FOUND, errorx.Op("userService.FindUser"), "User not found.")
errorx.get_code(err)     # Code.NOT_FOUND
errorx.get_message(err)  # "User not found."
```

```python
from datetime import timedelta
from gdkit.auth import Claims, Operator

operator = Operator(enable=True, jwt_secret="secret", jwt_duration=timedelta(hours=1))
issued = operator.generate_token(Claims(user_id=1, email="user@example.com"))
operator.validate_token(issued.token)  # Claims(user_id=1, email="user@example.com")
```

```python
from gdkit.cors import cors, remove_trailing_slash

def hello(environ, start_response):
    start_response("200 OK", [("Content-Type", "text/plain")])
    return [b"hello"]

application = cors(remove_trailing_slash(hello))
```

## What it does not do

gdkit is a library only. It has no command-line tool and does not run a server
or a router. It has no request logging, request-ID or authentication
middleware, no role-based access control, and no message-queue, cache or
database clients. The middleware in `gdkit.cors` is plain WSGI and needs a
server of your choosing.