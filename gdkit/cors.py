"""WSGI middleware for Cross-Origin Resource Sharing and path cleanup."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from gdkit import env

MAX_DOMAIN_LENGTH = 253

HEADER_VARY = "Vary"
HEADER_ORIGIN = "Origin"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_ALLOW_ORIGIN = "Access-Control-Allow-Origin"
HEADER_ALLOW_METHODS = "Access-Control-Allow-Methods"
HEADER_ALLOW_HEADERS = "Access-Control-Allow-Headers"
HEADER_ALLOW_CREDENTIALS = "Access-Control-Allow-Credentials"
HEADER_EXPOSE_HEADERS = "Access-Control-Expose-Headers"
HEADER_MAX_AGE = "Access-Control-Max-Age"
HEADER_REQUEST_METHOD = "Access-Control-Request-Method"
HEADER_REQUEST_HEADERS = "Access-Control-Request-Headers"

DEFAULT_ALLOW_METHODS = ("GET", "HEAD", "PUT", "PATCH", "POST", "DELETE")
PRODUCTION_ALLOW_ORIGINS = ("*.example.com",)

Skipper = Callable[[dict], bool]
WSGIApp = Callable[[dict, Callable[..., Any]], Iterable[bytes]]


def default_skipper(environ: dict) -> bool:
    """Never skip the middleware."""
    return False


@dataclass
class CORSConfig:
    """Settings for CORSMiddleware; empty origins and methods take defaults."""

    skipper: Skipper | None = None
    allow_origins: list[str] = field(default_factory=list)
    allow_methods: list[str] = field(default_factory=list)
    allow_headers: list[str] = field(default_factory=list)
    allow_credentials: bool = False
    expose_headers: list[str] = field(default_factory=list)
    max_age: int = 0


def default_cors_config() -> CORSConfig:
    """Return the permissive configuration: any origin, common methods."""
    return CORSConfig(
        skipper=default_skipper,
        allow_origins=["*"],
        allow_methods=list(DEFAULT_ALLOW_METHODS),
    )


def _merge_headers(
    ours: list[tuple[str, str]], theirs: list[tuple[str, str]]
) -> list[tuple[str, str]]:
    their_names = {name.lower() for name, _ in theirs}
    kept = [
        (name, value)
        for name, value in ours
        if name.lower() == HEADER_VARY.lower() or name.lower() not in their_names
    ]
    return kept + list(theirs)


class CORSMiddleware:
    """Adds CORS headers to responses and answers preflight requests."""

    def __init__(self, app: WSGIApp, config: CORSConfig | None = None) -> None:
        config = dataclasses.replace(config) if config else default_cors_config()
        if config.skipper is None:
            config.skipper = default_skipper
        if not config.allow_origins:
            config.allow_origins = ["*"]
        if not config.allow_methods:
            config.allow_methods = list(DEFAULT_ALLOW_METHODS)
        self.app = app
        self.config = config
        self._allow_methods = ",".join(config.allow_methods)
        self._allow_headers = ",".join(config.allow_headers)
        self._expose_headers = ",".join(config.expose_headers or [])
        self._max_age = str(config.max_age)

    def _allow_origin(self, origin: str) -> str:
        for allowed in self.config.allow_origins:
            if allowed == "*" and self.config.allow_credentials:
                return origin
            if allowed == "*" or allowed == origin:
                return allowed
            if match_subdomain(origin, allowed):
                return origin
        return ""

    def __call__(self, environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        if self.config.skipper(environ):
            return self.app(environ, start_response)

        origin = environ.get("HTTP_ORIGIN", "")
        allow_origin = self._allow_origin(origin)
        method = str(environ.get("REQUEST_METHOD", "GET")).upper()

        if method != "OPTIONS":
            headers = [(HEADER_VARY, HEADER_ORIGIN), (HEADER_ALLOW_ORIGIN, allow_origin)]
            if self.config.allow_credentials:
                headers.append((HEADER_ALLOW_CREDENTIALS, "true"))
            if self._expose_headers:
                headers.append((HEADER_EXPOSE_HEADERS, self._expose_headers))

            def wrapped(status, response_headers, exc_info=None):
                merged = _merge_headers(headers, list(response_headers))
                if exc_info is None:
                    return start_response(status, merged)
                return start_response(status, merged, exc_info)

            return self.app(environ, wrapped)

        headers = [
            (HEADER_VARY, HEADER_ORIGIN),
            (HEADER_VARY, HEADER_REQUEST_METHOD),
            (HEADER_VARY, HEADER_REQUEST_HEADERS),
            (HEADER_ALLOW_ORIGIN, allow_origin),
            (HEADER_ALLOW_METHODS, self._allow_methods),
        ]
        if self.config.allow_credentials:
            headers.append((HEADER_ALLOW_CREDENTIALS, "true"))
        if self._allow_headers:
            headers.append((HEADER_ALLOW_HEADERS, self._allow_headers))
        else:
            requested = environ.get("HTTP_ACCESS_CONTROL_REQUEST_HEADERS", "")
            if requested:
                headers.append((HEADER_ALLOW_HEADERS, requested))
        if self.config.max_age > 0:
            headers.append((HEADER_MAX_AGE, self._max_age))
        start_response("204 No Content", headers)
        return []


def cors(app: WSGIApp) -> CORSMiddleware:
    """Wrap app with CORS: permissive in development, strict elsewhere."""
    if env.is_development():
        return CORSMiddleware(app, default_cors_config())
    return CORSMiddleware(
        app,
        CORSConfig(
            skipper=lambda environ: False,
            allow_origins=list(PRODUCTION_ALLOW_ORIGINS),
            allow_methods=list(DEFAULT_ALLOW_METHODS),
            allow_headers=[HEADER_CONTENT_TYPE],
            allow_credentials=True,
            expose_headers=[],
            max_age=3600,
        ),
    )


def _match_scheme(domain: str, pattern: str) -> bool:
    didx = domain.find(":")
    pidx = pattern.find(":")
    return didx != -1 and pidx != -1 and domain[:didx] == pattern[:pidx]


def match_subdomain(domain: str, pattern: str) -> bool:
    """Report whether domain matches a pattern such as 'https://*.host.tld'."""
    if not _match_scheme(domain, pattern):
        return False
    didx = domain.find("://")
    pidx = pattern.find("://")
    if didx == -1 or pidx == -1:
        return False
    dom_auth = domain[didx + 3:]
    if len(dom_auth) > MAX_DOMAIN_LENGTH:
        return False
    pat_auth = pattern[pidx + 3:]

    dom_parts = dom_auth.split(".")[::-1]
    pat_parts = pat_auth.split(".")[::-1]
    for index, part in enumerate(dom_parts):
        if len(pat_parts) <= index:
            return False
        expected = pat_parts[index]
        if expected == "*":
            return True
        if expected != part:
            return False
    return False


def remove_trailing_slash(app: WSGIApp) -> WSGIApp:
    """Wrap app so that a single trailing slash is removed from the path."""

    def middleware(environ: dict, start_response: Callable[..., Any]) -> Iterable[bytes]:
        path = environ.get("PATH_INFO", "")
        if len(path) - 1 > 0 and path.endswith("/"):
            environ = dict(environ)
            path = path[:-1]
            uri = path
            query = environ.get("QUERY_STRING", "")
            if query:
                uri += "?" + query
            environ["REQUEST_URI"] = uri
            environ["PATH_INFO"] = path
        return app(environ, start_response)

    return middleware