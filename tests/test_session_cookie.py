"""Tests for the auth_token cookie transport."""

from starlette.requests import Request
from starlette.responses import Response

from promptforms.config import Settings
from promptforms.session_cookie import (
    COOKIE_NAME,
    attach_session_cookie,
    clear_session_cookie,
    extract_session_token,
)


def _request(cookie_header: str | None = None) -> Request:
    headers = []
    if cookie_header is not None:
        headers.append((b"cookie", cookie_header.encode("latin-1")))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def _set_cookie_headers(response: Response) -> list[str]:
    return [v.decode("latin-1") for k, v in response.raw_headers if k == b"set-cookie"]


class TestAttach:
    def test_development_attributes(self, settings):
        response = Response()
        attach_session_cookie(response, "tok123", settings)
        (header,) = _set_cookie_headers(response)
        assert header.startswith(f"{COOKIE_NAME}=tok123")
        assert "HttpOnly" in header
        assert "Max-Age=604800" in header
        assert "Path=/" in header
        assert "SameSite=Lax" in header
        assert "Secure" not in header

    def test_production_attributes(self):
        prod = Settings(_env_file=None, ENVIRONMENT="production", JWT_SECRET_KEY="x" * 40)
        response = Response()
        attach_session_cookie(response, "tok123", prod)
        (header,) = _set_cookie_headers(response)
        assert "Secure" in header
        assert "SameSite=None" in header
        assert "HttpOnly" in header

    def test_max_age_follows_token_expiry(self):
        short = Settings(_env_file=None, JWT_SECRET_KEY="x" * 40, JWT_EXPIRY_DAYS=1)
        response = Response()
        attach_session_cookie(response, "tok123", short)
        (header,) = _set_cookie_headers(response)
        assert "Max-Age=86400" in header


class TestExtract:
    def test_absent_when_no_cookie_header(self):
        assert extract_session_token(_request()) is None

    def test_absent_when_other_cookies_only(self):
        assert extract_session_token(_request("theme=dark; lang=en")) is None

    def test_round_trip_with_attach(self, settings):
        response = Response()
        attach_session_cookie(response, "header.payload.signature", settings)
        (header,) = _set_cookie_headers(response)
        pair = header.split(";", 1)[0]

        assert extract_session_token(_request(f"theme=dark; {pair}")) == "header.payload.signature"


class TestClear:
    def test_clear_expires_cookie_with_matching_attributes(self, settings):
        response = Response()
        clear_session_cookie(response, settings)
        (header,) = _set_cookie_headers(response)
        assert header.startswith(f"{COOKIE_NAME}=")
        assert "Max-Age=0" in header
        assert "Path=/" in header
        assert "HttpOnly" in header
        assert "SameSite=Lax" in header

    def test_clear_in_production_keeps_secure_flags(self):
        prod = Settings(_env_file=None, ENVIRONMENT="production", JWT_SECRET_KEY="x" * 40)
        response = Response()
        clear_session_cookie(response, prod)
        (header,) = _set_cookie_headers(response)
        assert "Secure" in header
        assert "SameSite=None" in header
