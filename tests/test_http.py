"""Tests for switchblade.http: headers, query params, cookies, request."""

from datetime import UTC, datetime

from switchblade._internal.multimap import collect_multi
from switchblade.http.cookies import EXPIRED, SetCookie, parse_cookies
from switchblade.http.headers import Headers, MutableHeaders
from switchblade.http.query import QueryParams
from switchblade.http.request import Request
from switchblade.http.response import Response


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers.from_pairs({"Content-Type": "application/json"})
        assert headers["content-type"] == "application/json"
        assert headers["CONTENT-TYPE"] == "application/json"
        assert "Content-type" in headers

    def test_repeated_values(self) -> None:
        headers = Headers.from_pairs([("Accept", "text/html"), ("accept", "application/json")])
        assert headers.get_list("accept") == ["text/html", "application/json"]
        assert headers["accept"] == "text/html"
        assert headers.to_dict() == {"accept": "text/html, application/json"}

    def test_missing(self) -> None:
        headers = Headers()
        assert headers.get("x-missing") is None
        assert headers.get("x-missing", "fallback") == "fallback"
        assert len(headers) == 0


class TestMutableHeaders:
    def test_set_replaces(self) -> None:
        headers = MutableHeaders()
        headers.set("X-Thing", "a")
        headers.set("x-thing", "b")
        assert headers.get_list("X-Thing") == ["b"]

    def test_append_keeps_order(self) -> None:
        headers = MutableHeaders()
        headers.append("Set-Cookie", "a=1")
        headers.append("Set-Cookie", "b=2")
        assert headers.items() == (("Set-Cookie", "a=1"), ("Set-Cookie", "b=2"))


class TestQueryParams:
    def test_single(self) -> None:
        query = QueryParams(b"page=2")
        assert query["page"] == "2"
        assert query.to_dict() == {"page": "2"}

    def test_repeated_key_collects_in_order(self) -> None:
        query = QueryParams(b"tag=a&page=1&tag=b")
        assert query.get_list("tag") == ["a", "b"]
        assert query.to_dict() == {"tag": ["a", "b"], "page": "1"}

    def test_blank_values_kept(self) -> None:
        assert QueryParams(b"flag=").to_dict() == {"flag": ""}

    def test_collect_multi_three_values(self) -> None:
        assert collect_multi([("a", "1"), ("a", "2"), ("a", "3")]) == {"a": ["1", "2", "3"]}


class TestCookies:
    def test_parse(self) -> None:
        assert parse_cookies("session=abc; theme=dark") == {"session": "abc", "theme": "dark"}

    def test_parse_empty(self) -> None:
        assert parse_cookies("") == {}

    def test_bare(self) -> None:
        assert SetCookie("a", "1").to_header_value() == "a=1"

    def test_all_attributes(self) -> None:
        cookie = SetCookie(
            "session",
            "abc",
            path="/",
            domain="example.com",
            expires=datetime(2030, 1, 2, 3, 4, 5, tzinfo=UTC),
            max_age=3600,
            secure=True,
            http_only=True,
            same_site="strict",
        )
        assert cookie.to_header_value() == (
            "session=abc; Path=/; Domain=example.com; "
            "Expires=Wed, 02 Jan 2030 03:04:05 GMT; Max-Age=3600; "
            "Secure; HttpOnly; SameSite=Strict"
        )

    def test_same_site_true_is_lax(self) -> None:
        assert SetCookie("a", "1", same_site=True).to_header_value() == "a=1; SameSite=Lax"

    def test_clear(self) -> None:
        value = SetCookie("session", "abc", path="/").to_clear_header_value()
        assert value == f"session=; Expires={EXPIRED}; Path=/"


class TestRequest:
    async def test_build_splits_query(self) -> None:
        request = Request.build("get", "/users?page=2&page=3", body="hi")
        assert request.method == "GET"
        assert request.path == "/users"
        assert request.query.get_list("page") == ["2", "3"]
        assert request.url == "/users?page=2&page=3"
        assert await request.body() == b"hi"

    async def test_body_cached(self) -> None:
        request = Request.build("POST", "/", body=b"payload")
        assert await request.body() == b"payload"
        assert await request.body() == b"payload"
        assert await request.text() == "payload"

    async def test_from_asgi(self) -> None:
        async def receive() -> dict:
            return {"type": "http.request", "body": b"x", "more_body": False}

        scope = {
            "type": "http",
            "method": "PUT",
            "path": "/items/1",
            "query_string": b"a=1",
            "headers": [(b"content-type", b"text/plain")],
            "client": ("127.0.0.1", 1234),
        }
        request = Request.from_asgi(scope, receive)
        assert request.method == "PUT"
        assert request.content_type == "text/plain"
        assert request.client == ("127.0.0.1", 1234)
        assert await request.body() == b"x"


class TestResponse:
    def test_header_lookups(self) -> None:
        response = Response(
            b"{}",
            201,
            (("Content-Type", "application/json"), ("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")),
        )
        assert response.header("content-type") == "application/json"
        assert response.header("x-missing", "none") == "none"
        assert response.get_list("set-cookie") == ["a=1", "b=2"]
        assert response.content_type == "application/json"
        assert response.json() == {}
