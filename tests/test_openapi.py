"""Tests for switchblade.openapi: the OpenAPI 3.1 document assembler."""

import pytest
from pydantic import BaseModel

from switchblade.app import Switchblade
from switchblade.config import AppConfig
from switchblade.errors import ConfigurationError

INFO = {"info": {"title": "Test API", "version": "1.0.0"}}


class Address(BaseModel):
    city: str


class User(BaseModel):
    name: str
    address: Address


def handler(ctx, res) -> None:
    res.end()


def _app(**config) -> Switchblade:
    return Switchblade(AppConfig(openapi=INFO, **config))


class TestDocument:
    def test_requires_header(self) -> None:
        with pytest.raises(ConfigurationError):
            Switchblade().openapi()

    def test_header_copied(self) -> None:
        document = _app().openapi()
        assert document["openapi"] == "3.1.0"
        assert document["info"] == INFO["info"]
        assert document["paths"] == {}

    def test_header_version_respected(self) -> None:
        app = Switchblade(AppConfig(openapi={"openapi": "3.1.1", **INFO}))
        assert app.openapi()["openapi"] == "3.1.1"

    def test_placeholders_rewritten_and_base_path(self) -> None:
        app = _app(base_path="/api").get("/users/:id", handler)
        paths = app.openapi()["paths"]
        assert list(paths) == ["/api/users/{id}"]
        assert "get" in paths["/api/users/{id}"]

    def test_methods_share_path_item(self) -> None:
        app = _app().get("/users", handler).post("/users", handler)
        assert set(app.openapi()["paths"]["/users"]) == {"get", "post"}

    def test_hidden_routes_skipped(self) -> None:
        app = _app().get("/internal", handler, openapi={"hide": True}).get("/public", handler)
        assert list(app.openapi()["paths"]) == ["/public"]

    def test_hidden_via_middleware(self) -> None:
        async def mw(ctx, res, next) -> None:
            await next()

        app = _app().get("/public", handler).use(mw, openapi={"hide": True}).get("/secret", handler)
        assert list(app.openapi()["paths"]) == ["/public"]


class TestOperation:
    def test_doc_fields(self) -> None:
        app = _app().get(
            "/users",
            handler,
            openapi={
                "summary": "List users",
                "description": "All of them",
                "tags": ["users"],
                "deprecated": True,
                "operationId": "listUsers",
                "externalDocs": {"url": "https://example.com/users"},
                "x-rate-limit": 10,
            },
        )
        operation = app.openapi()["paths"]["/users"]["get"]
        assert operation["summary"] == "List users"
        assert operation["description"] == "All of them"
        assert operation["tags"] == ["users"]
        assert operation["deprecated"] is True
        assert operation["operationId"] == "listUsers"
        assert operation["externalDocs"] == {"url": "https://example.com/users"}
        assert operation["x-rate-limit"] == 10

    def test_default_response(self) -> None:
        operation = _app().get("/", handler).openapi()["paths"]["/"]["get"]
        assert operation["responses"] == {"200": {"description": "Successful response"}}

    def test_parameters(self) -> None:
        app = _app().get(
            "/users/:id",
            handler,
            params={"id": int},
            query={"page": {"type": "integer"}},
            headers={"X-Token": str},
            cookies={"session": str},
        )
        parameters = app.openapi()["paths"]["/users/{id}"]["get"]["parameters"]
        by_location = {(p["in"], p["name"]): p for p in parameters}
        assert by_location[("path", "id")]["required"] is True
        assert by_location[("path", "id")]["schema"] == {"type": "integer"}
        assert by_location[("query", "page")]["required"] is False
        assert by_location[("query", "page")]["schema"] == {"type": "integer"}
        assert ("header", "x-token") in by_location
        assert ("cookie", "session") in by_location

    def test_undeclared_path_param_documented_as_string(self) -> None:
        parameters = _app().get("/files/:name", handler).openapi()["paths"]["/files/{name}"]["get"][
            "parameters"
        ]
        assert parameters == [
            {"name": "name", "in": "path", "required": True, "schema": {"type": "string"}}
        ]

    def test_request_body_per_content_type(self) -> None:
        app = _app().post(
            "/notes",
            handler,
            body={"application/json": {"type": "object"}, "text/plain": {"type": "string"}},
        )
        body = app.openapi()["paths"]["/notes"]["post"]["requestBody"]
        assert body["required"] is True
        assert body["content"] == {
            "application/json": {"schema": {"type": "object"}},
            "text/plain": {"schema": {"type": "string"}},
        }

    def test_response_201_round_trip(self) -> None:
        app = _app().post(
            "/users",
            handler,
            responses={
                201: {
                    "description": "Created",
                    "content": {
                        "application/json": {"type": "object"},
                        "application/xml": {"type": "string"},
                    },
                    "headers": {"Location": {"type": "string"}},
                }
            },
        )
        responses = app.openapi()["paths"]["/users"]["post"]["responses"]
        assert list(responses) == ["201"]
        assert set(responses["201"]["content"]) == {"application/json", "application/xml"}
        assert responses["201"]["description"] == "Created"
        assert responses["201"]["headers"] == {"location": {"schema": {"type": "string"}}}

    def test_nested_models_hoisted_to_components(self) -> None:
        app = _app().post("/users", handler, body={"application/json": User})
        document = app.openapi()
        schema = document["paths"]["/users"]["post"]["requestBody"]["content"]["application/json"][
            "schema"
        ]
        assert "$defs" not in schema
        assert schema["properties"]["address"] == {"$ref": "#/components/schemas/Address"}
        assert document["components"]["schemas"]["Address"]["properties"]["city"] == {
            "title": "City",
            "type": "string",
        }
