"""End-to-end tests through the ASGI adapter and TestClient."""

from typing import Any

import pytest
from pydantic import BaseModel

from switchblade.adapters.asgi import ASGIAdapter
from switchblade.app import Switchblade
from switchblade.config import AppConfig
from switchblade.errors import RegistryMutationAfterSealError, ValidationFailure
from switchblade.testing import TestClient


class NewUser(BaseModel):
    name: str
    email: str


def _users_app() -> Switchblade:
    app = Switchblade(AppConfig(base_path="/api"))

    async def validation_errors(error, ctx, res) -> None:
        if isinstance(error, ValidationFailure):
            res.json(422, {"location": error.location, "errors": error.errors})

    app.on_error(validation_errors)

    @app.get("/users/:id", params={"id": int})
    async def show(ctx, res) -> None:
        res.json(200, {"id": ctx.params["id"]})

    @app.post("/users", body={"application/json": NewUser})
    async def create(ctx, res) -> None:
        user = await ctx.body()
        res.set_cookie("last_user", user.name, path="/", http_only=True)
        res.json(201, user.model_dump())

    @app.get("/search")
    def search(ctx, res) -> None:
        res.json(200, ctx.query)

    return app


class TestClientRoundTrip:
    async def test_path_param(self) -> None:
        async with TestClient(_users_app()) as client:
            response = await client.get("/api/users/42")
        assert response.status == 200
        assert response.json() == {"id": 42}

    async def test_json_body(self) -> None:
        async with TestClient(_users_app()) as client:
            response = await client.post("/api/users", json={"name": "Ada", "email": "ada@example.com"})
        assert response.status == 201
        assert response.json() == {"name": "Ada", "email": "ada@example.com"}
        assert response.header("set-cookie") == "last_user=Ada; Path=/; HttpOnly"
        assert response.header("content-length") == str(len(response.body))

    async def test_invalid_body_handled(self) -> None:
        async with TestClient(_users_app()) as client:
            response = await client.post("/api/users", json={"name": "Ada"})
        assert response.status == 422
        assert response.json()["location"] == "body"

    async def test_invalid_param_handled(self) -> None:
        async with TestClient(_users_app()) as client:
            response = await client.get("/api/users/abc")
        assert response.status == 422
        assert response.json()["location"] == "params"

    async def test_repeated_query(self) -> None:
        async with TestClient(_users_app()) as client:
            response = await client.get("/api/search?tag=a&tag=b&q=x")
        assert response.json() == {"tag": ["a", "b"], "q": "x"}

    async def test_form_body(self) -> None:
        app = Switchblade()

        @app.post("/form")
        async def form(ctx, res) -> None:
            res.json(200, await ctx.body())

        async with TestClient(app) as client:
            response = await client.post("/form", form={"a": "1", "b": "2"})
        assert response.json() == {"a": "1", "b": "2"}

    async def test_other_verbs(self) -> None:
        app = Switchblade()
        for method in ("PUT", "PATCH", "DELETE"):
            app.route(method, "/item", lambda ctx, res: res.text(200, ctx.method))

        async with TestClient(app) as client:
            assert (await client.put("/item", json={})).text == "PUT"
            assert (await client.patch("/item", json={})).text == "PATCH"
            assert (await client.delete("/item")).text == "DELETE"


class TestAdapterErrors:
    async def test_not_found(self) -> None:
        async with TestClient(_users_app()) as client:
            response = await client.get("/users/1")
        assert response.status == 404
        assert response.content_type == "text/plain; charset=utf-8"

    async def test_method_not_allowed(self) -> None:
        async with TestClient(_users_app()) as client:
            response = await client.request("DELETE", "/api/users")
        assert response.status == 405
        assert response.header("allow") == "POST"

    async def test_unhandled_error_is_500(self) -> None:
        app = Switchblade()

        def boom(ctx, res) -> None:
            raise RuntimeError("boom")

        app.get("/boom", boom)
        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert response.text == "Internal Server Error"

    async def test_no_body_for_204(self) -> None:
        app = Switchblade().delete("/item", lambda ctx, res: res.status(204))
        async with TestClient(app) as client:
            response = await client.delete("/item")
        assert response.status == 204
        assert response.body == b""
        assert response.header("content-length") == "0"


class TestLifespan:
    async def test_startup_seals(self) -> None:
        app = Switchblade().get("/", lambda ctx, res: res.text(200, "ok"))
        async with TestClient(app):
            assert app.sealed
            with pytest.raises(RegistryMutationAfterSealError):
                app.get("/late", lambda ctx, res: None)

    async def test_lifespan_messages(self) -> None:
        messages = [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
        sent: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return messages.pop(0)

        async def send(message: dict[str, Any]) -> None:
            sent.append(message)

        await ASGIAdapter(Switchblade())({"type": "lifespan"}, receive, send)
        assert [message["type"] for message in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]

    async def test_head_sends_no_body(self) -> None:
        app = Switchblade().head("/", lambda ctx, res: res.text(200, "hidden"))
        async with TestClient(app) as client:
            response = await client.request("HEAD", "/")
        assert response.status == 200
        assert response.body == b""
        assert response.header("content-length") == "6"
