"""Tests for nightframe.app: freezing, ASGI entry, lifespan, and the error path."""

import logging
from pathlib import Path
from typing import Any

import pytest

from nightframe.app import App
from nightframe.config import AppConfig, SecurityHeadersConfig
from nightframe.errors import ControllerLoadError
from nightframe.testing import TestClient

HELLO = """
class Hello:
    def get(self, request, response, next):
        return "hello"
"""


def _app(routes_dir: Path, **config: Any) -> App:
    return App(AppConfig(log_requests=False, **config), routes_dir=routes_dir)


class TestAppFreeze:
    def test_routes_dir_from_config(self, routes_dir: Path) -> None:
        app = App(AppConfig(routes_dir=routes_dir))
        assert app.routes_dir == routes_dir

    def test_routes_lists_entries(self, routes_dir: Path, write_controller) -> None:
        write_controller("hello.py", HELLO)
        app = _app(routes_dir)
        assert [(e.http_method, e.url_pattern) for e in app.routes] == [("get", "/hello")]

    def test_freeze_happens_once(self, routes_dir: Path, write_controller) -> None:
        write_controller("hello.py", HELLO)
        app = _app(routes_dir)
        first = app.routers
        write_controller("later.py", HELLO.replace("Hello", "Later"))
        assert app.routers is first

    def test_load_error_leaves_app_unfrozen(self, routes_dir: Path, write_controller) -> None:
        write_controller("broken.py", "VALUE = 1\n")
        app = _app(routes_dir)
        with pytest.raises(ControllerLoadError):
            app._ensure_frozen()
        assert app._frozen is False


class TestASGI:
    async def test_basic_request(self, routes_dir: Path, write_controller) -> None:
        write_controller("hello.py", HELLO)
        async with TestClient(_app(routes_dir)) as client:
            response = await client.get("/hello")
        assert response.status == 200
        assert response.text == "hello"
        assert response.content_type == "text/html; charset=utf-8"
        assert response.headers["content-length"] == "5"

    async def test_head_uses_get_handler(self, routes_dir: Path, write_controller) -> None:
        write_controller("hello.py", HELLO)
        async with TestClient(_app(routes_dir)) as client:
            response = await client.request("HEAD", "/hello")
        assert response.status == 200

    async def test_query_string(self, routes_dir: Path, write_controller) -> None:
        write_controller(
            "search.py",
            """
            class Search:
                def get(self, request, response, next):
                    return {"q": request.query.get("q"), "url": request.url}
            """,
        )
        async with TestClient(_app(routes_dir)) as client:
            response = await client.get("/search?q=owls")
        assert response.json() == {"q": "owls", "url": "/search?q=owls"}

    async def test_path_params_named_per_route(self, routes_dir: Path, write_controller) -> None:
        write_controller(
            "users.py",
            """
            class Users:
                routes = {"get /:id": "show", "get /:slug/posts": "posts"}

                def show(self, request, response, next):
                    return dict(request.path_params)

                def posts(self, request, response, next):
                    return dict(request.path_params)
            """,
        )
        async with TestClient(_app(routes_dir)) as client:
            posts = await client.get("/users/abc/posts")
            show = await client.get("/users/abc")
        assert posts.json() == {"slug": "abc"}
        assert show.json() == {"id": "abc"}

    async def test_non_http_scope_ignored(self, routes_dir: Path) -> None:
        app = _app(routes_dir)
        sent: list[dict] = []

        async def receive() -> dict:
            return {}

        async def send(message: dict) -> None:
            sent.append(message)

        await app({"type": "websocket"}, receive, send)
        assert sent == []


class TestNotFound:
    async def test_envelope(self, routes_dir: Path) -> None:
        async with TestClient(_app(routes_dir)) as client:
            response = await client.get("/missing")
        assert response.status == 404
        assert response.content_type == "application/json"
        assert response.json() == {
            "status": 404,
            "error": "Not Found",
            "message": "404 Not Found",
        }

    async def test_wrong_method_is_404(self, routes_dir: Path, write_controller) -> None:
        write_controller("hello.py", HELLO)
        async with TestClient(_app(routes_dir)) as client:
            response = await client.delete("/hello")
        assert response.status == 404


class TestErrorPath:
    async def test_unhandled_exception_is_500(
        self, routes_dir: Path, write_controller, caplog
    ) -> None:
        write_controller(
            "boom.py",
            """
            class Boom:
                def get(self, request, response, next):
                    raise RuntimeError("secret detail")
            """,
        )
        with caplog.at_level(logging.ERROR, logger="nightframe.server"):
            async with TestClient(_app(routes_dir)) as client:
                response = await client.get("/boom")
        assert response.status == 500
        assert response.json() == {
            "status": 500,
            "error": "Internal Server Error",
            "message": "Internal Server Error",
        }
        assert "secret detail" not in response.text
        assert any(r.exc_info for r in caplog.records)

    async def test_debug_shows_exception(self, routes_dir: Path, write_controller) -> None:
        write_controller(
            "boom.py",
            """
            class Boom:
                def get(self, request, response, next):
                    raise RuntimeError("visible")
            """,
        )
        async with TestClient(_app(routes_dir, debug=True)) as client:
            response = await client.get("/boom")
        assert response.json()["message"] == "RuntimeError: visible"

    async def test_http_error_from_handler(self, routes_dir: Path, write_controller) -> None:
        write_controller(
            "gone.py",
            """
            from nightframe import HTTPError

            class Gone:
                def get(self, request, response, next):
                    raise HTTPError(status=410, detail="moved away", headers=(("X-Why", "old"),))
            """,
        )
        async with TestClient(_app(routes_dir)) as client:
            response = await client.get("/gone")
        assert response.status == 410
        assert response.headers["x-why"] == "old"
        assert response.json() == {"status": 410, "error": "Gone", "message": "moved away"}

    async def test_status_code_attribute(self, routes_dir: Path, write_controller) -> None:
        write_controller(
            "teapot.py",
            """
            class _Teapot(Exception):
                status_code = 418

            class Teapot:
                def get(self, request, response, next):
                    raise _Teapot("short and stout")
            """,
        )
        async with TestClient(_app(routes_dir)) as client:
            response = await client.get("/teapot")
        assert response.status == 418
        assert response.json()["message"] == "short and stout"

    async def test_error_after_send_does_not_send_twice(
        self, routes_dir: Path, write_controller
    ) -> None:
        write_controller(
            "late.py",
            """
            class Late:
                async def get(self, request, response, next):
                    await response.send("partial")
                    raise RuntimeError("after send")
            """,
        )
        async with TestClient(_app(routes_dir)) as client:
            response = await client.get("/late")
        assert response.start_count == 1
        assert response.status == 200
        assert response.text == "partial"

    async def test_hook_failure_goes_to_error_path(
        self, routes_dir: Path, write_controller
    ) -> None:
        write_controller(
            "hooked.py",
            """
            class Hooked:
                def after_request(self, result, request, response, next):
                    raise ValueError("after failed")

                def get(self, request, response, next):
                    return "never sent"
            """,
        )
        async with TestClient(_app(routes_dir)) as client:
            response = await client.get("/hooked")
        assert response.status == 500
        assert response.start_count == 1

    async def test_unserialisable_result_is_500(
        self, routes_dir: Path, write_controller
    ) -> None:
        write_controller(
            "odd.py",
            """
            class Odd:
                def get(self, request, response, next):
                    return {"value": object()}
            """,
        )
        async with TestClient(_app(routes_dir)) as client:
            response = await client.get("/odd")
        assert response.status == 500
        assert response.start_count == 1


class TestSecurityHeaders:
    async def test_defaults_on_success(self, routes_dir: Path, write_controller) -> None:
        write_controller("hello.py", HELLO)
        async with TestClient(_app(routes_dir)) as client:
            response = await client.get("/hello")
        assert response.headers["x-frame-options"] == "SAMEORIGIN"
        assert response.headers["referrer-policy"] == "no-referrer"
        assert response.headers["x-content-type-options"] == "nosniff"
        assert "x-powered-by" not in response.headers

    async def test_present_on_error_envelope(self, routes_dir: Path) -> None:
        async with TestClient(_app(routes_dir)) as client:
            response = await client.get("/missing")
        assert response.status == 404
        assert response.headers["x-frame-options"] == "SAMEORIGIN"

    async def test_controller_can_override(self, routes_dir: Path, write_controller) -> None:
        write_controller(
            "embed.py",
            """
            class Embed:
                def get(self, request, response, next):
                    response.set_header("X-Frame-Options", "DENY")
                    return "framed"
            """,
        )
        async with TestClient(_app(routes_dir)) as client:
            response = await client.get("/embed")
        assert response.headers.get_list("x-frame-options") == ["DENY"]

    async def test_custom_values(self, routes_dir: Path, write_controller) -> None:
        write_controller("hello.py", HELLO)
        headers = SecurityHeadersConfig(referrer_policy="same-origin")
        async with TestClient(_app(routes_dir, security_headers=headers)) as client:
            response = await client.get("/hello")
        assert response.headers["referrer-policy"] == "same-origin"

    async def test_disabled(self, routes_dir: Path, write_controller) -> None:
        write_controller("hello.py", HELLO)
        async with TestClient(_app(routes_dir, security_headers=None)) as client:
            response = await client.get("/hello")
        assert "x-frame-options" not in response.headers
        assert "referrer-policy" not in response.headers


class TestAccessLog:
    async def test_one_line_per_request(
        self, routes_dir: Path, write_controller, caplog
    ) -> None:
        write_controller("hello.py", HELLO)
        app = App(AppConfig(log_requests=True), routes_dir=routes_dir)
        with caplog.at_level(logging.INFO, logger="nightframe.access"):
            async with TestClient(app) as client:
                await client.get("/hello?x=1")
                await client.get("/nope")
        lines = [r.getMessage() for r in caplog.records if r.name == "nightframe.access"]
        assert len(lines) == 2
        assert lines[0].startswith("GET /hello?x=1 200 ")
        assert "correlation_id=- request_id=- trace_id=-" in lines[0]
        assert lines[1].startswith("GET /nope 404 ")

    async def test_tracing_headers_logged(
        self, routes_dir: Path, write_controller, caplog
    ) -> None:
        write_controller("hello.py", HELLO)
        app = App(AppConfig(log_requests=True, app_name="shop"), routes_dir=routes_dir)
        headers = {
            "X-Correlation-Id": "corr-1",
            "X-Request-Id": "req-2",
            "X-Trace-Id": "trace-3",
            "User-Agent": "pytest-agent",
        }
        with caplog.at_level(logging.INFO, logger="nightframe.access"):
            async with TestClient(app) as client:
                await client.get("/hello", headers=headers)
        (record,) = [r for r in caplog.records if r.name == "nightframe.access"]
        message = record.getMessage()
        assert "correlation_id=corr-1" in message
        assert "request_id=req-2" in message
        assert "trace_id=trace-3" in message
        assert 'user_agent="pytest-agent"' in message
        assert record.fields["service"] == "shop"
        assert record.fields["status"] == 200
        assert record.fields["user_agent"] == "pytest-agent"

    async def test_disabled(self, routes_dir: Path, write_controller, caplog) -> None:
        write_controller("hello.py", HELLO)
        with caplog.at_level(logging.INFO, logger="nightframe.access"):
            async with TestClient(_app(routes_dir)) as client:
                await client.get("/hello")
        assert not [r for r in caplog.records if r.name == "nightframe.access"]


class TestLifespan:
    async def _run(self, app: App) -> list[dict]:
        messages = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])
        sent: list[dict] = []

        async def receive() -> dict:
            return next(messages)

        async def send(message: dict) -> None:
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)
        return sent

    async def test_startup_and_shutdown(self, routes_dir: Path, write_controller) -> None:
        write_controller("hello.py", HELLO)
        app = _app(routes_dir)
        sent = await self._run(app)
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]
        assert app._frozen is True

    async def test_startup_fails_on_bad_controller(
        self, routes_dir: Path, write_controller
    ) -> None:
        write_controller("broken.py", "raise ImportError('missing dependency')\n")
        sent = await self._run(_app(routes_dir))
        assert len(sent) == 1
        assert sent[0]["type"] == "lifespan.startup.failed"
        assert "missing dependency" in sent[0]["message"]
