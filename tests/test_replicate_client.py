"""Tests for the Replicate predictions client against a local aiohttp server."""
import asyncio

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from baby_face_predictor.services.clients import ReplicateAsyncClient, ReplicateError

OUTPUT_URL = "https://replicate.delivery/pbxt/out-0.png"


class FakeReplicateApi:
    """Minimal in-process stand-in for the predictions API."""

    def __init__(self, *, polls_before_done=1, final_status="succeeded", error=None, create_status=201):
        self.polls_before_done = polls_before_done
        self.final_status = final_status
        self.error = error
        self.create_status = create_status
        self.created: list[dict] = []
        self.create_headers: list[dict] = []
        self.polls = 0
        self.cancelled = False

    def prediction(self, request: web.Request, status: str) -> dict:
        base = request.url.with_path("/v1/predictions/p1")
        return {
            "id": "p1",
            "status": status,
            "output": [OUTPUT_URL] if status == "succeeded" else None,
            "error": self.error if status == "failed" else None,
            "urls": {"get": str(base), "cancel": str(base) + "/cancel"},
        }

    async def create(self, request: web.Request) -> web.Response:
        self.created.append({"path": request.path, "body": await request.json()})
        self.create_headers.append(dict(request.headers))
        if self.create_status >= 400:
            return web.Response(status=self.create_status, text='{"detail": "nope"}')
        status = "starting" if self.polls_before_done else self.final_status
        return web.json_response(self.prediction(request, status), status=self.create_status)

    async def get(self, request: web.Request) -> web.Response:
        self.polls += 1
        status = self.final_status if self.polls >= self.polls_before_done else "processing"
        return web.json_response(self.prediction(request, status))

    async def cancel(self, request: web.Request) -> web.Response:
        self.cancelled = True
        return web.json_response(self.prediction(request, "canceled"))

    async def account(self, request: web.Request) -> web.Response:
        if request.headers.get("Authorization") != "Bearer test-token":
            return web.Response(status=401, text="Unauthenticated")
        return web.json_response({"type": "user", "username": "tester"})

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/v1/predictions", self.create)
        app.router.add_post("/v1/models/{owner}/{name}/predictions", self.create)
        app.router.add_get("/v1/predictions/{id}", self.get)
        app.router.add_post("/v1/predictions/{id}/cancel", self.cancel)
        app.router.add_get("/v1/account", self.account)
        return app


@pytest.fixture
async def session():
    async with aiohttp.ClientSession() as s:
        yield s


async def start(api: FakeReplicateApi) -> TestServer:
    server = TestServer(api.app())
    await server.start_server()
    return server


def make_client(server: TestServer, session, **kwargs) -> ReplicateAsyncClient:
    return ReplicateAsyncClient(
        "test-token",
        base_url=str(server.make_url("/v1")),
        session=session,
        prefer_wait_s=5,
        poll_interval_s=0.01,
        poll_interval_max_s=0.02,
        **kwargs,
    )


class TestReplicateAsyncClient:

    async def test_versioned_model_runs_to_completion(self, session):
        """Should create a versioned prediction, poll it and return its output."""
        api = FakeReplicateApi(polls_before_done=2)
        server = await start(api)
        try:
            output = await make_client(server, session).run("stability-ai/sdxl:abc123", {"prompt": "a baby"})
        finally:
            await server.close()

        assert output == [OUTPUT_URL]
        assert api.created == [
            {"path": "/v1/predictions", "body": {"version": "abc123", "input": {"prompt": "a baby"}}}
        ]
        assert api.create_headers[0]["Authorization"] == "Bearer test-token"
        assert api.create_headers[0]["Prefer"] == "wait=5"
        assert api.polls == 2

    async def test_official_model_uses_model_endpoint(self, session):
        """Should post unversioned models to /models/{owner}/{name}/predictions."""
        api = FakeReplicateApi(polls_before_done=0)
        server = await start(api)
        try:
            output = await make_client(server, session).run("black-forest-labs/flux-schnell", {"prompt": "x"})
        finally:
            await server.close()

        assert output == [OUTPUT_URL]
        assert api.created[0]["path"] == "/v1/models/black-forest-labs/flux-schnell/predictions"
        assert api.created[0]["body"] == {"input": {"prompt": "x"}}
        assert api.polls == 0

    async def test_failed_prediction_raises(self, session):
        api = FakeReplicateApi(final_status="failed", error="NSFW content detected")
        server = await start(api)
        try:
            with pytest.raises(ReplicateError, match="NSFW content detected"):
                await make_client(server, session).run("owner/model:v1", {"prompt": "x"})
        finally:
            await server.close()

    async def test_http_error_carries_status(self, session):
        """Should surface non-2xx answers as ReplicateError with the status code."""
        api = FakeReplicateApi(create_status=402)
        server = await start(api)
        try:
            with pytest.raises(ReplicateError) as exc_info:
                await make_client(server, session).run("owner/model:v1", {"prompt": "x"})
        finally:
            await server.close()

        assert exc_info.value.status == 402
        assert str(exc_info.value).startswith("402 Payment Required")

    async def test_cancellation_cancels_prediction(self, session):
        """Should cancel the remote prediction when the caller gives up."""
        api = FakeReplicateApi(polls_before_done=10_000)
        server = await start(api)
        try:
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(
                    make_client(server, session).run("owner/model:v1", {"prompt": "x"}), timeout=0.1
                )
        finally:
            await server.close()

        assert api.cancelled is True

    async def test_account(self, session):
        api = FakeReplicateApi()
        server = await start(api)
        try:
            account = await make_client(server, session).account()
            with pytest.raises(ReplicateError) as exc_info:
                await ReplicateAsyncClient(
                    "wrong", base_url=str(server.make_url("/v1")), session=session
                ).account()
        finally:
            await server.close()

        assert account["username"] == "tester"
        assert exc_info.value.status == 401

    async def test_connection_errors_are_retried(self, session):
        """Should retry connection failures before giving up."""
        sleeps: list[float] = []

        async def no_sleep(delay: float) -> None:
            sleeps.append(delay)

        server = await start(FakeReplicateApi())
        base_url = str(server.make_url("/v1"))
        await server.close()

        client = ReplicateAsyncClient("test-token", base_url=base_url, session=session, sleep=no_sleep)
        with pytest.raises(aiohttp.ClientConnectionError):
            await client.account()
        assert len(sleeps) == 3

    def test_missing_token(self, monkeypatch):
        from baby_face_predictor.data.settings import settings

        monkeypatch.setattr(settings, "replicate_api_token", None)
        monkeypatch.setattr(settings.api_urls, "replicate_api_token", None)
        with pytest.raises(RuntimeError, match="REPLICATE_API_TOKEN"):
            ReplicateAsyncClient()
