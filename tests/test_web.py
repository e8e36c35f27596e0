from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from telegram.error import NetworkError

from aimod.web import create_api

WEBHOOK_URL = "https://bot.example.com/"


class FakeApplication:
    def __init__(self, bot) -> None:
        self.bot = bot
        self.updates = []
        self.error = None
        self.entered = False
        self.exited = False
        self.running = False

    async def process_update(self, update) -> None:
        if self.error:
            raise self.error
        self.updates.append(update)

    async def start(self) -> None:
        self.running = True

    async def stop(self) -> None:
        self.running = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, *exc) -> None:
        self.exited = True


@pytest.fixture
def application(bot) -> FakeApplication:
    return FakeApplication(bot)


@pytest.fixture
def client(application) -> TestClient:
    return TestClient(create_api(application, WEBHOOK_URL))


def test_set_webhook(client, bot) -> None:
    resp = client.get("/", params={"set_webhook": "1"})
    assert resp.status_code == 200
    assert resp.json() == {"message": "Webhook set"}
    assert bot.calls == [("set_webhook", {"url": WEBHOOK_URL})]


def test_set_webhook_failure(client, bot) -> None:
    bot.webhook_error = NetworkError("unreachable")
    resp = client.get("/api/bot?set_webhook=true")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to set webhook"}


def test_update_is_dispatched(client, application) -> None:
    resp = client.post("/", json={"update_id": 5})
    assert resp.status_code == 200
    assert [u.update_id for u in application.updates] == [5]


def test_dispatch_failure(client, application) -> None:
    application.error = RuntimeError("boom")
    resp = client.post("/", json={"update_id": 6})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Update handling failed"}


def test_malformed_body(client) -> None:
    resp = client.post("/", content=b"not json", headers={"content-type": "application/json"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Update handling failed"}


def test_liveness(client) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.text == "Bot is alive"


@pytest.mark.parametrize("method, path", [("GET", "/health"), ("PUT", "/"), ("DELETE", "/x")])
def test_not_found(client, method, path) -> None:
    resp = client.request(method, path)
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not found"}


def test_lifespan_initializes_application(application) -> None:
    started = []

    async def on_startup(app) -> None:
        started.append(app)

    stopped = []

    async def on_shutdown(app) -> None:
        stopped.append(app)

    api = create_api(application, WEBHOOK_URL, on_startup=on_startup, on_shutdown=on_shutdown)
    with TestClient(api) as c:
        assert application.entered
        assert application.running
        assert started == [application]
        assert c.get("/").status_code == 200
    assert stopped == [application]
    assert not application.running
    assert application.exited
