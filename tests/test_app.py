from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from askbot.config import Config
from askbot.main import create_app, main


@pytest.fixture
def client(dispatcher) -> TestClient:
    return TestClient(create_app(dispatcher=dispatcher))


def test_health_check(client) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "OK"


def test_ping_returns_pong(client) -> None:
    response = client.post("/interactions", json={"id": "1", "type": 1, "token": "t"})

    assert response.status_code == 200
    assert response.json() == {"type": 1}


def test_unknown_command_returns_400(client) -> None:
    payload = {"id": "1", "type": 2, "token": "t", "data": {"name": "dance"}, "user": {"id": "5"}}

    response = client.post("/interactions", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "unknown command"}


def test_unknown_component_returns_400(client) -> None:
    payload = {"id": "1", "type": 3, "token": "t", "data": {"custom_id": "mystery_1"}, "user": {"id": "5"}}

    response = client.post("/interactions", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "unknown component"}


def test_invalid_body_returns_400(client) -> None:
    response = client.post("/interactions", content=b"not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400

    response = client.post("/interactions", json={"type": "ping"})
    assert response.status_code == 400
    assert response.json() == {"error": "invalid interaction"}


def test_ask_runs_followup_after_reply(client, answers, discord_client) -> None:
    answers.fetch.return_value = "4"
    payload = {
        "id": "11",
        "type": 2,
        "token": "tok-http",
        "data": {"name": "ask", "options": [{"name": "question", "type": 3, "value": "What is 2+2?"}]},
        "member": {"user": {"id": "42"}},
        "context": 0,
    }

    response = client.post("/interactions", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["type"] == 4
    assert "Let me find the answer for you" in data["data"]["content"]
    # TestClient returns after background tasks have finished
    final = discord_client.edit_original.await_args
    assert final.args[0] == "tok-http"
    assert "Here's what I found, <@42>:\n\n4" in final.args[1]["content"]


def test_duel_over_http(client, discord_client) -> None:
    challenge = {
        "id": "21",
        "type": 2,
        "token": "tok-a",
        "data": {"name": "challenge", "options": [{"name": "object", "type": 3, "value": "scissors"}]},
        "member": {"user": {"id": "1"}},
    }
    select = {
        "id": "22",
        "type": 3,
        "token": "tok-b",
        "data": {"custom_id": "select_choice_21", "component_type": 3, "values": ["rock"]},
        "member": {"user": {"id": "2"}},
        "message": {"id": "23"},
    }

    assert client.post("/interactions", json=challenge).status_code == 200
    first = client.post("/interactions", json=select)
    second = client.post("/interactions", json=select)

    assert first.json()["data"]["content"] == "<@2>'s **rock** crushes <@1>'s **scissors**"
    assert second.json()["data"]["content"] == "This challenge is no longer available."
    discord_client.edit_message.assert_awaited_once()


def test_main_runs_uvicorn_with_app_logging() -> None:
    cfg = Config(discord_app_id="999", discord_token="bot", ask_token="ask", host="127.0.0.1", port=8123)
    app = object()
    with (
        patch("askbot.main.load_config", return_value=cfg),
        patch("askbot.main.setup_logging", return_value="/tmp") as setup,
        patch("askbot.main.create_app", return_value=app) as make_app,
        patch("askbot.main.uvicorn.run") as run,
    ):
        main()

    setup.assert_called_once_with("INFO")
    make_app.assert_called_once_with(cfg=cfg)
    run.assert_called_once_with(app, host="127.0.0.1", port=8123, log_config=None)
