import pytest
from fastapi.testclient import TestClient

from agent.agent import ChatRelay
from agent.core.prompt import REFUSAL_MESSAGE
from app.main import app
from tests.conftest import FakeAPIError, FakeLLM

client = TestClient(app)


@pytest.fixture(autouse=True)
def _isolate_relay(fake_llm: FakeLLM) -> None:
    original = app.state.relay
    app.state.relay = ChatRelay(llm=fake_llm)
    yield
    app.state.relay = original


def test_health() -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_chat_returns_reply(fake_llm: FakeLLM) -> None:
    fake_llm.replies = ["A stack is a LIFO structure."]

    response = client.post("/", json={"message": "What is a stack?"})

    assert response.status_code == 200
    assert response.json() == {"reply": "A stack is a LIFO structure."}
    assert len(app.state.relay.history()) == 2


def test_chat_keeps_context_between_requests(fake_llm: FakeLLM) -> None:
    fake_llm.replies = ["first answer", "second answer"]

    client.post("/", json={"message": "What is BFS?"})
    client.post("/", json={"message": "And DFS?"})

    assert [m.content for m in fake_llm.calls[1][1:]] == [
        "What is BFS?",
        "first answer",
        "And DFS?",
    ]


def test_out_of_scope_question_passes_refusal_through(fake_llm: FakeLLM) -> None:
    fake_llm.replies = [REFUSAL_MESSAGE]

    response = client.post("/", json={"message": "Who won the match?"})

    assert response.status_code == 200
    assert response.json() == {"reply": REFUSAL_MESSAGE}


@pytest.mark.parametrize(
    "kwargs",
    [
        {"json": {"message": ""}},
        {"json": {}},
        {"json": {"message": None}},
        {"json": {"message": 42}},
        {},
    ],
)
def test_chat_requires_message(kwargs, fake_llm: FakeLLM) -> None:
    response = client.post("/", **kwargs)

    assert response.status_code == 400
    assert response.json() == {"error": "Message is required"}
    assert app.state.relay.history() == ()
    assert fake_llm.calls == []


def test_chat_empty_reply_is_500(fake_llm: FakeLLM) -> None:
    fake_llm.replies = [""]

    response = client.post("/", json={"message": "What is a tree?"})

    assert response.status_code == 500
    assert response.json() == {"error": "No reply generated from Gemini."}
    assert len(app.state.relay.history()) == 1


def test_chat_overload_is_503(fake_llm: FakeLLM) -> None:
    fake_llm.replies = [FakeAPIError("overloaded", code=503)]

    response = client.post("/", json={"message": "What is a tree?"})

    assert response.status_code == 503
    assert "overloaded" in response.json()["error"]
    assert len(app.state.relay.history()) == 1


def test_chat_generic_failure_is_500(fake_llm: FakeLLM) -> None:
    fake_llm.replies = [RuntimeError("connection reset")]

    response = client.post("/", json={"message": "What is a tree?"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to get response from Gemini"}


def test_reset_clears_transcript(fake_llm: FakeLLM) -> None:
    client.post("/", json={"message": "What is a stack?"})

    response = client.post("/reset")

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert app.state.relay.history() == ()


def test_reset_on_empty_transcript_still_ok() -> None:
    response = client.post("/reset")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_cors_reflects_origin() -> None:
    response = client.options(
        "/",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
