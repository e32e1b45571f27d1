import time

import pytest
from fastapi.testclient import TestClient

from config.settings import settings
from shellgoal.agent.attempt import AttemptExecutor
from shellgoal.agent.loop import GoalLoop
from shellgoal.agent.models import SUCCESS_BANNER, CommandResult
from shellgoal.api.main import app
from shellgoal.bot.dispatcher import GoalDispatcher
from shellgoal.bot.onboarding import ONBOARDING_PROMPT, SAVED_MESSAGE
from shellgoal.errors import ExecutorError
from shellgoal.storage.credentials import CredentialPair, CredentialStore, connect


class ScriptedGenerator:
    def __init__(self, reply: str = "echo ok") -> None:
        self.reply = reply

    def generate(self, context: str, goal: str, model_secret: str) -> str:
        return self.reply


class FakeSandbox:
    def __init__(self, unreachable: bool = False) -> None:
        self.unreachable = unreachable

    def execute(self, command, working_directory=None, sandbox_secret=""):
        if self.unreachable:
            raise ExecutorError("connection refused")
        return CommandResult(stdout="ok", stderr="")


@pytest.fixture
def store(tmp_path):
    db = connect(tmp_path / "api.db")
    yield CredentialStore(db)
    db.close()


@pytest.fixture
def make_client(tmp_path, monkeypatch, store):
    monkeypatch.setattr(settings, "database_path", tmp_path / "lifespan.db")
    monkeypatch.setattr(settings, "onboarding_timeout", 5.0)

    def factory(sandbox: FakeSandbox | None = None) -> TestClient:
        client = TestClient(app)
        client.__enter__()
        loop = GoalLoop(ScriptedGenerator(), AttemptExecutor(sandbox or FakeSandbox()))
        app.state.dispatcher = GoalDispatcher(store, loop)
        clients.append(client)
        return client

    clients: list[TestClient] = []
    yield factory
    for client in clients:
        client.__exit__(None, None, None)


def _poll(client: TestClient, user_id: str, count: int, timeout: float = 5.0) -> list[str]:
    messages: list[str] = []
    deadline = time.monotonic() + timeout
    while len(messages) < count and time.monotonic() < deadline:
        messages.extend(client.get(f"/api/v1/messages/{user_id}").json()["messages"])
        time.sleep(0.02)
    return messages


def test_health_and_root(make_client) -> None:
    client = make_client()

    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").json()["name"] == "shellgoal API"


def test_goal_endpoint_runs_to_success(make_client, store: CredentialStore) -> None:
    store.store("42", "sam", CredentialPair("m", "s"))
    client = make_client()

    response = client.post("/api/v1/goals", json={"user_id": "42", "goal": "install nginx"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "succeeded"
    assert body["iterations"] == 1
    assert "".join(body["messages"]).startswith(SUCCESS_BANNER)


def test_goal_endpoint_requires_onboarding(make_client) -> None:
    client = make_client()

    response = client.post("/api/v1/goals", json={"user_id": "nobody", "goal": "install nginx"})

    assert response.status_code == 404


def test_goal_endpoint_reports_transport_failure(make_client, store: CredentialStore) -> None:
    store.store("42", "sam", CredentialPair("m", "s"))
    client = make_client(FakeSandbox(unreachable=True))

    response = client.post("/api/v1/goals", json={"user_id": "42", "goal": "install nginx"})

    assert response.status_code == 502
    assert "connection refused" in response.json()["detail"]


def test_chat_flow_onboards_then_runs_goal(make_client, store: CredentialStore) -> None:
    client = make_client()

    first = client.post(
        "/api/v1/messages",
        json={"user_id": "7", "username": "kim", "content": "!goal install nginx"},
    )
    assert first.json() == {"accepted": True}
    assert _poll(client, "7", 1) == [ONBOARDING_PROMPT]

    reply = client.post(
        "/api/v1/messages",
        json={
            "user_id": "7",
            "username": "kim",
            "content": "GROQ API Key: gsk\nLinux API Key: lnx",
            "is_direct": True,
        },
    )
    assert reply.json() == {"accepted": False}
    assert _poll(client, "7", 1) == [SAVED_MESSAGE]
    assert store.lookup("7") == CredentialPair("gsk", "lnx")

    client.post(
        "/api/v1/messages",
        json={"user_id": "7", "username": "kim", "content": "!goal install nginx"},
    )
    messages = _poll(client, "7", 1)
    assert "".join(messages).startswith(SUCCESS_BANNER)


def test_bot_messages_are_not_accepted(make_client) -> None:
    client = make_client()

    response = client.post(
        "/api/v1/messages",
        json={"user_id": "bot", "content": "!goal anything", "is_bot": True},
    )

    assert response.json() == {"accepted": False}


def test_blank_goal_is_rejected(make_client, store: CredentialStore) -> None:
    store.store("42", "sam", CredentialPair("m", "s"))
    client = make_client()

    response = client.post("/api/v1/goals", json={"user_id": "42", "goal": "   "})

    assert response.status_code == 422
