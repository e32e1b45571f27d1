from __future__ import annotations

import pytest
from typer.testing import CliRunner

from config.settings import settings
from shellgoal import __version__, cli
from shellgoal.agent.attempt import AttemptExecutor
from shellgoal.agent.loop import GoalLoop
from shellgoal.agent.models import CommandResult
from shellgoal.errors import ModelError
from shellgoal.storage.credentials import CredentialPair, CredentialStore, connect

runner = CliRunner()


class ScriptedGenerator:
    def __init__(self, reply: str = "echo ok", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.secrets: list[str] = []

    def generate(self, context: str, goal: str, model_secret: str) -> str:
        self.secrets.append(model_secret)
        if self.error:
            raise self.error
        return self.reply


class FakeSandbox:
    def __init__(self, stderr: str = "") -> None:
        self.stderr = stderr
        self.calls: list[tuple[str, str | None, str]] = []

    def execute(self, command, working_directory=None, sandbox_secret=""):
        self.calls.append((command, working_directory, sandbox_secret))
        return CommandResult(stdout="ok", stderr=self.stderr)


@pytest.fixture
def fake_loop(monkeypatch: pytest.MonkeyPatch):
    created: dict[str, object] = {}

    def install(generator: ScriptedGenerator, sandbox: FakeSandbox) -> dict[str, object]:
        def build(http_client=None, max_iterations=None, working_directory=None, model=None):
            created["max_iterations"] = max_iterations
            created["working_directory"] = working_directory
            return GoalLoop(
                generator,
                AttemptExecutor(sandbox),
                max_iterations=max_iterations,
                working_directory=working_directory,
            )

        monkeypatch.setattr(cli, "build_goal_loop", build)
        return created

    return install


def test_run_succeeds_and_prints_transcript(fake_loop) -> None:
    generator = ScriptedGenerator("apt-get update -y")
    sandbox = FakeSandbox()
    fake_loop(generator, sandbox)

    result = runner.invoke(
        cli.app,
        ["run", "install nginx", "--model-key", "mk", "--sandbox-key", "sk", "--cwd", "/srv"],
    )

    assert result.exit_code == 0, result.output
    assert "The goal was successfully achieved." in result.output
    assert "apt-get update -y" in result.output
    assert generator.secrets == ["mk"]
    assert sandbox.calls == [("apt-get update -y", "/srv", "sk")]


def test_run_exhaustion_exits_with_one(fake_loop) -> None:
    created = fake_loop(ScriptedGenerator("broken"), FakeSandbox(stderr="command not found"))

    result = runner.invoke(
        cli.app,
        ["run", "do it", "--model-key", "mk", "--sandbox-key", "sk", "-n", "2"],
    )

    assert result.exit_code == 1
    assert created["max_iterations"] == 2
    assert "Failed to achieve the goal" in result.output


def test_run_abort_exits_with_two(fake_loop) -> None:
    fake_loop(ScriptedGenerator(error=ModelError("bad key")), FakeSandbox())

    result = runner.invoke(cli.app, ["run", "do it", "--model-key", "mk", "--sandbox-key", "sk"])

    assert result.exit_code == 2
    assert "Goal run aborted: bad key" in result.output


def test_run_reads_keys_from_environment(fake_loop, monkeypatch: pytest.MonkeyPatch) -> None:
    generator = ScriptedGenerator()
    fake_loop(generator, FakeSandbox())
    monkeypatch.setenv("GROQ_API_KEY", "env-model")
    monkeypatch.setenv("LINUX_API_KEY", "env-sandbox")

    result = runner.invoke(cli.app, ["run", "say ok"])

    assert result.exit_code == 0, result.output
    assert generator.secrets == ["env-model"]


def test_onboard_stores_credentials_once(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    db_path = tmp_path / "cli.db"
    monkeypatch.setattr(settings, "database_path", db_path)
    args = ["onboard", "42", "sam", "--model-key", "mk", "--sandbox-key", "sk"]

    first = runner.invoke(cli.app, args)
    second = runner.invoke(cli.app, args)

    assert first.exit_code == 0, first.output
    assert second.exit_code == 1
    assert "already has API keys" in second.output
    db = connect(db_path)
    assert CredentialStore(db).lookup("42") == CredentialPair("mk", "sk")
    db.close()


def test_version() -> None:
    result = runner.invoke(cli.app, ["version"])

    assert result.exit_code == 0
    assert f"shellgoal {__version__}" in result.output
