import pytest

from shellgoal.agent.attempt import AttemptExecutor
from shellgoal.agent.models import CommandResult
from shellgoal.errors import ExecutorError


class FakeExecutor:
    def __init__(self, results: dict[str, CommandResult] | None = None) -> None:
        self.results = results or {}
        self.calls: list[tuple[str, str | None, str]] = []

    def execute(self, command, working_directory=None, sandbox_secret=""):
        self.calls.append((command, working_directory, sandbox_secret))
        return self.results.get(command, CommandResult(stdout=f"ran {command}", stderr=""))


def test_all_commands_run_in_order_when_none_fail() -> None:
    executor = FakeExecutor()
    attempts = AttemptExecutor(executor)

    record = attempts.run_attempt(
        ["apt-get update -y", "apt-get install -y nginx"],
        working_directory="/home",
        sandbox_secret="sandbox-secret",
        iteration=1,
        instructions="apt-get update -y\napt-get install -y nginx",
    )

    assert [call[0] for call in executor.calls] == ["apt-get update -y", "apt-get install -y nginx"]
    assert all(call[1:] == ("/home", "sandbox-secret") for call in executor.calls)
    assert record.succeeded is True
    assert record.iteration == 1
    assert [e.command for e in record.executions] == ["apt-get update -y", "apt-get install -y nginx"]


def test_stops_at_first_failing_command() -> None:
    executor = FakeExecutor(
        {"apt-get install -y foo": CommandResult(stdout="", stderr="E: Unable to locate package foo")}
    )
    attempts = AttemptExecutor(executor)

    record = attempts.run_attempt(["apt-get update -y", "apt-get install -y foo", "foo --version"])

    assert [call[0] for call in executor.calls] == ["apt-get update -y", "apt-get install -y foo"]
    assert record.succeeded is False
    assert len(record.executions) == 2
    assert record.failed_execution is not None
    assert record.failed_execution.command == "apt-get install -y foo"


def test_whitespace_only_stderr_is_not_a_failure() -> None:
    executor = FakeExecutor({"true": CommandResult(stdout="", stderr="  \n\t")})
    attempts = AttemptExecutor(executor)

    record = attempts.run_attempt(["true", "echo done"])

    assert record.succeeded is True
    assert len(executor.calls) == 2


def test_benign_warnings_on_stderr_still_count_as_failure() -> None:
    executor = FakeExecutor(
        {"apt install -y curl": CommandResult(stdout="ok", stderr="WARNING: apt does not have a stable CLI")}
    )

    record = AttemptExecutor(executor).run_attempt(["apt install -y curl", "curl --version"])

    assert record.succeeded is False
    assert len(executor.calls) == 1


def test_empty_batch_is_vacuously_successful() -> None:
    executor = FakeExecutor()

    record = AttemptExecutor(executor).run_attempt([])

    assert record.succeeded is True
    assert record.executions == []
    assert executor.calls == []


def test_transport_errors_propagate() -> None:
    class BrokenExecutor:
        def execute(self, command, working_directory=None, sandbox_secret=""):
            raise ExecutorError("connection refused")

    with pytest.raises(ExecutorError):
        AttemptExecutor(BrokenExecutor()).run_attempt(["ls"])


def test_rendered_record_contains_commands_and_streams() -> None:
    executor = FakeExecutor({"bad": CommandResult(stdout="partial", stderr="boom")})

    record = AttemptExecutor(executor).run_attempt(
        ["bad"], iteration=3, instructions="bad"
    )
    block = record.render()

    assert block.startswith("Attempt #3:\n**AI instructions:**\n\n```bash\nbad\n```")
    assert "\n> bad\n```plaintext\nstdout:\npartial\n\nTerminal:\nboom\n```\n" in block
