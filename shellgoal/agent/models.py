"""Data model for goal runs: command results, attempts, and run state."""

from dataclasses import dataclass, field
from enum import Enum

CONTEXT_PREAMBLE = (
    "Initial attempt. No commands have been run yet.\n"
    "We are working with a Debian/Ubuntu container.\n"
    "Goal: {goal}"
)

SUCCESS_BANNER = "The goal was successfully achieved."
FAILURE_BANNER = "Failed to achieve the goal within the maximum number of iterations."


class LoopStatus(Enum):
    """States of the goal loop."""

    INIT = "init"
    ITERATING = "iterating"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"

    @property
    def is_terminal(self) -> bool:
        return self in (LoopStatus.SUCCEEDED, LoopStatus.EXHAUSTED)


@dataclass(frozen=True)
class CommandResult:
    """Captured output of one command run in the sandbox.

    A non-empty error stream (after trimming) is the only failure signal.
    """

    stdout: str = ""
    stderr: str = ""

    @property
    def failed(self) -> bool:
        return bool(self.stderr.strip())


@dataclass(frozen=True)
class CommandExecution:
    """A command paired with the result it produced."""

    command: str
    result: CommandResult

    def render(self) -> str:
        return (
            f"\n> {self.command}\n"
            "```plaintext\n"
            f"stdout:\n{self.result.stdout}\n\n"
            f"Terminal:\n{self.result.stderr}\n"
            "```\n"
        )


@dataclass
class AttemptRecord:
    """One iteration's instructions and the commands that actually ran."""

    iteration: int
    instructions: str
    executions: list[CommandExecution] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not any(execution.result.failed for execution in self.executions)

    @property
    def failed_execution(self) -> CommandExecution | None:
        return next((e for e in self.executions if e.result.failed), None)

    def render(self) -> str:
        """Render the attempt as the text block folded into context and transcript."""
        header = (
            f"Attempt #{self.iteration}:\n"
            "**AI instructions:**\n\n"
            f"```bash\n{self.instructions}\n```\n\n"
            "**Command results:**\n\n"
        )
        return header + "".join(execution.render() for execution in self.executions)


@dataclass
class RunState:
    """Mutable state of a single goal run.

    Context is kept as the preamble plus the ordered attempt records and is
    rendered on demand; records are only ever appended.
    """

    goal: str
    max_iterations: int
    iteration: int = 0
    status: LoopStatus = LoopStatus.INIT
    attempts: list[AttemptRecord] = field(default_factory=list)

    @property
    def preamble(self) -> str:
        return CONTEXT_PREAMBLE.format(goal=self.goal)

    @property
    def context(self) -> str:
        return self.preamble + "".join(f"\n\n{attempt.render()}" for attempt in self.attempts)

    @property
    def transcript(self) -> str:
        return "".join(attempt.render() for attempt in self.attempts)

    @property
    def succeeded(self) -> bool:
        return self.status == LoopStatus.SUCCEEDED

    def record(self, attempt: AttemptRecord) -> None:
        self.attempts.append(attempt)


@dataclass
class RunOutcome:
    """Terminal result of a goal run, ready for delivery."""

    goal: str
    status: LoopStatus
    iterations: int
    transcript: str
    attempts: list[AttemptRecord] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == LoopStatus.SUCCEEDED

    @property
    def banner(self) -> str:
        return SUCCESS_BANNER if self.succeeded else FAILURE_BANNER

    @property
    def message(self) -> str:
        return f"{self.banner}\n\n**Logs:**\n\n{self.transcript}"
