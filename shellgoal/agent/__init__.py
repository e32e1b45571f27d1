"""Goal loop components."""

from shellgoal.agent.attempt import AttemptExecutor
from shellgoal.agent.instructions import InstructionGenerator, build_messages, parse_commands
from shellgoal.agent.loop import GoalLoop
from shellgoal.agent.models import (
    AttemptRecord,
    CommandExecution,
    CommandResult,
    LoopStatus,
    RunOutcome,
    RunState,
)

__all__ = [
    "AttemptExecutor",
    "AttemptRecord",
    "CommandExecution",
    "CommandResult",
    "GoalLoop",
    "InstructionGenerator",
    "LoopStatus",
    "RunOutcome",
    "RunState",
    "build_messages",
    "parse_commands",
]
