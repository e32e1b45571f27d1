"""Runs one batch of commands and records what happened."""

import logging
from typing import Protocol

from shellgoal.agent.logs import log_command_result, log_command_start
from shellgoal.agent.models import AttemptRecord, CommandExecution, CommandResult

logger = logging.getLogger(__name__)


class CommandExecutor(Protocol):
    def execute(
        self,
        command: str,
        working_directory: str | None = None,
        sandbox_secret: str = "",
    ) -> CommandResult: ...


class AttemptExecutor:
    """
    Executes an ordered command batch, stopping at the first failure.

    Later commands in a batch usually depend on earlier ones, so nothing after a
    failing command is run or recorded.
    """

    def __init__(self, executor: CommandExecutor) -> None:
        self._executor = executor

    def run_attempt(
        self,
        commands: list[str],
        working_directory: str | None = None,
        sandbox_secret: str = "",
        iteration: int = 0,
        instructions: str = "",
    ) -> AttemptRecord:
        """
        Run commands in order through the remote executor.

        Args:
            commands: Ordered shell commands
            working_directory: Directory to run each command in
            sandbox_secret: Sandbox API key of the requesting user
            iteration: Iteration number stored on the record
            instructions: Raw model text the commands were parsed from

        Returns:
            AttemptRecord with the executed commands; an empty batch succeeds.
        """
        record = AttemptRecord(iteration=iteration, instructions=instructions)

        for command in commands:
            log_command_start(command)
            result = self._executor.execute(
                command,
                working_directory=working_directory,
                sandbox_secret=sandbox_secret,
            )
            log_command_result(result.stdout, result.stderr)
            record.executions.append(CommandExecution(command=command, result=result))

            if result.failed:
                logger.info(
                    "Command failed with error detected in Terminal. "
                    "Will request refined instructions next iteration."
                )
                break
            logger.info("Command executed successfully.")

        return record
