"""Bounded goal loop: ask for commands, run them, feed failures back."""

import logging
from typing import Callable

from config.settings import settings
from shellgoal.agent.attempt import AttemptExecutor
from shellgoal.agent.instructions import InstructionGenerator, parse_commands
from shellgoal.agent.logs import indent_multiline, log_header, log_sub_header
from shellgoal.agent.models import AttemptRecord, LoopStatus, RunOutcome, RunState
from shellgoal.errors import RunAborted, TransportError
from shellgoal.storage.credentials import CredentialPair

logger = logging.getLogger(__name__)

AttemptCallback = Callable[[AttemptRecord], None]


class GoalLoop:
    """Runs the feedback loop for a single goal until success or budget exhaustion."""

    def __init__(
        self,
        generator: InstructionGenerator,
        attempt_executor: AttemptExecutor,
        max_iterations: int | None = None,
        working_directory: str | None = None,
    ) -> None:
        self._generator = generator
        self._attempt_executor = attempt_executor
        self._max_iterations = (
            max_iterations if max_iterations is not None else settings.max_iterations
        )
        if self._max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self._working_directory = working_directory or settings.working_directory

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    def run(
        self,
        goal: str,
        credentials: CredentialPair,
        attempt_callback: AttemptCallback | None = None,
    ) -> RunOutcome:
        """
        Drive the goal to success or until the iteration budget is spent.

        Args:
            goal: Natural-language goal
            credentials: The requesting user's model and sandbox keys
            attempt_callback: Called with each attempt record once it is recorded

        Returns:
            RunOutcome in state SUCCEEDED or EXHAUSTED

        Raises:
            RunAborted: If the model or the sandbox could not be reached. The
                partial state is attached and the cause is chained.
        """
        state = RunState(goal=goal, max_iterations=self._max_iterations)
        log_header(f"STARTING PROCESS TO ACHIEVE GOAL: {goal}")
        state.status = LoopStatus.ITERATING

        while not state.status.is_terminal:
            try:
                attempt = self._iterate(state, credentials)
            except TransportError as e:
                log_header(f"ABORTED DURING ITERATION {state.iteration}: {e}")
                raise RunAborted(str(e), state) from e

            state.record(attempt)
            if attempt_callback:
                attempt_callback(attempt)

            if attempt.succeeded:
                logger.info("All commands executed successfully.")
                state.status = LoopStatus.SUCCEEDED
            elif state.iteration >= state.max_iterations:
                state.status = LoopStatus.EXHAUSTED
            else:
                logger.info(
                    "At least one command failed. The AI will refine approach in next iteration."
                )

        if state.succeeded:
            log_header("SUCCESS! The goal appears to have been achieved.")
        else:
            log_header("FAILURE TO ACHIEVE GOAL WITHIN MAX ITERATIONS")

        return RunOutcome(
            goal=goal,
            status=state.status,
            iterations=state.iteration,
            transcript=state.transcript,
            attempts=list(state.attempts),
        )

    def _iterate(self, state: RunState, credentials: CredentialPair) -> AttemptRecord:
        state.iteration += 1
        log_header(f"ITERATION {state.iteration} OF {state.max_iterations}")

        log_sub_header("Asking AI for instructions")
        instructions = self._generator.generate(
            state.context,
            state.goal,
            credentials.model_api_key,
        )
        logger.info("AI PROVIDED COMMANDS:\n" + indent_multiline(instructions))

        commands = parse_commands(instructions)
        return self._attempt_executor.run_attempt(
            commands,
            working_directory=self._working_directory,
            sandbox_secret=credentials.sandbox_api_key,
            iteration=state.iteration,
            instructions=instructions,
        )
