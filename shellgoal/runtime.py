"""Wiring of the goal loop and dispatcher from explicit resource handles."""

import sqlite3

import httpx

from shellgoal.agent.attempt import AttemptExecutor
from shellgoal.agent.instructions import InstructionGenerator
from shellgoal.agent.loop import GoalLoop
from shellgoal.bot.dispatcher import GoalDispatcher
from shellgoal.llm.client import ModelClient
from shellgoal.storage.credentials import CredentialStore
from shellgoal.tools.remote import RemoteExecutor


def build_goal_loop(
    http_client: httpx.Client | None = None,
    max_iterations: int | None = None,
    working_directory: str | None = None,
    model: str | None = None,
) -> GoalLoop:
    """Assemble a goal loop that talks to the configured model and sandbox."""
    generator = InstructionGenerator(ModelClient(model=model))
    attempt_executor = AttemptExecutor(RemoteExecutor(client=http_client))
    return GoalLoop(
        generator,
        attempt_executor,
        max_iterations=max_iterations,
        working_directory=working_directory,
    )


def build_dispatcher(db: sqlite3.Connection, http_client: httpx.Client) -> GoalDispatcher:
    """Assemble the dispatcher around a database connection and HTTP client owned by the caller."""
    return GoalDispatcher(CredentialStore(db), build_goal_loop(http_client))
