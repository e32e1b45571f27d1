"""Routing of incoming chat messages to onboarding or the goal loop."""

import asyncio
import logging
import sqlite3
from dataclasses import dataclass

from config.settings import settings
from shellgoal.agent.loop import GoalLoop
from shellgoal.agent.models import RunOutcome
from shellgoal.bot.channel import MessageChannel, send_long_message
from shellgoal.bot.onboarding import ONBOARDING_PROMPT, Onboarding
from shellgoal.bot.replies import ReplyWaiter
from shellgoal.errors import MissingCredentials, RunAborted, ShellGoalError
from shellgoal.storage.credentials import CredentialStore

logger = logging.getLogger(__name__)

USAGE_MESSAGE = "Please specify a goal after the command, e.g., `!goal install nginx`."
ABORT_MESSAGE = "Something went wrong while working on your goal: {reason}"


@dataclass
class IncomingMessage:
    """A chat message delivered by the messaging platform.

    Attributes:
        user_id: Unique id of the author
        username: Display name of the author
        content: Raw message text
        channel: Where replies to this message go
        direct: The author's private channel; defaults to ``channel``
        is_bot: True for messages authored by bots, which are ignored
        is_direct: True when the message arrived on the private channel;
            only such messages can answer an onboarding prompt
    """

    user_id: str
    username: str
    content: str
    channel: MessageChannel
    direct: MessageChannel | None = None
    is_bot: bool = False
    is_direct: bool = False

    @property
    def direct_channel(self) -> MessageChannel:
        return self.direct or self.channel


class GoalDispatcher:
    """Entry point for platform events; each event is handled in its own task."""

    def __init__(
        self,
        store: CredentialStore,
        loop: GoalLoop,
        replies: ReplyWaiter | None = None,
        goal_prefix: str | None = None,
        message_limit: int | None = None,
        onboarding_timeout: float | None = None,
    ) -> None:
        self._store = store
        self._loop = loop
        self._replies = replies or ReplyWaiter()
        self._goal_prefix = goal_prefix or settings.goal_prefix
        self._message_limit = message_limit or settings.max_message_length
        self._onboarding = Onboarding(store, self._replies, timeout=onboarding_timeout)
        self._tasks: set[asyncio.Task] = set()

    def handle_incoming(self, event: IncomingMessage) -> asyncio.Task | None:
        """
        Dispatch one incoming message.

        Returns:
            The task processing the message, or None when the message was
            ignored or consumed as a reply to a pending onboarding prompt.
        """
        if event.is_bot:
            return None
        if event.is_direct and self._replies.resolve(event.user_id, event.content):
            return None

        task = asyncio.create_task(self.process(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(_log_task_error)
        return task

    async def process(self, event: IncomingMessage) -> None:
        try:
            credentials = await asyncio.to_thread(self._store.lookup, event.user_id)
        except sqlite3.Error as e:
            logger.error(f"Credential lookup for {event.user_id} failed: {e}")
            await event.channel.send(ABORT_MESSAGE.format(reason=e))
            return

        if credentials is None:
            if self._replies.is_waiting(event.user_id):
                logger.info(f"Onboarding already pending for {event.user_id}, not prompting again")
                return
            prompt = self.on_onboarding_needed(event.user_id)
            await self._onboarding.run(
                event.user_id,
                event.username,
                event.direct_channel,
                prompt=prompt,
            )
            return

        goal = self.extract_goal(event.content)
        if goal is None:
            return
        if not goal:
            await event.channel.send(USAGE_MESSAGE)
            return

        try:
            message = await self.on_goal_received(event.user_id, goal)
        except RunAborted as e:
            logger.error(f"Goal run for {event.user_id} aborted: {e}")
            message = ABORT_MESSAGE.format(reason=e)
        except (ShellGoalError, sqlite3.Error) as e:
            logger.error(f"Goal run for {event.user_id} failed: {e}")
            message = ABORT_MESSAGE.format(reason=e)
        await send_long_message(event.channel, message, self._message_limit)

    def extract_goal(self, content: str) -> str | None:
        """Return the goal text of a goal command, or None for other messages."""
        if not content.startswith(self._goal_prefix):
            return None
        return content[len(self._goal_prefix) :].strip()

    async def run_goal(self, user_id: str, goal_text: str) -> RunOutcome:
        """
        Run the goal loop for a user in a worker thread.

        Raises:
            MissingCredentials: If the user has not onboarded.
            RunAborted: If the model or the sandbox became unreachable.
        """
        credentials = await asyncio.to_thread(self._store.lookup, user_id)
        if credentials is None:
            raise MissingCredentials(f"No API keys stored for user {user_id}")
        return await asyncio.to_thread(self._loop.run, goal_text, credentials)

    async def on_goal_received(self, user_id: str, goal_text: str) -> str:
        """Run a goal and return the full message: outcome banner plus logs."""
        outcome = await self.run_goal(user_id, goal_text)
        return outcome.message

    def on_onboarding_needed(self, user_id: str) -> str:
        logger.info(f"User {user_id} has no API keys stored, starting onboarding")
        return ONBOARDING_PROMPT

    async def wait_idle(self) -> None:
        """Wait for every in-flight message task to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


def _log_task_error(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Message handling failed: {error!r}")
