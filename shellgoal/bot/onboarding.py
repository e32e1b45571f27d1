"""Collecting a new user's API keys over their direct channel."""

import asyncio
import logging
import re
import sqlite3
from dataclasses import dataclass
from enum import Enum

from config.settings import settings
from shellgoal.bot.channel import MessageChannel
from shellgoal.bot.replies import ReplyWaiter
from shellgoal.errors import OnboardingError, OnboardingTimeout
from shellgoal.storage.credentials import CredentialPair, CredentialStore

logger = logging.getLogger(__name__)

ONBOARDING_PROMPT = (
    "Welcome! Please provide your API keys in the following format:\n\n"
    "GROQ API Key: <your-groq-api-key>\n"
    "Linux API Key: <your-linux-api-key>"
)
SAVED_MESSAGE = "Your API keys have been saved successfully!"
INVALID_FORMAT_MESSAGE = "Invalid format. Please try again."
TIMEOUT_MESSAGE = "Timed out waiting for your API keys. Send any message to start again."
ERROR_MESSAGE = "An error occurred while collecting your API keys. Please try again later."

_CREDENTIALS_PATTERN = re.compile(r"GROQ API Key: (.+)\nLinux API Key: (.+)")


class OnboardingResult(Enum):
    SAVED = "saved"
    INVALID_FORMAT = "invalid_format"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


def parse_credential_reply(text: str) -> CredentialPair | None:
    """Extract the two API keys from a reply, or None if it does not match."""
    match = _CREDENTIALS_PATTERN.search(text)
    if not match:
        return None
    model_key, sandbox_key = (value.strip() for value in match.groups())
    if not model_key or not sandbox_key:
        return None
    return CredentialPair(model_api_key=model_key, sandbox_api_key=sandbox_key)


@dataclass
class Onboarding:
    """Prompts for keys, waits for one reply, and stores a valid pair."""

    store: CredentialStore
    replies: ReplyWaiter
    timeout: float | None = None

    async def run(
        self,
        user_id: str,
        username: str,
        channel: MessageChannel,
        prompt: str = ONBOARDING_PROMPT,
    ) -> OnboardingResult:
        timeout = self.timeout if self.timeout is not None else settings.onboarding_timeout
        try:
            pending = self.replies.expect(user_id)
        except OnboardingError as e:
            return await self._fail(user_id, channel, e)

        try:
            await channel.send(prompt)
            reply = await self.replies.receive(user_id, pending, timeout)
        except OnboardingTimeout:
            await channel.send(TIMEOUT_MESSAGE)
            return OnboardingResult.TIMED_OUT
        finally:
            # releases the claim if the prompt could not be sent
            pending.cancel()

        credentials = parse_credential_reply(reply)
        if credentials is None:
            logger.info(f"Onboarding reply from {user_id} did not match the expected format")
            await channel.send(INVALID_FORMAT_MESSAGE)
            return OnboardingResult.INVALID_FORMAT

        try:
            await asyncio.to_thread(self.store.store, user_id, username, credentials)
        except sqlite3.Error as e:
            return await self._fail(user_id, channel, e)

        await channel.send(SAVED_MESSAGE)
        return OnboardingResult.SAVED

    async def _fail(
        self, user_id: str, channel: MessageChannel, error: Exception
    ) -> OnboardingResult:
        logger.error(f"Error collecting API keys for {user_id}: {error}")
        await channel.send(ERROR_MESSAGE)
        return OnboardingResult.FAILED
