"""Chat-facing components: dispatch, onboarding, and message delivery."""

from shellgoal.bot.channel import MessageChannel, Outbox, OutboxRegistry, send_long_message
from shellgoal.bot.chunker import chunk_text
from shellgoal.bot.dispatcher import GoalDispatcher, IncomingMessage
from shellgoal.bot.onboarding import Onboarding, OnboardingResult, parse_credential_reply
from shellgoal.bot.replies import ReplyWaiter

__all__ = [
    "GoalDispatcher",
    "IncomingMessage",
    "MessageChannel",
    "Onboarding",
    "OnboardingResult",
    "Outbox",
    "OutboxRegistry",
    "ReplyWaiter",
    "chunk_text",
    "parse_credential_reply",
    "send_long_message",
]
