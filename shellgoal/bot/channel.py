"""Outgoing message channels."""

from collections import defaultdict, deque
from typing import Protocol

from shellgoal.bot.chunker import chunk_text


class MessageChannel(Protocol):
    async def send(self, text: str) -> None: ...


async def send_long_message(channel: MessageChannel, content: str, limit: int | None = None) -> None:
    """Send content as one message per chunk, in order."""
    for part in chunk_text(content, limit):
        await channel.send(part)


class Outbox:
    """In-memory channel that queues messages until they are drained."""

    def __init__(self) -> None:
        self._messages: deque[str] = deque()

    async def send(self, text: str) -> None:
        self._messages.append(text)

    def drain(self) -> list[str]:
        messages = list(self._messages)
        self._messages.clear()
        return messages

    def __len__(self) -> int:
        return len(self._messages)


class OutboxRegistry:
    """One outbox per user id, created on first use."""

    def __init__(self) -> None:
        self._outboxes: defaultdict[str, Outbox] = defaultdict(Outbox)

    def for_user(self, user_id: str) -> Outbox:
        return self._outboxes[user_id]

    def drain(self, user_id: str) -> list[str]:
        return self._outboxes[user_id].drain()
