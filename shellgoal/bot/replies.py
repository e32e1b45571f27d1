"""Waiting for a single user reply with a deadline."""

import asyncio
import logging

from shellgoal.errors import OnboardingError, OnboardingTimeout

logger = logging.getLogger(__name__)


class ReplyWaiter:
    """Routes the next message from a user to whoever is waiting on it."""

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Future[str]] = {}

    def is_waiting(self, user_id: str) -> bool:
        future = self._pending.get(user_id)
        return future is not None and not future.done()

    def resolve(self, user_id: str, text: str) -> bool:
        """Hand a reply to a pending wait. Returns False if nobody was waiting."""
        future = self._pending.get(user_id)
        if future is None or future.done():
            return False
        future.set_result(text)
        return True

    def expect(self, user_id: str) -> asyncio.Future[str]:
        """
        Claim the user's next message before anything is awaited.

        Raises:
            OnboardingError: If a wait for this user is already pending.
        """
        if self.is_waiting(user_id):
            raise OnboardingError(f"Already waiting for a reply from {user_id}")
        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._pending[user_id] = future
        return future

    async def receive(self, user_id: str, future: asyncio.Future[str], timeout: float) -> str:
        """
        Wait on a claimed reply until the deadline.

        Raises:
            OnboardingTimeout: If no reply arrives before the deadline.
        """
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.info(f"No reply from {user_id} within {timeout}s")
            raise OnboardingTimeout(f"No reply within {timeout} seconds") from e
        finally:
            if self._pending.get(user_id) is future:
                del self._pending[user_id]

    async def wait_for(self, user_id: str, timeout: float) -> str:
        """Wait for the user's next message."""
        return await self.receive(user_id, self.expect(user_id), timeout)
