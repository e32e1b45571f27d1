"""Remote command execution against the sandbox HTTP API."""

import logging
from typing import Any

import httpx

from config.settings import settings
from shellgoal.agent.models import CommandResult
from shellgoal.errors import ExecutorError

logger = logging.getLogger(__name__)


class RemoteExecutor:
    """
    Runs shell commands inside the remote Linux sandbox.

    Each call is an independent authenticated POST to ``/exec``. Commands mutate
    the sandbox and are never rolled back.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize the executor.

        Args:
            client: HTTP client to send requests with. When omitted the executor
                creates its own and closes it in ``close()``.
            base_url: Sandbox API base URL. Defaults to settings.linux_api_url.
            timeout: Per-request timeout in seconds. Defaults to settings.exec_timeout.
        """
        self._base_url = (base_url or settings.linux_api_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.exec_timeout
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=self._timeout)

    @property
    def exec_url(self) -> str:
        return f"{self._base_url}/exec"

    def close(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "RemoteExecutor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def execute(
        self,
        command: str,
        working_directory: str | None = None,
        sandbox_secret: str = "",
    ) -> CommandResult:
        """
        Execute one command in the sandbox.

        Args:
            command: A single non-empty shell command
            working_directory: Directory to run in (defaults to settings)
            sandbox_secret: Value for the ``x-ssh-auth`` header

        Returns:
            CommandResult with the captured stdout and stderr

        Raises:
            ExecutorError: If the sandbox API is unreachable or answers with
                something other than a JSON object.
        """
        if not command or not command.strip():
            raise ValueError("command must be a non-empty string")

        pwd = working_directory or settings.working_directory
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "x-ssh-auth": sandbox_secret,
        }

        try:
            response = self._client.post(
                self.exec_url,
                json={"cmd": command, "pwd": pwd},
                headers=headers,
                timeout=self._timeout,
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Sandbox API returned HTTP {e.response.status_code}")
            raise ExecutorError(
                f"Sandbox API returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Sandbox API request failed: {e}")
            raise ExecutorError(f"Sandbox API request failed: {e}") from e
        except ValueError as e:
            raise ExecutorError("Sandbox API returned a non-JSON response") from e

        return self._to_result(body)

    @staticmethod
    def _to_result(body: Any) -> CommandResult:
        if not isinstance(body, dict):
            raise ExecutorError("Sandbox API response must be a JSON object")
        return CommandResult(
            stdout=_as_text(body.get("stdout")),
            stderr=_as_text(body.get("stderr")),
        )

    def check_availability(self) -> bool:
        """Check whether the sandbox API host answers at all."""
        try:
            self._client.get(self._base_url, timeout=5.0)
            return True
        except httpx.HTTPError as e:
            logger.warning(f"Sandbox API availability check failed: {e}")
            return False


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)
