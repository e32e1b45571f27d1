"""Language model client for instruction generation via LiteLLM."""

import logging
from dataclasses import dataclass

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from litellm import completion

from config.settings import settings
from shellgoal.errors import ModelError

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Result from LLM generation."""

    content: str
    model: str
    tokens_used: int | None = None


class ModelClient:
    """Request/response chat completion client keyed by a per-user API key."""

    def __init__(self, model: str | None = None, timeout: int | None = None) -> None:
        """Initialize the client.

        Args:
            model: LiteLLM model string. Defaults to settings.groq_model.
            timeout: Request timeout in seconds. Defaults to settings.model_timeout.
        """
        self._model = model or settings.groq_model
        self._timeout = timeout or settings.model_timeout

    def get_model(self) -> str:
        """Get the current model name."""
        return self._model

    def _convert_messages(self, messages: list[BaseMessage]) -> list[dict]:
        """Convert LangChain messages to LiteLLM format."""
        converted = []
        for msg in messages:
            if isinstance(msg, SystemMessage):
                converted.append({"role": "system", "content": msg.content})
            elif isinstance(msg, HumanMessage):
                converted.append({"role": "user", "content": msg.content})
            else:
                converted.append({"role": "assistant", "content": msg.content})
        return converted

    def generate(self, messages: list[BaseMessage], api_key: str) -> GenerationResult:
        """
        Generate a response for the given conversation.

        Args:
            messages: System and user messages
            api_key: The requesting user's model API key

        Returns:
            GenerationResult with the response text

        Raises:
            ModelError: If the provider call fails or returns no content
        """
        try:
            response = completion(
                model=self._model,
                messages=self._convert_messages(messages),
                api_key=api_key,
                timeout=self._timeout,
            )
        except Exception as e:
            logger.error(f"Model call to {self._model} failed: {e}")
            raise ModelError(f"Model call failed: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise ModelError("Model response had no choices") from e
        if content is None:
            raise ModelError("Model response had no content")

        usage = getattr(response, "usage", None)
        tokens = getattr(usage, "total_tokens", None) if usage else None
        logger.debug(f"Model {self._model} generated response (tokens: {tokens})")

        return GenerationResult(content=content, model=self._model, tokens_used=tokens)

    def complete(self, system_prompt: str, user_prompt: str, api_key: str) -> str:
        """Run one system/user exchange and return the raw response text."""
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_prompt),
        ]
        return self.generate(messages, api_key).content
