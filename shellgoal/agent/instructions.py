"""Prompt construction for shell instructions and parsing of the model reply."""

import logging
from typing import Protocol

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from shellgoal.llm.client import GenerationResult

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a world-class Linux system administration assistant, given the ability to access and run commands on a remote Debian/Ubuntu-based Linux container. Your mission is to help achieve the following goal: {goal}.
Rules:
1. Return only shell commands needed, line-by-line, no explanation.
2. If previous attempts failed, refine your approach and fix the issues based on the provided errors and output.
3. If you need to run multiple commands, separate them by new lines.
4. Consider common steps: updating package lists, installing packages, verifying installation.
5. The container might be minimal, so consider installing or fixing repositories if needed.
6. Always ensure commands are non-interactive.
7. Do not use markdown formatting at all ever.
8. All commands are non-interactive
9. If installing packages, always use -y to allow for non-interactive commands
"""

USER_PROMPT = """CONTEXT:
{context}

Goal: {goal}

Please provide the exact shell commands to achieve the goal above."""


class ChatModel(Protocol):
    def generate(self, messages: list[BaseMessage], api_key: str) -> GenerationResult: ...


def build_messages(context: str, goal: str) -> list[BaseMessage]:
    """Build the system and user messages for one instruction request."""
    return [
        SystemMessage(content=SYSTEM_PROMPT.format(goal=goal)),
        HumanMessage(content=USER_PROMPT.format(context=context, goal=goal)),
    ]


class InstructionGenerator:
    """Asks the model for the next batch of shell commands."""

    def __init__(self, model: ChatModel) -> None:
        self._model = model

    def generate(self, context: str, goal: str, model_secret: str) -> str:
        """
        Request shell instructions for the goal given everything tried so far.

        Model failures propagate to the caller untouched.
        """
        messages = build_messages(context, goal)
        result = self._model.generate(messages, model_secret)
        return result.content.strip()


def parse_commands(raw: str) -> list[str]:
    """Split a model reply into ordered, non-empty shell commands."""
    return [line.strip() for line in raw.splitlines() if line.strip()]
