"""LLM integration components."""

from shellgoal.llm.client import GenerationResult, ModelClient

__all__ = [
    "GenerationResult",
    "ModelClient",
]
