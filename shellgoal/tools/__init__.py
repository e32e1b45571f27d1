"""Tool components."""

from shellgoal.tools.remote import RemoteExecutor

__all__ = [
    "RemoteExecutor",
]
