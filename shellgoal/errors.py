"""Error types raised across the goal loop and its collaborators."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shellgoal.agent.models import RunState


class ShellGoalError(Exception):
    """Base class for all shellgoal errors."""


class TransportError(ShellGoalError):
    """A collaborator could not be reached or answered with a malformed response."""


class ExecutorError(TransportError):
    """The remote command executor failed at the transport level."""


class ModelError(TransportError):
    """The language model call failed (network, auth, or empty response)."""


class RunAborted(ShellGoalError):
    """A goal run stopped early because of a fatal transport error.

    Attributes:
        state: The run state as it was when the run stopped, including any
            attempts that were already recorded.
    """

    def __init__(self, message: str, state: "RunState") -> None:
        super().__init__(message)
        self.state = state


class MissingCredentials(ShellGoalError):
    """No credential pair is stored for the requesting user."""


class OnboardingError(ShellGoalError):
    """Credential onboarding could not be completed."""


class OnboardingTimeout(OnboardingError):
    """The user did not reply within the onboarding wait window."""
