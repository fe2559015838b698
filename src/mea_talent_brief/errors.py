"""Error taxonomy surfaced by the workflow.

Every error ends the current attempt only; the controller always lands in a
usable state afterwards.
"""

from __future__ import annotations


class WorkflowError(Exception):
    """Base class for user-visible workflow errors."""

    kind = "workflow"
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class DiscoveryError(WorkflowError):
    """Discovery boundary unreachable or returned a malformed payload."""

    kind = "discovery"
    default_message = "Intelligence gathering failed. Check connection."


class SynthesisError(WorkflowError):
    """Synthesis boundary unreachable or returned a malformed payload."""

    kind = "synthesis"
    default_message = "AI synthesis failed. Please try again."


class InvalidLinkError(WorkflowError):
    """A shared link carried a token that could not be decoded."""

    kind = "invalid_link"
    default_message = "Invalid newsletter link."
