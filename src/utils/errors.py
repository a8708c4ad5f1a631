"""Exception types shared by the group-chat workflow."""

from __future__ import annotations


class GroupChatError(Exception):
    """Base exception for the group-chat workflow."""


class ConfigurationError(GroupChatError):
    """Raised when the conversation cannot be constructed; fatal before a run starts."""


class UnknownParticipantError(ConfigurationError):
    """Raised when an edge or roster references an undeclared participant."""


class FixtureNotFoundError(ConfigurationError):
    """Raised when a required seed file is missing."""


class GenerationError(GroupChatError):
    """Raised when an agent fails to produce a reply for one turn."""


class GuardEvaluationWarning(UserWarning):
    """Emitted when a transition guard raises; the edge is treated as not matching."""
