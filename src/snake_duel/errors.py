"""Exception hierarchy for Snake Duel."""

from __future__ import annotations


class SnakeDuelError(Exception):
    """Base class for all Snake Duel errors."""


class ConfigError(SnakeDuelError, ValueError):
    """Raised when a game configuration is rejected."""


class MissingCollaboratorError(SnakeDuelError, TypeError):
    """Raised when the frame driver is built without a required collaborator."""


class InvalidTransitionError(SnakeDuelError):
    """Raised when a match action is not allowed in the current state."""
