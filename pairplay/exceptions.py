"""Error taxonomy for the playground server.

Everything except :class:`AuthRejected` is recoverable: the dispatcher turns
it into an ``error`` event delivered to the requesting connection only.
"""
from __future__ import annotations


class PlaygroundError(Exception):
    """Base class for errors reported back to a single client."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthRejected(PlaygroundError):
    """Missing or invalid bearer token at connect time."""


class TargetNotFound(PlaygroundError):
    """The referenced player is unknown or no longer connected."""


class OutOfRange(PlaygroundError):
    """The target is farther away than the proximity radius."""


class AlreadyEngaged(PlaygroundError):
    """One of the parties is already in a private room."""


class Unauthorized(PlaygroundError):
    """The request is malformed or targets a room the sender is not part of."""


__all__ = [
    "PlaygroundError",
    "AuthRejected",
    "TargetNotFound",
    "OutOfRange",
    "AlreadyEngaged",
    "Unauthorized",
]
