"""Errors raised by the queue engine.

The HTTP layer maps each class to a status code; see ``main.py``.
"""


class QueueError(Exception):
    """Base class for rejected queue operations."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(QueueError):
    """A referenced room, doctor or patient does not exist."""


class InvalidStateError(QueueError):
    """The target entity is in a state that forbids the operation."""


class ConflictError(QueueError):
    """The operation would break a uniqueness or exclusivity rule."""
