"""Exceptions raised by the quiz engine."""


class QuestionGenerationError(Exception):
    """The question service failed or sent something we could not read."""

    def __init__(self, message: str = "Failed to generate question"):
        super().__init__(message)


class InvalidTransition(Exception):
    """A session action was attempted from a state that does not allow it."""
