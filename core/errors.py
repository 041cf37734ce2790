"""Exception types raised by TypeCoach."""


class TypeCoachError(Exception):
    """Base class for TypeCoach errors."""


class TextGenerationError(TypeCoachError):
    """Upstream text source failed or returned nothing usable."""


class InsightGenerationError(TypeCoachError):
    """Upstream insight source failed or returned nothing usable."""


class InvalidTransitionError(TypeCoachError):
    """Session controller was asked to do something its state does not allow."""

    def __init__(self, state: str, action: str):
        super().__init__(f"Cannot {action} while session is {state}")
        self.state = state
        self.action = action


class SessionBlockedError(TypeCoachError):
    """Entry gate refused to start a session."""


__all__ = [
    "TypeCoachError",
    "TextGenerationError",
    "InsightGenerationError",
    "InvalidTransitionError",
    "SessionBlockedError",
]
