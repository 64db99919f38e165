"""Exceptions for the Gauntlet engine.

Only configuration problems are raised. Out-of-order input, numerical edge
cases and persistence failures are absorbed where they happen.
"""


class GauntletError(Exception):
    """Base exception carrying structured details."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(GauntletError):
    """Raised when a profile, shape or station preset is malformed.

    Always raised at construction time, never mid-attempt.
    """
