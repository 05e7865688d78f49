from typing import Optional


class ModerationError(Exception):
    """Base class for every error raised by the moderation pipeline."""


class RequestValidationError(ModerationError):
    """The incoming message was rejected before any processing."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class OracleError(ModerationError):
    """A single similarity lookup failed (network, HTTP status, bad payload)."""

    def __init__(self, message: str, unit: Optional[str] = None):
        super().__init__(message)
        self.unit = unit


class AggregationError(ModerationError):
    """Scoring could not be completed; no partial verdict is returned."""


class ConfigError(ModerationError):
    """The moderation configuration file is malformed."""
