"""Error taxonomy for the relationship mapper."""

from typing import Optional


class RelationshipMapperError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(RelationshipMapperError):
    """Missing or invalid configuration. Fatal before any work starts."""


class InputError(RelationshipMapperError):
    """Source file missing or unreadable. Fatal before any work starts."""


class PersistenceError(RelationshipMapperError):
    """Output JSON could not be written."""


class LLMRequestError(RelationshipMapperError):
    """A completion request failed and will not be retried."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RetryExhaustedError(LLMRequestError):
    """A completion request kept failing with retryable errors."""


class ResponseFormatError(RelationshipMapperError):
    """The model returned text that does not match the relationship schema."""
