"""LLM Provider Exception Hierarchy

Structured exception types decoded at the transport boundary.

Providers translate SDK/transport failures into this closed set so the
error classifier matches on types instead of probing exception shapes:
- LLMProviderError: Base class for all provider errors
- ProviderAPIError: The provider answered with a typed error payload
- NetworkError: Connection reset or timeout before a response arrived
"""

from enum import Enum
from typing import Optional


class ProviderErrorType(str, Enum):
    """Error types reported by the provider API"""

    RATE_LIMIT = "rate_limit_error"
    OVERLOADED = "overloaded_error"
    API = "api_error"
    AUTHENTICATION = "authentication_error"
    INVALID_REQUEST = "invalid_request_error"
    OTHER = "other"

    @classmethod
    def decode(cls, raw: Optional[str]) -> "ProviderErrorType":
        """Map a raw provider error type string onto the closed set."""
        for member in cls:
            if member.value == raw:
                return member
        return cls.OTHER


class LLMProviderError(Exception):
    """Base exception for all LLM provider errors.

    All provider-specific errors inherit from this class,
    enabling consistent error handling across providers.
    """

    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(message)


class ProviderAPIError(LLMProviderError):
    """Raised when the provider returns a typed API error.

    Attributes:
        error_type: Decoded provider error type
        raw_type: Error type string exactly as reported
        status_code: HTTP status of the failed call (if known)
    """

    def __init__(
        self,
        message: str,
        error_type: ProviderErrorType,
        raw_type: Optional[str] = None,
        status_code: Optional[int] = None,
        provider: Optional[str] = None,
    ):
        self.error_type = error_type
        self.raw_type = raw_type if raw_type is not None else error_type.value
        self.status_code = status_code
        super().__init__(message, provider=provider)


class NetworkError(LLMProviderError):
    """Raised when the connection is reset or times out.

    This is a retryable error - no response was received.

    Attributes:
        reason: "reset" or "timeout"
    """

    def __init__(
        self,
        message: str = "Network connection error",
        reason: str = "reset",
        provider: Optional[str] = None,
    ):
        self.reason = reason
        super().__init__(message, provider=provider)
