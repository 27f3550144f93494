"""Error Classifier Module

Maps any failure raised while serving a summary into the closed ErrorKind
taxonomy, deciding whether the retry loop may try again.

Dispatch order:
1. Package errors that carry their own kind (validation, structural, ...)
2. Provider API errors, by decoded provider error type
3. Network resets and timeouts
4. Anything else: non-retryable, kind "unknown"
"""

import asyncio

from plumly_summarizer.models.summary import ErrorInfo, ErrorKind
from plumly_summarizer.services.llm.exceptions import (
    NetworkError,
    ProviderAPIError,
    ProviderErrorType,
)
from plumly_summarizer.utils.exceptions import SummarizerError

# (retryable, kind, message) per provider error type
_PROVIDER_ERRORS = {
    ProviderErrorType.RATE_LIMIT: (True, ErrorKind.RATE_LIMIT, "Rate limit exceeded"),
    ProviderErrorType.OVERLOADED: (True, ErrorKind.CAPACITY, "Provider overloaded"),
    ProviderErrorType.API: (True, ErrorKind.API_ERROR, "Internal API error"),
    ProviderErrorType.AUTHENTICATION: (False, ErrorKind.AUTH, "Invalid API key"),
    ProviderErrorType.INVALID_REQUEST: (
        False,
        ErrorKind.INVALID_REQUEST,
        "Invalid request format",
    ),
}

_NETWORK_ERRORS = (
    NetworkError,
    ConnectionResetError,
    TimeoutError,
    asyncio.TimeoutError,
)


class ErrorClassifier:
    """Classifies failures into retryable/non-retryable ErrorInfo.

    ``classify`` never raises.
    """

    def classify(self, error: BaseException) -> ErrorInfo:
        if isinstance(error, SummarizerError):
            return ErrorInfo(
                retryable=error.retryable,
                message=str(error) or error.kind.value,
                kind=error.kind,
            )

        if isinstance(error, ProviderAPIError):
            return self._classify_provider_error(error)

        if isinstance(error, _NETWORK_ERRORS):
            return ErrorInfo(
                retryable=True,
                message="Network connection error",
                kind=ErrorKind.NETWORK,
            )

        return ErrorInfo(
            retryable=False,
            message=str(error) or "Unknown error",
            kind=ErrorKind.UNKNOWN,
        )

    def _classify_provider_error(self, error: ProviderAPIError) -> ErrorInfo:
        known = _PROVIDER_ERRORS.get(error.error_type)
        if known is not None:
            retryable, kind, message = known
            return ErrorInfo(retryable=retryable, message=message, kind=kind)

        # Unrecognized provider error types are assumed transient
        return ErrorInfo(
            retryable=True,
            message=str(error) or "Unknown API error",
            kind=ErrorKind.UNKNOWN,
        )
