"""Tests for failure classification."""

import asyncio

import pytest

from plumly_summarizer.models.summary import ErrorKind
from plumly_summarizer.services.llm.error_classifier import ErrorClassifier
from plumly_summarizer.services.llm.exceptions import (
    NetworkError,
    ProviderAPIError,
    ProviderErrorType,
)
from plumly_summarizer.utils.exceptions import (
    PromptBuildError,
    RequestValidationError,
    ResponseFormatError,
    ResponseStructureError,
)


@pytest.fixture
def classifier() -> ErrorClassifier:
    return ErrorClassifier()


class TestProviderErrors:
    """Tests for provider API error classification."""

    @pytest.mark.parametrize(
        "error_type,retryable,kind,message",
        [
            (ProviderErrorType.RATE_LIMIT, True, ErrorKind.RATE_LIMIT, "Rate limit exceeded"),
            (ProviderErrorType.OVERLOADED, True, ErrorKind.CAPACITY, "Provider overloaded"),
            (ProviderErrorType.API, True, ErrorKind.API_ERROR, "Internal API error"),
            (ProviderErrorType.AUTHENTICATION, False, ErrorKind.AUTH, "Invalid API key"),
            (
                ProviderErrorType.INVALID_REQUEST,
                False,
                ErrorKind.INVALID_REQUEST,
                "Invalid request format",
            ),
        ],
    )
    def test_known_types(self, classifier, error_type, retryable, kind, message) -> None:
        info = classifier.classify(ProviderAPIError("raw", error_type=error_type))

        assert info.retryable is retryable
        assert info.kind is kind
        assert info.message == message

    def test_unrecognized_type_is_retryable_unknown(self, classifier) -> None:
        """Unknown provider error types are assumed transient."""
        error = ProviderAPIError(
            "strange failure",
            error_type=ProviderErrorType.decode("teapot_error"),
            raw_type="teapot_error",
        )

        info = classifier.classify(error)

        assert info.retryable is True
        assert info.kind is ErrorKind.UNKNOWN
        assert info.message == "strange failure"

    def test_unrecognized_type_without_message(self, classifier) -> None:
        info = classifier.classify(ProviderAPIError("", error_type=ProviderErrorType.OTHER))

        assert info.message == "Unknown API error"


class TestNetworkErrors:
    """Tests for network failure classification."""

    @pytest.mark.parametrize(
        "error",
        [
            NetworkError(),
            NetworkError("timed out", reason="timeout"),
            ConnectionResetError("ECONNRESET"),
            TimeoutError(),
            asyncio.TimeoutError(),
        ],
    )
    def test_network_errors_are_retryable(self, classifier, error) -> None:
        info = classifier.classify(error)

        assert info.retryable is True
        assert info.kind is ErrorKind.NETWORK
        assert info.message == "Network connection error"


class TestPackageErrors:
    """Tests for errors raised by this package."""

    def test_validation_error(self, classifier) -> None:
        info = classifier.classify(RequestValidationError("Valid persona is required"))

        assert info.retryable is False
        assert info.kind is ErrorKind.VALIDATION
        assert info.message == "Valid persona is required"

    def test_structural_error(self, classifier) -> None:
        info = classifier.classify(ResponseStructureError("bad"))

        assert info.retryable is False
        assert info.kind is ErrorKind.STRUCTURAL

    @pytest.mark.parametrize("error_cls", [PromptBuildError, ResponseFormatError])
    def test_unknown_kind_errors(self, classifier, error_cls) -> None:
        info = classifier.classify(error_cls("boom"))

        assert info.retryable is False
        assert info.kind is ErrorKind.UNKNOWN


class TestOtherErrors:
    """Tests for everything else."""

    def test_generic_exception(self, classifier) -> None:
        info = classifier.classify(ValueError("weird"))

        assert info.retryable is False
        assert info.kind is ErrorKind.UNKNOWN
        assert info.message == "weird"

    def test_generic_exception_without_message(self, classifier) -> None:
        assert classifier.classify(RuntimeError()).message == "Unknown error"
