"""Custom exceptions for the summarization pipeline

This module defines the exception hierarchy raised by the summary client:
- SummarizerError: base for failures that carry their own ErrorKind
- Specific exceptions for each stage (request, prompt, response)
- SummarizationError: the terminal, caller-facing error of summarize()

JSONParseError is an internal signal: the client catches it and falls back
to synthesizing a response from unstructured text.
"""

from typing import Any, Dict, Optional

from plumly_summarizer.models.summary import ErrorKind


class SummarizerError(Exception):
    """Base exception for failures raised by this package

    Subclasses pin a ``kind`` and a ``retryable`` flag so the error
    classifier never has to guess.
    """

    kind: ErrorKind = ErrorKind.UNKNOWN
    retryable: bool = False


class RequestValidationError(SummarizerError):
    """Summary request failed validation

    Raised when:
    - Persona is missing or not one of patient/provider/caregiver
    - resourceData is missing
    - resourceData has no patient entry

    No provider call is attempted.
    """

    kind = ErrorKind.VALIDATION


class PromptBuildError(SummarizerError):
    """Prompt builder collaborator failed

    No provider call is attempted.
    """

    kind = ErrorKind.UNKNOWN


class ResponseFormatError(SummarizerError):
    """Provider returned a non-text content block

    This is NOT retryable - the request shape produced it.
    """

    kind = ErrorKind.UNKNOWN


class ResponseStructureError(SummarizerError):
    """Model output failed post-hoc schema validation

    Raised after a successful provider call when:
    - summary is missing or empty
    - sections is missing or not a list
    - a section lacks id, title or content

    This is NOT retryable.
    """

    kind = ErrorKind.STRUCTURAL


class JSONParseError(Exception):
    """No JSON object could be recovered from the model output"""

    pass


class SummarizationError(Exception):
    """Terminal failure of a summarize() call.

    Attributes:
        type: ErrorKind of the underlying failure
        retryable: Whether a caller may reasonably try again
        processing_time: Milliseconds spent before failing
        persona: Persona of the failed request (if known)
        original_error: The underlying exception
    """

    def __init__(
        self,
        message: str,
        type: ErrorKind,
        retryable: bool,
        processing_time: float,
        persona: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.type = type
        self.retryable = retryable
        self.processing_time = processing_time
        self.persona = persona
        self.original_error = original_error

    @property
    def status_code(self) -> int:
        """HTTP status for API layers."""
        return self.type.status_code

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the wire field names."""
        return {
            "message": self.message,
            "type": self.type.value,
            "retryable": self.retryable,
            "processingTime": self.processing_time,
            "persona": self.persona,
            "originalError": (
                str(self.original_error) if self.original_error is not None else None
            ),
        }
