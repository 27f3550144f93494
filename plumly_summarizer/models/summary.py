"""Summary request/response data models

This module defines the data structures exchanged with the summary client:
- Persona: target audience of a summary
- SummaryRequest: clinical payload plus persona and template options
- Section / SummaryResponse: validated, schema-conforming model output
- ErrorKind / ErrorInfo: closed failure taxonomy used for retry decisions

Wire names are camelCase (``resourceData``, ``sectionsGenerated``); Python
attributes are snake_case. Both spellings are accepted on input.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Persona(str, Enum):
    """Target audience for a generated summary"""

    PATIENT = "patient"
    PROVIDER = "provider"
    CAREGIVER = "caregiver"


class SummaryRequest(BaseModel):
    """Input for a single summarize() call.

    Only ``resource_data["patient"]`` and the lengths of the optional
    ``conditions``/``medications``/``labValues`` collections are inspected by
    the client; the rest of the payload is handed to the prompt builder.
    """

    resource_data: Optional[Dict[str, Any]] = Field(
        default=None,
        alias="resourceData",
        description="Selected clinical resources (must contain 'patient')",
    )
    persona: Persona = Field(description="Target audience")
    template_options: Dict[str, Any] = Field(
        default_factory=dict,
        alias="templateOptions",
        description="Opaque template options, e.g. focusAreas",
    )
    ab_test_variant: Optional[str] = Field(
        default=None,
        alias="abTestVariant",
        description="A/B test variant, passed through to the prompt builder",
    )

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "resourceData": {
                    "patient": {"id": "pat-1"},
                    "conditions": [],
                    "medications": [],
                    "labValues": [],
                },
                "persona": "patient",
                "templateOptions": {"focusAreas": ["diabetes"]},
            }
        },
    )


class Section(BaseModel):
    """A single generated summary section"""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    confidence: float = Field(0.8, ge=0.0, le=1.0)
    sources: List[str] = Field(default_factory=list)
    claims: List[Any] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class SummaryResponse(BaseModel):
    """Validated summary returned to callers"""

    summary: str = Field(..., min_length=1)
    sections: List[Section] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def section_ids(self) -> List[str]:
        """Section ids in generation order."""
        return [section.id for section in self.sections]


class ErrorKind(str, Enum):
    """Closed taxonomy of summarization failures"""

    VALIDATION = "validation"
    AUTH = "auth"
    INVALID_REQUEST = "invalid_request"
    RATE_LIMIT = "rate_limit"
    CAPACITY = "capacity"
    NETWORK = "network"
    API_ERROR = "api_error"
    UNKNOWN = "unknown"
    STRUCTURAL = "structural"

    @property
    def status_code(self) -> int:
        """HTTP status a caller-facing API should map this kind to."""
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTH: 401,
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.RATE_LIMIT: 429,
    ErrorKind.CAPACITY: 503,
    ErrorKind.NETWORK: 503,
    ErrorKind.API_ERROR: 500,
    ErrorKind.UNKNOWN: 500,
    ErrorKind.STRUCTURAL: 500,
}


class ErrorInfo(BaseModel):
    """Classification of a failure"""

    retryable: bool
    message: str
    kind: ErrorKind

    model_config = ConfigDict(frozen=True)


class TemplateInfo(BaseModel):
    """Identity of the prompt template used for a persona"""

    id: str
    version: str = "1.0.0"
    persona: Optional[Persona] = None
    name: Optional[str] = None

    model_config = ConfigDict(frozen=True)
