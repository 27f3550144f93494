"""Response Validator Module

Enforces the summary output schema on a parsed (or synthesized) candidate.

This module handles:
- Accumulating structural defects across the whole candidate
- Normalizing confidence, sources and claims to their defaults
- Filling section and top-level metadata (existing fields win)
- Building the typed SummaryResponse
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Union

import structlog
from pydantic import ValidationError

from plumly_summarizer.models.summary import Persona, Section, SummaryResponse
from plumly_summarizer.utils.exceptions import ResponseStructureError

logger = structlog.get_logger()

DEFAULT_CONFIDENCE = 0.8
REQUIRED_SECTION_FIELDS = ("id", "title", "content")


class ResponseValidator:
    """Validates and normalizes model output into a SummaryResponse.

    Defects are collected for every section before anything is raised, so a
    single error message reports all of them. The candidate is not mutated.
    """

    def validate(
        self,
        candidate: Any,
        persona: Union[Persona, str],
        template_id: str = "unknown",
    ) -> SummaryResponse:
        """Validate a candidate response.

        Args:
            candidate: Parsed JSON object or fallback candidate
            persona: Persona of the request
            template_id: Id of the template used, for section metadata

        Returns:
            Validated SummaryResponse

        Raises:
            ResponseStructureError: If the candidate has structural defects
        """
        persona_value = Persona(persona).value
        errors: List[str] = []

        if not isinstance(candidate, dict):
            raise ResponseStructureError(
                "Invalid response structure: response is not a JSON object"
            )

        summary = candidate.get("summary")
        if not isinstance(summary, str) or not summary:
            errors.append("Missing or invalid summary field")

        raw_sections = candidate.get("sections")
        sections: List[Dict[str, Any]] = []
        if not isinstance(raw_sections, list):
            errors.append("Missing or invalid sections array")
        else:
            generated_at = datetime.now(timezone.utc).isoformat()
            seen_ids = set()
            for index, raw in enumerate(raw_sections, start=1):
                if not isinstance(raw, dict):
                    errors.append(f"Section {index} is not an object")
                    continue

                section = self._normalize_section(
                    raw, persona_value, template_id, generated_at
                )
                if not all(section.get(field) for field in REQUIRED_SECTION_FIELDS):
                    errors.append(f"Section {index} missing required fields")
                elif section["id"] in seen_ids:
                    errors.append(f"Section {index} has duplicate id '{section['id']}'")
                else:
                    seen_ids.add(section["id"])
                sections.append(section)

        if errors:
            logger.warning("response_validation_failed", errors=errors)
            raise ResponseStructureError(
                f"Invalid response structure: {', '.join(errors)}"
            )

        existing_metadata = candidate.get("metadata")
        if not isinstance(existing_metadata, dict):
            existing_metadata = {}
        metadata = {
            "persona": persona_value,
            "sectionsGenerated": [s["id"] for s in sections],
            **existing_metadata,
        }

        try:
            return SummaryResponse(
                summary=summary,
                sections=[Section(**s) for s in sections],
                metadata=metadata,
            )
        except ValidationError as e:
            raise ResponseStructureError(f"Invalid response structure: {e}")

    def _normalize_section(
        self,
        raw: Dict[str, Any],
        persona: str,
        template_id: str,
        generated_at: str,
    ) -> Dict[str, Any]:
        """Copy of a section with defaults applied."""
        section = dict(raw)

        for field in REQUIRED_SECTION_FIELDS:
            value = section.get(field)
            if value and not isinstance(value, str):
                section[field] = str(value)

        confidence = section.get("confidence")
        if (
            isinstance(confidence, bool)
            or not isinstance(confidence, (int, float))
            or not 0 <= confidence <= 1
        ):
            section["confidence"] = DEFAULT_CONFIDENCE

        sources = section.get("sources")
        section["sources"] = (
            [s if isinstance(s, str) else str(s) for s in sources]
            if isinstance(sources, list)
            else []
        )
        if not isinstance(section.get("claims"), list):
            section["claims"] = []

        existing = section.get("metadata")
        section["metadata"] = {
            "generatedAt": generated_at,
            "persona": persona,
            "template": template_id,
            "processingTime": 0,
            **(existing if isinstance(existing, dict) else {}),
        }
        return section
