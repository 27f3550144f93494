"""Prompt Builder Module

This module handles:
- The PromptBuilder contract consumed by the summary client
- Building the persona-specific system prompt with the output JSON schema
- A default template-registry prompt builder (one template per persona,
  optional A/B variants)
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union

import structlog

from plumly_summarizer.models.summary import Persona, TemplateInfo

logger = structlog.get_logger()


class PromptBuilder(Protocol):
    """Contract for the prompt template collaborator."""

    def build_prompt(
        self,
        resource_data: Mapping[str, Any],
        persona: Persona,
        template_options: Mapping[str, Any],
        ab_test_variant: Optional[str] = None,
    ) -> str: ...

    def get_template(self, persona: Persona) -> Optional[TemplateInfo]: ...


PERSONA_INSTRUCTIONS = {
    Persona.PATIENT: (
        "Use simple, clear language that patients and families can understand. "
        "Avoid medical jargon."
    ),
    Persona.PROVIDER: (
        "Use precise medical terminology appropriate for healthcare "
        "professionals. Focus on clinical decision-making."
    ),
    Persona.CAREGIVER: (
        "Provide practical, actionable information for caregivers. "
        "Include specific care instructions."
    ),
}


def build_system_prompt(persona: Union[Persona, str]) -> str:
    """Build the system prompt demanding JSON output for a persona.

    Args:
        persona: Target audience

    Returns:
        System prompt string
    """
    persona = Persona(persona)
    return f"""You are an AI assistant specialized in summarizing clinical health data. You must return your response in valid JSON format following the exact schema provided.

{PERSONA_INSTRUCTIONS[persona]}

IMPORTANT: Your response must be valid JSON matching this schema:
{{
  "summary": "string - main narrative summary",
  "sections": [
    {{
      "id": "string - section identifier",
      "title": "string - section title",
      "content": "string - section content",
      "confidence": "number - confidence 0-1",
      "sources": ["string - source references"]
    }}
  ],
  "metadata": {{
    "persona": "{persona.value}",
    "sectionsGenerated": ["string - section IDs"]
  }}
}}"""


@dataclass(frozen=True)
class PersonaTemplate:
    """A persona prompt template with its section outline"""

    id: str
    name: str
    persona: Persona
    version: str
    sections: List[str] = field(default_factory=list)
    tone: str = ""

    def info(self) -> TemplateInfo:
        return TemplateInfo(
            id=self.id, version=self.version, persona=self.persona, name=self.name
        )


DEFAULT_TEMPLATES = [
    PersonaTemplate(
        id="patient-v2.1",
        name="Patient-Friendly Summary",
        persona=Persona.PATIENT,
        version="2.1.0",
        sections=[
            "Your Health Overview",
            "Your Conditions",
            "Your Medications",
            "Important Results",
            "Next Steps",
        ],
        tone="Warm and reassuring",
    ),
    PersonaTemplate(
        id="provider-v2.1",
        name="Clinical Summary",
        persona=Persona.PROVIDER,
        version="2.1.0",
        sections=[
            "Clinical Overview",
            "Active Problems",
            "Medication Review",
            "Lab Analysis",
            "Clinical Recommendations",
        ],
        tone="Concise and clinical",
    ),
    PersonaTemplate(
        id="caregiver-v2.1",
        name="Caregiver Summary",
        persona=Persona.CAREGIVER,
        version="2.1.0",
        sections=[
            "Care Overview",
            "Conditions to Watch",
            "Medication Management",
            "Monitoring Values",
            "Care Tasks",
        ],
        tone="Practical and supportive",
    ),
]


class TemplatePromptBuilder:
    """Default PromptBuilder backed by an in-memory template registry.

    Templates are looked up by persona, or by ``{persona}-{variant}`` when an
    A/B test variant is requested and registered.
    """

    def __init__(self, templates: Optional[List[PersonaTemplate]] = None):
        self._templates: Dict[str, PersonaTemplate] = {}
        for template in templates if templates is not None else DEFAULT_TEMPLATES:
            self.register(template)

    def register(self, template: PersonaTemplate, variant: Optional[str] = None) -> None:
        """Register a template for its persona, or as an A/B variant."""
        key = f"{template.persona.value}-{variant}" if variant else template.persona.value
        self._templates[key] = template

    def get_template(
        self, persona: Persona, ab_test_variant: Optional[str] = None
    ) -> Optional[TemplateInfo]:
        template = self._lookup(persona, ab_test_variant)
        return template.info() if template else None

    def build_prompt(
        self,
        resource_data: Mapping[str, Any],
        persona: Persona,
        template_options: Mapping[str, Any],
        ab_test_variant: Optional[str] = None,
    ) -> str:
        """Build the user prompt for a request.

        Raises:
            KeyError: If no template is registered for the persona
        """
        template = self._lookup(persona, ab_test_variant)
        if template is None:
            raise KeyError(f"Template not found for persona: {Persona(persona).value}")

        focus_areas = template_options.get("focusAreas") or []
        prompt = self._render(template, resource_data, focus_areas)

        logger.debug(
            "prompt_built",
            template_id=template.id,
            persona=template.persona.value,
            prompt_length=len(prompt),
        )
        return prompt

    def _lookup(
        self, persona: Persona, ab_test_variant: Optional[str]
    ) -> Optional[PersonaTemplate]:
        persona = Persona(persona)
        if ab_test_variant:
            variant = self._templates.get(f"{persona.value}-{ab_test_variant}")
            if variant is not None:
                return variant
        return self._templates.get(persona.value)

    def _render(
        self,
        template: PersonaTemplate,
        resource_data: Mapping[str, Any],
        focus_areas: List[str],
    ) -> str:
        counts = {
            key: len(resource_data.get(key) or ())
            for key in ("conditions", "medications", "labValues")
        }
        outline = "\n".join(
            f"{i}. {title}" for i, title in enumerate(template.sections, start=1)
        )
        focus = f"\nFocus areas: {', '.join(focus_areas)}" if focus_areas else ""

        return f"""Summarize the following clinical record for the {template.persona.value}.
Style: {template.tone}

**Record Overview:**
- Conditions: {counts['conditions']}
- Medications: {counts['medications']}
- Lab values: {counts['labValues']}

**Sections:**
{outline}{focus}

**Clinical Data:**
{_format_data(resource_data)}

**Now write the summary and return ONLY the JSON response:**"""


def _format_data(resource_data: Mapping[str, Any]) -> str:
    return json.dumps(resource_data, indent=2, default=str)
