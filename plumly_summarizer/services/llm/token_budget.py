"""Max-output-token budget for a summary request."""

from typing import Any, Mapping, Optional, Union

from plumly_summarizer.models.summary import Persona

BASE_TOKENS = 1500
TOKENS_PER_ITEM = 50
MIN_TOKENS = 1000
MAX_TOKENS = 4000

# Patients get simpler language, providers more detailed clinical analysis
PERSONA_FACTORS = {
    Persona.PATIENT: 0.8,
    Persona.PROVIDER: 1.2,
    Persona.CAREGIVER: 1.0,
}

COUNTED_COLLECTIONS = ("conditions", "medications", "labValues")


def count_data_items(resource_data: Optional[Mapping[str, Any]]) -> int:
    """Number of conditions, medications and lab values (missing count as 0)."""
    if not resource_data:
        return 0
    return sum(len(resource_data.get(key) or ()) for key in COUNTED_COLLECTIONS)


def calculate_max_tokens(
    resource_data: Optional[Mapping[str, Any]],
    persona: Union[Persona, str],
) -> int:
    """Compute the max output tokens for a request.

    ``1500 + 50 * items``, scaled by the persona factor and clamped to
    [1000, 4000].
    """
    tokens = BASE_TOKENS + TOKENS_PER_ITEM * count_data_items(resource_data)
    tokens *= PERSONA_FACTORS.get(Persona(persona), 1.0)
    return int(round(min(max(tokens, MIN_TOKENS), MAX_TOKENS)))
