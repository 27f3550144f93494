"""Fallback synthesis of a structured response from unstructured model text."""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List

import structlog

logger = structlog.get_logger()

SUMMARY_MAX_CHARS = 500
FALLBACK_CONFIDENCE = 0.7

_BLANK_LINE = re.compile(r"\n[ \t\r\f\v]*\n")


class FallbackSynthesizer:
    """Builds a schema-shaped candidate by splitting text into paragraphs.

    The result always passes structural validation for non-empty input:
    every paragraph becomes one section with sequential ``section-{n}`` ids.
    """

    def synthesize(self, text: str) -> Dict[str, Any]:
        paragraphs = self.split_paragraphs(text)
        generated_at = datetime.now(timezone.utc).isoformat()

        sections: List[Dict[str, Any]] = []
        for index, paragraph in enumerate(paragraphs, start=1):
            sections.append(
                {
                    "id": f"section-{index}",
                    "title": f"Section {index}",
                    "content": paragraph,
                    "confidence": FALLBACK_CONFIDENCE,
                    "sources": [],
                    "claims": [],
                    "metadata": {
                        "generatedAt": generated_at,
                        "persona": "patient",
                        "template": "fallback",
                        "processingTime": 0,
                    },
                }
            )

        logger.info("fallback_synthesized", sections=len(sections), length=len(text))

        return {
            "summary": self.truncate(text),
            "sections": sections,
            # No top-level persona; validation takes it from the request
            "metadata": {
                "sectionsGenerated": [s["id"] for s in sections],
                "fallback": True,
            },
        }

    @staticmethod
    def split_paragraphs(text: str) -> List[str]:
        """Trimmed, non-empty blank-line separated segments."""
        return [part.strip() for part in _BLANK_LINE.split(text) if part.strip()]

    @staticmethod
    def truncate(text: str) -> str:
        """Text capped at 500 characters, ending in '...' when cut."""
        if len(text) <= SUMMARY_MAX_CHARS:
            return text
        return text[: SUMMARY_MAX_CHARS - 3] + "..."
