"""Response Parser Module

Extracts the JSON object embedded in free-form model output.

Models often wrap the requested JSON in prose or markdown code fences.
The parser scans for balanced top-level ``{...}`` spans, honoring string
literals and escapes, and returns the first span that decodes to a JSON
object. "First complete object wins": later objects, and objects nested
inside an earlier span, are never preferred over it.
"""

import json
from typing import Any, Dict, Iterator, List, Optional, Tuple

import structlog

from plumly_summarizer.utils.exceptions import JSONParseError

logger = structlog.get_logger()

_CLOSERS = {"{": "}", "[": "]"}


class ResponseParser:
    """Parses model text into a JSON object."""

    def parse(self, text: str) -> Dict[str, Any]:
        """Return the first JSON object found in ``text``.

        Args:
            text: Raw model output

        Returns:
            Parsed dictionary

        Raises:
            JSONParseError: If no complete, valid JSON object is present
        """
        if not text:
            raise JSONParseError("Empty LLM response")

        for start, end in self._iter_object_spans(text):
            candidate = text[start:end]
            try:
                data = json.loads(candidate)
            except json.JSONDecodeError as e:
                logger.debug("json_candidate_rejected", offset=start, error=str(e))
                continue
            if isinstance(data, dict):
                logger.debug("response_parsed", offset=start, length=len(candidate))
                return data

        raise JSONParseError(
            f"No JSON object found in LLM response. Content: {text[:500]}"
        )

    def _iter_object_spans(self, text: str) -> Iterator[Tuple[int, int]]:
        """Yield (start, end) of balanced top-level ``{...}`` spans in order."""
        pos = text.find("{")
        while pos != -1:
            end = self._match_balanced(text, pos)
            if end is None:
                # Unbalanced from here; try the next opening brace
                pos = text.find("{", pos + 1)
                continue
            yield pos, end
            pos = text.find("{", end)

    def _match_balanced(self, text: str, start: int) -> Optional[int]:
        """Index one past the brace closing ``text[start]``, or None."""
        stack: List[str] = []
        in_string = False
        escaped = False

        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue

            if ch == '"':
                in_string = True
            elif ch in _CLOSERS:
                stack.append(_CLOSERS[ch])
            elif ch in ("}", "]"):
                if not stack or stack.pop() != ch:
                    return None
                if not stack:
                    return i + 1

        return None
