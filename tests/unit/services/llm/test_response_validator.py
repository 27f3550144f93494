"""Tests for response schema enforcement."""

import copy

import pytest

from plumly_summarizer.models.summary import Persona
from plumly_summarizer.services.llm.response_validator import ResponseValidator
from plumly_summarizer.utils.exceptions import ResponseStructureError


@pytest.fixture
def validator() -> ResponseValidator:
    return ResponseValidator()


class TestStructuralChecks:
    """Tests for structural defect detection."""

    def test_valid_payload(self, validator, valid_payload) -> None:
        response = validator.validate(valid_payload, Persona.PATIENT, "patient-v2.1")

        assert response.summary == valid_payload["summary"]
        assert response.section_ids == ["overview", "meds"]
        assert response.metadata["sectionsGenerated"] == ["overview", "meds"]

    def test_missing_summary(self, validator, valid_payload) -> None:
        del valid_payload["summary"]

        with pytest.raises(ResponseStructureError, match="Missing or invalid summary field"):
            validator.validate(valid_payload, "patient")

    def test_sections_not_a_list(self, validator) -> None:
        with pytest.raises(ResponseStructureError) as exc_info:
            validator.validate({"summary": "S", "sections": "nope"}, "patient")

        assert "Missing or invalid sections array" in str(exc_info.value)

    def test_all_section_defects_reported(self, validator) -> None:
        """Every section missing a title should be reported in one error."""
        candidate = {
            "summary": "S",
            "sections": [
                {"id": "a", "content": "x"},
                {"id": "b", "content": "y"},
            ],
        }

        with pytest.raises(ResponseStructureError) as exc_info:
            validator.validate(candidate, "provider")

        message = str(exc_info.value)
        assert message.startswith("Invalid response structure: ")
        assert "Section 1 missing required fields" in message
        assert "Section 2 missing required fields" in message

    def test_summary_and_section_defects_accumulate(self, validator) -> None:
        candidate = {"sections": [{"title": "T", "content": "c"}]}

        with pytest.raises(ResponseStructureError) as exc_info:
            validator.validate(candidate, "provider")

        assert "Missing or invalid summary field" in str(exc_info.value)
        assert "Section 1 missing required fields" in str(exc_info.value)

    def test_non_object_section(self, validator) -> None:
        with pytest.raises(ResponseStructureError, match="Section 1 is not an object"):
            validator.validate({"summary": "S", "sections": ["text"]}, "patient")

    def test_duplicate_section_ids(self, validator) -> None:
        candidate = {
            "summary": "S",
            "sections": [
                {"id": "a", "title": "A", "content": "x"},
                {"id": "a", "title": "B", "content": "y"},
            ],
        }

        with pytest.raises(ResponseStructureError, match="Section 2 has duplicate id 'a'"):
            validator.validate(candidate, "patient")

    def test_non_dict_candidate(self, validator) -> None:
        with pytest.raises(ResponseStructureError):
            validator.validate(["not", "an", "object"], "patient")

    def test_empty_sections_list_is_valid(self, validator) -> None:
        response = validator.validate({"summary": "S", "sections": []}, "patient")

        assert response.sections == []
        assert response.metadata["sectionsGenerated"] == []


class TestNormalization:
    """Tests for default filling and normalization."""

    def test_confidence_out_of_range_reset(self, validator) -> None:
        candidate = {
            "summary": "S",
            "sections": [
                {"id": "a", "title": "A", "content": "x", "confidence": 1.5},
                {"id": "b", "title": "B", "content": "y", "confidence": 0.42},
                {"id": "c", "title": "C", "content": "z", "confidence": "high"},
                {"id": "d", "title": "D", "content": "w", "confidence": True},
            ],
        }

        response = validator.validate(candidate, "patient")

        assert [s.confidence for s in response.sections] == [0.8, 0.42, 0.8, 0.8]

    def test_sources_and_claims_defaults(self, validator) -> None:
        candidate = {
            "summary": "S",
            "sections": [
                {"id": "a", "title": "A", "content": "x", "sources": "Lab/1"},
                {"id": "b", "title": "B", "content": "y", "sources": ["Obs/1", 7]},
            ],
        }

        response = validator.validate(candidate, "patient")

        assert response.sections[0].sources == []
        assert response.sections[0].claims == []
        assert response.sections[1].sources == ["Obs/1", "7"]

    def test_section_metadata_defaults(self, validator, valid_payload) -> None:
        response = validator.validate(valid_payload, Persona.CAREGIVER, "caregiver-v2.1")

        metadata = response.sections[0].metadata
        assert metadata["persona"] == "caregiver"
        assert metadata["template"] == "caregiver-v2.1"
        assert metadata["processingTime"] == 0
        assert "generatedAt" in metadata

    def test_existing_section_metadata_wins(self, validator) -> None:
        candidate = {
            "summary": "S",
            "sections": [
                {
                    "id": "a",
                    "title": "A",
                    "content": "x",
                    "metadata": {"template": "custom", "reviewed": True},
                }
            ],
        }

        metadata = validator.validate(candidate, "patient", "patient-v2.1").sections[0].metadata

        assert metadata["template"] == "custom"
        assert metadata["reviewed"] is True
        assert metadata["persona"] == "patient"

    def test_existing_top_level_metadata_wins(self, validator) -> None:
        """Model-supplied persona is kept over the request persona."""
        candidate = {
            "summary": "S",
            "sections": [{"id": "a", "title": "A", "content": "x"}],
            "metadata": {"persona": "provider", "fallback": True},
        }

        metadata = validator.validate(candidate, "patient").metadata

        assert metadata["persona"] == "provider"
        assert metadata["fallback"] is True
        assert metadata["sectionsGenerated"] == ["a"]

    def test_candidate_not_mutated(self, validator, valid_payload) -> None:
        original = copy.deepcopy(valid_payload)

        validator.validate(valid_payload, "patient")

        assert valid_payload == original
