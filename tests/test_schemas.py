"""
Unit tests for record and response schemas.

Tests:
- DocumentContext kind/mimeType consistency and wire aliases
- ManualEntry wire form
- AnalysisResult strict validation
"""

import pytest
from pydantic import ValidationError

from hts_compliance.schemas import (
    AnalysisResult,
    DocumentContext,
    ManualEntry,
    MetalType,
    describe_validation_error,
    validate_analysis_result,
)


class TestDocumentContext:
    """Test DocumentContext model."""

    def test_text_from_wire_form(self):
        context = DocumentContext.model_validate({"type": "text", "content": "HELLO"})
        assert context.kind == "text"
        assert context.content == "HELLO"
        assert context.name == "Reference Document"
        assert context.is_file is False

    def test_text_wire_form_omits_mime_type(self):
        context = DocumentContext(kind="text", content="HELLO", name="Pasted")
        assert context.as_dict() == {"type": "text", "content": "HELLO", "name": "Pasted"}

    def test_file_requires_mime_type(self):
        with pytest.raises(ValidationError):
            DocumentContext.model_validate({"type": "file", "content": "JVBERi0xLjQ="})

    def test_file_requires_base64(self):
        with pytest.raises(ValidationError):
            DocumentContext.model_validate({
                "type": "file", "content": "not base64!!", "mimeType": "application/pdf",
            })

    def test_text_rejects_mime_type(self):
        with pytest.raises(ValidationError):
            DocumentContext.model_validate({"type": "text", "content": "x", "mimeType": "text/plain"})

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            DocumentContext.model_validate({"type": "url", "content": "x"})

    def test_file_content_bytes(self, pdf_context):
        assert pdf_context.content_bytes() == b"%PDF-1.4"
        assert pdf_context.as_dict()["mimeType"] == "application/pdf"


class TestManualEntry:
    """Test ManualEntry model."""

    def test_wire_form_uses_metal_type_alias(self):
        entry = ManualEntry(id="1", code="7317", category="Steel", description="nails", metal_type=MetalType.STEEL)
        assert entry.as_dict() == {
            "id": "1",
            "code": "7317",
            "category": "Steel",
            "description": "nails",
            "metalType": "Steel",
        }

    def test_from_wire_form(self):
        entry = ManualEntry.model_validate({
            "id": "1", "code": "7317", "category": "Steel", "description": "nails", "metalType": "Both",
        })
        assert entry.metal_type == MetalType.BOTH


class TestAnalysisResult:
    """Test compliance response validation."""

    def test_valid_found(self, compliance_found_response):
        is_valid, result, error = validate_analysis_result(compliance_found_response)

        assert is_valid is True
        assert error is None
        assert result.found is True
        assert result.matches[0].confidence == "High"

    def test_matches_default_empty(self):
        result = AnalysisResult(found=False, reasoning="nothing")
        assert result.matches == []

    def test_strict_rejects_string_bool(self):
        is_valid, result, error = validate_analysis_result({"found": "yes", "reasoning": "r"})
        assert is_valid is False
        assert result is None
        assert "found" in error

    def test_rejects_unknown_confidence(self, compliance_found_response):
        compliance_found_response["matches"][0]["confidence"] = "Certain"
        is_valid, _, _ = validate_analysis_result(compliance_found_response)
        assert is_valid is False

    def test_rejects_non_object(self):
        is_valid, _, error = validate_analysis_result(["found"])
        assert is_valid is False
        assert "list" in error


class TestDescribeValidationError:
    def test_first_error_with_location(self):
        with pytest.raises(ValidationError) as exc_info:
            ManualEntry.model_validate({"id": "1", "code": "7317", "category": "c", "description": "d"})
        assert describe_validation_error(exc_info.value).startswith("metalType:")
