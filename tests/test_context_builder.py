"""
Unit tests for the context builder.

Pure functions, no app or database needed.
"""

import pytest

from hts_compliance.services.context_builder import (
    COMPLIANCE,
    HEADINGS,
    LOOKUP,
    build,
    is_system_ready,
)


class TestBuild:
    """Test AnalysisRequest composition per mode."""

    def test_compliance_keeps_context_and_entries(self, text_context, steel_entry):
        request = build(COMPLIANCE, text_context, [steel_entry], "7317.00.30")

        assert request.mode == COMPLIANCE
        assert request.code == "7317.00.30"
        assert request.context == text_context
        assert request.entries == (steel_entry,)
        assert request.has_entries is True

    def test_lookup_never_includes_entries(self, text_context, steel_entry):
        request = build(LOOKUP, text_context, [steel_entry], "7317.00.30")

        assert request.entries == ()
        assert request.has_entries is False
        assert request.context == text_context

    def test_compliance_without_context(self, steel_entry):
        request = build(COMPLIANCE, None, [steel_entry], "9903.81.91")
        assert request.context is None
        assert len(request.entries) == 1

    def test_headings_requires_context(self):
        with pytest.raises(ValueError, match="document context"):
            build(HEADINGS, None, [], "")

    def test_headings_drops_entries(self, pdf_context, steel_entry):
        request = build(HEADINGS, pdf_context, [steel_entry], "")
        assert request.entries == ()
        assert request.code == ""

    def test_blank_code_rejected(self, text_context):
        with pytest.raises(ValueError, match="blank"):
            build(COMPLIANCE, text_context, [], "   ")

    def test_unknown_mode(self, text_context):
        with pytest.raises(ValueError, match="Unknown mode"):
            build("classify", text_context, [], "7317")


class TestAsPayload:
    """Test the gateway request body."""

    def test_payload_shape(self, pdf_context, steel_entry):
        payload = build(COMPLIANCE, pdf_context, [steel_entry], "7317").as_payload()

        assert payload["mode"] == "compliance"
        assert payload["htsCode"] == "7317"
        assert payload["context"]["type"] == "file"
        assert payload["manualEntries"][0]["metalType"] == "Steel"

    def test_payload_omits_empty_parts(self):
        payload = build(LOOKUP, None, [], "7317").as_payload()
        assert payload == {"mode": "lookup", "htsCode": "7317"}


class TestSystemReady:
    def test_nothing_loaded(self):
        assert is_system_ready(None, []) is False
        assert is_system_ready(None, None) is False

    def test_context_only(self, text_context):
        assert is_system_ready(text_context, []) is True

    def test_entries_only(self, steel_entry):
        assert is_system_ready(None, [steel_entry]) is True
