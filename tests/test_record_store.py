"""
Tests for the SQLAlchemy-backed record store.

Tests:
- Document context set / replace / clear
- Manual entry add / update / delete and ordering
- Initialization flag
- Failed writes surface as PersistenceError
"""

import os
import subprocess
import sys
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from hts_compliance.errors import PersistenceError
from hts_compliance.schemas import DocumentContext, MetalType
from hts_compliance.services.entry_validator import build_entry


class TestDocumentContextRecord:
    """Test the singleton document context."""

    def test_empty_store_has_no_context(self, store):
        assert store.get_context() is None

    def test_text_round_trips_unchanged(self, store):
        store.set_context(DocumentContext(kind="text", content="HELLO", name="Pasted Text Content"))

        loaded = store.get_context()
        assert loaded.kind == "text"
        assert loaded.content == "HELLO"
        assert loaded.mime_type is None
        assert loaded.name == "Pasted Text Content"

    def test_file_round_trips(self, store, pdf_context):
        store.set_context(pdf_context)

        loaded = store.get_context()
        assert loaded.is_file
        assert loaded.mime_type == "application/pdf"
        assert loaded.content_bytes() == b"%PDF-1.4"

    def test_set_replaces_previous(self, store, text_context, pdf_context):
        store.set_context(text_context)
        store.set_context(pdf_context)

        assert store.get_context().name == "annex.pdf"
        assert store.get_context().mime_type == "application/pdf"

    def test_set_none_clears(self, store, text_context):
        store.set_context(text_context)
        store.set_context(None)
        assert store.get_context() is None

    def test_clear_when_empty_is_noop(self, store):
        store.clear_context()
        assert store.get_context() is None


class TestManualEntryRecords:
    """Test manual entry persistence."""

    def test_save_then_list(self, store, steel_entry):
        """Test a saved entry is listed exactly once with the submitted fields."""
        store.save_entry(steel_entry)

        entries = store.list_entries()
        assert len(entries) == 1
        assert entries[0].id == steel_entry.id
        assert entries[0].code == "9903.81.91"
        assert entries[0].metal_type == MetalType.STEEL

    def test_list_keeps_insertion_order(self, store):
        codes = ["7614.10", "7317.00.30", "7616.99"]
        for code in codes:
            store.save_entry(build_entry({"code": code, "category": "c", "description": "d"}))

        assert [e.code for e in store.list_entries()] == codes

    def test_update_preserves_id_and_position(self, store, steel_entry):
        other = build_entry({"code": "7614.10", "category": "Al", "description": "wire"})
        store.save_entry(steel_entry)
        store.save_entry(other)

        updated = build_entry(
            {"code": "9903.81.92", "category": "Steel Derivative", "description": "changed", "metalType": "Both"},
            entry_id=steel_entry.id,
        )
        store.save_entry(updated)

        entries = store.list_entries()
        assert len(entries) == 2
        assert entries[0].id == steel_entry.id
        assert entries[0].code == "9903.81.92"
        assert entries[0].metal_type == MetalType.BOTH

    def test_get_entry(self, store, steel_entry):
        store.save_entry(steel_entry)
        assert store.get_entry(steel_entry.id).description == "matches Annex I"
        assert store.get_entry("missing") is None

    def test_delete_removes_only_that_entry(self, store, steel_entry):
        other = build_entry({"code": "7614.10", "category": "Al", "description": "wire"})
        store.save_entry(steel_entry)
        store.save_entry(other)

        assert store.delete_entry(steel_entry.id) is True
        assert [e.id for e in store.list_entries()] == [other.id]

    def test_delete_unknown_id(self, store):
        assert store.delete_entry("missing") is False


class TestInitialization:
    """Test the initialized flag."""

    def test_empty_store_uninitialized(self, store):
        assert store.is_initialized() is False

    def test_context_initializes(self, store, text_context):
        store.set_context(text_context)
        assert store.is_initialized() is True

    def test_entry_initializes(self, store, steel_entry):
        store.save_entry(steel_entry)
        assert store.is_initialized() is True


class TestPersistenceFailures:
    """Test failed writes are rolled back and reported."""

    def test_failed_commit_raises(self, store, steel_entry):
        error = OperationalError("INSERT", {}, Exception("disk I/O error"))
        with patch("sqlalchemy.orm.Session.commit", side_effect=error):
            with pytest.raises(PersistenceError, match="save manual entry"):
                store.save_entry(steel_entry)

        assert store.list_entries() == []

    def test_failed_context_write_keeps_previous(self, store, text_context, pdf_context):
        store.set_context(text_context)

        error = OperationalError("UPDATE", {}, Exception("database is locked"))
        with patch("sqlalchemy.orm.Session.commit", side_effect=error):
            with pytest.raises(PersistenceError):
                store.set_context(pdf_context)

        assert store.get_context().name == "Annex I excerpt"


class TestStandaloneImport:
    """Test the store loads without the web app being imported first."""

    def test_fresh_interpreter_import(self):
        project_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        result = subprocess.run(
            [sys.executable, "-c", "from hts_compliance.services.record_store import RecordStore"],
            cwd=project_dir,
            capture_output=True,
            text=True,
        )

        assert result.returncode == 0, result.stderr
