"""
Pytest fixtures for compliance desk tests.

Provides:
- Flask app and test client fixtures (in-memory SQLite)
- FakeProvider standing in for Gemini (see tests/fakes.py)
- Sample records and provider responses
"""

import os
import sys

import pytest

# Set testing environment before importing app
os.environ["TESTING"] = "true"
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")

# Add the project root to the Python path
project_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_dir not in sys.path:
    sys.path.insert(0, project_dir)

from tests.fakes import ADMIN_TOKEN, ALLOWED_ORIGIN, FakeProvider  # noqa: E402


# ============================================================================
# Flask App Fixtures
# ============================================================================

@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def app(fake_provider):
    """Create Flask application for testing."""
    from hts_compliance.web import create_app
    from hts_compliance.web.db import db

    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "ADMIN_API_TOKEN": ADMIN_TOKEN,
            "ALLOWED_ORIGIN": ALLOWED_ORIGIN,
        },
        provider=fake_provider,
    )

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def admin_headers():
    """Headers carrying the admin bearer token."""
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def store(app):
    """RecordStore bound to the test database."""
    from hts_compliance.services.record_store import RecordStore
    return RecordStore()


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def steel_entry_data():
    """Manual entry form data (no id yet)."""
    return {
        "code": "9903.81.91",
        "category": "Steel Derivative",
        "description": "matches Annex I",
        "metalType": "Steel",
    }


@pytest.fixture
def steel_entry(steel_entry_data):
    from hts_compliance.services.entry_validator import build_entry
    return build_entry(steel_entry_data)


@pytest.fixture
def text_context():
    from hts_compliance.schemas import DocumentContext
    return DocumentContext(kind="text", content="7317.00.30 Steel nails, tacks", name="Annex I excerpt")


@pytest.fixture
def pdf_context():
    from hts_compliance.schemas import DocumentContext
    # "%PDF-1.4" base64 encoded
    return DocumentContext(kind="file", content="JVBERi0xLjQ=", mime_type="application/pdf", name="annex.pdf")


@pytest.fixture
def compliance_found_response():
    """Provider JSON for a code that is subject to a derivative list."""
    return {
        "found": True,
        "matches": [
            {
                "derivativeCategory": "Steel Derivative",
                "metalType": "Steel",
                "matchDetail": "Listed under manual rule for Annex I",
                "sourceSnippet": "9903.81.91 matches Annex I",
                "confidence": "High",
            }
        ],
        "reasoning": "The code appears in the manual rules.",
    }


@pytest.fixture
def compliance_not_found_response():
    return {
        "found": False,
        "matches": [],
        "reasoning": "No derivative list covers 0101.21.00.",
    }
