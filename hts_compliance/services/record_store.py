"""
Local Record Store

Persists the two record sets the compliance desk owns:

    document_context   one row at most (replace-on-set, delete-on-clear)
    manual_entry       ordered collection keyed by id

Usage (inside a Flask app context):
    store = RecordStore()
    store.set_context(DocumentContext(type="text", content="...", name="Pasted"))
    store.save_entry(entry)
    entries = store.list_entries()

Every mutation commits before returning. A failed write is rolled back and
raised as PersistenceError, so callers never update in-memory state for a
write that did not land. Writes to the two record sets are independent;
there is no transaction spanning both.
"""

import logging
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from hts_compliance.errors import PersistenceError
from hts_compliance.schemas import DocumentContext, ManualEntry
from hts_compliance.web.db import db
from hts_compliance.web.db.models import ManualEntryRecord, StoredDocumentContext

logger = logging.getLogger(__name__)


class RecordStore:
    """SQLAlchemy-backed store for the document context and manual entries."""

    # ─────────────────────────────────────────────────────────────────────────
    # Document context
    # ─────────────────────────────────────────────────────────────────────────

    def get_context(self) -> Optional[DocumentContext]:
        """
        Return the active document context.

        Returns:
            DocumentContext, or None when no context has been set (a valid
            "uninitialized" state, not an error)
        """
        with self._read("load document context"):
            row = StoredDocumentContext.current()
            if row is None:
                return None
            return DocumentContext(**row.as_dict())

    def set_context(self, context: Optional[DocumentContext]) -> None:
        """
        Replace the document context, or clear it when ``context`` is None.
        """
        if context is None:
            self.clear_context()
            return

        with self._write("save document context"):
            row = StoredDocumentContext.current()
            if row is None:
                row = StoredDocumentContext(id=StoredDocumentContext.SINGLETON_ID)
                db.session.add(row)
            row.kind = context.kind
            row.content = context.content
            row.mime_type = context.mime_type
            row.name = context.name

        logger.info(f"Document context set: {context.kind} '{context.name}' ({len(context.content)} chars)")

    def clear_context(self) -> None:
        with self._write("clear document context"):
            row = StoredDocumentContext.current()
            if row is not None:
                db.session.delete(row)
        logger.info("Document context cleared")

    # ─────────────────────────────────────────────────────────────────────────
    # Manual entries
    # ─────────────────────────────────────────────────────────────────────────

    def list_entries(self) -> List[ManualEntry]:
        """All manual entries in insertion order."""
        with self._read("list manual entries"):
            rows = ManualEntryRecord.all_ordered(ManualEntryRecord.position)
            return [ManualEntry(**row.as_dict()) for row in rows]

    def get_entry(self, entry_id: str) -> Optional[ManualEntry]:
        with self._read(f"load manual entry {entry_id}"):
            row = ManualEntryRecord.find_by(id=entry_id)
            return ManualEntry(**row.as_dict()) if row else None

    def save_entry(self, entry: ManualEntry) -> ManualEntry:
        """
        Insert the entry if its id is unseen, otherwise replace its fields.

        The id and list position of an existing entry never change.
        """
        with self._write(f"save manual entry {entry.id}"):
            row = ManualEntryRecord.find_by(id=entry.id)
            if row is None:
                row = ManualEntryRecord(id=entry.id, position=ManualEntryRecord.next_position())
                db.session.add(row)
                action = "added"
            else:
                action = "updated"
            row.code = entry.code
            row.category = entry.category
            row.description = entry.description
            row.metal_type = entry.metal_type.value

        logger.info(f"Manual entry {action}: {entry.id} ({entry.code})")
        return entry

    def delete_entry(self, entry_id: str) -> bool:
        """
        Delete one entry by id.

        Returns:
            True if deleted, False if no entry had that id
        """
        with self._write(f"delete manual entry {entry_id}"):
            row = ManualEntryRecord.find_by(id=entry_id)
            if row is None:
                return False
            db.session.delete(row)

        logger.info(f"Manual entry deleted: {entry_id}")
        return True

    # ─────────────────────────────────────────────────────────────────────────
    # Readiness
    # ─────────────────────────────────────────────────────────────────────────

    def is_initialized(self) -> bool:
        """True when a context or at least one manual entry exists."""
        if self.get_context() is not None:
            return True
        with self._read("count manual entries"):
            return ManualEntryRecord.query.count() > 0

    # ─────────────────────────────────────────────────────────────────────────
    # Session helpers
    # ─────────────────────────────────────────────────────────────────────────

    @contextmanager
    def _write(self, action: str):
        """Commit on success, roll back and raise PersistenceError on failure."""
        try:
            yield
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e

    @contextmanager
    def _read(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e
