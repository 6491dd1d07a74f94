"""
Singleton record holding the active reference document.

Only row ``id = 1`` is ever written; clearing the context deletes it.
"""

from hts_compliance.web.db import db
from .base import BaseModel


class StoredDocumentContext(BaseModel):
    __tablename__ = "document_context"

    SINGLETON_ID = 1

    id = db.Column(db.Integer, primary_key=True)
    kind = db.Column(db.String(10), nullable=False)  # "file" | "text"
    content = db.Column(db.Text, nullable=False)     # raw text or base64 payload
    mime_type = db.Column(db.String(120), nullable=True)
    name = db.Column(db.String(255), nullable=False)
    updated_at = db.Column(
        db.DateTime, server_default=db.func.now(), onupdate=db.func.now()
    )

    def as_dict(self):
        """Wire form of the context (camelCase keys)."""
        data = {"type": self.kind, "content": self.content, "name": self.name}
        if self.mime_type:
            data["mimeType"] = self.mime_type
        return data

    @classmethod
    def current(cls):
        return db.session.get(cls, cls.SINGLETON_ID)

    def __repr__(self):
        return f"<StoredDocumentContext {self.kind}:{self.name}>"
