import uuid
from hts_compliance.web.db import db
from .base import BaseModel


class ManualEntryRecord(BaseModel):
    """
    Persisted manual override rule.

    Attributes:
        id: Opaque identifier minted at creation (UUID4 string)
        position: Insertion order; listing is ordered by it
        code: HTS code or range ("7317.00.30", "7317.00 - 7318.00")
        category: Regulatory category label
        description: Rationale / classification detail
        metal_type: "Aluminum" | "Steel" | "Both"
    """
    __tablename__ = "manual_entry"

    id = db.Column(db.String(), primary_key=True, default=lambda: str(uuid.uuid4()))
    position = db.Column(db.Integer, nullable=False, index=True)
    code = db.Column(db.String(64), nullable=False)
    category = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    metal_type = db.Column(db.String(10), nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    def as_dict(self):
        return {
            "id": self.id,
            "code": self.code,
            "category": self.category,
            "description": self.description,
            "metalType": self.metal_type,
        }

    @classmethod
    def next_position(cls) -> int:
        highest = db.session.query(db.func.max(cls.position)).scalar()
        return (highest or 0) + 1

    def __repr__(self):
        return f"<ManualEntryRecord {self.code} ({self.metal_type})>"
