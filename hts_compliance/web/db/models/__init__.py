from .base import BaseModel as Model
from .document_context import StoredDocumentContext
from .manual_entry import ManualEntryRecord
