"""
Pydantic Schemas for records and Gemini responses

Two groups:
- Record schemas (DocumentContext, ManualEntry): what the store persists and
  what the browser sends. Python attributes are snake_case, the wire format
  is camelCase (``type``, ``mimeType``, ``metalType``).
- Response schemas (AnalysisResult, ProvisionResult, HeadingInfo): the JSON
  Gemini is asked to return. Field names mirror the provider JSON exactly
  because AnalysisResult is also handed to Gemini as the response schema.

Response schemas use strict mode to prevent silent coercion (e.g., "yes" -> True).
"""

import base64
import binascii
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# Record Schemas
# ============================================================================

class MetalType(str, Enum):
    """Metal a manual override entry applies to."""
    ALUMINUM = "Aluminum"
    STEEL = "Steel"
    BOTH = "Both"


class DocumentContext(BaseModel):
    """Reference material the classification call is grounded against.

    Invariant: ``mime_type`` is set iff ``kind == "file"``; file content is
    base64 text.

    Example (wire form):
        {"type": "text", "content": "...", "name": "Pasted Text Content"}
        {"type": "file", "content": "JVBERi0...", "mimeType": "application/pdf", "name": "annex.pdf"}
    """
    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["file", "text"] = Field(alias="type")
    content: str
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    name: str = "Reference Document"

    @model_validator(mode="after")
    def _check_kind_consistency(self):
        if self.kind == "file":
            if not self.mime_type:
                raise ValueError("mimeType is required when type is 'file'")
            try:
                base64.b64decode(self.content, validate=True)
            except (binascii.Error, ValueError):
                raise ValueError("file content must be base64 encoded")
        elif self.mime_type is not None:
            raise ValueError("mimeType is only allowed when type is 'file'")
        return self

    @property
    def is_file(self) -> bool:
        return self.kind == "file"

    def content_bytes(self) -> bytes:
        """Decoded payload for file contexts."""
        return base64.b64decode(self.content)

    def as_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ManualEntry(BaseModel):
    """User-authored override rule.

    Field-level checks (code pattern, non-blank text) live in
    ``services.entry_validator`` so they can be reported per field; this
    model only fixes the shape.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    code: str
    category: str
    description: str
    metal_type: MetalType = Field(alias="metalType")

    def as_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# ============================================================================
# Response Schemas
# ============================================================================

class ComplianceMatch(BaseModel):
    """One derivative category an HTS code falls under."""
    model_config = ConfigDict(strict=True)

    derivativeCategory: str
    metalType: Literal["Aluminum", "Steel", "Both", "Unknown"]
    matchDetail: str
    sourceSnippet: str  # EXACT text from the document or manual rule
    confidence: Literal["High", "Medium", "Low"]


class AnalysisResult(BaseModel):
    """Compliance-mode response.

    Expected structure from Gemini:
    {
        "found": true,
        "matches": [
            {
                "derivativeCategory": "Steel Derivative",
                "metalType": "Steel",
                "matchDetail": "Listed in Annex I",
                "sourceSnippet": "9903.81.91 ...",
                "confidence": "High"
            }
        ],
        "reasoning": "A general summary."
    }
    """
    model_config = ConfigDict(strict=True)

    found: bool
    matches: List[ComplianceMatch] = []
    reasoning: str


class ProvisionResult(BaseModel):
    """Lookup-mode response. Opaque: whatever provision details Gemini returns."""
    model_config = ConfigDict(extra="allow")


class HeadingInfo(BaseModel):
    """One 4-digit heading pulled out of the reference document."""
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    heading: Optional[str] = None
    description: Optional[str] = None


# ============================================================================
# Validation Functions
# ============================================================================

def validate_analysis_result(parsed_json: dict) -> tuple[bool, Optional[AnalysisResult], Optional[str]]:
    """
    Validate parsed JSON against the compliance response schema.

    Args:
        parsed_json: Dictionary parsed from Gemini response

    Returns:
        (is_valid, validated_result, error_message)
        - On success: (True, AnalysisResult, None)
        - On failure: (False, None, error_string)
    """
    if not isinstance(parsed_json, dict):
        return False, None, f"Expected a JSON object, got {type(parsed_json).__name__}"

    try:
        result = AnalysisResult(**parsed_json)
        return True, result, None
    except Exception as e:
        return False, None, str(e)


def describe_validation_error(error) -> str:
    """First pydantic error as "field: message", for API error bodies."""
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", str(error))
    return f"{location}: {message}" if location else message
