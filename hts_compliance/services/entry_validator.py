"""
Manual Entry Validator

Validates manual override rules before they reach the record store, and
sanitizes HTS codes typed into the search box.

- Entry codes: digits and periods, optionally a dash-separated second code
  ("7317.00.30", "7317.00 - 7318.00")
- category / description: required, non-blank
- metalType: Aluminum | Steel | Both (defaults to Aluminum)

Errors are collected per field so a form can show them next to the input.
Nothing here touches the network or the store.
"""

import re
import uuid
import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from hts_compliance.errors import EntryValidationError
from hts_compliance.schemas import ManualEntry, MetalType

logger = logging.getLogger(__name__)

# Entry code: "7317.00.30" or "7317.00 - 7318.00"; ASCII digits only
HTS_ENTRY_PATTERN = re.compile(r'^[\d.]+(?:\s*-\s*[\d.]+)?$', re.ASCII)

# Anything the search box does not accept
QUERY_CODE_STRIP = re.compile(r'[^0-9.]')

DEFAULT_METAL_TYPE = MetalType.ALUMINUM


@dataclass
class EntryValidationResult:
    """Result of manual entry validation."""
    is_valid: bool
    errors: Dict[str, str] = field(default_factory=dict)
    entry: Optional[ManualEntry] = None

    def as_dict(self) -> Dict:
        return {
            "is_valid": self.is_valid,
            "errors": self.errors,
            "entry": self.entry.as_dict() if self.entry else None,
        }


def sanitize_query_code(raw: Optional[str]) -> str:
    """
    Reduce search input to digits and periods.

    Examples:
        "7614.10" -> "7614.10"
        " 9903-81 91a" -> "99038191"
    """
    if not raw:
        return ""
    return QUERY_CODE_STRIP.sub("", raw)


def is_valid_entry_code(code: str) -> bool:
    return bool(HTS_ENTRY_PATTERN.match(code.strip()))


def validate_entry(data: Mapping, entry_id: Optional[str] = None) -> EntryValidationResult:
    """
    Validate form data for a manual entry.

    Args:
        data: Mapping with code, category, description and optionally
              metalType (or metal_type)
        entry_id: Existing id when updating; a new UUID is minted otherwise

    Returns:
        EntryValidationResult; ``entry`` is set only when valid
    """
    errors: Dict[str, str] = {}

    code = _text(data.get("code"))
    category = _text(data.get("category"))
    description = _text(data.get("description"))
    raw_metal = data.get("metalType", data.get("metal_type"))

    if not code:
        errors["code"] = "HTS Code is required"
    elif not HTS_ENTRY_PATTERN.match(code):
        errors["code"] = "Invalid format"

    if not category:
        errors["category"] = "Category name is required"
    if not description:
        errors["description"] = "Rule detail is required"

    metal_type = DEFAULT_METAL_TYPE
    if raw_metal not in (None, ""):
        try:
            metal_type = MetalType(raw_metal)
        except ValueError:
            allowed = ", ".join(m.value for m in MetalType)
            errors["metalType"] = f"Must be one of: {allowed}"

    if errors:
        logger.debug(f"Manual entry rejected: {errors}")
        return EntryValidationResult(is_valid=False, errors=errors)

    entry = ManualEntry(
        id=entry_id or str(uuid.uuid4()),
        code=code,
        category=category,
        description=description,
        metal_type=metal_type,
    )
    return EntryValidationResult(is_valid=True, entry=entry)


def build_entry(data: Mapping, entry_id: Optional[str] = None) -> ManualEntry:
    """Validate and return the entry, raising EntryValidationError on failure."""
    result = validate_entry(data, entry_id=entry_id)
    if not result.is_valid:
        raise EntryValidationError(result.errors)
    return result.entry


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()
