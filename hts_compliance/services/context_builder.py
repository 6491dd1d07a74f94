"""
Context Builder

Composes one AnalysisRequest from explicit inputs. Pure: no I/O, no ambient
"current context". The caller passes whatever the record store returned.

Rules:
- compliance: context (optional) + every manual entry + code
- lookup:     context (optional) + code; entries are always dropped
- headings:   context (required); entries dropped, code ignored

The code is expected to be sanitized already (see
entry_validator.sanitize_query_code). A blank code is a caller bug and
raises ValueError.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from hts_compliance.schemas import DocumentContext, ManualEntry

COMPLIANCE = "compliance"
LOOKUP = "lookup"
HEADINGS = "headings"

MODES = (COMPLIANCE, LOOKUP, HEADINGS)


@dataclass(frozen=True)
class AnalysisRequest:
    """One outbound analysis request. Transient, never persisted."""
    mode: str
    code: str
    context: Optional[DocumentContext] = None
    entries: Tuple[ManualEntry, ...] = field(default_factory=tuple)

    @property
    def has_entries(self) -> bool:
        return len(self.entries) > 0

    def as_payload(self) -> dict:
        """Gateway endpoint body for this request."""
        payload = {"mode": self.mode, "htsCode": self.code}
        if self.context is not None:
            payload["context"] = self.context.as_dict()
        if self.entries:
            payload["manualEntries"] = [entry.as_dict() for entry in self.entries]
        return payload


def build(
    mode: str,
    context: Optional[DocumentContext],
    entries: Optional[Sequence[ManualEntry]],
    code: str,
) -> AnalysisRequest:
    """
    Build an AnalysisRequest.

    Args:
        mode: "compliance", "lookup" or "headings"
        context: Active document context, or None
        entries: Manual override entries (ignored outside compliance mode)
        code: Sanitized HTS code

    Raises:
        ValueError: unknown mode, blank code, or headings without a context
    """
    if mode not in MODES:
        raise ValueError(f"Unknown mode: {mode!r}")

    code = (code or "").strip()

    if mode == HEADINGS:
        if context is None:
            raise ValueError("Headings extraction requires a document context")
        return AnalysisRequest(mode=mode, code=code, context=context)

    if not code:
        raise ValueError("HTS code must not be blank")

    kept = tuple(entries or ()) if mode == COMPLIANCE else ()
    return AnalysisRequest(mode=mode, code=code, context=context, entries=kept)


def is_system_ready(context: Optional[DocumentContext], entries: Optional[Sequence[ManualEntry]]) -> bool:
    """Search is enabled once a reference document or any manual rule exists."""
    return context is not None or bool(entries)
