"""
Result Presenter

Shapes provider JSON into displayable reports and keeps the rolling query
history.

    compliance -> ComplianceReport (not subject: reasoning only;
                  subject: list of matches)
    lookup     -> ProvisionReport (opaque pass-through)
    headings   -> HeadingsReport

Only successful compliance searches enter the history.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, List

from hts_compliance.config import HISTORY_LIMIT
from hts_compliance.schemas import ComplianceMatch, HeadingInfo, validate_analysis_result
from .context_builder import COMPLIANCE, HEADINGS, LOOKUP


@dataclass
class ComplianceReport:
    code: str
    found: bool
    reasoning: str
    matches: List[ComplianceMatch] = field(default_factory=list)

    @property
    def headline(self) -> str:
        if not self.found:
            return f"{self.code}: not subject to any derivative list"
        return f"{self.code}: {len(self.matches)} derivative match(es)"

    def as_dict(self) -> Dict:
        data = {"kind": "compliance", "code": self.code, "found": self.found, "reasoning": self.reasoning}
        if self.found:
            data["matches"] = [m.model_dump() for m in self.matches]
        return data


@dataclass
class ProvisionReport:
    code: str
    details: Dict[str, Any]

    def as_dict(self) -> Dict:
        return {"kind": "lookup", "code": self.code, "details": self.details}


@dataclass
class HeadingsReport:
    headings: List[HeadingInfo]

    def as_dict(self) -> Dict:
        return {"kind": "headings", "headings": [h.model_dump() for h in self.headings]}


def present(mode: str, response: Any, code: str = ""):
    """
    Map a provider response onto a report.

    Raises:
        ValueError: compliance response does not have the expected shape
    """
    if mode == COMPLIANCE:
        is_valid, result, error = validate_analysis_result(response)
        if not is_valid:
            raise ValueError(f"Malformed compliance response: {error}")
        # "not subject" carries reasoning only, whatever matches the model sent
        matches = list(result.matches) if result.found else []
        return ComplianceReport(code=code, found=result.found, reasoning=result.reasoning, matches=matches)

    if mode == LOOKUP:
        details = response if isinstance(response, dict) else {"result": response}
        return ProvisionReport(code=code, details=details)

    if mode == HEADINGS:
        raw = response.get("headings") if isinstance(response, dict) else None
        return HeadingsReport(headings=[HeadingInfo(**h) for h in (raw or []) if isinstance(h, dict)])

    raise ValueError(f"Unknown mode: {mode!r}")


# ============================================================================
# Query History
# ============================================================================

@dataclass(frozen=True)
class HistoryEntry:
    code: str
    found: bool

    def as_dict(self) -> Dict:
        return {"code": self.code, "found": self.found}


class QueryHistory:
    """
    Newest-first list of recent compliance searches, capped at ``limit``.

    In-memory only.
    """

    def __init__(self, limit: int = HISTORY_LIMIT):
        self.limit = limit
        self._entries = deque(maxlen=limit)

    def record(self, code: str, found: bool) -> None:
        self._entries.appendleft(HistoryEntry(code=code, found=found))

    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def codes(self) -> List[str]:
        return [e.code for e in self._entries]

    def __len__(self):
        return len(self._entries)
