"""
Search Session

Drives one user's searches end to end:

    raw input -> sanitize -> readiness check -> build -> gateway -> present -> history

Every search is tagged with a sequence number. When two searches race, only
the response for the most recently issued one is kept; older responses are
discarded instead of overwriting newer results.

Usage:
    session = SearchSession(gateway, RecordStore())
    outcome = session.search("7614.10", mode="compliance")
    if outcome.accepted:
        print(outcome.report.headline)
"""

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional

from hts_compliance.errors import EntryValidationError, SystemUninitializedError
from .classification_gateway import ClassificationGateway
from .context_builder import COMPLIANCE, HEADINGS, build, is_system_ready
from .entry_validator import sanitize_query_code
from .result_presenter import QueryHistory, present

logger = logging.getLogger(__name__)


@dataclass
class SearchOutcome:
    """Result of one search. ``report`` is None when the response went stale."""
    sequence: int
    mode: str
    code: str
    report: Optional[Any] = None

    @property
    def accepted(self) -> bool:
        return self.report is not None


class SearchSession:
    """Per-user search state: rolling history, latest report, sequence counter."""

    def __init__(self, gateway: ClassificationGateway, records, history: Optional[QueryHistory] = None):
        """
        Args:
            gateway: Classification gateway
            records: Anything with get_context() and list_entries()
                     (normally a RecordStore)
            history: Shared history, or a fresh one
        """
        self.gateway = gateway
        self.records = records
        self.history = history or QueryHistory()
        self.latest_report = None
        self._counter = itertools.count(1)
        self._latest_issued = 0
        self._lock = threading.Lock()

    def is_ready(self) -> bool:
        return is_system_ready(self.records.get_context(), self.records.list_entries())

    def search(self, raw_code: str, mode: str = COMPLIANCE) -> SearchOutcome:
        """
        Run one compliance or lookup search.

        Raises:
            EntryValidationError: nothing left of the code after sanitizing
            SystemUninitializedError: no context and no manual entries
            GatewayError subclasses / ValueError: from the gateway, unchanged
        """
        code = sanitize_query_code(raw_code)
        if not code.strip():
            raise EntryValidationError({"htsCode": "HTS code is required"})

        context = self.records.get_context()
        entries = self.records.list_entries()
        if not is_system_ready(context, entries):
            raise SystemUninitializedError()

        request = build(mode, context, entries, code)
        return self._run(request)

    def extract_headings(self) -> SearchOutcome:
        """Pull 4-digit headings out of the active reference document."""
        context = self.records.get_context()
        if context is None:
            raise SystemUninitializedError()
        return self._run(build(HEADINGS, context, None, ""))

    def _run(self, request) -> SearchOutcome:
        sequence = self._issue()
        response = self.gateway.forward_request(request)
        report = present(request.mode, response, code=request.code)

        with self._lock:
            if sequence != self._latest_issued:
                logger.info(
                    f"Discarding stale response #{sequence} for {request.code} "
                    f"(latest issued #{self._latest_issued})"
                )
                return SearchOutcome(sequence=sequence, mode=request.mode, code=request.code)

            if request.mode == COMPLIANCE:
                self.history.record(request.code, report.found)
            self.latest_report = report

        return SearchOutcome(sequence=sequence, mode=request.mode, code=request.code, report=report)

    def _issue(self) -> int:
        with self._lock:
            self._latest_issued = next(self._counter)
            return self._latest_issued
