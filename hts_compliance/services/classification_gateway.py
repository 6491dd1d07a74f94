"""
Classification Gateway

Stateless forwarding to the external classification provider (Google Gemini).

Per call:
1. Pick the fixed system instruction for the mode
2. Build the ordered content parts:
       MANUAL RULES text (compliance only, when entries exist)
    -> document context (inline bytes for files; text, DOCUMENT-framed in compliance)
    -> the code / query text
3. Call the provider once: JSON response, temperature 0, thinking off
4. Parse the JSON and hand it back unvalidated

No retry, no deduplication, no shared mutable state between calls. The same
inputs may produce different answers on different calls.

Usage:
    gateway = ClassificationGateway(GeminiProvider())
    result = gateway.forward("compliance", context, entries, "9903.81.91")
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Type

import httpx
from google.genai import errors as genai_errors
from google.genai import types

from hts_compliance.config import (
    GATEWAY_TIMEOUT_SECONDS,
    GEMINI_API_KEY,
    GEMINI_MODEL,
    TEMPERATURE,
    THINKING_BUDGET,
)
from hts_compliance.errors import (
    GatewayProviderError,
    GatewayTimeoutError,
    GatewayTransportError,
)
from hts_compliance.logging_utils import GatewayCallLogger
from hts_compliance.schemas import AnalysisResult, DocumentContext, ManualEntry
from .context_builder import COMPLIANCE, HEADINGS, LOOKUP, AnalysisRequest, build

logger = logging.getLogger(__name__)


# ============================================================================
# Instructions
# ============================================================================

COMPLIANCE_INSTRUCTION = """You are a specialized HTS Compliance Engine for TRADE EXPEDITORS INC. DBA TEU GLOBAL.
Your goal is to perform lightning-fast classification of HTS codes against Section 232 Aluminum and Steel derivative lists.
Be precise. If a code matches a manual rule or document entry, extract the EXACT snippet.
Return ONLY valid JSON. Accuracy and speed are top priorities."""

MANUAL_RULES_INSTRUCTION = """
MANUAL RULES are user-authored overrides. When a MANUAL RULE covers the code (exactly or by range), report it as a match and quote the rule as the sourceSnippet."""

LOOKUP_INSTRUCTION = "Quick lookup of HTS provision details. Return JSON."

HEADINGS_INSTRUCTION = """Extract HTS headings into JSON format.
Return an object of the form {"headings": [{"heading": "7317", "description": "..."}]}."""


def select_instruction(mode: str, has_entries: bool = False) -> str:
    """
    Fixed system instruction for a mode.

    Only compliance mode ever mentions manual rules.
    """
    if mode == COMPLIANCE:
        if has_entries:
            return COMPLIANCE_INSTRUCTION + MANUAL_RULES_INSTRUCTION
        return COMPLIANCE_INSTRUCTION
    if mode == LOOKUP:
        return LOOKUP_INSTRUCTION
    if mode == HEADINGS:
        return HEADINGS_INSTRUCTION
    raise ValueError(f"Unknown mode: {mode!r}")


# ============================================================================
# Content Parts
# ============================================================================

@dataclass(frozen=True)
class ContentPart:
    """Provider-neutral content part: either text or inline bytes."""
    kind: str  # "text" | "inline"
    text: Optional[str] = None
    data: Optional[bytes] = None
    mime_type: Optional[str] = None
    label: str = ""  # "manual_rules" | "document" | "query"

    @classmethod
    def from_text(cls, text: str, label: str) -> "ContentPart":
        return cls(kind="text", text=text, label=label)

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str, label: str) -> "ContentPart":
        return cls(kind="inline", data=data, mime_type=mime_type, label=label)


def manual_rules_text(entries: Sequence[ManualEntry]) -> str:
    return f"MANUAL RULES:\n{json.dumps([entry.as_dict() for entry in entries])}\n"


def query_text(request: AnalysisRequest) -> str:
    if request.mode == COMPLIANCE:
        return f"Analyze HTS: {request.code}"
    if request.mode == LOOKUP:
        return f"Lookup HTS: {request.code}"
    return "Extract HTS 4-digit headings."


def build_parts(request: AnalysisRequest) -> List[ContentPart]:
    """
    Ordered parts for one request.

    Order is fixed: rules, then document, then query. The provider reads the
    list as grounding context followed by the question, so reordering changes
    which evidence it treats as authoritative.
    """
    parts: List[ContentPart] = []

    if request.mode == COMPLIANCE and request.entries:
        parts.append(ContentPart.from_text(manual_rules_text(request.entries), "manual_rules"))

    if request.context is not None:
        parts.append(_context_part(request.context, labelled=request.mode == COMPLIANCE))

    parts.append(ContentPart.from_text(query_text(request), "query"))
    return parts


def _context_part(context: DocumentContext, labelled: bool) -> ContentPart:
    if context.is_file:
        return ContentPart.from_bytes(context.content_bytes(), context.mime_type, "document")
    # Only compliance frames pasted text as a DOCUMENT block next to the rules
    if labelled:
        return ContentPart.from_text(f"DOCUMENT:\n{context.content}\n", "document")
    return ContentPart.from_text(context.content, "document")


# ============================================================================
# Providers
# ============================================================================

class ClassificationProvider(ABC):
    """Pluggable classification capability (Gemini in production, fakes in tests)."""

    @abstractmethod
    def classify(
        self,
        parts: List[ContentPart],
        system_instruction: str,
        response_schema: Optional[Type] = None,
    ) -> str:
        """
        Run one JSON-mode generation.

        Returns:
            Raw response text (expected to be JSON)

        Raises:
            GatewayProviderError: provider answered with a non-2xx status
            GatewayTimeoutError: no answer within the timeout
            GatewayTransportError: provider unreachable
        """
        pass


class GeminiProvider(ClassificationProvider):
    """
    Gemini via the google-genai SDK.

    The API key is checked when the provider is constructed (process start),
    not per request.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = GEMINI_MODEL,
        timeout_seconds: int = GATEWAY_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key or GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY environment variable is not set")
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._client = None

    @property
    def client(self):
        """Lazy initialization of Gemini client."""
        if self._client is None:
            from google import genai
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=self.timeout_seconds * 1000),
            )
        return self._client

    def classify(
        self,
        parts: List[ContentPart],
        system_instruction: str,
        response_schema: Optional[Type] = None,
    ) -> str:
        config_kwargs = {
            "system_instruction": system_instruction,
            "response_mime_type": "application/json",
            "temperature": TEMPERATURE,
            "thinking_config": types.ThinkingConfig(thinking_budget=THINKING_BUDGET["off"]),
        }
        if response_schema is not None:
            config_kwargs["response_schema"] = response_schema

        contents = [types.Content(role="user", parts=[self._to_gemini_part(p) for p in parts])]

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(**config_kwargs),
            )
        except genai_errors.APIError as e:
            body = getattr(e, "response_json", None) or getattr(e, "details", None)
            raise GatewayProviderError(e.code, body=body, message=e.message or str(e)) from e
        except httpx.TimeoutException as e:
            raise GatewayTimeoutError(
                f"Provider did not respond within {self.timeout_seconds}s"
            ) from e
        except httpx.TransportError as e:
            raise GatewayTransportError(f"Server error: {e}") from e

        return response.text

    @staticmethod
    def _to_gemini_part(part: ContentPart) -> types.Part:
        if part.kind == "inline":
            return types.Part.from_bytes(data=part.data, mime_type=part.mime_type)
        return types.Part.from_text(text=part.text)


# ============================================================================
# Gateway
# ============================================================================

class ClassificationGateway:
    """Mode-based forwarding of analysis requests to a provider."""

    def __init__(self, provider: ClassificationProvider):
        self.provider = provider

    def forward(
        self,
        mode: str,
        context: Optional[DocumentContext],
        entries: Optional[Sequence[ManualEntry]],
        code: str,
    ) -> Any:
        """
        Build the request and forward it.

        Returns:
            Parsed provider JSON, untouched

        Raises:
            GatewayProviderError / GatewayTimeoutError / GatewayTransportError
            ValueError: the provider's text was not valid JSON
        """
        return self.forward_request(build(mode, context, entries, code))

    def forward_request(self, request: AnalysisRequest) -> Any:
        instruction = select_instruction(request.mode, request.has_entries)
        parts = build_parts(request)
        response_schema = AnalysisResult if request.mode == COMPLIANCE else None

        with GatewayCallLogger(request.mode, request.code) as call:
            call.log_request([p.label for p in parts], request.has_entries)
            text = self.provider.classify(parts, instruction, response_schema)
            call.log_response(text)

        try:
            return json.loads(text or "")
        except ValueError:
            logger.warning(
                f"Provider returned non-JSON output for {request.mode} {request.code} "
                f"({len(text or '')} chars)"
            )
            raise
