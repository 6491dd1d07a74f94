"""
Logging utilities for the classification gateway.

Provides structured JSON logging for:
- Outbound provider requests (mode, part kinds, sizes)
- Provider responses and latency
- Provider errors vs transport errors (kept distinct for diagnosis)

Usage:
    from hts_compliance.logging_utils import log_gateway_event, GatewayCallLogger

    log_gateway_event("gateway_request", {"call_id": "...", "mode": "compliance"})

    with GatewayCallLogger("compliance", hts_code) as call:
        call.log_request(parts_summary)
        ...
        call.log_response(result)

Document content and credentials are never logged, only their sizes.
"""

import json
import logging
import time
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional


# Configure logger
logger = logging.getLogger("gateway_calls")
logger.setLevel(logging.INFO)


# JSON formatter for structured logging
class JSONFormatter(logging.Formatter):
    def format(self, record):
        if isinstance(record.msg, dict):
            return json.dumps(record.msg, default=str)
        return super().format(record)


# Add handler if not already present
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)


# ============================================================================
# Simple Logging Functions
# ============================================================================

def log_gateway_event(event_type: str, payload: Dict[str, Any], level: int = logging.INFO) -> None:
    """
    Log a gateway event with structured data.

    Args:
        event_type: Type of event (e.g., "gateway_request", "gateway_timeout")
        payload: Event data including call_id, mode, etc.
        level: Logging level for the record
    """
    event = {
        "timestamp": datetime.utcnow().isoformat(),
        "event_type": event_type,
        **_truncate_dict(payload)
    }
    logger.log(level, event)


# ============================================================================
# GatewayCallLogger Class
# ============================================================================

class GatewayCallLogger:
    """
    Context manager for logging a single provider call.

    Usage:
        with GatewayCallLogger("lookup", "7317.00.30") as call:
            call.log_request(["text"])
            result = provider.classify(...)
            call.log_response(result)

    Exceptions raised inside the block are logged with their type so that
    provider errors, timeouts and transport failures stay distinguishable.
    """

    def __init__(self, mode: str, hts_code: str, call_id: Optional[str] = None):
        self.call_id = call_id or str(uuid.uuid4())
        self.mode = mode
        self.hts_code = hts_code
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_val is None:
            return False

        # Local import: errors module has no logging dependency
        from .errors import GatewayProviderError, GatewayTimeoutError, GatewayTransportError

        if isinstance(exc_val, GatewayProviderError):
            event_type = "gateway_provider_error"
            extra = {"status_code": exc_val.status_code}
        elif isinstance(exc_val, GatewayTimeoutError):
            event_type = "gateway_timeout"
            extra = {}
        elif isinstance(exc_val, GatewayTransportError):
            event_type = "gateway_transport_error"
            extra = {}
        else:
            event_type = "gateway_failure"
            extra = {"exception_type": exc_type.__name__}

        log_gateway_event(event_type, {
            "call_id": self.call_id,
            "mode": self.mode,
            "hts_code": self.hts_code,
            "duration_ms": self._elapsed_ms(),
            "error": str(exc_val),
            **extra
        }, level=logging.WARNING)
        return False

    def log_request(self, part_kinds: List[str], has_entries: bool = False) -> None:
        """Log the shape of the outbound request."""
        log_gateway_event("gateway_request", {
            "call_id": self.call_id,
            "mode": self.mode,
            "hts_code": self.hts_code,
            "parts": part_kinds,
            "has_manual_rules": has_entries
        })

    def log_response(self, response_text: Optional[str]) -> None:
        """Log response size and latency."""
        log_gateway_event("gateway_response", {
            "call_id": self.call_id,
            "mode": self.mode,
            "hts_code": self.hts_code,
            "response_length": len(response_text) if response_text else 0,
            "duration_ms": self._elapsed_ms()
        })

    def _elapsed_ms(self) -> Optional[float]:
        if self.start_time is None:
            return None
        return round((time.time() - self.start_time) * 1000, 2)


# ============================================================================
# Helper Functions
# ============================================================================

def _truncate_dict(d: Dict, max_str_len: int = 200) -> Dict:
    """Truncate string values in dict for logging."""
    if not d:
        return d

    result = {}
    for key, value in d.items():
        if isinstance(value, str) and len(value) > max_str_len:
            result[key] = value[:max_str_len] + "..."
        elif isinstance(value, list) and len(value) > 10:
            result[key] = value[:10]
        elif isinstance(value, dict):
            result[key] = _truncate_dict(value, max_str_len)
        else:
            result[key] = value
    return result
