"""
Error taxonomy for the compliance desk.

    EntryValidationError   - malformed local input, reported per field
    GatewayTransportError  - no response from the provider (network, DNS)
    GatewayTimeoutError    - provider call exceeded GATEWAY_TIMEOUT_SECONDS
    GatewayProviderError   - provider answered with a non-2xx status
    PersistenceError       - record store read/write failure
    SystemUninitializedError - search attempted with no context and no rules
"""

from typing import Any, Dict, Optional


class ComplianceDeskError(Exception):
    """Base class for all application errors."""


class EntryValidationError(ComplianceDeskError):
    """Manual entry (or query code) failed local validation."""

    def __init__(self, fields: Dict[str, str]):
        self.fields = fields
        super().__init__(
            "; ".join(f"{name}: {message}" for name, message in fields.items())
        )


class PersistenceError(ComplianceDeskError):
    """Record store read or write failed."""


class GatewayError(ComplianceDeskError):
    """Base class for classification gateway failures."""


class GatewayTransportError(GatewayError):
    """The provider could not be reached."""

    status_code = 502

    def __init__(self, message: str = "Server error"):
        super().__init__(message)


class GatewayTimeoutError(GatewayTransportError):
    """The provider did not answer in time."""

    status_code = 504


class GatewayProviderError(GatewayError):
    """The provider answered with a non-success status.

    ``body`` is the provider's error payload exactly as received.
    """

    def __init__(self, status_code: int, body: Optional[Any] = None, message: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"Provider returned HTTP {status_code}")

    def response_body(self) -> Dict[str, Any]:
        """Body to hand back to the HTTP caller."""
        if isinstance(self.body, dict) and self.body:
            return self.body
        return {"error": str(self)}


class SystemUninitializedError(ComplianceDeskError):
    """No document context and no manual entries: search is disabled."""

    def __init__(self):
        super().__init__(
            "System context is uninitialized. Provide a reference document or manual rules first."
        )
