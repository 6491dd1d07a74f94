"""
Classification Gateway endpoint.

One endpoint, one request schema:

    POST /api/gemini
    {
        "mode": "compliance" | "lookup" | "headings",
        "htsCode": "9903.81.91",
        "context": {"type": "file"|"text", "content": "...", "mimeType": "...", "name": "..."},
        "manualEntries": [ManualEntry, ...]
    }

Responses:
    200  provider JSON, verbatim
    400  {"error": ...} malformed request
    4xx/5xx from the provider: provider status and body, verbatim
    502  {"error": ...} provider unreachable or non-JSON output
    504  {"error": ...} provider timed out
"""

import logging

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from hts_compliance.errors import GatewayProviderError, GatewayTransportError
from hts_compliance.schemas import DocumentContext, ManualEntry, describe_validation_error
from hts_compliance.services.context_builder import COMPLIANCE, MODES, build

logger = logging.getLogger(__name__)

bp = Blueprint("gateway", __name__, url_prefix="/api")


@bp.route("/gemini", methods=["POST", "OPTIONS"])
def forward_analysis():
    """Forward one analysis request to the classification provider."""
    if request.method == "OPTIONS":
        return "", 204

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    mode = data.get("mode")
    if not mode:
        return jsonify({"error": "Mode is required"}), 400
    if mode not in MODES:
        return jsonify({"error": f"Unknown mode: {mode}"}), 400

    try:
        context = DocumentContext.model_validate(data["context"]) if data.get("context") else None
    except ValidationError as e:
        return jsonify({"error": f"Invalid context: {describe_validation_error(e)}"}), 400

    # Manual rules only ever matter for compliance; other modes never read them
    entries = []
    if mode == COMPLIANCE:
        try:
            entries = [ManualEntry.model_validate(e) for e in (data.get("manualEntries") or [])]
        except ValidationError as e:
            return jsonify({"error": f"Invalid manual entry: {describe_validation_error(e)}"}), 400

    try:
        analysis_request = build(mode, context, entries, str(data.get("htsCode") or ""))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    gateway = current_app.extensions.get("classification_gateway")
    if gateway is None:
        return jsonify({"error": "Classification gateway is not configured"}), 503

    try:
        result = gateway.forward_request(analysis_request)
    except GatewayProviderError as e:
        return jsonify(e.response_body()), e.status_code or 502
    except GatewayTransportError as e:
        return jsonify({"error": str(e)}), e.status_code
    except ValueError as e:
        return jsonify({"error": f"Provider returned malformed JSON: {e}"}), 502
    except Exception as e:
        logger.exception(f"Unexpected gateway failure for {mode} {analysis_request.code}: {e}")
        return jsonify({"error": "Server error"}), 500

    return jsonify(result), 200

