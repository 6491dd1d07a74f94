import hmac
from functools import wraps

from flask import current_app, jsonify, request


def admin_required(view):
    """
    Require ``Authorization: Bearer <ADMIN_API_TOKEN>`` on record mutations.

    With no token configured, every mutation is refused.
    """

    @wraps(view)
    def wrapped_view(*args, **kwargs):
        expected = current_app.config.get("ADMIN_API_TOKEN")
        if not expected:
            return jsonify({"error": "Admin access is not configured"}), 403

        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not hmac.compare_digest(token.strip().encode(), expected.encode()):
            return jsonify({"error": "Unauthorized"}), 401

        return view(*args, **kwargs)

    return wrapped_view
