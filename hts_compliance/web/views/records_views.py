"""
Record Store endpoints.

Reads are open; mutations require the admin bearer token.

    GET    /api/context           -> {"context": {...}|null, "initialized": bool}
    PUT    /api/context           (admin) replace the document context
    DELETE /api/context           (admin) clear it
    GET    /api/entries           -> {"entries": [...]}
    POST   /api/entries           (admin) add, mints a new id
    PUT    /api/entries/<id>      (admin) update, id preserved
    DELETE /api/entries/<id>      (admin) delete
"""

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from hts_compliance.errors import EntryValidationError, PersistenceError
from hts_compliance.schemas import DocumentContext, describe_validation_error
from hts_compliance.services.entry_validator import build_entry
from hts_compliance.services.record_store import RecordStore
from hts_compliance.web.hooks import admin_required

bp = Blueprint("records", __name__, url_prefix="/api")


@bp.errorhandler(PersistenceError)
def handle_persistence_error(error):
    return jsonify({"error": str(error)}), 503


@bp.errorhandler(EntryValidationError)
def handle_validation_error(error):
    return jsonify({"error": "Validation failed", "fields": error.fields}), 400


# ─────────────────────────────────────────────────────────────────────────────
# Document Context
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/context", methods=["GET"])
def get_context():
    store = RecordStore()
    context = store.get_context()
    return jsonify({
        "context": context.as_dict() if context else None,
        "initialized": store.is_initialized(),
    })


@bp.route("/context", methods=["PUT"])
@admin_required
def set_context():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    try:
        context = DocumentContext.model_validate(data)
    except ValidationError as e:
        return jsonify({"error": f"Invalid context: {describe_validation_error(e)}"}), 400

    RecordStore().set_context(context)
    return jsonify({"context": context.as_dict()})


@bp.route("/context", methods=["DELETE"])
@admin_required
def clear_context():
    RecordStore().clear_context()
    return "", 204


# ─────────────────────────────────────────────────────────────────────────────
# Manual Entries
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/entries", methods=["GET"])
def list_entries():
    entries = RecordStore().list_entries()
    return jsonify({"entries": [e.as_dict() for e in entries]})


@bp.route("/entries", methods=["POST"])
@admin_required
def add_entry():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    entry = build_entry(data)
    RecordStore().save_entry(entry)
    return jsonify({"entry": entry.as_dict()}), 201


@bp.route("/entries/<string:entry_id>", methods=["PUT"])
@admin_required
def update_entry(entry_id: str):
    store = RecordStore()
    if store.get_entry(entry_id) is None:
        return jsonify({"error": "Entry not found"}), 404

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    # Any id in the body is ignored; the path id is authoritative
    entry = build_entry(data, entry_id=entry_id)
    store.save_entry(entry)
    return jsonify({"entry": entry.as_dict()})


@bp.route("/entries/<string:entry_id>", methods=["DELETE"])
@admin_required
def delete_entry(entry_id: str):
    if not RecordStore().delete_entry(entry_id):
        return jsonify({"error": "Entry not found"}), 404
    return "", 204
