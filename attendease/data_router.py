# attendease/data_router.py
"""
data_router.py
────────────────────────────────────────────
Health check and whole-document access:
 • GET  /api/health      → service status + sync flag
 • GET  /api/data        → current JSON document
 • POST /api/data        → replace the whole document (PUT accepted too)
 • POST /api/sync/retry  → re-save after a storage outage
────────────────────────────────────────────
"""

import logging
from datetime import datetime, timezone
from flask import Blueprint, request, jsonify

from .router_helpers import get_studio, respond, bad_request

bp = Blueprint("data_bp", __name__)
log = logging.getLogger(__name__)


@bp.route("/api/health", methods=["GET"])
def health():
    studio = get_studio()
    return jsonify({
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat(),
        "syncPending": studio.sync_pending,
    }), 200


@bp.route("/api/data", methods=["GET"])
def get_data():
    return jsonify(get_studio().snapshot().to_dict()), 200


@bp.route("/api/data", methods=["POST", "PUT"])
def put_data():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return bad_request("Expected a JSON document.")
    try:
        result = get_studio().replace_document(data)
    except (KeyError, ValueError, TypeError) as e:
        log.warning(f"[data_router] rejected document: {e}")
        return bad_request(f"Invalid document: {e}")
    return respond(result)


@bp.route("/api/sync/retry", methods=["POST"])
def retry_sync():
    if get_studio().retry_sync():
        return jsonify({"success": True, "message": "Saved."}), 200
    return jsonify({"success": False, "message": "Storage unreachable. Please retry."}), 503
