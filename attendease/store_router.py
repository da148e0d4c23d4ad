# attendease/store_router.py
"""
store_router.py
────────────────────────────────────────────
Credit packages, purchases and a trainee's activity.
 • GET/POST      /api/packages
 • PUT/DELETE    /api/packages/<id>
 • POST          /api/purchases               {traineeId, packageId}
 • GET           /api/trainees/<id>/history   → attendance + payments
────────────────────────────────────────────
"""

import logging
from flask import Blueprint, request, jsonify

from . import queries
from .logic_models import CreditPackage, new_id
from .router_helpers import get_studio, respond, bad_request

bp = Blueprint("store_bp", __name__)
log = logging.getLogger(__name__)


def _package_from_json(data: dict, package_id: str) -> CreditPackage:
    try:
        return CreditPackage(
            id=package_id,
            name=str(data.get("name") or ""),
            credits=int(data.get("credits") or 0),
            price=float(data.get("price") or 0),
        )
    except (TypeError, ValueError):
        raise ValueError("credits and price must be numbers")


@bp.route("/api/packages", methods=["GET"])
def list_packages():
    return jsonify([p.to_dict() for p in get_studio().snapshot().packages]), 200


@bp.route("/api/packages", methods=["POST"])
def create_package():
    try:
        pkg = _package_from_json(request.get_json(silent=True) or {}, new_id())
        return respond(get_studio().add_package(pkg))
    except ValueError as e:
        return bad_request(str(e))


@bp.route("/api/packages/<package_id>", methods=["PUT"])
def update_package(package_id):
    try:
        pkg = _package_from_json(request.get_json(silent=True) or {}, package_id)
        return respond(get_studio().update_package(pkg))
    except ValueError as e:
        return bad_request(str(e))


@bp.route("/api/packages/<package_id>", methods=["DELETE"])
def delete_package(package_id):
    return respond(get_studio().delete_package(package_id))


@bp.route("/api/purchases", methods=["POST"])
def create_purchase():
    data = request.get_json(silent=True) or {}
    trainee_id = str(data.get("traineeId") or "")
    package_id = str(data.get("packageId") or "")
    if not trainee_id or not package_id:
        return bad_request("traineeId and packageId are required.")
    result = get_studio().purchase(trainee_id, package_id)
    log.info(f"[store_router] purchase {package_id} for {trainee_id} → {result.success}")
    return respond(result)


@bp.route("/api/trainees/<trainee_id>/history", methods=["GET"])
def trainee_history(trainee_id):
    state = get_studio().snapshot()
    user = state.find_user(trainee_id)
    if not user:
        return bad_request("User not found.", 404)
    return jsonify({
        "credits": user.credits,
        "attendance": queries.trainee_history(state, trainee_id),
        "payments": queries.trainee_payments(state, trainee_id),
    }), 200
