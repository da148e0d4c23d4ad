# attendease/users_router.py
import logging
from flask import Blueprint, request, jsonify

from . import queries
from .logic_models import Role, User, new_id
from .router_helpers import get_studio, respond, bad_request

bp = Blueprint("users_bp", __name__)
log = logging.getLogger(__name__)


def _user_from_json(data: dict, user_id: str, existing: User = None) -> User:
    base = existing.to_dict() if existing else {"id": user_id}
    merged = {**base, **{k: v for k, v in data.items() if k != "id"}}
    if "phone" in data:
        merged["phoneNumber"] = data["phone"]
    if not str(merged.get("email") or "").strip():
        raise ValueError("email is required")
    merged["role"] = str(merged.get("role") or Role.TRAINEE.value).upper()
    if merged.get("credits") not in (None, ""):
        merged["credits"] = int(merged["credits"])
    return User.from_dict(merged)


@bp.route("/api/users", methods=["GET"])
def list_users():
    state = get_studio().snapshot()
    role = (request.args.get("role") or "").upper()
    users = [u for u in state.users if not role or u.role.value == role]
    return jsonify([
        {k: v for k, v in u.to_dict().items() if k != "password"} for u in users
    ]), 200


@bp.route("/api/users", methods=["POST"])
def create_user():
    try:
        user = _user_from_json(request.get_json(silent=True) or {}, new_id())
        return respond(get_studio().add_user(user))
    except ValueError as e:
        return bad_request(str(e))


@bp.route("/api/users/<user_id>", methods=["PUT"])
def update_user(user_id):
    """Admin edit; a trainee's credits can be set directly but never below zero."""
    existing = get_studio().snapshot().find_user(user_id)
    if not existing:
        return bad_request("User not found.", 404)
    try:
        user = _user_from_json(request.get_json(silent=True) or {}, user_id, existing)
        return respond(get_studio().update_user(user))
    except ValueError as e:
        return bad_request(str(e))


@bp.route("/api/reports/bookings", methods=["GET"])
def bookings_report():
    return jsonify(queries.bookings_per_session(get_studio().snapshot())), 200
