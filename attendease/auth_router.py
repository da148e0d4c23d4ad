# attendease/auth_router.py
import logging
from flask import Blueprint, request, jsonify

from .router_helpers import get_studio, respond, bad_request

bp = Blueprint("auth_bp", __name__)
log = logging.getLogger(__name__)


@bp.route("/api/auth/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    user = get_studio().login(data.get("email", ""), data.get("password", ""))
    if not user:
        log.info("[auth] failed login")
        return bad_request("Invalid credentials. Please check your email and password.", 401)
    profile = {k: v for k, v in user.to_dict().items() if k != "password"}
    return jsonify({"success": True, "user": profile}), 200


@bp.route("/api/auth/reset-password", methods=["POST"])
def reset_password():
    data = request.get_json(silent=True) or {}
    new_password = data.get("newPassword") or ""
    if not new_password:
        return bad_request("newPassword is required.")
    return respond(get_studio().reset_password(data.get("email", ""), data.get("phone", ""), new_password))
