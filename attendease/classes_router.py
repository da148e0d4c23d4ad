# attendease/classes_router.py
"""
classes_router.py
────────────────────────────────────────────
Class sessions and the attendance toggle.
 • GET    /api/classes                    → upcoming sessions (?all=1 for every session)
 • POST   /api/classes                    → create (409 on duplicate name/date/time)
 • PUT    /api/classes/<id>               → edit
 • DELETE /api/classes/<id>               → delete + drop its attendance
   (edit and delete: owning trainer or admin, via actingRole / actingUserId)
 • GET    /api/classes/<id>/roster        → booked list + waitlist
 • POST   /api/classes/<id>/attendance    → book / cancel toggle
 • POST   /api/classes/<id>/check-in      → staff marks ATTENDED
────────────────────────────────────────────
"""

import logging
from datetime import datetime
from flask import Blueprint, request, jsonify

from . import queries
from .errors import AttendanceError, InvalidUserError, Result
from .logic_models import ClassSession, Role, epoch_ms, new_id
from .router_helpers import get_studio, respond, bad_request
from .sessions import can_manage

bp = Blueprint("classes_bp", __name__)
log = logging.getLogger(__name__)


def _session_from_json(data: dict, session_id: str, existing: ClassSession = None) -> ClassSession:
    base = existing.to_dict() if existing else {
        "id": session_id,
        "createdAt": epoch_ms(datetime.now().astimezone()),
    }
    merged = {**base, **{k: v for k, v in data.items() if k not in ("id", "createdAt")}}
    for key in ("name", "date", "time"):
        if not str(merged.get(key) or "").strip():
            raise ValueError(f"{key} is required")
    return ClassSession.from_dict(merged)


@bp.route("/api/classes", methods=["GET"])
def list_classes():
    state = get_studio().snapshot()
    if request.args.get("all") in ("1", "true", "True"):
        return jsonify([c.to_dict() for c in state.classes]), 200
    return jsonify(queries.upcoming_sessions(state)), 200


@bp.route("/api/classes", methods=["POST"])
def create_class():
    data = request.get_json(silent=True) or {}
    try:
        session = _session_from_json(data, new_id())
        return respond(get_studio().create_session(session))
    except ValueError as e:
        return bad_request(str(e))


def _acting(data: dict):
    """(role, user id) of the caller from the body or query string."""
    raw_role = data.get("actingRole") or request.args.get("actingRole") or ""
    try:
        role = Role(str(raw_role).upper())
    except ValueError:
        raise ValueError("actingRole must be ADMIN, TRAINER or TRAINEE.")
    return role, str(data.get("actingUserId") or request.args.get("actingUserId") or "")


def _forbidden(session: ClassSession, data: dict):
    """Error response unless the caller may edit or delete the session."""
    role, acting_user = _acting(data)
    if can_manage(session, role, acting_user):
        return None
    log.info(f"[classes_router] {role.value} {acting_user or '-'} refused on {session.id}")
    return bad_request("Only the owning trainer or an admin can change this session.", 403)


@bp.route("/api/classes/<class_id>", methods=["PUT"])
def update_class(class_id):
    data = request.get_json(silent=True) or {}
    existing = get_studio().snapshot().find_class(class_id)
    if not existing:
        return bad_request("Class session not found.", 404)
    try:
        refused = _forbidden(existing, data)
        if refused:
            return refused
        session = _session_from_json(data, class_id, existing)
        return respond(get_studio().update_session(session))
    except ValueError as e:
        return bad_request(str(e))


@bp.route("/api/classes/<class_id>", methods=["DELETE"])
def delete_class(class_id):
    data = request.get_json(silent=True) or {}
    existing = get_studio().snapshot().find_class(class_id)
    if not existing:
        return bad_request("Class session not found.", 404)
    try:
        refused = _forbidden(existing, data)
    except ValueError as e:
        return bad_request(str(e))
    if refused:
        return refused
    return respond(get_studio().delete_session(class_id))


@bp.route("/api/classes/<class_id>/roster", methods=["GET"])
def class_roster(class_id):
    try:
        return jsonify(queries.roster(get_studio().snapshot(), class_id)), 200
    except AttendanceError as e:
        return respond(Result.fail(e))


@bp.route("/api/classes/<class_id>/attendance", methods=["POST"])
def toggle_class_attendance(class_id):
    """
    Body: {traineeId, actingRole, actingUserId?}
    A trainee may only toggle their own attendance; staff may toggle anyone's.
    """
    data = request.get_json(silent=True) or {}
    trainee_id = str(data.get("traineeId") or "")
    try:
        role = Role(str(data.get("actingRole") or "").upper())
    except ValueError:
        return bad_request("actingRole must be ADMIN, TRAINER or TRAINEE.")

    acting_user = data.get("actingUserId")
    if role == Role.TRAINEE and acting_user and str(acting_user) != trainee_id:
        return respond(Result.fail(InvalidUserError("Trainees can only book for themselves.")))

    result = get_studio().toggle_attendance(class_id, trainee_id, role)
    log.info(f"[classes_router] toggle {class_id}/{trainee_id} by {role.value} → {result.success}")
    return respond(result)


@bp.route("/api/classes/<class_id>/check-in", methods=["POST"])
def check_in_trainee(class_id):
    """
    Body: {traineeId, actingRole}
    Staff mark a trainee ATTENDED; a walk-in without a booking is charged 1 credit.
    """
    data = request.get_json(silent=True) or {}
    try:
        role, _ = _acting(data)
    except ValueError as e:
        return bad_request(str(e))
    trainee_id = str(data.get("traineeId") or "")
    result = get_studio().check_in(class_id, trainee_id, role)
    log.info(f"[classes_router] check-in {class_id}/{trainee_id} by {role.value} → {result.success}")
    return respond(result)
