# attendease/router_helpers.py
from __future__ import annotations
import logging
from flask import current_app, jsonify

from .errors import Result

log = logging.getLogger(__name__)


def get_studio():
    """StudioService attached by create_app()."""
    return current_app.extensions["studio"]


def respond(result: Result):
    """Serialise a Result with the status code for its error tag."""
    if not result.success:
        log.info(f"[{result.error}] {result.message}")
    return jsonify(result.to_dict()), result.http_status


def bad_request(message: str, status: int = 400):
    return jsonify({"success": False, "message": message}), status
